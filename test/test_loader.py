"""
Module descriptor and bootstrap loader tests.

Test classes:
    TestCoreModules:        discovery of core module directories
    TestExtensions:         system.extensions parsing and ordering
    TestGetModules:         core first, then extensions; name collisions
    TestBootstrapLoader:    bootstrap.py execution, failures, timeout
"""

from __future__ import annotations

import pytest

from storefront.exceptions import BootstrapError, InvalidModuleDescriptorError
from storefront.loader.bootstrap import load_bootstrap_script, load_bootstrap_scripts
from storefront.loader.descriptors import get_core_modules, get_enabled_extensions, get_modules

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestCoreModules
# ══════════════════════════════════════════════════════════════════════════════


class TestCoreModules:
    def test_core_modules_in_name_order(self, modules_root, make_module):
        for name in ("checkout", "base", "catalog"):
            make_module(name)

        names = [m.name for m in get_core_modules(modules_root)]

        assert names == ["base", "catalog", "checkout"]

    def test_private_directories_and_files_ignored(self, modules_root, make_module):
        make_module("base")
        (modules_root / "__pycache__").mkdir()
        (modules_root / ".hidden").mkdir()
        (modules_root / "__init__.py").write_text("")

        assert [m.name for m in get_core_modules(modules_root)] == ["base"]

    def test_core_modules_are_not_extensions(self, modules_root, make_module):
        make_module("base")

        module = get_core_modules(modules_root)[0]

        assert module.is_extension is False
        assert module.enabled is True
        assert module.bootstrap_file == modules_root / "base" / "bootstrap.py"

    def test_missing_modules_directory_is_fatal(self, tmp_path):
        with pytest.raises(InvalidModuleDescriptorError):
            get_core_modules(tmp_path / "nowhere")


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestExtensions
# ══════════════════════════════════════════════════════════════════════════════


class TestExtensions:
    def test_enabled_extensions_sorted_by_priority(self, tmp_path):
        for name in ("a", "b", "c"):
            (tmp_path / "extensions" / name).mkdir(parents=True)
        config = {
            "system": {
                "extensions": [
                    {"name": "a", "resolve": "extensions/a", "priority": 20},
                    {"name": "b", "resolve": "extensions/b", "priority": 10},
                    {"name": "c", "resolve": "extensions/c", "priority": 20},
                ]
            }
        }

        extensions = get_enabled_extensions(config, tmp_path)

        assert [e.name for e in extensions] == ["b", "a", "c"]
        assert all(e.is_extension for e in extensions)
        assert extensions[0].path == (tmp_path / "extensions" / "b").resolve()

    def test_disabled_extensions_excluded(self, tmp_path):
        (tmp_path / "ext").mkdir()
        config = {"system": {"extensions": [{"name": "ext", "resolve": "ext", "enabled": False}]}}

        assert get_enabled_extensions(config, tmp_path) == []

    def test_disabled_extension_path_not_checked(self, tmp_path):
        config = {"system": {"extensions": [{"name": "gone", "resolve": "missing", "enabled": False}]}}

        assert get_enabled_extensions(config, tmp_path) == []

    def test_no_extensions_section(self, tmp_path):
        assert get_enabled_extensions({}, tmp_path) == []

    def test_absolute_resolve_path(self, tmp_path):
        target = tmp_path / "abs"
        target.mkdir()
        config = {"system": {"extensions": [{"name": "abs", "resolve": str(target)}]}}

        assert get_enabled_extensions(config, tmp_path / "elsewhere")[0].path == target

    def test_missing_directory_is_fatal(self, tmp_path):
        config = {"system": {"extensions": [{"name": "ghost", "resolve": "nope"}]}}

        with pytest.raises(InvalidModuleDescriptorError) as exc_info:
            get_enabled_extensions(config, tmp_path)

        assert exc_info.value.details == {"module": "ghost"}

    def test_duplicate_names_are_fatal(self, tmp_path):
        (tmp_path / "x").mkdir()
        config = {
            "system": {
                "extensions": [
                    {"name": "dup", "resolve": "x"},
                    {"name": "dup", "resolve": "x"},
                ]
            }
        }

        with pytest.raises(InvalidModuleDescriptorError):
            get_enabled_extensions(config, tmp_path)

    @pytest.mark.parametrize(
        "entry",
        [
            {"resolve": "x"},
            {"name": "x"},
            {"name": "", "resolve": "x"},
            {"name": "x", "resolve": "x", "unknown": True},
            {"name": "x", "resolve": "x", "priority": "high"},
        ],
    )
    def test_malformed_entries_are_fatal(self, tmp_path, entry):
        (tmp_path / "x").mkdir()

        with pytest.raises(InvalidModuleDescriptorError):
            get_enabled_extensions({"system": {"extensions": [entry]}}, tmp_path)

    @pytest.mark.parametrize("system", [None, [], "extensions"])
    def test_system_section_must_be_an_object(self, tmp_path, system):
        with pytest.raises(InvalidModuleDescriptorError, match="must be an object"):
            get_enabled_extensions({"system": system}, tmp_path)

    def test_missing_system_section_means_no_extensions(self, tmp_path):
        assert get_enabled_extensions({}, tmp_path) == []


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestGetModules
# ══════════════════════════════════════════════════════════════════════════════


class TestGetModules:
    def test_core_modules_precede_extensions(self, tmp_path, modules_root, make_module):
        make_module("checkout")
        make_module("base")
        (tmp_path / "ext" / "loyalty").mkdir(parents=True)
        config = {"system": {"extensions": [{"name": "loyalty", "resolve": "ext/loyalty", "priority": -5}]}}

        modules = get_modules(config, tmp_path, modules_root)

        assert [m.name for m in modules] == ["base", "checkout", "loyalty"]

    def test_extension_named_like_core_module_is_fatal(self, tmp_path, modules_root, make_module):
        make_module("checkout")
        (tmp_path / "ext").mkdir()
        config = {"system": {"extensions": [{"name": "checkout", "resolve": "ext"}]}}

        with pytest.raises(InvalidModuleDescriptorError):
            get_modules(config, tmp_path, modules_root)


# ══════════════════════════════════════════════════════════════════════════════
# 4. TestBootstrapLoader
# ══════════════════════════════════════════════════════════════════════════════


class TestBootstrapLoader:
    async def test_module_without_script_contributes_nothing(self, make_module, kernel):
        module = make_module("plain").descriptor()

        assert await load_bootstrap_script(module, kernel) is False
        assert kernel.registry.extension_points() == []

    async def test_sync_bootstrap_registers_processors(self, make_module, kernel):
        module = make_module("checkout").bootstrap(
            """
            def bootstrap(ctx):
                ctx.add_processor("cartFields", lambda fields: [*fields, ctx.module_name])
            """
        )

        assert await load_bootstrap_script(module.descriptor(), kernel) is True
        assert kernel.registry.run_processors_sync("cartFields", []) == ["checkout"]

    async def test_async_bootstrap_is_awaited(self, make_module, kernel):
        module = make_module("catalog").bootstrap(
            """
            import asyncio

            async def bootstrap(ctx):
                await asyncio.sleep(0)
                ctx.add_final_processor("productCollectionFilters", sorted)
            """
        )

        await load_bootstrap_script(module.descriptor(), kernel)

        assert kernel.registry.get_final_processor("productCollectionFilters") is sorted

    async def test_modules_bootstrap_in_order(self, make_module, kernel):
        source = """
            def bootstrap(ctx):
                ctx.add_processor("order", lambda names: [*names, ctx.module_name])
            """
        modules = [make_module(name).bootstrap(source).descriptor() for name in ("zeta", "alpha")]
        modules.append(make_module("silent").descriptor())

        loaded = await load_bootstrap_scripts(modules, kernel)

        assert loaded == ["zeta", "alpha"]
        assert kernel.registry.run_processors_sync("order", []) == ["zeta", "alpha"]

    async def test_later_module_sees_earlier_registrations(self, make_module, kernel):
        first = make_module("first").bootstrap(
            """
            def bootstrap(ctx):
                ctx.add_processor("points", lambda value: value + 1)
            """
        )
        second = make_module("second").bootstrap(
            """
            def bootstrap(ctx):
                seen = len(ctx.registry.get_processors("points"))
                ctx.add_processor("seen", lambda value: seen)
            """
        )

        await load_bootstrap_scripts([first.descriptor(), second.descriptor()], kernel)

        assert kernel.registry.run_processors_sync("seen", None) == 1

    async def test_raising_bootstrap_is_wrapped(self, make_module, kernel):
        module = make_module("broken").bootstrap(
            """
            def bootstrap(ctx):
                raise RuntimeError("database unreachable")
            """
        )

        with pytest.raises(BootstrapError) as exc_info:
            await load_bootstrap_script(module.descriptor(), kernel)

        assert exc_info.value.module == "broken"
        assert "database unreachable" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_syntax_error_is_wrapped(self, make_module, kernel):
        module = make_module("typo").bootstrap("def bootstrap(ctx)\n    pass\n")

        with pytest.raises(BootstrapError):
            await load_bootstrap_script(module.descriptor(), kernel)

    async def test_script_without_bootstrap_function(self, make_module, kernel):
        module = make_module("empty").bootstrap("VALUE = 1\n")

        with pytest.raises(BootstrapError, match="does not define"):
            await load_bootstrap_script(module.descriptor(), kernel)

    async def test_failure_stops_later_modules(self, make_module, kernel):
        broken = make_module("a_broken").bootstrap("def bootstrap(ctx):\n    raise ValueError('x')\n")
        later = make_module("b_later").bootstrap(
            "def bootstrap(ctx):\n    ctx.add_processor('later', lambda v: v)\n"
        )

        with pytest.raises(BootstrapError):
            await load_bootstrap_scripts([broken.descriptor(), later.descriptor()], kernel)

        assert "later" not in kernel.registry.extension_points()

    async def test_slow_async_bootstrap_times_out(self, make_module, kernel):
        module = make_module("slow").bootstrap(
            """
            import asyncio

            async def bootstrap(ctx):
                await asyncio.sleep(5)
            """
        )

        with pytest.raises(BootstrapError, match="timed out"):
            await load_bootstrap_script(module.descriptor(), kernel, timeout=0.05)

    async def test_registering_on_locked_kernel_fails_bootstrap(self, make_module, kernel):
        module = make_module("late").bootstrap(
            "def bootstrap(ctx):\n    ctx.add_processor('points', lambda v: v)\n"
        )
        kernel.lock()

        with pytest.raises(BootstrapError, match="locked"):
            await load_bootstrap_script(module.descriptor(), kernel)
