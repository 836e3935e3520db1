"""
Lock controller and kernel tests.
"""

from __future__ import annotations

import threading

import pytest

from storefront.exceptions import LockedHooksError, LockedRegistryError
from storefront.extensibility import CONFIGURATION_SCHEMA, Kernel, LockController, Phase


class TestLockController:
    def test_starts_mutable(self):
        controller = LockController()

        assert controller.phase is Phase.MUTABLE
        assert not controller.is_locked

    def test_lock_transitions_once(self):
        controller = LockController()

        assert controller.lock() is True
        assert controller.lock() is False
        assert controller.phase is Phase.LOCKED

    def test_callbacks_run_at_lock_time(self):
        controller = LockController()
        calls = []
        controller.on_lock(lambda: calls.append("frozen"))

        assert calls == []
        controller.lock()
        controller.lock()

        assert calls == ["frozen"]

    def test_callback_registered_after_lock_runs_immediately(self):
        controller = LockController()
        controller.lock()
        calls = []

        controller.on_lock(lambda: calls.append("late"))

        assert calls == ["late"]

    def test_concurrent_lock_transitions_exactly_once(self):
        controller = LockController()
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(controller.lock())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
        assert results.count(False) == 7


class TestKernel:
    def test_single_lock_freezes_registry_and_hooks(self):
        kernel = Kernel()
        kernel.lock()

        assert kernel.is_locked
        assert kernel.registry.is_locked
        assert kernel.hooks.is_locked
        with pytest.raises(LockedRegistryError):
            kernel.registry.add_processor("points", lambda value: value)
        with pytest.raises(LockedHooksError):
            kernel.hooks.add_hook("fn", "before", lambda: None)

    def test_kernels_are_independent(self):
        first, second = Kernel(), Kernel()
        first.registry.add_processor("points", lambda value: value + 1)
        first.lock()

        second.registry.add_processor("points", lambda value: value + 10)

        assert first.registry.run_processors_sync("points", 0) == 1
        assert second.registry.run_processors_sync("points", 0) == 10


class TestBootstrapContext:
    def test_context_registers_on_kernel(self):
        kernel = Kernel()
        ctx = kernel.context_for("checkout")

        ctx.add_processor("cartFields", lambda fields: [*fields, "a"], 5)
        ctx.add_final_processor("cartFields", lambda fields: [*fields, "final"])
        ctx.add_hook("setPageMetaInfo", "after", lambda result, *args: result)

        assert ctx.module_name == "checkout"
        assert kernel.registry.run_processors_sync("cartFields", []) == ["a", "final"]
        assert kernel.hooks.hooked_functions() == ["setPageMetaInfo"]

    def test_merge_config_schema_deep_merges_fragments(self):
        kernel = Kernel()
        kernel.context_for("base").merge_config_schema(
            {"properties": {"shop": {"type": "object", "properties": {"name": {"type": "string"}}}}}
        )
        kernel.context_for("extra").merge_config_schema(
            {"properties": {"shop": {"properties": {"tagline": {"type": "string"}}}}}
        )

        schema = kernel.registry.run_processors_sync(CONFIGURATION_SCHEMA, {"type": "object"})

        assert schema["properties"]["shop"]["properties"] == {
            "name": {"type": "string"},
            "tagline": {"type": "string"},
        }

    def test_merge_config_schema_copies_the_fragment(self):
        kernel = Kernel()
        fragment = {"properties": {"cms": {"type": "object"}}}
        kernel.context_for("cms").merge_config_schema(fragment)

        fragment["properties"]["cms"]["type"] = "string"
        schema = kernel.registry.run_processors_sync(CONFIGURATION_SCHEMA, {})

        assert schema["properties"]["cms"]["type"] == "object"

    def test_merge_config_schema_after_lock_raises(self):
        kernel = Kernel()
        kernel.lock()

        with pytest.raises(LockedRegistryError):
            kernel.context_for("late").merge_config_schema({"properties": {}})
