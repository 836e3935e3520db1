"""
Bundler entry generation.

Each page route gets ``<build_dir>/<output_name>/entry.js``: it imports the route's
components in composition order (sort order, then file name), groups them
by layout area and hands the map to the client runtime. The bundler writes
its output to ``<build_dir>/<output_name>/dist``.
"""

from __future__ import annotations

import json
from pathlib import Path

from storefront.routing.route import ComponentRef, RouteEntry

CLIENT_RUNTIME = "@storefront/client/hydrate.js"
ENTRY_FILE = "entry.js"
BUNDLE_DIR = "dist"


def route_output_dir(build_dir: Path, route: RouteEntry) -> Path:
    return build_dir / route.output_name


def entry_file(build_dir: Path, route: RouteEntry) -> Path:
    return route_output_dir(build_dir, route) / ENTRY_FILE


def bundle_dir(build_dir: Path, route: RouteEntry) -> Path:
    return route_output_dir(build_dir, route) / BUNDLE_DIR


def bundle_output(route: RouteEntry) -> str:
    """Bundle location relative to the build directory, as recorded in the manifest."""
    return f"{route.output_name}/{BUNDLE_DIR}"


def ordered_components(route: RouteEntry) -> list[ComponentRef]:
    return sorted(route.components, key=lambda c: (c.layout.sort_order, c.path.name))


def render_entry(route: RouteEntry) -> str:
    components = ordered_components(route)
    lines = [
        f"// Generated for {route.identity} ({route.module}). Do not edit.",
        f"import {{ hydrate }} from {json.dumps(CLIENT_RUNTIME)};",
    ]
    lines.extend(f"import c{index} from {json.dumps(c.path.as_posix())};" for index, c in enumerate(components))

    areas: dict[str, list[str]] = {}
    for index, component in enumerate(components):
        areas.setdefault(component.layout.area_id, []).append(
            f"    {{ id: 'c{index}', sortOrder: {component.layout.sort_order}, component: c{index} }},"
        )

    lines.append("")
    lines.append("const areas = {")
    for area_id, items in areas.items():
        lines.append(f"  {json.dumps(area_id)}: [")
        lines.extend(items)
        lines.append("  ],")
    lines.append("};")
    lines.append("")
    lines.append(f"hydrate(areas, {json.dumps(route.identity)});")
    return "\n".join(lines) + "\n"


def write_entry(build_dir: Path, route: RouteEntry) -> Path:
    path = entry_file(build_dir, route)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_entry(route), encoding="utf-8")
    return path
