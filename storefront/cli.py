"""
Command-line entry point.

    storefront build [--clean]      assemble the kernel and compile page bundles
    storefront start [--host --port] serve the storefront with uvicorn
    storefront routes               print the resolved route table

Fatal kernel errors are reported on stderr and exit with status 1.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from storefront.config import Settings, settings
from storefront.exceptions import StorefrontError
from storefront.logging_config import configure_logging
from storefront.startup import Application, bootstrap_application, build_application

app = typer.Typer(help="Extensible storefront kernel.", no_args_is_help=True)

RootOption = Annotated[
    Path | None,
    typer.Option("--root", "-r", help="Project root holding config/ and the build directory"),
]


def _settings(root: Path | None) -> Settings:
    if root is None:
        return settings
    return settings.model_copy(update={"root_dir": root})


def _fail(exc: StorefrontError) -> typer.Exit:
    typer.echo(f"Error [{exc.error_code.value}]: {exc.message}", err=True)
    return typer.Exit(code=1)


def _assemble(app_settings: Settings) -> Application:
    try:
        return asyncio.run(bootstrap_application(app_settings))
    except StorefrontError as exc:
        raise _fail(exc) from exc


@app.command()
def build(
    clean: Annotated[bool, typer.Option("--clean", help="Discard the previous build and manifest")] = False,
    root: RootOption = None,
) -> None:
    """Compile the client bundles of every page route that changed."""
    app_settings = _settings(root)
    configure_logging(app_settings.log_level, app_settings.log_json)
    application = _assemble(app_settings)
    try:
        result = asyncio.run(build_application(application, clean=clean))
    except StorefrontError as exc:
        raise _fail(exc) from exc

    for identity in result.compiled:
        typer.echo(f"  compiled  {identity}")
    for identity in result.skipped:
        typer.echo(f"  skipped   {identity}")
    typer.echo(f"Build complete: {len(result.compiled)} compiled, {len(result.skipped)} up to date")


@app.command()
def start(
    host: Annotated[str, typer.Option("--host", help="Interface to bind")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port to listen on")] = 8000,
    root: RootOption = None,
) -> None:
    """Serve the storefront."""
    import uvicorn

    from storefront.app import create_app

    app_settings = _settings(root)
    configure_logging(app_settings.log_level, app_settings.log_json)
    uvicorn.run(create_app(app_settings), host=host, port=port)


@app.command()
def routes(root: RootOption = None) -> None:
    """Print the route table after overrides are resolved."""
    app_settings = _settings(root)
    configure_logging(app_settings.log_level, app_settings.log_json)
    application = _assemble(app_settings)

    for route in application.routes:
        handlers = ", ".join(route.handler_files)
        typer.echo(f"{route.method:<7}{route.url_pattern:<32}{route.module:<12}{handlers}")
    for override in application.routes.overrides:
        typer.echo(f"override: {override.identity} {override.replaced_module} -> {override.module}")
