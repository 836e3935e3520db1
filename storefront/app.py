"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from storefront.api import introspection
from storefront.config import Settings, settings
from storefront.exception_handlers import register_exception_handlers
from storefront.exceptions import StorefrontError
from storefront.loader.descriptors import MODULES_PATH
from storefront.routing.dispatch import mount_routes
from storefront.startup import bootstrap_application

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None, modules_path: Path = MODULES_PATH) -> FastAPI:
    """Create the FastAPI application; the kernel is assembled in its lifespan."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up the application...")
        try:
            application = await bootstrap_application(app_settings, modules_path)
        except StorefrontError as exc:
            logger.critical(
                "Startup aborted: %s",
                exc.message,
                extra={"error_code": exc.error_code.value, "phase": "startup"},
            )
            raise
        app.state.storefront = application
        mount_routes(app, application.routes, application.kernel, application.config)
        yield
        logger.info("Shutting down the application...")

    app = FastAPI(
        title=app_settings.app_name,
        description="Extensible eCommerce storefront",
        debug=app_settings.debug,
        version=app_settings.app_version,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(introspection.router, prefix="/api/v1/kernel")
    return app
