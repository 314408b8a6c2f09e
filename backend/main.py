"""
Main FastAPI application entry point
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from realm.api.routes import assets, health, metrics, pages
from realm.core.assets import DependencyError
from realm.core.config import Settings, get_settings
from realm.core.context import RealmContext
from realm.core.error_handlers import register_error_handlers
from realm.core.logging_config import LoggingConfig
from realm.core.middleware import LoggingContextMiddleware
from realm.core.middleware_metrics import MetricsMiddleware

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; assets are resolved when the lifespan starts"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")
        try:
            app.state.realm = RealmContext.create(settings)
        except DependencyError as e:
            logger.critical(
                "Static asset resolution failed, refusing to start",
                extra={"static_dir": settings.static_dir, "kind": e.kind, "error": str(e)},
            )
            raise
        logger.info(
            "Serving asset version",
            extra={"asset_version": app.state.realm.assets.get().latest_version},
        )

        yield

        logger.info(f"Shutting down {settings.app_name}...")

    app = FastAPI(
        title=settings.app_name,
        description="Pages served as HTML, JSON payload or layout descriptor",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(assets.router)
    app.include_router(pages.router)

    if Path(settings.static_dir).is_dir():
        app.mount(settings.static_url, StaticFiles(directory=settings.static_dir), name="static")
    else:
        logger.warning("Static directory missing, not mounting", extra={"static_dir": settings.static_dir})

    return app


app = create_app()
