import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from app.config.database import create_db_engine, create_session_factory, init_db
from app.config.settings import Settings, get_settings
from app.core.exceptions import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.api.v1.router import api_router
from app.shared.clock import Clock

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    """Construir la app con su propio engine y session factory"""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        init_db(app.state.engine)
        logger.info(f"🚀 {settings.app_name} starting - version {settings.version}")
        logger.info(f"🌍 Environment: {'Development' if settings.debug else 'Production'}")

        yield

        # Shutdown
        app.state.engine.dispose()
        logger.info(f"🛑 {settings.app_name} shutting down")

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Recepción de mercancía en puntos de entrega (PVZ)",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    engine = create_db_engine(settings.database_url, echo=settings.debug)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.clock = clock or Clock()
    app.dependency_overrides[get_settings] = lambda: settings

    # Setup middleware
    setup_middleware(app, settings)
    setup_exception_handlers(app)

    # Include routers
    app.include_router(api_router)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port
    )
