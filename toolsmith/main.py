# toolsmith/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import asyncio
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

from .core.config import Settings, settings as default_settings
from .core.exceptions import (
    ToolsmithException,
    toolsmith_exception_handler,
    validation_exception_handler,
    http_exception_handler
)
from .core.dependencies import ServiceContainer
from .api.middleware import LoggingMiddleware, SecurityHeadersMiddleware
from .api.v1 import catalog, compliance, generations, progress, tools
from .services.artifact_provider import ArtifactProvider
from .utils.logging_filter import setup_secure_logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

setup_secure_logging()

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, provider: Optional[ArtifactProvider] = None) -> FastAPI:
    """
    Build a Toolsmith application with its own service container.

    ``provider`` overrides the generation provider chosen at startup.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}")
        container: ServiceContainer = app.state.container

        try:
            async with asyncio.timeout(30):
                await container.startup()
        except TimeoutError:
            logger.warning("Service startup timed out, falling back to offline generation")
            container.started = True

        logger.info(f"Accepting generation requests on {settings.API_PREFIX}")

        yield

        logger.info("Stopping generation runs")
        try:
            async with asyncio.timeout(10):
                await container.shutdown()
        except TimeoutError:
            logger.warning("Shutdown timed out with generation runs still active")
        logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        description="Describe a tool in plain words and get a working one, with live generation progress",
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan
    )
    app.state.container = ServiceContainer(settings, provider=provider)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time", "X-Error-Code", "X-Error-Category"]
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(ToolsmithException, toolsmith_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": settings.APP_VERSION,
            "status": "running",
            "api_base": settings.API_PREFIX,
            "progress_stream": "/ws",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/health")
    async def health_check():
        container: ServiceContainer = app.state.container
        return {
            "status": "healthy" if container.started else "starting",
            "generation_provider": container.provider.name,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    app.include_router(generations.router, prefix=f"{settings.API_PREFIX}/generations", tags=["generations"])
    app.include_router(tools.router, prefix=f"{settings.API_PREFIX}/tools", tags=["tools"])
    app.include_router(compliance.router, prefix=f"{settings.API_PREFIX}/compliance", tags=["compliance"])
    app.include_router(catalog.router, prefix=settings.API_PREFIX, tags=["catalog"])
    app.include_router(progress.router, tags=["progress"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "toolsmith.main:app",
        host="0.0.0.0",
        port=8080,
        reload=default_settings.DEBUG,
        log_level="info"
    )
