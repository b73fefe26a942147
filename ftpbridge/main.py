"""Main server application."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from loguru import logger

from . import __version__
from .api import router as api_router
from .core.environment import ConfigurationService, get_config_service
from .core.errors import ServiceError
from .core.ftp_gateway import FTPGateway
from .core.middleware import PrometheusMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the FTP gateway from configuration before serving requests."""
    config_service: ConfigurationService = app.state.config_service
    try:
        logger.info("Starting up ftpbridge API server...")

        ftp_settings = config_service.get_ftp_settings()
        layout = config_service.get_layout_settings()
        app.state.ftp_gateway = FTPGateway(ftp_settings)
        app.state.layout = layout

        logger.info(
            "FTP gateway configured for {}@{}:{} (secure={})",
            ftp_settings.ftp_user,
            ftp_settings.ftp_host,
            ftp_settings.ftp_port,
            ftp_settings.ftp_secure,
        )
        logger.info(
            "Inbox: {}, processed: {}, business UTC offset: {}h",
            layout.inbox_dir,
            layout.processed_dir,
            layout.business_utc_offset_hours,
        )

        yield

    except Exception as e:
        logger.error(f"Failed to start ftpbridge API server: {e}")
        raise
    finally:
        logger.info("Shutting down ftpbridge API server...")


async def service_error_handler(request: Request, exc: ServiceError):
    """Render service errors as plain-text bodies."""
    logger.warning(
        f"{request.method} {request.url.path} failed with {exc.status_code}: {exc.message}"
    )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(config_service: Optional[ConfigurationService] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config_service: Configuration to use, the process-wide one by default

    Returns:
        FastAPI: Configured application
    """
    config_service = config_service or get_config_service()
    service_settings = config_service.get_service_settings()
    api_settings = config_service.get_api_settings()

    app = FastAPI(
        title=service_settings.service_name,
        description="HTTP bridge to the partner's FTP inbox",
        debug=service_settings.debug,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config_service = config_service

    app.add_exception_handler(ServiceError, service_error_handler)

    # Add Prometheus middleware
    app.add_middleware(PrometheusMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from .core.log_config import configure_logging

    config_service = get_config_service()
    api_settings = config_service.get_api_settings()
    service_settings = config_service.get_service_settings()
    configure_logging(service_settings)

    uvicorn.run(
        "ftpbridge.main:app",
        host=api_settings.api_host,
        port=api_settings.api_port,
        reload=api_settings.reload,
        log_level="debug" if service_settings.debug else "info",
    )
