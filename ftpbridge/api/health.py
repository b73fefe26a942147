"""Health check endpoints for monitoring."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.dependencies import get_ftp_gateway
from ..core.ftp_gateway import FTPGateway

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(request: Request):
    """Basic health check endpoint."""
    config_service = request.app.state.config_service
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": config_service.get_service_settings().service_name,
        "version": __version__,
    }


@router.get("/ftp")
def ftp_health(gateway: FTPGateway = Depends(get_ftp_gateway)):
    """Check that the FTP server accepts a login."""
    reachable = gateway.check_connection()
    health_status = {
        "status": "healthy" if reachable else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "ftp": {
            "host": gateway.settings.ftp_host,
            "port": gateway.settings.ftp_port,
            "reachable": reachable,
        },
    }
    return JSONResponse(content=health_status, status_code=200 if reachable else 503)
