"""FastAPI dependencies."""

from fastapi import Request

from .environment import LayoutSettings
from .ftp_gateway import FTPGateway


def get_ftp_gateway(request: Request) -> FTPGateway:
    """Return the gateway built at startup.

    Returns:
        FTPGateway: Gateway bound to the configured FTP server
    """
    return request.app.state.ftp_gateway


def get_layout(request: Request) -> LayoutSettings:
    """Return the remote layout built at startup."""
    return request.app.state.layout
