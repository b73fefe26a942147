"""Common test fixtures and configuration."""

import os
import tempfile
from pathlib import Path

# Required settings must exist before the application module is imported
_env_defaults = {
    "FTP_HOST": "ftp.example.test",
    "FTP_USER": "tester",
    "FTP_PASSWORD": "secret",
}
for _k, _v in _env_defaults.items():
    os.environ.setdefault(_k, _v)

import pytest
from fastapi.testclient import TestClient

from ftpbridge.core.dependencies import get_ftp_gateway, get_layout
from ftpbridge.core.environment import FTPSettings, LayoutSettings
from ftpbridge.core.ftp_gateway import FTPGateway
from ftpbridge.main import app
from tests.fakes import FakeFTP


@pytest.fixture
def ftp_settings():
    """FTP settings pointing at a server that is never contacted."""
    return FTPSettings(
        ftp_host="ftp.example.test", ftp_user="tester", ftp_password="secret"
    )


@pytest.fixture
def layout():
    """Default remote layout."""
    return LayoutSettings()


@pytest.fixture
def fake_ftp(layout):
    """An empty fake server with the inbox and processed folders."""
    ftp = FakeFTP()
    ftp.add_dir(layout.inbox_dir)
    ftp.add_dir(layout.processed_dir)
    return ftp


@pytest.fixture
def gateway(ftp_settings, fake_ftp):
    """Gateway whose every connection is the fake server."""
    return FTPGateway(ftp_settings, ftp_factory=lambda: fake_ftp)


@pytest.fixture
def override_dependencies(gateway, layout):
    """Override FastAPI dependencies for testing."""
    app.dependency_overrides[get_ftp_gateway] = lambda: gateway
    app.dependency_overrides[get_layout] = lambda: layout

    yield
    # Clean up
    app.dependency_overrides = {}


@pytest.fixture
def client(override_dependencies):
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)
