"""Loguru sink configuration."""

import sys
from pathlib import Path

from loguru import logger

from .environment import ServiceSettings


def configure_logging(settings: ServiceSettings) -> None:
    """Replace loguru's default handler with the configured sinks."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()

    logger.remove()  # Remove default handler
    logger.add(sys.stdout, level=level)
    if settings.log_file:
        log_path = Path(settings.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_path, rotation="10 MB", level="DEBUG")
