"""
Environment-based Configuration System

Settings are loaded from environment variables (and an optional ``.env``
file) into small pydantic-settings groups. A single ``ConfigurationService``
caches each group for the lifetime of the process; nothing is written back
to disk.
"""

import os
from abc import ABC, abstractmethod
from datetime import timezone
from enum import Enum
from typing import Dict, List, Optional, Union

from loguru import logger
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .civil_time import fixed_offset

REQUIRED_ENV_VARS = ("FTP_HOST", "FTP_USER", "FTP_PASSWORD")


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ServiceSettings(BaseSettings):
    """Base settings with common configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    service_name: str = "ftpbridge"

    log_level: str = "INFO"
    log_file: Optional[str] = None


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    api_host: str = "0.0.0.0"
    api_port: int = 3000
    reload: bool = False
    cors_origins: Union[List[str], str] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from a comma-separated string or list."""
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v


class FTPSettings(BaseSettings):
    """Connection parameters of the partner's FTP server."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    ftp_host: str
    ftp_port: int = 21
    ftp_user: str
    ftp_password: str
    ftp_secure: bool = False
    # None keeps ftplib's own default (no timeout)
    ftp_timeout: Optional[float] = None
    ftp_encoding: str = "utf-8"
    ftp_debug_level: int = 0


class LayoutSettings(BaseSettings):
    """Remote directory layout and business calendar."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    inbox_dir: str = "/DHL"
    processed_dir: str = "/DHL/importacao/Processados"
    excluded_names: Union[List[str], str] = ["Erros", "Processados", "padrao_2"]
    business_utc_offset_hours: float = -3

    @field_validator("excluded_names", mode="before")
    @classmethod
    def parse_excluded_names(cls, v):
        """Parse excluded names from a comma-separated string or list."""
        if isinstance(v, str):
            return [n.strip() for n in v.split(",") if n.strip()]
        return v

    @property
    def business_timezone(self) -> timezone:
        """Fixed-offset timezone defining the business day."""
        return fixed_offset(self.business_utc_offset_hours)


class ConfigProvider(ABC):
    """Abstract configuration provider interface."""

    @abstractmethod
    def get_service_settings(self) -> ServiceSettings:
        """Get service settings."""

    @abstractmethod
    def get_api_settings(self) -> APISettings:
        """Get API settings."""

    @abstractmethod
    def get_ftp_settings(self) -> FTPSettings:
        """Get FTP settings."""

    @abstractmethod
    def get_layout_settings(self) -> LayoutSettings:
        """Get remote layout settings."""


class EnvironmentConfigProvider(ConfigProvider):
    """Configuration provider that loads from environment variables only."""

    def __init__(self):
        self._validate_required_env_vars()

    def _validate_required_env_vars(self) -> None:
        """Validate that required environment variables are set."""
        missing_vars = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
        if missing_vars:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

    def get_service_settings(self) -> ServiceSettings:
        return ServiceSettings()

    def get_api_settings(self) -> APISettings:
        return APISettings()

    def get_ftp_settings(self) -> FTPSettings:
        return FTPSettings()

    def get_layout_settings(self) -> LayoutSettings:
        return LayoutSettings()


class ConfigurationService:
    """Main configuration service that aggregates all settings."""

    def __init__(self, provider: ConfigProvider):
        self._provider = provider
        self._cache: Dict[str, BaseSettings] = {}
        logger.info("Configuration service initialized")

    def get_service_settings(self) -> ServiceSettings:
        """Get service settings with caching."""
        if "service" not in self._cache:
            self._cache["service"] = self._provider.get_service_settings()
        return self._cache["service"]

    def get_api_settings(self) -> APISettings:
        """Get API settings with caching."""
        if "api" not in self._cache:
            self._cache["api"] = self._provider.get_api_settings()
        return self._cache["api"]

    def get_ftp_settings(self) -> FTPSettings:
        """Get FTP settings with caching."""
        if "ftp" not in self._cache:
            self._cache["ftp"] = self._provider.get_ftp_settings()
        return self._cache["ftp"]

    def get_layout_settings(self) -> LayoutSettings:
        """Get layout settings with caching."""
        if "layout" not in self._cache:
            self._cache["layout"] = self._provider.get_layout_settings()
        return self._cache["layout"]

    def reload_settings(self) -> None:
        """Clear cache and force reload of all settings."""
        self._cache.clear()
        logger.info(
            "Configuration cache cleared, settings will be reloaded on next access"
        )

    def get_environment(self) -> Environment:
        """Get current environment."""
        return self.get_service_settings().environment

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.get_environment() == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.get_environment() == Environment.PRODUCTION


# Global configuration service instance
_config_service: Optional[ConfigurationService] = None


def get_config_service() -> ConfigurationService:
    """Get the global configuration service instance."""
    global _config_service
    if _config_service is None:
        provider = EnvironmentConfigProvider()
        _config_service = ConfigurationService(provider)
    return _config_service


def reset_config_service() -> None:
    """Drop the global instance so the next access re-reads the environment."""
    global _config_service
    _config_service = None
