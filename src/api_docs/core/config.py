"""Configuration management for the Local API Docs server."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from ``local.env`` and the environment."""

    model_config = SettingsConfigDict(
        env_file="local.env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Server configuration
    PORT: int = Field(default=3000, ge=1, le=65535, description="Listen port")
    BIND_HOST: str = Field(default="0.0.0.0", description="Interface the server binds to")
    HOST: str = Field(default="", description="Default target API host offered to the UI")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="text", description="Logging format: json or text")

    # Static files and endpoint store
    DOCS_ROOT: str = Field(default="public", description="Document root for static files")
    DEFAULT_DOCUMENT: str = Field(default="index.html", description="Document served for /")
    APIS_DIR: str = Field(default="public/apis", description="Directory holding endpoint group files")
    INDEX_FILE: str = Field(default="index.json", description="Index file name inside APIS_DIR")

    # Proxy relay
    PROXY_TIMEOUT: float = Field(default=30.0, gt=0, le=600.0, description="Upstream timeout in seconds")
    PROXY_STRICT_STATUS: bool = Field(
        default=False,
        description="Answer relay transport failures with 502/504 instead of 200"
    )

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('LOG_FORMAT')
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format"""
        valid_formats = ['json', 'text']
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}")
        return v.lower()

    @field_validator('HOST')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.strip().rstrip('/')

    @property
    def docs_root(self) -> Path:
        return Path(self.DOCS_ROOT).resolve()

    @property
    def apis_dir(self) -> Path:
        return Path(self.APIS_DIR).resolve()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings (for dependency injection)"""
    return settings
