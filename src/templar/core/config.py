"""
Templar Configuration Management

Provides centralized configuration management with validation and environment support.
"""

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


def _default_home() -> Path:
    return Path.home() / ".templar"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    max_file_size: int = Field(
        default=10_000_000, description="Max log file size in bytes"
    )
    backup_count: int = Field(default=5, description="Number of backup log files")
    http_level: str = Field(
        default="WARNING", description="Logging level of aiohttp client loggers"
    )

    @field_validator("level", "http_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class RunnerConfig(BaseModel):
    """Request runner configuration."""

    timeout: float = Field(default=30.0, description="Default request timeout in seconds")
    max_connections: int = Field(default=100, description="Max pooled connections")
    max_connections_per_host: int = Field(
        default=10, description="Max pooled connections per host"
    )
    keepalive_timeout: float = Field(
        default=30.0, description="Idle keep-alive timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("timeout", "keepalive_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Invalid timeout: {v}. Must be greater than zero")
        return v

    @field_validator("max_connections", "max_connections_per_host")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Invalid connection limit: {v}. Must be zero or more")
        return v


class StorageConfig(BaseModel):
    """Workspace storage configuration."""

    workspace_path: str = Field(
        default_factory=lambda: str(_default_home() / "workspace.json"),
        description="Workspace document path",
    )
    transcript_path: Optional[str] = Field(
        default=None, description="File the request transcript is appended to"
    )


class TemplarConfig(BaseSettings):
    """Main Templar configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    model_config = SettingsConfigDict(
        env_prefix="TEMPLAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


# Global configuration instance
_config: Optional[TemplarConfig] = None


def get_config() -> TemplarConfig:
    """
    Get the global configuration instance.

    Returns:
        The global TemplarConfig instance
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def load_config(config_file: Optional[Path] = None) -> TemplarConfig:
    """
    Load configuration from environment variables and an optional env file.

    Args:
        config_file: Optional path to a dotenv-style configuration file

    Returns:
        Loaded configuration instance

    Raises:
        ConfigurationError: If a setting has an invalid value
    """
    try:
        if config_file and config_file.exists():
            return TemplarConfig(_env_file=str(config_file))
        return TemplarConfig()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def reload_config(config_file: Optional[Path] = None) -> TemplarConfig:
    """
    Reload the global configuration.

    Args:
        config_file: Optional path to configuration file

    Returns:
        Reloaded configuration instance
    """
    global _config
    _config = load_config(config_file)
    return _config


def update_config(**kwargs: Any) -> None:
    """
    Update configuration values at runtime.

    Args:
        **kwargs: Configuration values to update

    Raises:
        ConfigurationError: If a key is not a configuration section
    """
    global _config
    if _config is None:
        _config = load_config()

    for key, value in kwargs.items():
        if hasattr(_config, key):
            setattr(_config, key, value)
        else:
            raise ConfigurationError(f"Unknown configuration key: {key}")


def get_workspace_path() -> Path:
    """
    Get the configured workspace document path.

    Returns:
        Path to the workspace file, with its parent directory created
    """
    config = get_config()
    path = Path(os.path.expanduser(config.storage.workspace_path))
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
