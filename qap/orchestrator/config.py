"""
QAP Configuration Module
========================

Centralized configuration management using environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    QAP_START_SNO: Default first sequence number for new QAPs (default: 1)
    QAP_DEFAULT_ACTOR: Actor recorded when none is supplied (default: unknown)
    QAP_CATALOG_PATH: JSON baseline catalog (default: built-in catalog)
    QAP_ALLOW_DIRECT_SUBMIT: Allow zero-mismatch submission from review (default: false)

    QAP_LOG_LEVEL: Root log level (default: INFO)
    QAP_LOG_JSON: JSON structured logs (default: false)
    QAP_LOG_FILE: Optional rotating log file

    ENVIRONMENT: development / production (default: development)
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Args:
        key: Environment variable name
        default: Default value if not set
        required: If True, raises ValueError when not set

    Returns:
        Environment variable value or default

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class WorkflowConfig:
    """QAP workflow configuration."""

    start_sno: int = field(default_factory=lambda: get_env_int("QAP_START_SNO", 1))
    default_actor: str = field(default_factory=lambda: get_env("QAP_DEFAULT_ACTOR", "unknown"))
    catalog_path: Optional[str] = field(default_factory=lambda: get_env("QAP_CATALOG_PATH"))

    # Zero-mismatch QAPs may skip the assignment stage when enabled
    allow_direct_submit: bool = field(
        default_factory=lambda: get_env_bool("QAP_ALLOW_DIRECT_SUBMIT", False)
    )

    def __post_init__(self):
        """Validate configuration."""
        if self.start_sno < 1:
            raise ValueError("start_sno must be >= 1")
        if not self.default_actor:
            raise ValueError("default_actor cannot be empty")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("QAP_LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("QAP_LOG_FILE"))

    # Structured logging
    json_logs: bool = field(default_factory=lambda: get_env_bool("QAP_LOG_JSON", False))

    def __post_init__(self):
        if self.level.upper() not in LOG_LEVELS:
            raise ValueError(f"QAP_LOG_LEVEL must be one of {LOG_LEVELS}, got: {self.level}")


@dataclass
class Settings:
    """Main application settings container."""

    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Application metadata
    app_name: str = "qap"
    app_version: str = "1.0.0"
    environment: str = field(default_factory=lambda: get_env("ENVIRONMENT", "development"))

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() in ("production", "prod")


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Raises:
        ValueError: If configuration is invalid
    """
    return Settings()


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings():
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
