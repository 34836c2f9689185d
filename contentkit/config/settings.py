"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="contentkit", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # Storage Configuration
    storage_path: Path = Field(default=Path("./storage"), description="Storage directory path")

    # Content Configuration
    max_object_name_length: int = Field(
        default=64, description="Maximum database object name length"
    )
    field_column_prefix: str = Field(
        default="field_", description="Prefix applied to field content columns"
    )
    field_context: str = Field(default="global", description="Default field context")

    # Control Panel Configuration
    notification_duration: int = Field(
        default=2000, description="Notification display duration in milliseconds"
    )
    action_base_url: str = Field(
        default="http://localhost:8000", description="Base URL for control panel actions"
    )
    action_timeout: int = Field(default=30, description="Action request timeout in seconds")

    # Celery Configuration
    celery_broker_url: str = Field(
        default="redis://localhost:6379/1", description="Celery broker URL"
    )
    celery_result_backend: Optional[str] = Field(
        default=None, description="Celery result backend URL"
    )
    celery_task_timeout: int = Field(default=300, description="Celery task timeout in seconds")
    task_always_eager: bool = Field(
        default=False, description="Run queued tasks synchronously in the caller"
    )

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("max_object_name_length")
    @classmethod
    def validate_max_object_name_length(cls, v: int) -> int:
        """Object names must leave room for at least one handle character."""
        if v < 1:
            raise ValueError("max_object_name_length must be positive")
        return v

    @field_validator("storage_path")
    @classmethod
    def create_directories(cls, v: Path) -> Path:
        """Ensure directories exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="CONTENTKIT_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
