"""
Unit Tests for Settings and Logging Configuration
=================================================
"""

import pytest
from pydantic import ValidationError

from contentkit.config.logging import get_logger, get_logging_config
from contentkit.config.settings import Settings, get_settings, reload_settings


class TestSettings:
    """Test environment-driven settings."""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("CONTENTKIT_FIELD_COLUMN_PREFIX", "col_")
        assert Settings().field_column_prefix == "col_"

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="staging")

    def test_log_level_upper_cased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_object_name_length_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(max_object_name_length=0)

    def test_reload_replaces_global(self, monkeypatch):
        from contentkit.config import settings as settings_module

        monkeypatch.setattr(settings_module, "settings", None)
        first = get_settings()
        assert get_settings() is first
        assert reload_settings() is not first


class TestLoggingConfig:
    """Test handler selection per environment."""

    def test_testing_logs_to_console_only(self):
        config = get_logging_config(Settings(environment="testing"))
        assert config["loggers"][""]["handlers"] == ["console"]

    def test_production_uses_json_and_files(self):
        config = get_logging_config(Settings(environment="production"))
        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"][""]["handlers"] == ["console", "file", "error_file"]

    def test_get_logger_binds(self):
        logger = get_logger("contentkit.test").bind(component="test")
        logger.info("Logger works", value=1)
