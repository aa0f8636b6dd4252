"""Tests for environment-driven settings and logging setup."""

import logging

import pytest
import structlog
from pydantic import ValidationError

from ioengine.config.logging_config import configure_logging, get_logger
from ioengine.config.settings import Environment, LogLevel, Settings, get_settings


class TestSettings:

    def test_defaults(self, monkeypatch) -> None:
        for var in ("MAX_THREADS", "INFLUENCE_EPSILON", "LOG_LEVEL", "ENVIRONMENT"):
            monkeypatch.delenv(f"IOENGINE_{var}", raising=False)
        settings = Settings(_env_file=None)
        assert settings.MAX_THREADS == 0
        assert settings.INFLUENCE_EPSILON == pytest.approx(0.001)
        assert settings.LOG_LEVEL == LogLevel.INFO
        assert settings.ENVIRONMENT == Environment.DEV
        assert not settings.is_production

    def test_prefixed_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("IOENGINE_MAX_THREADS", "4")
        monkeypatch.setenv("IOENGINE_ENVIRONMENT", "prod")
        settings = get_settings()
        assert settings.MAX_THREADS == 4
        assert settings.is_production

    def test_negative_threads_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("IOENGINE_MAX_THREADS", "-2")
        with pytest.raises(ValidationError):
            get_settings()

    def test_non_positive_epsilon_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("IOENGINE_INFLUENCE_EPSILON", "0")
        with pytest.raises(ValidationError):
            get_settings()


class TestLogging:

    def test_configure_sets_root_level(self) -> None:
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging(Settings(LOG_LEVEL=LogLevel.WARNING, _env_file=None))
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)
            structlog.reset_defaults()

    def test_get_logger_binds_component(self) -> None:
        logger = get_logger("validate_model")
        assert logger is not None
