"""ioengine settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Engine-wide settings loaded from environment variables / .env file.

    Every variable is read with the ``IOENGINE_`` prefix, e.g.
    ``IOENGINE_MAX_THREADS=4``.
    """

    model_config = SettingsConfigDict(
        env_prefix="IOENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Worker pool ---
    MAX_THREADS: int = Field(
        default=0,
        ge=0,
        description="Worker threads for the shared pool. 0 = all CPUs, 1 = sequential.",
    )

    # --- Analyses ---
    INFLUENCE_EPSILON: float = Field(
        default=0.001,
        gt=0.0,
        description="Default coefficient perturbation for field-of-influence analysis.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Engine log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PROD


def get_settings() -> Settings:
    """Build a fresh Settings from the current environment."""
    return Settings()
