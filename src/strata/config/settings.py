"""Runtime settings loaded from the environment."""

import enum
import typing as t
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Continuation counts with special meaning
CONTINUATIONS_DISABLED: t.Final = 0
CONTINUATIONS_UNLIMITED: t.Final = -1


class Environment(enum.StrEnum):
    """Runtime environment for the application."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(enum.StrEnum):
    """Log levels accepted by the logging setup."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Settings container used to bootstrap the client.

    Values come from keyword arguments first, then ``STRATA_*`` environment
    variables, then the defaults below.
    """

    model_config = SettingsConfigDict(env_prefix="STRATA_", frozen=True)

    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO
    base_url: str | None = Field(
        default=None, description="Object store endpoint that paths resolve against"
    )
    download_continuations: int = Field(
        default=5,
        ge=CONTINUATIONS_UNLIMITED,
        description="Continuations per download: 0 disables, -1 is unlimited",
    )
    timeout: float = Field(default=300.0, gt=0, description="Request timeout (s)")
    max_retries: int = Field(
        default=3, ge=0, description="Automatic retries for failed request exchanges"
    )
    chunk_size: int = Field(default=65536, gt=0, description="Body read size")
    download_dir: Path = Field(default=Path("."))

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: t.Any) -> t.Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def continuations_enabled(self) -> bool:
        return self.download_continuations != CONTINUATIONS_DISABLED

    @property
    def max_continuations(self) -> int | None:
        """Continuation ceiling, or None when unlimited."""
        if self.download_continuations == CONTINUATIONS_UNLIMITED:
            return None
        return self.download_continuations


def build_settings(**overrides: t.Any) -> Settings:
    """Build Settings, ignoring overrides that were left as None.

    Lets CLI options default to None without clobbering environment values.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)
