"""Logging setup built on loguru.

Library modules obtain a bound logger with ``get_logger(__name__)``. The
first call configures a default stderr sink unless ``configure_logger`` or
``setup_logging`` has already been called.
"""

import sys
import typing as t

from loguru import logger

from ..config.settings import Environment, LogLevel, Settings

if t.TYPE_CHECKING:
    import loguru

_DEVELOPMENT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
_PLAIN_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]} - {message}"
)

_configured = False


def configure_logger(
    level: LogLevel = LogLevel.INFO,
    environment: Environment = Environment.DEVELOPMENT,
) -> None:
    """Replace all sinks with a single stderr sink for the environment.

    Production emits serialised JSON lines; development is colourised.
    """
    global _configured

    logger.remove()
    logger.configure(extra={"name": "strata"})

    match environment:
        case Environment.PRODUCTION:
            logger.add(sys.stderr, level=str(level), serialize=True)
        case Environment.DEVELOPMENT:
            logger.add(
                sys.stderr,
                level=str(level),
                format=_DEVELOPMENT_FORMAT,
                colorize=True,
                backtrace=True,
                diagnose=True,
            )
        case _:
            logger.add(sys.stderr, level=str(level), format=_PLAIN_FORMAT)

    _configured = True


def setup_logging(settings: Settings) -> None:
    """Configure logging from application settings."""
    configure_logger(level=settings.log_level, environment=settings.environment)


def get_logger(name: str) -> "loguru.Logger":
    """Return a logger bound to ``name``, configuring defaults on first use."""
    if not _configured:
        configure_logger()
    return logger.bind(name=name)


def is_configured() -> bool:
    return _configured


def reset_logging() -> None:
    """Drop all sinks so the next get_logger call reconfigures."""
    global _configured

    logger.remove()
    _configured = False
