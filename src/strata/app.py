"""Application bootstrap."""

from dataclasses import dataclass

from .config.settings import Settings
from .infrastructure.logging import setup_logging


@dataclass(frozen=True)
class App:
    """Bootstrapped application holding its resolved settings."""

    settings: Settings


def create_app(settings: Settings | None = None) -> App:
    """Resolve settings and configure logging for them."""
    settings = settings or Settings()
    setup_logging(settings)
    return App(settings=settings)
