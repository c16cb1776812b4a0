"""Build a provider client from settings."""

from .base import ProviderClient
from .http import HttpProvider
from .memory import InMemoryProvider
from ..config.settings import ProviderSettings
from ..utils.errors import ConfigError
from ..utils.logging import get_logger

logger = get_logger("providers.factory")


def get_provider(settings: ProviderSettings) -> ProviderClient:
    """Instantiate the configured provider client."""
    if settings.type == "memory":
        logger.debug(f"Using in-memory provider (persisted to {settings.memory_path})")
        return InMemoryProvider(path=settings.memory_path)
    if settings.type == "http":
        return HttpProvider(base_url=settings.base_url, token_env=settings.token_env)
    raise ConfigError(f"Unknown provider type: {settings.type}")
