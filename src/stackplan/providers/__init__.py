"""Cloud provider clients."""

from .base import ProviderClient, ProviderResource
from .memory import InMemoryProvider
from .http import HttpProvider

__all__ = [
    "ProviderClient",
    "ProviderResource",
    "InMemoryProvider",
    "HttpProvider",
]
