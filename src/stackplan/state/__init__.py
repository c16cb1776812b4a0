"""State store: durable record of what was last applied."""

from .models import StateRecord, StateDocument
from .store import StateStore, InMemoryStateStore
from .json_store import JsonFileStateStore

__all__ = [
    "StateRecord",
    "StateDocument",
    "StateStore",
    "InMemoryStateStore",
    "JsonFileStateStore",
]
