"""State store interface and in-memory implementation."""

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional
from .models import StateRecord


class StateStore(ABC):
    """
    Durable mapping from resource id to StateRecord.
    
    Writes for the same resource id are serialized; the executor may call
    ``put``/``delete`` from several worker threads at once.
    """
    
    def __init__(self):
        self._guard = threading.Lock()
        self._resource_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
    
    def resource_lock(self, resource_id: str) -> threading.Lock:
        """Lock serializing writers of a single resource id."""
        with self._guard:
            return self._resource_locks[resource_id]
    
    @abstractmethod
    def get(self, resource_id: str) -> Optional[StateRecord]:
        """Return the record for a resource, or None."""
        pass
    
    @abstractmethod
    def put(self, record: StateRecord) -> None:
        """Insert or replace a record."""
        pass
    
    @abstractmethod
    def delete(self, resource_id: str) -> None:
        """Remove a record; missing ids are ignored."""
        pass
    
    @abstractmethod
    def snapshot(self) -> List[StateRecord]:
        """All records, as independent copies."""
        pass


class InMemoryStateStore(StateStore):
    """Process-local state store."""
    
    def __init__(self, records: Optional[List[StateRecord]] = None):
        super().__init__()
        self._records: Dict[str, StateRecord] = {}
        self._data_lock = threading.Lock()
        for record in records or []:
            self._records[record.resource_id] = record.model_copy(deep=True)
    
    def get(self, resource_id: str) -> Optional[StateRecord]:
        with self._data_lock:
            record = self._records.get(resource_id)
            return record.model_copy(deep=True) if record else None
    
    def put(self, record: StateRecord) -> None:
        with self.resource_lock(record.resource_id), self._data_lock:
            self._records[record.resource_id] = record.model_copy(deep=True)
    
    def delete(self, resource_id: str) -> None:
        with self.resource_lock(resource_id), self._data_lock:
            self._records.pop(resource_id, None)
    
    def snapshot(self) -> List[StateRecord]:
        with self._data_lock:
            return [record.model_copy(deep=True) for record in self._records.values()]
