"""JSON file state store with atomic read-modify-write."""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional
from pydantic import ValidationError
from .models import StateDocument, StateRecord, STATE_FORMAT_VERSION
from .store import StateStore
from ..utils.errors import StateStoreError
from ..utils.logging import get_logger

logger = get_logger("state.json_store")


class JsonFileStateStore(StateStore):
    """
    State persisted as a single JSON document.
    
    Every write re-reads the file, changes one record and atomically replaces
    the file, so concurrent writers within one process never drop each
    other's records. Writers in separate processes are not coordinated.
    """
    
    def __init__(self, path):
        super().__init__()
        self.path = Path(path)
        self._file_lock = threading.Lock()
    
    def _read(self) -> StateDocument:
        if not self.path.exists():
            return StateDocument()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateStoreError(f"State file {self.path} is not valid JSON: {e}")
        except OSError as e:
            raise StateStoreError(f"Error reading state file {self.path}: {e}")
        
        try:
            document = StateDocument.model_validate(data)
        except ValidationError as e:
            raise StateStoreError(f"State file {self.path} has an invalid layout: {e}")
        
        if document.version != STATE_FORMAT_VERSION:
            raise StateStoreError(
                f"Unsupported state format version {document.version} in {self.path} "
                f"(expected {STATE_FORMAT_VERSION})"
            )
        return document
    
    def _write(self, document: StateDocument) -> None:
        document.serial += 1
        payload = json.dumps(document.model_dump(mode="json"), indent=2, sort_keys=True)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StateStoreError(f"Failed to write state file {self.path}: {e}")
        logger.debug(f"Wrote state serial {document.serial} to {self.path}")
    
    def get(self, resource_id: str) -> Optional[StateRecord]:
        with self._file_lock:
            return self._read().resources.get(resource_id)
    
    def put(self, record: StateRecord) -> None:
        with self.resource_lock(record.resource_id), self._file_lock:
            document = self._read()
            document.resources[record.resource_id] = record
            self._write(document)
    
    def delete(self, resource_id: str) -> None:
        with self.resource_lock(resource_id), self._file_lock:
            document = self._read()
            if document.resources.pop(resource_id, None) is not None:
                self._write(document)
    
    def snapshot(self) -> List[StateRecord]:
        with self._file_lock:
            return list(self._read().resources.values())
    
    @property
    def serial(self) -> int:
        with self._file_lock:
            return self._read().serial
