"""In-memory provider: a deterministic fake cloud with failure injection."""

import json
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from .base import ProviderClient, ProviderResource
from ..ingest.models import ResourceKind
from ..utils.errors import ProviderError, ProviderTimeoutError, ResourceNotFoundError, StackPlanError
from ..utils.logging import get_logger

logger = get_logger("providers.memory")

ID_PREFIXES = {
    ResourceKind.NETWORK: "vpc",
    ResourceKind.SUBNET: "subnet",
    ResourceKind.GATEWAY: "igw",
    ResourceKind.ROUTE_TABLE: "rtb",
    ResourceKind.SECURITY_GROUP: "sg",
    ResourceKind.INSTANCE: "i",
    ResourceKind.LOAD_BALANCER: "alb",
    ResourceKind.TARGET_GROUP: "tg",
    ResourceKind.DB_INSTANCE: "db",
}


class _Failure:
    def __init__(self, operation: str, error: ProviderError, kind: Optional[ResourceKind],
                 match: Optional[Dict[str, Any]], times: Optional[int]):
        self.operation = operation
        self.error = error
        self.kind = kind
        self.match = match or {}
        self.remaining = times
    
    def applies(self, operation: str, kind: ResourceKind, attributes: Dict[str, Any]) -> bool:
        if self.operation != operation or self.remaining == 0:
            return False
        if self.kind is not None and self.kind != kind:
            return False
        return all(attributes.get(key) == value for key, value in self.match.items())


class InMemoryProvider(ProviderClient):
    """
    Provider backed by a dict, optionally persisted to a JSON file.
    
    Ids look like AWS ids (``vpc-00000001``). ``calls`` records every call
    as ``(operation, kind, provider_id)`` so tests can assert what was
    attempted. ``inject_failure`` makes matching calls raise. ``latency``
    simulates a slow API: a call whose latency exceeds its timeout waits
    for the timeout and raises ProviderTimeoutError.
    """
    
    def __init__(self, path: Optional[str] = None, latency: float = 0.0):
        self.path = Path(path) if path else None
        self.latency = latency
        self.resources: Dict[str, ProviderResource] = {}
        self.calls: List[Tuple[str, ResourceKind, Optional[str]]] = []
        self._counter = 0
        self._failures: List[_Failure] = []
        self._lock = threading.Lock()
        self._load()
    
    def inject_failure(
        self,
        operation: str,
        error: ProviderError,
        kind: Optional[ResourceKind] = None,
        match: Optional[Dict[str, Any]] = None,
        times: Optional[int] = None,
    ) -> None:
        """
        Make calls fail.
        
        Args:
            operation: "create", "update", "destroy" or "describe"
            error: Exception raised by matching calls
            kind: Only calls for this kind (any kind if None)
            match: Only calls whose attributes contain these items
            times: Fail this many times, then succeed (always if None)
        """
        self._failures.append(_Failure(operation, error, kind, match, times))
    
    def _check_failure(self, operation: str, kind: ResourceKind, attributes: Dict[str, Any]) -> None:
        for failure in self._failures:
            if failure.applies(operation, kind, attributes):
                if failure.remaining is not None:
                    failure.remaining -= 1
                raise failure.error
    
    def _wait(self, operation: str, kind: ResourceKind, timeout: Optional[float]) -> None:
        if self.latency <= 0:
            return
        if timeout is not None and self.latency > timeout:
            time.sleep(timeout)
            raise ProviderTimeoutError(f"{operation} {kind.value} did not finish within {timeout}s")
        time.sleep(self.latency)
    
    def _get(self, provider_id: str, kind: ResourceKind) -> ProviderResource:
        resource = self.resources.get(provider_id)
        if resource is None or resource.kind != kind:
            raise ResourceNotFoundError(f"{kind.value} {provider_id} not found")
        return resource
    
    def create(self, kind, attributes, timeout=None):
        self._wait("create", kind, timeout)
        with self._lock:
            self.calls.append(("create", kind, None))
            self._check_failure("create", kind, attributes)
            self._counter += 1
            provider_id = f"{ID_PREFIXES[kind]}-{self._counter:08x}"
            resource = ProviderResource(provider_id=provider_id, kind=kind, attributes=dict(attributes))
            self.resources[provider_id] = resource
            self._save()
            logger.debug(f"Created {kind.value} {provider_id}")
            return resource.model_copy(deep=True)
    
    def update(self, provider_id, kind, attributes, timeout=None):
        self._wait("update", kind, timeout)
        with self._lock:
            self.calls.append(("update", kind, provider_id))
            self._check_failure("update", kind, attributes)
            resource = self._get(provider_id, kind)
            resource.attributes = dict(attributes)
            self._save()
            return resource.model_copy(deep=True)
    
    def destroy(self, provider_id, kind, timeout=None):
        self._wait("destroy", kind, timeout)
        with self._lock:
            self.calls.append(("destroy", kind, provider_id))
            self._check_failure("destroy", kind, {})
            self._get(provider_id, kind)
            del self.resources[provider_id]
            self._save()
    
    def describe(self, provider_id, kind, timeout=None):
        self._wait("describe", kind, timeout)
        with self._lock:
            self.calls.append(("describe", kind, provider_id))
            self._check_failure("describe", kind, {})
            return self._get(provider_id, kind).model_copy(deep=True)
    
    def is_available(self) -> bool:
        return True
    
    def calls_for(self, operation: str) -> List[Tuple[str, ResourceKind, Optional[str]]]:
        return [call for call in self.calls if call[0] == operation]
    
    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StackPlanError(f"Cannot read in-memory provider file {self.path}: {e}")
        self._counter = data.get("counter", 0)
        self.resources = {
            provider_id: ProviderResource.model_validate(resource)
            for provider_id, resource in data.get("resources", {}).items()
        }
    
    def _save(self) -> None:
        if self.path is None:
            return
        data = {
            "counter": self._counter,
            "resources": {pid: r.model_dump(mode="json") for pid, r in self.resources.items()},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, sort_keys=True)
