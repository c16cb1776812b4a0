"""HTTP provider client for a REST cloud control API."""

import os
from typing import Any, Dict, Optional
import requests
from .base import ProviderClient, ProviderResource
from ..ingest.models import ResourceKind
from ..utils.errors import (
    FatalProviderError,
    ProviderTimeoutError,
    ResourceNotFoundError,
    TransientProviderError,
)
from ..utils.logging import get_logger

logger = get_logger("providers.http")

# throttling, eventual-consistency conflicts and server-side hiccups
TRANSIENT_STATUS_CODES = {409, 429, 500, 502, 503, 504}


class HttpProvider(ProviderClient):
    """
    Provider speaking JSON over HTTP.
    
    Endpoints:
        POST   {base_url}/resources/{kind}
        PUT    {base_url}/resources/{kind}/{id}
        DELETE {base_url}/resources/{kind}/{id}
        GET    {base_url}/resources/{kind}/{id}
        GET    {base_url}/health
    
    The bearer token is read from the environment variable named by
    ``token_env``. ``{"secret": NAME}`` attribute values are replaced with
    the value of environment variable NAME just before sending.
    """
    
    def __init__(self, base_url: Optional[str] = None, token_env: str = "STACKPLAN_API_TOKEN",
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or os.getenv("STACKPLAN_API_URL", "http://localhost:8080")).rstrip("/")
        self.token_env = token_env
        self.session = session or requests.Session()
    
    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = os.getenv(self.token_env)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers
    
    def _request(self, method: str, path: str, timeout: Optional[float], payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, headers=self._headers(), timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError(f"{method} {url} timed out after {timeout}s: {e}")
        except requests.exceptions.ConnectionError as e:
            raise TransientProviderError(f"Cannot reach provider at {url}: {e}")
        except requests.exceptions.RequestException as e:
            raise FatalProviderError(f"{method} {url} failed: {e}")
        
        if response.status_code == 404:
            raise ResourceNotFoundError(f"{method} {url}: not found")
        if response.status_code in TRANSIENT_STATUS_CODES:
            raise TransientProviderError(f"{method} {url}: HTTP {response.status_code} {response.text[:200]}")
        if response.status_code >= 400:
            raise FatalProviderError(f"{method} {url}: HTTP {response.status_code} {response.text[:200]}")
        
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise FatalProviderError(f"{method} {url}: response is not JSON: {e}")
    
    def _resolve_secrets(self, value: Any) -> Any:
        if isinstance(value, dict):
            if set(value) == {"secret"}:
                secret = os.getenv(str(value["secret"]))
                if secret is None:
                    raise FatalProviderError(f"Secret '{value['secret']}' is not set in the environment")
                return secret
            return {key: self._resolve_secrets(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._resolve_secrets(item) for item in value]
        return value
    
    def _to_resource(self, data: Dict[str, Any], kind: ResourceKind, provider_id: Optional[str] = None) -> ProviderResource:
        resource_id = data.get("id") or provider_id
        if not resource_id:
            raise FatalProviderError(f"Provider response for {kind.value} carries no id")
        return ProviderResource(provider_id=str(resource_id), kind=kind, attributes=data.get("attributes") or {})
    
    def create(self, kind, attributes, timeout=None):
        data = self._request("POST", f"/resources/{kind.value}", timeout, {"attributes": self._resolve_secrets(attributes)})
        resource = self._to_resource(data, kind)
        logger.debug(f"Created {kind.value} {resource.provider_id}")
        return resource
    
    def update(self, provider_id, kind, attributes, timeout=None):
        data = self._request(
            "PUT", f"/resources/{kind.value}/{provider_id}", timeout, {"attributes": self._resolve_secrets(attributes)}
        )
        return self._to_resource(data, kind, provider_id)
    
    def destroy(self, provider_id, kind, timeout=None):
        self._request("DELETE", f"/resources/{kind.value}/{provider_id}", timeout)
    
    def describe(self, provider_id, kind, timeout=None):
        data = self._request("GET", f"/resources/{kind.value}/{provider_id}", timeout)
        return self._to_resource(data, kind, provider_id)
    
    def is_available(self) -> bool:
        """Check if the control API answers its health endpoint."""
        try:
            response = self.session.get(f"{self.base_url}/health", headers=self._headers(), timeout=2)
            response.raise_for_status()
            return True
        except requests.exceptions.RequestException as e:
            logger.debug(f"Provider not available at {self.base_url}: {e}")
            return False
