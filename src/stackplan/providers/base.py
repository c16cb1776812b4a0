"""Abstract base class for cloud provider clients."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from ..ingest.models import ResourceKind


class ProviderResource(BaseModel):
    """A resource as reported by the provider."""
    provider_id: str = Field(..., description="Identifier assigned by the provider")
    kind: ResourceKind = Field(..., description="Resource kind")
    attributes: Dict[str, Any] = Field(default_factory=dict, description="Current remote attributes")


class ProviderClient(ABC):
    """
    Interface to the remote cloud API.
    
    The engine never assumes authority over real resources: everything it
    knows about the remote side comes back through these calls. Attribute
    maps are plain JSON data with references already replaced by provider
    ids; ``{"secret": NAME}`` entries name secrets the client resolves.
    
    Every call takes a ``timeout`` in seconds. When it is not None the
    implementation must give up once it has elapsed and raise
    ProviderTimeoutError; the executor bounds each provider call this way
    and never abandons a running call itself.
    
    Failures are reported with typed errors:
    - TransientProviderError / ProviderTimeoutError: safe to retry
    - FatalProviderError: validation or permission problems
    - ResourceNotFoundError: the provider id is unknown
    """
    
    @abstractmethod
    def create(self, kind: ResourceKind, attributes: Dict[str, Any], timeout: Optional[float] = None) -> ProviderResource:
        """Create a resource and return it with its provider id."""
        pass
    
    @abstractmethod
    def update(self, provider_id: str, kind: ResourceKind, attributes: Dict[str, Any], timeout: Optional[float] = None) -> ProviderResource:
        """Replace the attributes of an existing resource."""
        pass
    
    @abstractmethod
    def destroy(self, provider_id: str, kind: ResourceKind, timeout: Optional[float] = None) -> None:
        """Delete a resource."""
        pass
    
    @abstractmethod
    def describe(self, provider_id: str, kind: ResourceKind, timeout: Optional[float] = None) -> ProviderResource:
        """Read the current remote state of a resource."""
        pass
    
    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this provider can be reached.
        
        Returns:
            True if provider is configured and available
        """
        pass
