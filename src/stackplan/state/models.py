"""Pydantic models for persisted resource state."""

from typing import Dict, List
from pydantic import BaseModel, Field
from ..ingest.models import Attributes, ResourceKind

STATE_FORMAT_VERSION = 1


class StateRecord(BaseModel):
    """Last successfully applied state of one resource."""
    resource_id: str = Field(..., description="Declared resource id")
    provider_id: str = Field(..., description="Identifier assigned by the cloud provider")
    kind: ResourceKind = Field(..., description="Resource kind at last apply")
    last_applied_attributes: Attributes = Field(default_factory=dict, description="Declared attributes at last apply")
    depends_on: List[str] = Field(default_factory=list, description="Dependencies at last apply")
    position: int = Field(default=0, ge=0, description="Declaration index at last apply")
    resolved_references: Dict[str, str] = Field(
        default_factory=dict, description="Provider ids that references pointed at, at last apply"
    )


class StateDocument(BaseModel):
    """On-disk layout of a state file."""
    version: int = Field(default=STATE_FORMAT_VERSION, description="State format version")
    serial: int = Field(default=0, ge=0, description="Incremented on every write")
    resources: Dict[str, StateRecord] = Field(default_factory=dict, description="Records keyed by resource id")
