"""Pydantic models for engine settings."""

from typing import Literal, Optional
from pydantic import BaseModel, Field
from ..execution.retry import RetryPolicy


class ExecutorSettings(BaseModel):
    max_workers: int = Field(default=4, ge=1, description="Concurrent provider calls")
    call_timeout_seconds: float = Field(default=30.0, gt=0, description="Bounded wait per provider call")


class StateSettings(BaseModel):
    path: str = Field(default="stackplan.state.json", description="State file location")


class ProviderSettings(BaseModel):
    type: Literal["memory", "http"] = Field(default="memory", description="Provider client implementation")
    base_url: Optional[str] = Field(None, description="Control API base URL (http provider)")
    token_env: str = Field(default="STACKPLAN_API_TOKEN", description="Environment variable holding the API token")
    memory_path: Optional[str] = Field(default=".stackplan/cloud.json", description="Persistence file for the memory provider")


class Settings(BaseModel):
    """Complete engine configuration."""
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    state: StateSettings = Field(default_factory=StateSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
