"""Pydantic models for execution outcomes."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from ..planning.models import ActionVerb


class OutcomeStatus(str, Enum):
    """Final status of one planned action."""
    APPLIED = "Applied"
    SKIPPED = "Skipped"
    FAILED = "Failed"


class ResourceState(str, Enum):
    """Logical lifecycle of a resource; the -ing states only exist mid-call."""
    ABSENT = "Absent"
    CREATING = "Creating"
    PRESENT = "Present"
    UPDATING = "Updating"
    DESTROYING = "Destroying"


class ActionOutcome(BaseModel):
    """What happened to one action during a run."""
    target: str = Field(..., description="Resource id")
    verb: ActionVerb = Field(..., description="Planned action type")
    status: OutcomeStatus = Field(..., description="Applied, Skipped or Failed")
    state: ResourceState = Field(..., description="Resource state after the action")
    attempts: int = Field(default=0, ge=0, description="Provider calls made, including retries")
    provider_id: Optional[str] = Field(None, description="Provider id after the action")
    error: Optional[str] = Field(None, description="Failure cause or skip reason")


class RunResult(BaseModel):
    """Outcome of every action in plan order; never raised, always reported."""
    outcomes: List[ActionOutcome] = Field(default_factory=list, description="Outcomes in plan order")
    cancelled: bool = Field(default=False, description="Whether the run was cancelled")
    
    def _with_status(self, status: OutcomeStatus) -> List[ActionOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == status]
    
    @property
    def applied(self) -> List[ActionOutcome]:
        return self._with_status(OutcomeStatus.APPLIED)
    
    @property
    def skipped(self) -> List[ActionOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)
    
    @property
    def failed(self) -> List[ActionOutcome]:
        return self._with_status(OutcomeStatus.FAILED)
    
    @property
    def success(self) -> bool:
        return not self.failed and not self.skipped and not self.cancelled
    
    def counts(self) -> Dict[str, int]:
        return {status.value: len(self._with_status(status)) for status in OutcomeStatus}
    
    def outcome_for(self, target: str) -> Optional[ActionOutcome]:
        for outcome in self.outcomes:
            if outcome.target == target:
                return outcome
        return None
