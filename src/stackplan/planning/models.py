"""Pydantic models for planned actions."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from ..ingest.models import Attributes, ResourceKind


class ActionVerb(str, Enum):
    """What the executor must do for a resource."""
    CREATE = "Create"
    UPDATE = "Update"
    DESTROY = "Destroy"
    NO_OP = "NoOp"


class PlannedAction(BaseModel):
    """One reconciliation step; produced by the planner, consumed once by the executor."""
    target: str = Field(..., description="Resource id the action applies to")
    verb: ActionVerb = Field(..., description="Action type")
    reason: str = Field(..., description="Why the planner chose this verb")
    kind: ResourceKind = Field(..., description="Resource kind")
    attributes: Attributes = Field(default_factory=dict, description="Desired attributes (empty for Destroy)")
    depends_on: List[str] = Field(default_factory=list, description="Resource dependencies to record in state")
    wait_for: List[str] = Field(default_factory=list, description="Targets whose actions must be applied first")
    provider_id: Optional[str] = Field(None, description="Provider id for Update/Destroy/NoOp")
    position: int = Field(default=0, ge=0, description="Declaration index")
    record_refresh: bool = Field(default=False, description="NoOp whose recorded dependencies are out of date")


class Plan(BaseModel):
    """Ordered action list: a valid topological order of the resource graph."""
    actions: List[PlannedAction] = Field(default_factory=list, description="Actions in execution order")
    
    @property
    def changes(self) -> List[PlannedAction]:
        """Actions that call the provider."""
        return [action for action in self.actions if action.verb != ActionVerb.NO_OP]
    
    @property
    def record_refreshes(self) -> List[PlannedAction]:
        """NoOp actions that only rewrite recorded dependencies."""
        return [action for action in self.actions if action.verb == ActionVerb.NO_OP and action.record_refresh]
    
    @property
    def has_changes(self) -> bool:
        """True when applying would call the provider or rewrite state."""
        return bool(self.changes or self.record_refreshes)
    
    def counts(self) -> Dict[str, int]:
        """Number of actions per verb."""
        counts = {verb.value: 0 for verb in ActionVerb}
        for action in self.actions:
            counts[ActionVerb(action.verb).value] += 1
        return counts
    
    def action_for(self, target: str) -> Optional[PlannedAction]:
        for action in self.actions:
            if action.target == target:
                return action
        return None
