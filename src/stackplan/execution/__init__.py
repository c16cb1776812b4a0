"""Execution: apply plans and refresh state against a provider."""

from .executor import Executor
from .models import ActionOutcome, OutcomeStatus, ResourceState, RunResult
from .refresh import RefreshResult, refresh_state
from .retry import RetryPolicy, call_with_retry

__all__ = [
    "Executor",
    "ActionOutcome",
    "OutcomeStatus",
    "ResourceState",
    "RunResult",
    "RefreshResult",
    "refresh_state",
    "RetryPolicy",
    "call_with_retry",
]
