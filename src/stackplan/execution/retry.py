"""Bounded exponential backoff for transient provider errors."""

import threading
from typing import Callable, Optional, TypeVar
from pydantic import BaseModel, Field
from ..utils.errors import TransientProviderError
from ..utils.logging import get_logger

logger = get_logger("execution.retry")

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """How often and how patiently transient failures are retried."""
    max_attempts: int = Field(default=5, ge=1, description="Total attempts, including the first")
    initial_interval_seconds: float = Field(default=1.0, ge=0, description="Delay before the first retry")
    backoff_coefficient: float = Field(default=2.0, ge=1, description="Delay multiplier per attempt")
    max_interval_seconds: float = Field(default=30.0, ge=0, description="Upper bound for a single delay")
    
    def calculate_backoff(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        delay = self.initial_interval_seconds * (self.backoff_coefficient ** attempt)
        return min(delay, self.max_interval_seconds)


def call_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    description: str,
    cancel_event: Optional[threading.Event] = None,
) -> T:
    """
    Run ``operation``, retrying TransientProviderError with backoff.
    
    Any other exception propagates immediately. After ``max_attempts`` the
    last transient error is raised. A set ``cancel_event`` interrupts the
    backoff wait and raises the last error without another attempt.
    """
    cancel_event = cancel_event or threading.Event()
    
    for attempt in range(policy.max_attempts):
        try:
            return operation()
        except TransientProviderError as e:
            if attempt >= policy.max_attempts - 1:
                logger.warning(f"{description}: giving up after {attempt + 1} attempts: {e}")
                raise
            
            delay = policy.calculate_backoff(attempt)
            logger.warning(f"{description}: transient error (attempt {attempt + 1}), retrying in {delay}s: {e}")
            if cancel_event.wait(delay):
                raise TransientProviderError(f"{e} (retry abandoned: run cancelled)") from e
    
