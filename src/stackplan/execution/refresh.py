"""Reconcile recorded state with what the provider actually holds."""

from typing import Dict, List, Optional
import threading
from pydantic import BaseModel, Field
from .retry import RetryPolicy, call_with_retry
from ..ingest.models import render_attributes
from ..providers.base import ProviderClient
from ..state.store import StateStore
from ..utils.errors import ResourceNotFoundError
from ..utils.logging import get_logger

logger = get_logger("execution.refresh")


class RefreshResult(BaseModel):
    """Outcome of a refresh pass."""
    checked: List[str] = Field(default_factory=list, description="Resource ids described at the provider")
    removed: List[str] = Field(default_factory=list, description="Ids dropped from state because the remote resource is gone")
    drifted: Dict[str, List[str]] = Field(default_factory=dict, description="Attribute keys whose remote value differs")


def refresh_state(
    provider: ProviderClient,
    store: StateStore,
    retry_policy: Optional[RetryPolicy] = None,
    call_timeout: Optional[float] = 30.0,
    cancel_event: Optional[threading.Event] = None,
) -> RefreshResult:
    """
    Describe every recorded resource at the provider.
    
    Records whose remote resource no longer exists are deleted so the next
    plan creates them again. Drifted attributes are reported, never written
    into state: state keeps the declared values.
    """
    retry_policy = retry_policy or RetryPolicy()
    records = store.snapshot()
    provider_ids = {record.resource_id: record.provider_id for record in records}
    result = RefreshResult()
    
    for record in sorted(records, key=lambda r: r.position):
        try:
            remote = call_with_retry(
                lambda: provider.describe(record.provider_id, record.kind, timeout=call_timeout),
                retry_policy,
                f"describe {record.resource_id}",
                cancel_event,
            )
        except ResourceNotFoundError:
            logger.warning(f"{record.resource_id} ({record.provider_id}) no longer exists; removing from state")
            store.delete(record.resource_id)
            result.removed.append(record.resource_id)
            continue
        
        result.checked.append(record.resource_id)
        expected = render_attributes(
            record.last_applied_attributes,
            lambda target: provider_ids.get(target, target),
        )
        drift = sorted(
            key for key, value in expected.items()
            if key in remote.attributes and not _is_secret(value) and remote.attributes[key] != value
        )
        if drift:
            logger.warning(f"{record.resource_id} drifted at the provider: {', '.join(drift)}")
            result.drifted[record.resource_id] = drift
    
    logger.info(f"Refreshed {len(result.checked)} resources, removed {len(result.removed)}")
    return result


def _is_secret(value) -> bool:
    return isinstance(value, dict) and set(value) == {"secret"}
