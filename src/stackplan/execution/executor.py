"""Apply planned actions in dependency order through a provider client."""

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional
from .models import ActionOutcome, OutcomeStatus, ResourceState, RunResult
from .retry import RetryPolicy, call_with_retry
from ..ingest.models import iter_references, render_attributes
from ..planning.models import ActionVerb, Plan, PlannedAction
from ..providers.base import ProviderClient
from ..state.models import StateRecord
from ..state.store import StateStore
from ..utils.errors import ProviderError, ResourceNotFoundError, StateStoreError
from ..utils.logging import get_logger

logger = get_logger("execution.executor")

# state before, during and after a successful action
_TRANSITIONS = {
    ActionVerb.CREATE: (ResourceState.ABSENT, ResourceState.CREATING, ResourceState.PRESENT),
    ActionVerb.UPDATE: (ResourceState.PRESENT, ResourceState.UPDATING, ResourceState.PRESENT),
    ActionVerb.DESTROY: (ResourceState.PRESENT, ResourceState.DESTROYING, ResourceState.ABSENT),
    ActionVerb.NO_OP: (ResourceState.PRESENT, ResourceState.PRESENT, ResourceState.PRESENT),
}


class Executor:
    """
    Runs a Plan against a provider, updating the state store after each success.

    Independent actions run concurrently on a bounded thread pool; an action
    starts only once every action it waits for has been applied. A failed
    action causes everything waiting on it to be skipped, while unrelated
    branches keep going. The run result reports every action's outcome.
    """

    def __init__(
        self,
        provider: ProviderClient,
        store: StateStore,
        retry_policy: Optional[RetryPolicy] = None,
        max_workers: int = 4,
        call_timeout: Optional[float] = 30.0,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.provider = provider
        self.store = store
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_workers = max(1, max_workers)
        self.call_timeout = call_timeout
        self.cancel_event = cancel_event or threading.Event()

    def cancel(self) -> None:
        """Stop scheduling new actions; in-flight provider calls finish."""
        self.cancel_event.set()

    def execute(self, plan: Plan) -> RunResult:
        """
        Apply every action of the plan.

        Raises:
            StateStoreError: State could not be persisted; raised after
                in-flight actions have finished
        """
        actions: Dict[str, PlannedAction] = {action.target: action for action in plan.actions}
        order = [action.target for action in plan.actions]
        outcomes: Dict[str, ActionOutcome] = {}
        pending: List[str] = list(order)
        running: Dict[Future, str] = {}
        store_error: Optional[StateStoreError] = None

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="stackplan") as pool:
            while pending or running:
                self._skip_blocked(pending, actions, outcomes)

                if store_error is not None or self.cancel_event.is_set():
                    reason = "run aborted: state store failure" if store_error else "cancelled"
                    for target in pending:
                        outcomes[target] = self._skipped(actions[target], reason)
                    pending.clear()
                else:
                    for target in list(pending):
                        if len(running) >= self.max_workers:
                            break
                        if self._is_ready(actions[target], actions, outcomes):
                            pending.remove(target)
                            running[pool.submit(self._run_action, actions[target])] = target

                if not running:
                    # nothing in flight and nothing startable: remaining waits cannot be met
                    for target in pending:
                        outcomes[target] = self._skipped(actions[target], "dependencies never applied")
                    pending.clear()
                    break

                done, _ = wait(list(running), return_when=FIRST_COMPLETED)
                for future in done:
                    target = running.pop(future)
                    try:
                        outcomes[target] = future.result()
                    except StateStoreError as e:
                        logger.error(f"State store failure while applying {target}: {e}")
                        store_error = store_error or e
                        outcomes[target] = self._failed(actions[target], str(e), attempts=1)

        if store_error is not None:
            raise store_error

        result = RunResult(
            outcomes=[outcomes[target] for target in order],
            cancelled=self.cancel_event.is_set(),
        )
        logger.info(f"Run finished: {result.counts()}")
        return result

    def _is_ready(self, action: PlannedAction, actions: Dict[str, PlannedAction], outcomes: Dict[str, ActionOutcome]) -> bool:
        for dep in action.wait_for:
            if dep not in actions:
                continue
            outcome = outcomes.get(dep)
            if outcome is None or outcome.status != OutcomeStatus.APPLIED:
                return False
        return True

    def _skip_blocked(self, pending: List[str], actions: Dict[str, PlannedAction], outcomes: Dict[str, ActionOutcome]) -> None:
        """Skip pending actions waiting on a failed or skipped action (plan order makes one pass enough)."""
        for target in list(pending):
            action = actions[target]
            for dep in action.wait_for:
                outcome = outcomes.get(dep)
                if outcome is not None and outcome.status != OutcomeStatus.APPLIED:
                    pending.remove(target)
                    outcomes[target] = self._skipped(action, f"dependency '{dep}' {outcome.status.value.lower()}")
                    logger.info(f"Skipping {action.verb.value} {target}: dependency {dep} {outcome.status.value}")
                    break

    def _skipped(self, action: PlannedAction, reason: str) -> ActionOutcome:
        return ActionOutcome(
            target=action.target,
            verb=action.verb,
            status=OutcomeStatus.SKIPPED,
            state=_TRANSITIONS[action.verb][0],
            provider_id=action.provider_id,
            error=reason,
        )

    def _failed(self, action: PlannedAction, error: str, attempts: int) -> ActionOutcome:
        return ActionOutcome(
            target=action.target,
            verb=action.verb,
            status=OutcomeStatus.FAILED,
            state=_TRANSITIONS[action.verb][0],
            attempts=attempts,
            provider_id=action.provider_id,
            error=error,
        )

    def _resolve_reference(self, target: str) -> str:
        record = self.store.get(target)
        if record is None:
            raise StateStoreError(f"No state recorded for referenced resource '{target}'")
        return record.provider_id

    def _record(self, action: PlannedAction, provider_id: str) -> StateRecord:
        return StateRecord(
            resource_id=action.target,
            provider_id=provider_id,
            kind=action.kind,
            last_applied_attributes=action.attributes,
            depends_on=action.depends_on,
            position=action.position,
            resolved_references={
                target: self._resolve_reference(target)
                for value in action.attributes.values()
                for target in iter_references(value)
            },
        )

    def _run_action(self, action: PlannedAction) -> ActionOutcome:
        """Apply one action; runs on a worker thread."""
        before, during, after = _TRANSITIONS[action.verb]

        if action.verb == ActionVerb.NO_OP:
            self._refresh_record_metadata(action)
            return ActionOutcome(
                target=action.target,
                verb=action.verb,
                status=OutcomeStatus.APPLIED,
                state=after,
                provider_id=action.provider_id,
            )

        attempts = 0
        description = f"{action.verb.value} {action.target}"

        def attempt():
            nonlocal attempts
            attempts += 1
            return self._call_provider(action)

        logger.info(f"{action.target}: {before.value} -> {during.value}")
        try:
            provider_id = call_with_retry(attempt, self.retry_policy, description, self.cancel_event)
        except StateStoreError:
            raise
        except ProviderError as e:
            logger.error(f"{description} failed after {attempts} attempt(s): {e}")
            return self._failed(action, f"{type(e).__name__}: {e}", attempts)
        except Exception as e:
            logger.error(f"Unexpected error during {description}: {e}", exc_info=True)
            return self._failed(action, f"{type(e).__name__}: {e}", attempts)

        if action.verb == ActionVerb.DESTROY:
            self.store.delete(action.target)
        else:
            self.store.put(self._record(action, provider_id))
        logger.info(f"{action.target}: {during.value} -> {after.value}")

        return ActionOutcome(
            target=action.target,
            verb=action.verb,
            status=OutcomeStatus.APPLIED,
            state=after,
            attempts=attempts,
            provider_id=None if action.verb == ActionVerb.DESTROY else provider_id,
        )

    def _call_provider(self, action: PlannedAction) -> Optional[str]:
        """Make the single provider call for an action; returns the provider id."""
        if action.verb == ActionVerb.CREATE:
            attributes = render_attributes(action.attributes, self._resolve_reference)
            return self.provider.create(action.kind, attributes, timeout=self.call_timeout).provider_id

        if action.verb == ActionVerb.UPDATE:
            attributes = render_attributes(action.attributes, self._resolve_reference)
            self.provider.update(action.provider_id, action.kind, attributes, timeout=self.call_timeout)
            return action.provider_id

        try:
            self.provider.destroy(action.provider_id, action.kind, timeout=self.call_timeout)
        except ResourceNotFoundError:
            logger.warning(f"{action.target} ({action.provider_id}) already gone at the provider")
        return action.provider_id

    def _refresh_record_metadata(self, action: PlannedAction) -> None:
        """Keep recorded dependencies and position current for unchanged resources."""
        record = self.store.get(action.target)
        if record is None:
            raise StateStoreError(f"State record for '{action.target}' disappeared during the run")
        if record.depends_on != action.depends_on or record.position != action.position:
            record.depends_on = list(action.depends_on)
            record.position = action.position
            self.store.put(record)
