"""stackplan - dependency-ordered plan/apply engine for declared infrastructure."""

import threading
from typing import Optional
from .ingest.declaration_loader import load_declarations_file
from .ingest.declaration_normalizer import normalize_declarations
from .graph.dependency_graph import DependencyGraph
from .planning.planner import build_plan
from .planning.models import ActionVerb, Plan, PlannedAction
from .execution.executor import Executor
from .execution.models import OutcomeStatus, RunResult
from .execution.refresh import RefreshResult, refresh_state
from .config import Settings, load_settings
from .providers.base import ProviderClient
from .providers.factory import get_provider
from .state import JsonFileStateStore, StateStore
from .utils.logging import setup_logging, get_logger
from .utils.errors import StackPlanError

__version__ = "0.1.0"

__all__ = [
    "build_graph",
    "open_state_store",
    "plan",
    "apply",
    "destroy",
    "refresh",
    "execute_plan",
    "ActionVerb",
    "OutcomeStatus",
    "Plan",
    "PlannedAction",
    "RunResult",
    "RefreshResult",
]

setup_logging()
logger = get_logger("stackplan")


def build_graph(declarations_path: Optional[str]) -> DependencyGraph:
    """Load, normalize and validate declarations; None means nothing declared."""
    graph = DependencyGraph()
    if declarations_path is None:
        return graph
    declarations = normalize_declarations(load_declarations_file(declarations_path))
    graph.build_from_nodes(declarations.resources)
    return graph


def open_state_store(settings: Settings, state_path: Optional[str] = None) -> StateStore:
    """State store at ``state_path`` or the configured location."""
    return JsonFileStateStore(state_path or settings.state.path)


def execute_plan(
    plan_obj: Plan,
    settings: Settings,
    store: StateStore,
    provider: ProviderClient,
    cancel_event: Optional[threading.Event] = None,
) -> RunResult:
    """Run a computed plan with the configured worker pool and retry policy."""
    executor = Executor(
        provider,
        store,
        retry_policy=settings.retry,
        max_workers=settings.executor.max_workers,
        call_timeout=settings.executor.call_timeout_seconds,
        cancel_event=cancel_event,
    )
    return executor.execute(plan_obj)


def plan(
    declarations_path: Optional[str],
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    store: Optional[StateStore] = None,
) -> Plan:
    """Compute the action list for declarations against recorded state. Never mutates anything."""
    settings = load_settings(config_path)
    store = store or open_state_store(settings, state_path)
    graph = build_graph(declarations_path)
    return build_plan(graph, store.snapshot())


def apply(
    declarations_path: Optional[str],
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    store: Optional[StateStore] = None,
    provider: Optional[ProviderClient] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunResult:
    """Plan and execute. Configuration errors are raised before any provider call."""
    try:
        settings = load_settings(config_path)
        store = store or open_state_store(settings, state_path)
        plan_obj = build_plan(build_graph(declarations_path), store.snapshot())
        provider = provider or get_provider(settings.provider)

        logger.info(f"Applying {len(plan_obj.changes)} changes")
        return execute_plan(plan_obj, settings, store, provider, cancel_event)
    except StackPlanError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during apply: {e}", exc_info=True)
        raise StackPlanError(f"Apply failed: {e}") from e


def destroy(
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    store: Optional[StateStore] = None,
    provider: Optional[ProviderClient] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunResult:
    """Destroy every recorded resource, dependents first."""
    return apply(None, config_path, state_path, store, provider, cancel_event)


def refresh(
    config_path: Optional[str] = None,
    state_path: Optional[str] = None,
    store: Optional[StateStore] = None,
    provider: Optional[ProviderClient] = None,
) -> RefreshResult:
    """Drop state records whose remote resource has disappeared and report drift."""
    settings = load_settings(config_path)
    store = store or open_state_store(settings, state_path)
    provider = provider or get_provider(settings.provider)
    return refresh_state(
        provider,
        store,
        retry_policy=settings.retry,
        call_timeout=settings.executor.call_timeout_seconds,
    )
