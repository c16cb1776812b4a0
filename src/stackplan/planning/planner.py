"""Diff declared resources against recorded state and order the actions."""

import networkx as nx
from typing import Dict, List, Optional, Tuple
from .models import ActionVerb, Plan, PlannedAction
from ..graph.dependency_graph import DependencyGraph, layered_order
from ..ingest.models import Attributes, ResourceNode
from ..state.models import StateRecord
from ..utils.errors import ConfigurationError
from ..utils.logging import get_logger

logger = get_logger("planning.planner")


def diff_attributes(old: Attributes, new: Attributes) -> Tuple[List[str], List[str], List[str]]:
    """Return (added, removed, changed) attribute keys, in sorted order."""
    added = sorted(key for key in new if key not in old)
    removed = sorted(key for key in old if key not in new)
    changed = sorted(key for key in new if key in old and old[key] != new[key])
    return added, removed, changed


def _update_reason(added: List[str], removed: List[str], changed: List[str]) -> str:
    parts = []
    if changed:
        parts.append(f"changed: {', '.join(changed)}")
    if added:
        parts.append(f"added: {', '.join(added)}")
    if removed:
        parts.append(f"removed: {', '.join(removed)}")
    return "attributes " + "; ".join(parts)


def _stale_references(node: ResourceNode, record: StateRecord, planned: Dict[str, PlannedAction],
                      state: Dict[str, StateRecord]) -> List[str]:
    """Referenced resources whose provider id will differ from the one last sent for this node."""
    stale = []
    for target in node.references():
        action = planned.get(target)
        if action is not None and action.verb == ActionVerb.CREATE:
            stale.append(target)
            continue
        applied_id = record.resolved_references.get(target)
        current = state.get(target)
        if applied_id is not None and current is not None and current.provider_id != applied_id:
            stale.append(target)
    return stale


def _plan_declared(node: ResourceNode, record: Optional[StateRecord], position: int,
                   planned: Dict[str, PlannedAction], state: Dict[str, StateRecord]) -> PlannedAction:
    common = dict(
        target=node.id,
        kind=node.kind,
        attributes=node.attributes,
        depends_on=list(node.depends_on),
        wait_for=list(node.depends_on),
        position=position,
    )
    if record is None:
        return PlannedAction(verb=ActionVerb.CREATE, reason="not present in state", **common)
    
    if record.kind != node.kind:
        raise ConfigurationError(
            f"Resource '{node.id}' changed kind from {record.kind.value} to {node.kind.value}; "
            "remove it and declare it under a new id instead"
        )
    
    added, removed, changed = diff_attributes(record.last_applied_attributes, node.attributes)
    stale = _stale_references(node, record, planned, state)
    if added or removed or changed or stale:
        reasons = []
        if added or removed or changed:
            reasons.append(_update_reason(added, removed, changed))
        if stale:
            reasons.append(f"referenced resources get new provider ids: {', '.join(stale)}")
        return PlannedAction(
            verb=ActionVerb.UPDATE,
            reason="; ".join(reasons),
            provider_id=record.provider_id,
            **common
        )
    
    if set(record.depends_on) != set(node.depends_on):
        # destroy ordering reads recorded dependencies
        return PlannedAction(
            verb=ActionVerb.NO_OP,
            reason=f"recorded dependencies change from {sorted(record.depends_on)} to {list(node.depends_on)}",
            provider_id=record.provider_id,
            record_refresh=True,
            **common
        )
    return PlannedAction(
        verb=ActionVerb.NO_OP,
        reason="matches last applied attributes",
        provider_id=record.provider_id,
        **common
    )


def recorded_create_order(records: List[StateRecord]) -> List[str]:
    """Order in which recorded resources would be created, from their recorded dependencies."""
    state_graph = nx.DiGraph()
    position = {}
    for record in records:
        state_graph.add_node(record.resource_id)
        position[record.resource_id] = record.position
    for record in records:
        for dep_id in record.depends_on:
            if dep_id in position:
                state_graph.add_edge(record.resource_id, dep_id)
    
    if not nx.is_directed_acyclic_graph(state_graph):
        raise ConfigurationError("Recorded state dependencies contain a cycle")
    return layered_order(state_graph, position)


def build_plan(graph: DependencyGraph, records: List[StateRecord]) -> Plan:
    """
    Compute the ordered action list for a validated graph and a state snapshot.
    
    Create/Update/NoOp actions come first, dependencies before dependents.
    Destroy actions follow in the exact reverse of the recorded create order,
    so dependents are destroyed before what they depend on. Pure: the same
    inputs always give the same plan.
    """
    state: Dict[str, StateRecord] = {record.resource_id: record for record in records}
    planned: Dict[str, PlannedAction] = {}
    
    for resource_id in graph.topological_order():
        node = graph.get_resource(resource_id)
        planned[resource_id] = _plan_declared(node, state.get(resource_id), graph.position(resource_id), planned, state)
    actions: List[PlannedAction] = list(planned.values())
    
    removed = {record.resource_id for record in records if record.resource_id not in graph}
    for resource_id in reversed(recorded_create_order(records)):
        if resource_id not in removed:
            continue
        record = state[resource_id]
        # wait for everything that still used this resource at the last apply
        dependents = [r.resource_id for r in records if resource_id in r.depends_on]
        actions.append(PlannedAction(
            target=resource_id,
            verb=ActionVerb.DESTROY,
            reason="no longer declared",
            kind=record.kind,
            depends_on=list(record.depends_on),
            wait_for=sorted(dependents, key=lambda rid: state[rid].position),
            provider_id=record.provider_id,
            position=record.position,
        ))
    
    plan = Plan(actions=actions)
    logger.info(f"Planned {len(plan.actions)} actions: {plan.counts()}")
    return plan
