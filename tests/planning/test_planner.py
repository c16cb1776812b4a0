"""Tests for the planner."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from stackplan.graph.dependency_graph import DependencyGraph
from stackplan.ingest.models import ReferenceValue, ResourceKind, ResourceNode, StringValue
from stackplan.planning.models import ActionVerb
from stackplan.planning.planner import build_plan, diff_attributes
from stackplan.state.models import StateRecord
from stackplan.utils.errors import ConfigurationError


def graph_of(nodes):
    graph = DependencyGraph()
    graph.build_from_nodes(nodes)
    return graph


def applied(plan):
    """State records as if every Create/Update/NoOp in the plan had succeeded."""
    return [
        StateRecord(
            resource_id=action.target,
            provider_id=f"p-{action.target}",
            kind=action.kind,
            last_applied_attributes=action.attributes,
            depends_on=action.depends_on,
            position=action.position,
        )
        for action in plan.actions
        if action.verb != ActionVerb.DESTROY
    ]


@pytest.fixture
def stack():
    """Network N, subnet S in N, instance I in S."""
    return [
        ResourceNode(id="N", kind=ResourceKind.NETWORK, attributes={"cidr_block": StringValue(value="10.0.0.0/16")}),
        ResourceNode(
            id="S",
            kind=ResourceKind.SUBNET,
            attributes={"network_id": ReferenceValue(target="N"), "cidr_block": StringValue(value="10.0.1.0/24")},
            depends_on=["N"],
        ),
        ResourceNode(
            id="I",
            kind=ResourceKind.INSTANCE,
            attributes={"subnet_id": ReferenceValue(target="S"), "instance_type": StringValue(value="t3.micro")},
            depends_on=["S"],
        ),
    ]


@st.composite
def random_dags(draw):
    """Random DAGs: each node may only depend on nodes with a smaller index, then shuffled."""
    size = draw(st.integers(min_value=1, max_value=12))
    nodes = []
    for index in range(size):
        deps = draw(st.sets(st.integers(min_value=0, max_value=index - 1), max_size=3)) if index else set()
        nodes.append(ResourceNode(id=f"r{index}", kind=ResourceKind.SUBNET, depends_on=[f"r{d}" for d in sorted(deps)]))
    return draw(st.permutations(nodes))


class TestPlanner:
    """Test action selection and ordering."""
    
    def test_first_plan_creates_in_dependency_order(self, stack):
        plan = build_plan(graph_of(stack), [])
        
        assert [(a.verb, a.target) for a in plan.actions] == [
            (ActionVerb.CREATE, "N"),
            (ActionVerb.CREATE, "S"),
            (ActionVerb.CREATE, "I"),
        ]
        assert plan.has_changes
    
    def test_second_plan_is_all_noop(self, stack):
        first = build_plan(graph_of(stack), [])
        second = build_plan(graph_of(stack), applied(first))
        
        assert [a.verb for a in second.actions] == [ActionVerb.NO_OP] * 3
        assert not second.has_changes
        assert second.action_for("S").provider_id == "p-S"
    
    def test_planning_is_idempotent(self, stack):
        records = applied(build_plan(graph_of(stack), []))
        
        assert build_plan(graph_of(stack), records) == build_plan(graph_of(stack), records)
    
    def test_removed_node_is_destroyed(self, stack):
        records = applied(build_plan(graph_of(stack), []))
        plan = build_plan(graph_of(stack[:2]), records)
        
        assert [(a.verb, a.target) for a in plan.changes] == [(ActionVerb.DESTROY, "I")]
        destroy = plan.action_for("I")
        assert destroy.provider_id == "p-I"
        assert destroy.reason == "no longer declared"
    
    def test_changed_attribute_is_update(self, stack):
        records = applied(build_plan(graph_of(stack), []))
        stack[2].attributes["instance_type"] = StringValue(value="t3.large")
        
        plan = build_plan(graph_of(stack), records)
        
        update = plan.action_for("I")
        assert update.verb == ActionVerb.UPDATE
        assert "instance_type" in update.reason
        assert [a.verb for a in plan.actions[:2]] == [ActionVerb.NO_OP, ActionVerb.NO_OP]
    
    def test_kind_change_is_configuration_error(self, stack):
        records = applied(build_plan(graph_of(stack), []))
        stack[2].kind = ResourceKind.DB_INSTANCE
        
        with pytest.raises(ConfigurationError, match="changed kind"):
            build_plan(graph_of(stack), records)
    
    def test_destroy_order_is_reverse_of_create_order(self, stack):
        create_plan = build_plan(graph_of(stack), [])
        destroy_plan = build_plan(DependencyGraph(), applied(create_plan))
        
        assert [a.target for a in destroy_plan.actions] == [a.target for a in reversed(create_plan.actions)]
        assert all(a.verb == ActionVerb.DESTROY for a in destroy_plan.actions)
    
    def test_destroy_waits_for_dependents(self, stack):
        records = applied(build_plan(graph_of(stack), []))
        plan = build_plan(DependencyGraph(), records)
        
        assert plan.action_for("N").wait_for == ["S"]
        assert plan.action_for("S").wait_for == ["I"]
        assert plan.action_for("I").wait_for == []
    
    def test_destroy_waits_for_update_that_drops_the_reference(self):
        records = [
            StateRecord(resource_id="old_sg", provider_id="sg-1", kind=ResourceKind.SECURITY_GROUP, position=0),
            StateRecord(
                resource_id="web",
                provider_id="i-1",
                kind=ResourceKind.INSTANCE,
                last_applied_attributes={"sg": ReferenceValue(target="old_sg")},
                depends_on=["old_sg"],
                position=1,
            ),
        ]
        web = ResourceNode(id="web", kind=ResourceKind.INSTANCE, attributes={"sg": StringValue(value="none")})
        
        plan = build_plan(graph_of([web]), records)
        
        assert [(a.verb, a.target) for a in plan.actions] == [
            (ActionVerb.UPDATE, "web"),
            (ActionVerb.DESTROY, "old_sg"),
        ]
        assert plan.action_for("old_sg").wait_for == ["web"]
    
    def test_dependency_only_change_refreshes_record(self):
        records = [
            StateRecord(resource_id="a", provider_id="vpc-a", kind=ResourceKind.NETWORK, position=0),
            StateRecord(resource_id="b", provider_id="vpc-b", kind=ResourceKind.NETWORK, depends_on=["a"], position=1),
        ]
        nodes = [
            ResourceNode(id="a", kind=ResourceKind.NETWORK, depends_on=["b"]),
            ResourceNode(id="b", kind=ResourceKind.NETWORK),
        ]
        
        plan = build_plan(graph_of(nodes), records)
        
        assert [a.verb for a in plan.actions] == [ActionVerb.NO_OP, ActionVerb.NO_OP]
        assert [a.target for a in plan.record_refreshes] == ["b", "a"]
        assert plan.changes == []
        assert plan.has_changes
        assert "recorded dependencies" in plan.action_for("a").reason
    
    def test_recreated_reference_updates_dependent(self, stack):
        records = [r for r in applied(build_plan(graph_of(stack), [])) if r.resource_id != "N"]
        
        plan = build_plan(graph_of(stack), records)
        
        assert [(a.verb, a.target) for a in plan.actions] == [
            (ActionVerb.CREATE, "N"),
            (ActionVerb.UPDATE, "S"),
            (ActionVerb.NO_OP, "I"),
        ]
        assert plan.action_for("S").reason == "referenced resources get new provider ids: N"
        assert plan.action_for("S").wait_for == ["N"]
    
    def test_reference_applied_against_old_provider_id_is_update(self, stack):
        records = applied(build_plan(graph_of(stack), []))
        subnet = next(r for r in records if r.resource_id == "S")
        subnet.resolved_references = {"N": "p-N-before-recreate"}
        
        plan = build_plan(graph_of(stack), records)
        
        assert plan.action_for("S").verb == ActionVerb.UPDATE
        assert "N" in plan.action_for("S").reason
        assert plan.action_for("N").verb == ActionVerb.NO_OP
    
    def test_counts(self, stack):
        plan = build_plan(graph_of(stack), [])
        assert plan.counts() == {"Create": 3, "Update": 0, "Destroy": 0, "NoOp": 0}
    
    def test_diff_attributes(self):
        old = {"a": StringValue(value="1"), "b": StringValue(value="2")}
        new = {"a": StringValue(value="1"), "b": StringValue(value="3"), "c": StringValue(value="4")}
        
        assert diff_attributes(old, new) == (["c"], [], ["b"])
        assert diff_attributes(new, old) == ([], ["c"], ["b"])


class TestPlannerProperties:
    """Ordering properties over random graphs."""
    
    @settings(max_examples=75, deadline=None)
    @given(random_dags())
    def test_create_order_is_topological(self, nodes):
        plan = build_plan(graph_of(nodes), [])
        
        seen = set()
        for action in plan.actions:
            assert set(action.wait_for) <= seen
            seen.add(action.target)
        assert len(seen) == len(nodes)
    
    @settings(max_examples=75, deadline=None)
    @given(random_dags())
    def test_destroy_is_exact_reverse(self, nodes):
        create_plan = build_plan(graph_of(nodes), [])
        destroy_plan = build_plan(DependencyGraph(), applied(create_plan))
        
        assert [a.target for a in destroy_plan.actions] == [a.target for a in reversed(create_plan.actions)]
        done = set()
        for action in destroy_plan.actions:
            assert set(action.wait_for) <= done
            done.add(action.target)
    
    @settings(max_examples=50, deadline=None)
    @given(random_dags())
    def test_replan_after_apply_is_all_noop(self, nodes):
        graph = graph_of(nodes)
        first = build_plan(graph, [])
        second = build_plan(graph, applied(first))
        
        assert all(action.verb == ActionVerb.NO_OP for action in second.actions)
        assert [a.target for a in second.actions] == [a.target for a in first.actions]
