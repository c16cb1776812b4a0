"""Tests for dependency graph."""

import pytest
from stackplan.graph.dependency_graph import DependencyGraph
from stackplan.ingest.models import ResourceKind, ResourceNode
from stackplan.utils.errors import ConfigurationError, CyclicDependencyError, UnresolvedReferenceError


def node(resource_id, kind=ResourceKind.SUBNET, depends_on=None):
    return ResourceNode(id=resource_id, kind=kind, depends_on=depends_on or [])


@pytest.fixture
def sample_resources():
    """Network with two subnets and an instance in one of them."""
    return [
        node("vpc", ResourceKind.NETWORK),
        node("subnet_a", depends_on=["vpc"]),
        node("subnet_b", depends_on=["vpc"]),
        node("web", ResourceKind.INSTANCE, depends_on=["subnet_b"]),
    ]


class TestDependencyGraph:
    """Test dependency graph construction."""
    
    def test_build_graph_from_nodes(self, sample_resources):
        graph = DependencyGraph()
        graph.build_from_nodes(sample_resources)
        
        assert graph.graph.number_of_nodes() == 4
        assert graph.graph.number_of_edges() == 3
        assert graph.graph.has_edge("web", "subnet_b")
    
    def test_topological_order_groups_by_depth(self, sample_resources):
        graph = DependencyGraph()
        graph.build_from_nodes(sample_resources)
        
        assert graph.topological_order() == ["vpc", "subnet_a", "subnet_b", "web"]
    
    def test_same_depth_keeps_declaration_order(self):
        resources = [
            node("zeta", ResourceKind.NETWORK),
            node("alpha", ResourceKind.NETWORK),
            node("child", depends_on=["alpha"]),
        ]
        graph = DependencyGraph()
        graph.build_from_nodes(resources)
        
        assert graph.topological_order() == ["zeta", "alpha", "child"]
    
    def test_dependency_declared_after_dependent(self):
        resources = [
            node("web", ResourceKind.INSTANCE, depends_on=["subnet"]),
            node("subnet", depends_on=["vpc"]),
            node("vpc", ResourceKind.NETWORK),
        ]
        graph = DependencyGraph()
        graph.build_from_nodes(resources)
        
        assert graph.topological_order() == ["vpc", "subnet", "web"]
    
    def test_get_downstream_resources(self, sample_resources):
        graph = DependencyGraph()
        graph.build_from_nodes(sample_resources)
        
        assert graph.get_downstream_resources("vpc") == {"subnet_a", "subnet_b", "web"}
        assert graph.get_downstream_resources("web") == set()
        assert graph.get_downstream_resources("missing") == set()
    
    def test_get_upstream_resources(self, sample_resources):
        graph = DependencyGraph()
        graph.build_from_nodes(sample_resources)
        
        assert graph.get_upstream_resources("web") == {"subnet_b", "vpc"}
        assert graph.get_upstream_resources("vpc") == set()
    
    def test_direct_neighbours(self, sample_resources):
        graph = DependencyGraph()
        graph.build_from_nodes(sample_resources)
        
        assert graph.dependencies_of("web") == ["subnet_b"]
        assert sorted(graph.dependents_of("vpc")) == ["subnet_a", "subnet_b"]
    
    def test_get_resource(self, sample_resources):
        graph = DependencyGraph()
        graph.build_from_nodes(sample_resources)
        
        resource = graph.get_resource("vpc")
        assert resource is not None
        assert resource.kind == ResourceKind.NETWORK
        assert graph.get_resource("nope") is None
        assert "vpc" in graph


class TestGraphValidation:
    """Configuration errors found while building the graph."""
    
    def test_two_node_cycle_names_both_nodes(self):
        resources = [
            node("a", depends_on=["b"]),
            node("b", depends_on=["a"]),
        ]
        graph = DependencyGraph()
        
        with pytest.raises(CyclicDependencyError) as exc_info:
            graph.build_from_nodes(resources)
        
        assert set(exc_info.value.cycle) == {"a", "b"}
        assert "a" in str(exc_info.value) and "b" in str(exc_info.value)
    
    def test_longer_cycle_reports_only_participants(self):
        resources = [
            node("root", ResourceKind.NETWORK),
            node("x", depends_on=["root", "z"]),
            node("y", depends_on=["x"]),
            node("z", depends_on=["y"]),
        ]
        graph = DependencyGraph()
        
        with pytest.raises(CyclicDependencyError) as exc_info:
            graph.build_from_nodes(resources)
        
        assert set(exc_info.value.cycle) == {"x", "y", "z"}
    
    def test_self_reference_is_a_cycle(self):
        graph = DependencyGraph()
        with pytest.raises(CyclicDependencyError):
            graph.build_from_nodes([node("loop", depends_on=["loop"])])
    
    def test_unresolved_reference(self):
        graph = DependencyGraph()
        
        with pytest.raises(UnresolvedReferenceError, match="ghost") as exc_info:
            graph.build_from_nodes([node("subnet", depends_on=["ghost"])])
        
        assert exc_info.value.source_id == "subnet"
        assert exc_info.value.missing_id == "ghost"
    
    def test_duplicate_ids_rejected(self):
        graph = DependencyGraph()
        with pytest.raises(ConfigurationError, match="Duplicate"):
            graph.build_from_nodes([node("vpc"), node("vpc")])
    
    def test_configuration_errors_share_base_class(self):
        assert issubclass(CyclicDependencyError, ConfigurationError)
        assert issubclass(UnresolvedReferenceError, ConfigurationError)
