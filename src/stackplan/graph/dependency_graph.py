"""Build the directed dependency graph from declared resources."""

import networkx as nx
from typing import Dict, List, Mapping, Optional, Set
from ..ingest.models import ResourceNode
from ..utils.errors import ConfigurationError, CyclicDependencyError, UnresolvedReferenceError
from ..utils.logging import get_logger

logger = get_logger("graph.dependency_graph")

_VISITING = 1
_VISITED = 2


def layered_order(graph: nx.DiGraph, position: Mapping[str, int]) -> List[str]:
    """
    Order nodes dependencies-first, grouped by depth.
    
    Edges point from dependent to dependency. Nodes sharing a depth keep
    their relative ``position`` (declaration order).
    """
    order: List[str] = []
    for generation in nx.topological_generations(graph.reverse(copy=False)):
        order.extend(sorted(generation, key=lambda node_id: (position.get(node_id, 0), node_id)))
    return order


def find_cycle(graph: nx.DiGraph, order: List[str]) -> Optional[List[str]]:
    """Depth-first search with visiting/visited markers; returns one cycle or None."""
    marks: Dict[str, int] = {}
    
    for root in order:
        if root in marks:
            continue
        marks[root] = _VISITING
        path = [root]
        stack = [iter(sorted(graph.successors(root)))]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                marks[path.pop()] = _VISITED
                continue
            state = marks.get(child)
            if state == _VISITING:
                return path[path.index(child):]
            if state is None:
                marks[child] = _VISITING
                path.append(child)
                stack.append(iter(sorted(graph.successors(child))))
    return None


class DependencyGraph:
    """Directed dependency graph: nodes=resources, edges=dependent -> dependency."""
    
    def __init__(self):
        self.graph = nx.DiGraph()
        self._resource_map: Dict[str, ResourceNode] = {}
        self._position: Dict[str, int] = {}
    
    def add_resource(self, resource: ResourceNode) -> None:
        """Add a resource node; edges are added once every node is known."""
        if resource.id in self._resource_map:
            raise ConfigurationError(f"Duplicate resource id: {resource.id}")
        self._position[resource.id] = len(self._position)
        self._resource_map[resource.id] = resource
        self.graph.add_node(resource.id, resource=resource)
    
    def build_from_nodes(self, resources: List[ResourceNode]) -> None:
        """
        Build and validate the graph for resources in declaration order.
        
        Raises:
            UnresolvedReferenceError: A dependency names an undeclared resource
            CyclicDependencyError: The dependencies contain a cycle
        """
        for resource in resources:
            self.add_resource(resource)
        
        for resource in resources:
            for dep_id in resource.depends_on:
                if dep_id not in self._resource_map:
                    raise UnresolvedReferenceError(resource.id, dep_id)
                if dep_id == resource.id:
                    raise CyclicDependencyError([resource.id])
                self.graph.add_edge(resource.id, dep_id)
                logger.debug(f"Added dependency edge: {resource.id} -> {dep_id}")
        
        cycle = find_cycle(self.graph, list(self._resource_map))
        if cycle:
            raise CyclicDependencyError(cycle)
        
        logger.info(f"Built dependency graph with {self.graph.number_of_nodes()} nodes and {self.graph.number_of_edges()} edges")
    
    def topological_order(self) -> List[str]:
        """Resource ids with every dependency before its dependents."""
        return layered_order(self.graph, self._position)
    
    def position(self, resource_id: str) -> int:
        """Declaration index of a resource."""
        return self._position[resource_id]
    
    def dependencies_of(self, resource_id: str) -> List[str]:
        """Direct dependencies of a resource."""
        return list(self.graph.successors(resource_id))
    
    def dependents_of(self, resource_id: str) -> List[str]:
        """Resources that directly depend on the given resource."""
        return list(self.graph.predecessors(resource_id))
    
    def get_downstream_resources(self, resource_id: str) -> Set[str]:
        """All resources that depend on the given resource, transitively."""
        if resource_id not in self.graph:
            return set()
        return set(nx.ancestors(self.graph, resource_id))
    
    def get_upstream_resources(self, resource_id: str) -> Set[str]:
        """All resources the given resource depends on, transitively."""
        if resource_id not in self.graph:
            return set()
        return set(nx.descendants(self.graph, resource_id))
    
    def get_resource(self, resource_id: str) -> Optional[ResourceNode]:
        """Get declared resource by id."""
        return self._resource_map.get(resource_id)
    
    def __contains__(self, resource_id: str) -> bool:
        return resource_id in self._resource_map
