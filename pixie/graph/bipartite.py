"""
Bipartite Graph Module.

This module holds the adjacency structure the random walks run on. Nodes
split into two classes (LEFT and RIGHT, e.g. users/pins and boards, or
objects and tags) and every edge joins one LEFT node to one RIGHT node.

Key Concept:
    Neighbor lookup happens once per walk step, so each class keeps a
    dictionary from node id to the list of incident edges. Looking up a node
    that does not exist is not an error, it simply has no neighbors.

    Edges carry an attribute dictionary (e.g. an interaction ``count``).
    Attributes are only read by weight functions, never by the walker.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, Iterator, List, NamedTuple, Optional, Tuple

import networkx as nx

logger = logging.getLogger(__name__)


class NodeClass(Enum):
    """The two disjoint node classes of a bipartite graph."""
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> 'NodeClass':
        """The class on the other side of every edge."""
        return NodeClass.RIGHT if self is NodeClass.LEFT else NodeClass.LEFT


class Node(NamedTuple):
    """A node reference: identifier plus the class it belongs to."""
    id: Hashable
    node_class: NodeClass


@dataclass
class Edge:
    """
    Represents an edge between a LEFT and a RIGHT node.

    Attributes:
        left: Identifier of the LEFT endpoint
        right: Identifier of the RIGHT endpoint
        attributes: Metadata consumed by weight functions (e.g. count)
    """
    left: Hashable
    right: Hashable
    attributes: Dict[str, Any] = field(default_factory=dict)

    def endpoint(self, node_class: NodeClass) -> Hashable:
        """Identifier of the endpoint that belongs to ``node_class``."""
        return self.left if node_class is NodeClass.LEFT else self.right

    def other(self, node_class: NodeClass) -> Hashable:
        """Identifier of the endpoint opposite to ``node_class``."""
        return self.right if node_class is NodeClass.LEFT else self.left


class BipartiteGraph:
    """
    Adjacency-list bipartite graph keyed by node identifier.

    Every edge object is shared by the adjacency lists of both of its
    endpoints, so the two sides never disagree and there are no dangling
    references. Adding the same (left, right) pair twice merges into the
    existing edge: numeric ``count`` attributes are summed, other attributes
    are overwritten.

    The graph is built once by an ingestion step and then only read while
    recommendations are computed.

    Example:
        >>> from pixie.graph import BipartiteGraph, NodeClass
        >>>
        >>> graph = BipartiteGraph()
        >>> graph.add_edge("A", "X", count=3)
        >>> graph.add_edge("A", "Y")
        >>> [e.right for e in graph.neighbors("A", NodeClass.LEFT)]
        ['X', 'Y']
        >>> graph.degree("X", NodeClass.RIGHT)
        1
    """

    def __init__(self):
        """Initialize an empty graph."""
        self._adjacency: Dict[NodeClass, Dict[Hashable, List[Edge]]] = {
            NodeClass.LEFT: {},
            NodeClass.RIGHT: {},
        }
        self._edge_lookup: Dict[Tuple[Hashable, Hashable], Edge] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_node(self, node: Hashable, node_class: NodeClass) -> None:
        """Add a node without edges. Existing nodes are left untouched."""
        self._adjacency[node_class].setdefault(node, [])

    def add_edge(self, left: Hashable, right: Hashable, **attributes) -> Edge:
        """
        Add an edge between a LEFT and a RIGHT node.

        Missing endpoints are created.

        Args:
            left: LEFT node identifier
            right: RIGHT node identifier
            **attributes: Edge metadata for weight functions

        Returns:
            The stored (possibly merged) edge
        """
        key = (left, right)
        existing = self._edge_lookup.get(key)
        if existing is not None:
            for name, value in attributes.items():
                if name == 'count' and 'count' in existing.attributes:
                    existing.attributes['count'] += value
                else:
                    existing.attributes[name] = value
            return existing

        edge = Edge(left=left, right=right, attributes=dict(attributes))
        self._edge_lookup[key] = edge
        self._adjacency[NodeClass.LEFT].setdefault(left, []).append(edge)
        self._adjacency[NodeClass.RIGHT].setdefault(right, []).append(edge)
        return edge

    @classmethod
    def from_edges(cls, edges: Iterable) -> 'BipartiteGraph':
        """
        Build a graph from an iterable of edges.

        Each item is either an ``Edge``, a ``(left, right)`` pair or a
        ``(left, right, attributes_dict)`` triple.
        """
        graph = cls()
        for item in edges:
            if isinstance(item, Edge):
                graph.add_edge(item.left, item.right, **item.attributes)
            elif len(item) == 2:
                graph.add_edge(item[0], item[1])
            elif len(item) == 3:
                graph.add_edge(item[0], item[1], **dict(item[2]))
            else:
                raise ValueError(f"Cannot interpret edge: {item!r}")
        return graph

    @classmethod
    def from_networkx(
        cls,
        nx_graph: nx.Graph,
        left_nodes: Optional[Iterable[Hashable]] = None
    ) -> 'BipartiteGraph':
        """
        Convert a NetworkX bipartite graph.

        Args:
            nx_graph: Undirected NetworkX graph
            left_nodes: Nodes of the LEFT class. If None, the NetworkX
                convention is used: nodes with ``bipartite == 0`` are LEFT,
                every other node is RIGHT.

        Returns:
            BipartiteGraph with edge data copied as attributes
        """
        if left_nodes is None:
            left_set = {
                n for n, data in nx_graph.nodes(data=True)
                if data.get('bipartite') == 0
            }
        else:
            left_set = set(left_nodes)

        graph = cls()
        for node in nx_graph.nodes():
            graph.add_node(node, NodeClass.LEFT if node in left_set else NodeClass.RIGHT)

        for u, v, data in nx_graph.edges(data=True):
            if u in left_set and v not in left_set:
                graph.add_edge(u, v, **data)
            elif v in left_set and u not in left_set:
                graph.add_edge(v, u, **data)
            else:
                raise ValueError(f"Edge ({u!r}, {v!r}) does not join the two node classes")

        logger.debug("Converted NetworkX graph: %r", graph)
        return graph

    def to_networkx(self) -> nx.Graph:
        """
        Export as a NetworkX graph.

        LEFT nodes become ``('left', id)`` with ``bipartite=0`` and RIGHT
        nodes ``('right', id)`` with ``bipartite=1``, so that identifiers
        shared across classes stay distinct.
        """
        g = nx.Graph()
        for node in self._adjacency[NodeClass.LEFT]:
            g.add_node((NodeClass.LEFT.value, node), bipartite=0)
        for node in self._adjacency[NodeClass.RIGHT]:
            g.add_node((NodeClass.RIGHT.value, node), bipartite=1)
        for edge in self._edge_lookup.values():
            g.add_edge(
                (NodeClass.LEFT.value, edge.left),
                (NodeClass.RIGHT.value, edge.right),
                **edge.attributes
            )
        return g

    # ------------------------------------------------------------------
    # Read interface
    # ------------------------------------------------------------------

    def neighbors(self, node: Hashable, node_class: NodeClass) -> Tuple[Edge, ...]:
        """
        Incident edges of a node.

        Args:
            node: Node identifier
            node_class: Class the identifier belongs to

        Returns:
            Tuple of edges to the opposite class (empty for unknown nodes)
        """
        return tuple(self._adjacency[node_class].get(node, ()))

    def has_node(self, node: Hashable, node_class: NodeClass) -> bool:
        return node in self._adjacency[node_class]

    def degree(self, node: Hashable, node_class: NodeClass) -> int:
        return len(self._adjacency[node_class].get(node, ()))

    def max_degree(self, node_class: Optional[NodeClass] = None) -> int:
        """Largest degree within one class, or across both if None."""
        classes = [node_class] if node_class is not None else list(NodeClass)
        return max(
            (len(edges) for c in classes for edges in self._adjacency[c].values()),
            default=0
        )

    def nodes(self, node_class: NodeClass) -> List[Hashable]:
        return list(self._adjacency[node_class])

    def edges(self) -> Iterator[Edge]:
        return iter(self._edge_lookup.values())

    @property
    def num_nodes(self) -> int:
        return sum(len(adj) for adj in self._adjacency.values())

    @property
    def num_edges(self) -> int:
        return len(self._edge_lookup)

    def __repr__(self) -> str:
        return (
            f"BipartiteGraph(left={len(self._adjacency[NodeClass.LEFT])}, "
            f"right={len(self._adjacency[NodeClass.RIGHT])}, edges={self.num_edges})"
        )
