"""
Graph Module for Pixie Recommendations.

This module provides the bipartite adjacency structure the walks run on.

Classes:
    BipartiteGraph: Adjacency lists for LEFT and RIGHT nodes keyed by id
    NodeClass: LEFT / RIGHT node class enum
    Node: (id, node_class) reference
    Edge: LEFT-RIGHT edge with metadata attributes

Example:
    >>> from pixie.graph import BipartiteGraph, NodeClass
    >>>
    >>> graph = BipartiteGraph.from_edges([("A", "X"), ("A", "Y"), ("B", "Y")])
    >>> graph.degree("Y", NodeClass.RIGHT)
    2
"""

from .bipartite import BipartiteGraph, Edge, Node, NodeClass

__all__ = [
    'BipartiteGraph',
    'Edge',
    'Node',
    'NodeClass',
]
