"""
Data Module for Pixie Recommendations.

This module handles building graphs from external sources:
1. Interaction edge lists
2. Saved JSON graphs
3. NetworkX bipartite graphs
4. Synthetic mock graphs

Classes:
    GraphLoader: Load or generate a BipartiteGraph

Example:
    >>> from pixie.data import GraphLoader
    >>>
    >>> graph = GraphLoader.create_mock(num_left=100, num_right=30, seed=42)
"""

from .graph_loader import GraphLoader

__all__ = [
    'GraphLoader',
]
