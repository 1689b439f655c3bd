"""
Pixie Random-Walk Recommender.

This package implements graph recommendations in the style of Pinterest's
Pixie: short biased random walks on a bipartite interaction graph, started
from weighted query nodes, whose visit counts are aggregated into a ranked
list of recommendations.

Submodules:
    - graph: Bipartite adjacency structure
    - walks: Weight functions and the random walker
    - recommend: Query aggregation, ranking and the object/tag recommender
    - data: Loading graphs from edge lists, JSON, NetworkX and mock data
    - utils: Graph statistics

Example:
    >>> from pixie.graph import BipartiteGraph
    >>> from pixie.recommend import recommend
    >>>
    >>> graph = BipartiteGraph.from_edges([("A", "X"), ("A", "Y"), ("B", "Y"), ("B", "Z")])
    >>> recommend(graph, [("A", 1.0)], walks_per_query=1000, max_steps=2, top_k=2, seed=42)
"""

__version__ = "1.0.0"

from .graph import BipartiteGraph, Edge, Node, NodeClass
from .recommend import InvalidInputError, PixieRecommender, Recommender, recommend, recommend_with_budget

__all__ = [
    'BipartiteGraph',
    'Edge',
    'Node',
    'NodeClass',
    'recommend',
    'recommend_with_budget',
    'PixieRecommender',
    'Recommender',
    'InvalidInputError',
]
