"""
Random Walk Module for Pixie Recommendations.

This module implements the biased random walks and the weight functions
that steer them. It includes:

1. Pluggable edge weight functions
2. The weighted random walker

The core idea: items that many short walks from a user's items reach are
good recommendations for that user.

Classes:
    RandomWalker: Weighted walks alternating between node classes
    EdgeAttributeWeight: Weight from an edge attribute (e.g. counts)
    DirectionalWeight: Per-direction weighting callables
    InverseDegreeWeight: Dampen high-degree neighbors

Example:
    >>> from pixie.walks import RandomWalker, EdgeAttributeWeight
    >>>
    >>> walker = RandomWalker(graph, weight_fn=EdgeAttributeWeight('count'), max_steps=10)
    >>> visits = walker.walk_many("user_1", num_walks=100)
"""

from .weights import (
    DirectionalWeight,
    EdgeAttributeWeight,
    InverseDegreeWeight,
    WeightFunction,
    clamp_weight,
    uniform_weight,
)
from .walker import RandomWalker

__all__ = [
    'RandomWalker',
    'WeightFunction',
    'uniform_weight',
    'clamp_weight',
    'EdgeAttributeWeight',
    'DirectionalWeight',
    'InverseDegreeWeight',
]
