"""
Edge Weight Functions Module.

This module defines the pluggable policy that biases every walk step.

Key Concept:
    At each step the walker calls ``weight(current, edge)`` once for every
    candidate edge leaving ``current`` and picks an edge with probability
    proportional to the returned value. A weight of zero makes an edge
    unselectable for that step; if every candidate is zero the walk stops
    (dead end).

    Any callable with the signature ``(Node, Edge) -> float`` can be used.
    Negative, NaN and infinite results are treated as zero by the walker
    (see ``clamp_weight``).
"""

import math
from typing import Callable, Hashable, Optional

from ..graph import BipartiteGraph, Edge, Node, NodeClass

WeightFunction = Callable[[Node, Edge], float]


def clamp_weight(value: float) -> float:
    """
    Coerce a weight function result into a valid sampling weight.

    Args:
        value: Raw weight returned by a weight function

    Returns:
        ``value`` if it is finite and positive, otherwise 0.0
    """
    value = float(value)
    if math.isfinite(value) and value > 0.0:
        return value
    return 0.0


def uniform_weight(current: Node, edge: Edge) -> float:
    """Weight 1 for every edge, i.e. an unbiased random walk."""
    return 1.0


class EdgeAttributeWeight:
    """
    Weight edges by a numeric edge attribute.

    Typical use is an interaction count: an item a user touched ten times
    is followed more often than one touched once. With ``exponent < 1`` the
    influence of heavy edges is dampened.

    Example:
        >>> weight_fn = EdgeAttributeWeight('count', exponent=0.5)
        >>> recommend(graph, [("user_1", 1.0)], 100, 10, 5, weight_fn=weight_fn)
    """

    def __init__(self, attribute: str = 'count', default: float = 1.0, exponent: float = 1.0):
        """
        Args:
            attribute: Edge attribute to read
            default: Weight used when the attribute is missing
            exponent: Power applied to the attribute value
        """
        self.attribute = attribute
        self.default = default
        self.exponent = exponent

    def __call__(self, current: Node, edge: Edge) -> float:
        value = edge.attributes.get(self.attribute, self.default)
        if value <= 0:
            return 0.0
        return float(value) ** self.exponent

    def __repr__(self) -> str:
        return f"EdgeAttributeWeight(attribute={self.attribute!r}, exponent={self.exponent})"


class DirectionalWeight:
    """
    Separate weighting for LEFT->RIGHT and RIGHT->LEFT steps.

    Each direction takes a callable ``(from_id, to_id) -> float``. This is
    how object/tag graphs express e.g. "prefer specific tags when leaving an
    object, prefer popular objects when leaving a tag". A missing direction
    weighs every edge 1.0.
    """

    def __init__(
        self,
        left_to_right: Optional[Callable[[Hashable, Hashable], float]] = None,
        right_to_left: Optional[Callable[[Hashable, Hashable], float]] = None
    ):
        self.left_to_right = left_to_right
        self.right_to_left = right_to_left

    def __call__(self, current: Node, edge: Edge) -> float:
        if current.node_class is NodeClass.LEFT:
            if self.left_to_right is None:
                return 1.0
            return self.left_to_right(edge.left, edge.right)
        if self.right_to_left is None:
            return 1.0
        return self.right_to_left(edge.right, edge.left)


class InverseDegreeWeight:
    """
    Down-weight steps into high-degree neighbors.

    weight = 1 / degree(neighbor) ** exponent

    Hubs (very popular items or very broad tags) otherwise soak up most of
    the walk mass and flatten personalization.
    """

    def __init__(self, graph: BipartiteGraph, exponent: float = 1.0):
        self.graph = graph
        self.exponent = exponent

    def __call__(self, current: Node, edge: Edge) -> float:
        neighbor_class = current.node_class.opposite
        degree = self.graph.degree(edge.endpoint(neighbor_class), neighbor_class)
        if degree == 0:
            return 0.0
        return 1.0 / degree ** self.exponent
