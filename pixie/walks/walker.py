"""
Biased Random Walker Module.

This module performs the short random walks Pixie is built on.

Key Concept:
    A walk starts at a query node and alternates classes at every step
    (LEFT -> RIGHT -> LEFT ...). At each step the candidate edges of the
    current node are weighted by the weight function and one is drawn with
    probability proportional to its weight. Every node of the target class
    that the walk lands on is recorded as a visit.

    The walk stops after ``max_steps`` steps, or earlier when the current
    node has no edge with positive weight (dead end). It is a plain walk
    with replacement: edges and nodes may be revisited.

    The random number source is an injectable ``numpy.random.Generator`` so
    that walks are reproducible under a fixed seed.
"""

import logging
from collections import Counter
from typing import Hashable, List, Optional

import numpy as np

from ..graph import BipartiteGraph, Node, NodeClass
from .weights import WeightFunction, clamp_weight, uniform_weight

logger = logging.getLogger(__name__)


class RandomWalker:
    """
    Weighted random walks on a bipartite graph.

    Example:
        >>> import numpy as np
        >>> from pixie.graph import BipartiteGraph, NodeClass
        >>> from pixie.walks import RandomWalker
        >>>
        >>> graph = BipartiteGraph.from_edges([("A", "X"), ("A", "Y"), ("B", "Y")])
        >>> walker = RandomWalker(graph, max_steps=4, target_class=NodeClass.RIGHT)
        >>> visits = walker.walk("A", NodeClass.LEFT, rng=np.random.default_rng(0))
        >>> len(visits)  # one RIGHT visit every second step
        2
    """

    def __init__(
        self,
        graph: BipartiteGraph,
        weight_fn: WeightFunction = uniform_weight,
        max_steps: int = 10,
        target_class: Optional[NodeClass] = NodeClass.RIGHT,
        seed: Optional[int] = None
    ):
        """
        Initialize random walker.

        Args:
            graph: Graph to walk on (read only)
            weight_fn: Edge weighting policy ``(Node, Edge) -> float``
            max_steps: Maximum number of steps per walk
            target_class: Class whose visits are recorded. None records every
                visited node as a ``Node`` tuple.
            seed: Seed of the fallback generator used when a call does not
                pass its own ``rng``
        """
        if max_steps < 1:
            raise ValueError(f"max_steps must be positive, got {max_steps}")

        self.graph = graph
        self.weight_fn = weight_fn
        self.max_steps = max_steps
        self.target_class = target_class
        self.rng = np.random.default_rng(seed)

    def choose_edge(self, current: Node, rng: np.random.Generator):
        """
        Draw one outgoing edge of ``current`` proportionally to its weight.

        Args:
            current: Node the walk is at
            rng: Random generator

        Returns:
            The chosen edge, or None at a dead end
        """
        edges = self.graph.neighbors(current.id, current.node_class)
        if not edges:
            return None

        weights = np.fromiter(
            (clamp_weight(self.weight_fn(current, edge)) for edge in edges),
            dtype=np.float64,
            count=len(edges)
        )
        peak = weights.max()
        if peak <= 0.0:
            return None

        # Finite weights can still overflow when summed
        weights /= peak
        total = weights.sum()

        idx = rng.choice(len(edges), p=weights / total)
        return edges[idx]

    def walk(
        self,
        start: Hashable,
        start_class: NodeClass = NodeClass.LEFT,
        rng: Optional[np.random.Generator] = None
    ) -> List[Hashable]:
        """
        Perform one walk.

        The start node itself is never recorded.

        Args:
            start: Identifier of the start node
            start_class: Class of the start node
            rng: Random generator (falls back to the walker's own)

        Returns:
            Visited target-class nodes in visiting order, at most
            ``max_steps`` of them
        """
        rng = rng if rng is not None else self.rng
        visits = []
        current = Node(start, start_class)

        for _ in range(self.max_steps):
            edge = self.choose_edge(current, rng)
            if edge is None:
                # Dead end - stop walk
                break

            next_class = current.node_class.opposite
            current = Node(edge.endpoint(next_class), next_class)

            if self.target_class is None:
                visits.append(current)
            elif next_class is self.target_class:
                visits.append(current.id)

        return visits

    def walk_many(
        self,
        start: Hashable,
        num_walks: int,
        start_class: NodeClass = NodeClass.LEFT,
        rng: Optional[np.random.Generator] = None
    ) -> Counter:
        """
        Perform several independent walks from the same node.

        Args:
            start: Identifier of the start node
            num_walks: Number of walks
            start_class: Class of the start node
            rng: Random generator (falls back to the walker's own)

        Returns:
            Counter of visits over all walks
        """
        rng = rng if rng is not None else self.rng
        visits = Counter()

        if self.graph.degree(start, start_class) == 0:
            logger.debug("Start node %r (%s) has no edges, skipping walks", start, start_class.value)
            return visits

        for _ in range(num_walks):
            visits.update(self.walk(start, start_class, rng))

        return visits
