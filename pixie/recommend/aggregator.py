"""
Recommendation Aggregator Module.

This module turns a weighted query into a ranked list of recommendations.

Algorithm:
    1. Run ``walks_per_query`` walks from every query node
    2. Scale each query's visit counts by the query weight
    3. Merge the scaled counts of all queries into one tally
    4. Sort by score (ties by node id) and keep the top K

Key Concept:
    Every query node gets its own random generator, spawned from one
    ``numpy.random.SeedSequence``. Walks of different queries therefore never
    share random state, they can run on worker threads, and the result for a
    fixed seed does not depend on the number of workers.

    Visit counts enter the tally linearly: a query weight of 2 contributes
    exactly twice the score of weight 1 for the same walks. With
    ``boost=True`` the Pixie boosting rule is used instead: per-query scores
    are combined as ``(sum of square roots) ** 2`` which favours nodes reached
    from several queries over nodes reached often from a single one.
"""

import logging
import math
import numbers
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from ..graph import BipartiteGraph, Node, NodeClass
from ..walks import RandomWalker, WeightFunction, uniform_weight
from .tally import VisitTally

logger = logging.getLogger(__name__)

QueryLike = Union[Mapping[Hashable, float], Iterable[Any]]


class InvalidInputError(ValueError):
    """Raised when a recommendation request violates the input contract."""


@dataclass(frozen=True)
class Query:
    """
    A seed node with its importance weight.

    Attributes:
        node: Node identifier
        weight: Relative importance (> 0)
        node_class: Class of ``node``
    """
    node: Hashable
    weight: float = 1.0
    node_class: NodeClass = NodeClass.LEFT


@dataclass
class RecommendConfig:
    """Default parameters of a recommendation call."""
    walks_per_query: int = 100
    max_steps: int = 10
    top_k: int = 10
    total_walks: int = 1000
    seed: Optional[int] = 42
    num_workers: int = 1
    boost: bool = False
    exclude_queries: bool = True
    target_class: Optional[NodeClass] = NodeClass.RIGHT

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'RecommendConfig':
        """
        Build from the ``recommend`` section of the YAML config.

        Unknown keys are ignored; ``target_class`` may be "left", "right"
        or null.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in config.items() if k in known}
        if 'target_class' in values and values['target_class'] is not None:
            values['target_class'] = NodeClass(values['target_class'])
        return cls(**values)


def _check_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise InvalidInputError(f"{name} must be a positive integer, got {value!r}")


def _check_target_class(target_class: Any) -> None:
    if target_class is not None and not isinstance(target_class, NodeClass):
        raise InvalidInputError(f"target_class must be a NodeClass or None, got {target_class!r}")


def _check_weight(entry: Query) -> None:
    weight = entry.weight
    if (
        isinstance(weight, bool)
        or not isinstance(weight, numbers.Real)
        or not math.isfinite(weight)
        or weight <= 0
    ):
        raise InvalidInputError(
            f"Query weight must be a positive number, got {weight!r} for node {entry.node!r}"
        )


def normalize_query(query: QueryLike) -> List[Query]:
    """
    Validate a query and merge duplicate nodes.

    Accepts a mapping ``{node: weight}`` or an iterable whose items are
    ``Query`` objects, ``(node, weight)`` pairs (LEFT nodes) or
    ``(node, weight, node_class)`` triples. Entries for the same node are
    additive, so their weights are summed.

    Merged queries are sorted by (class, node id) so that each query gets
    the same random generator whatever the iteration order of the input
    (a ``set`` of pairs iterates in hash order). Identifiers that cannot
    be compared are ordered by their ``repr``.

    Args:
        query: Query in any of the accepted forms

    Returns:
        List of merged queries, sorted by class then node id

    Raises:
        InvalidInputError: If an entry is malformed or its weight is not > 0
    """
    entries = query.items() if isinstance(query, Mapping) else query

    merged: Dict[Tuple[Hashable, NodeClass], float] = {}
    for entry in entries:
        if isinstance(entry, Query):
            q = entry
        elif isinstance(entry, (tuple, list)) and len(entry) in (2, 3):
            q = Query(*entry)
        else:
            raise InvalidInputError(f"Cannot interpret query entry: {entry!r}")

        if not isinstance(q.node_class, NodeClass):
            raise InvalidInputError(f"Invalid node class {q.node_class!r} for node {q.node!r}")
        _check_weight(q)

        key = (q.node, q.node_class)
        merged[key] = merged.get(key, 0.0) + q.weight

    entries = list(merged.items())
    try:
        entries.sort(key=lambda kv: (kv[0][1].value, kv[0][0]))
    except TypeError:
        entries.sort(key=lambda kv: (kv[0][1].value, repr(kv[0][0])))

    return [Query(node, weight, node_class) for (node, node_class), weight in entries]


def allocate_walks(graph: BipartiteGraph, queries: List[Query], total_walks: int) -> List[int]:
    """
    Split a walk budget over query nodes (Pixie step allocation).

    Each query receives a share proportional to

        s_q = degree(q) * (max_degree - log2(degree(q)))

    which grows with the degree of the query node but sub-linearly for the
    biggest hubs. Nodes without edges get no walks.

    Args:
        graph: Graph the queries refer to
        queries: Normalized queries
        total_walks: Total number of walks to distribute

    Returns:
        Number of walks per query, aligned with ``queries``
    """
    _check_positive_int('total_walks', total_walks)

    max_degree = graph.max_degree()
    factors = []
    for q in queries:
        degree = graph.degree(q.node, q.node_class)
        factors.append(degree * (max_degree - math.log2(degree)) if degree > 0 else 0.0)

    total = sum(factors)
    if total <= 0:
        return [0] * len(queries)
    return [int(total_walks * f / total) for f in factors]


def _spawn_generators(
    n: int,
    seed: Optional[int],
    rng: Optional[np.random.Generator]
) -> List[np.random.Generator]:
    """One independent generator per query."""
    if rng is not None:
        child_seeds = rng.integers(0, 2 ** 63 - 1, size=n, dtype=np.int64)
        return [np.random.default_rng(int(s)) for s in child_seeds]
    return [np.random.default_rng(child) for child in np.random.SeedSequence(seed).spawn(n)]


def _combine(queries: List[Query], visit_counts: List[Counter], boost: bool) -> VisitTally:
    """Scale per-query visits by query weight and merge into one tally."""
    combined = VisitTally()
    for q, counts in zip(queries, visit_counts):
        if boost:
            combined.update({node: math.sqrt(q.weight * c) for node, c in counts.items()})
        else:
            combined.update(counts, scale=q.weight)

    if boost:
        combined = VisitTally({node: score * score for node, score in combined.items()})
    return combined


def _run_walks(
    graph: BipartiteGraph,
    queries: List[Query],
    walk_counts: List[int],
    max_steps: int,
    top_k: int,
    weight_fn: WeightFunction,
    target_class: Optional[NodeClass],
    seed: Optional[int],
    rng: Optional[np.random.Generator],
    num_workers: int,
    boost: bool,
    exclude_queries: bool
) -> List[Tuple[Hashable, float]]:
    walker = RandomWalker(graph, weight_fn=weight_fn, max_steps=max_steps, target_class=target_class)
    generators = _spawn_generators(len(queries), seed, rng)

    def walk_query(index: int) -> Counter:
        q = queries[index]
        return walker.walk_many(q.node, walk_counts[index], q.node_class, generators[index])

    if num_workers == 1 or len(queries) == 1:
        visit_counts = [walk_query(i) for i in range(len(queries))]
    else:
        with ThreadPoolExecutor(max_workers=num_workers) as pool:
            visit_counts = list(pool.map(walk_query, range(len(queries))))

    tally = _combine(queries, visit_counts, boost)

    if exclude_queries:
        if target_class is None:
            tally.discard(Node(q.node, q.node_class) for q in queries)
        else:
            tally.discard(q.node for q in queries if q.node_class is target_class)

    logger.debug(
        "Walked %d queries (%d walks, max %d steps): %d candidate nodes",
        len(queries), sum(walk_counts), max_steps, len(tally)
    )
    return tally.ranked(top_k)


def recommend(
    graph: BipartiteGraph,
    query: QueryLike,
    walks_per_query: int,
    max_steps: int,
    top_k: int,
    weight_fn: WeightFunction = uniform_weight,
    target_class: Optional[NodeClass] = NodeClass.RIGHT,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    num_workers: int = 1,
    boost: bool = False,
    exclude_queries: bool = True
) -> List[Tuple[Hashable, float]]:
    """
    Recommend nodes for a weighted query.

    Args:
        graph: Graph to walk on (read only)
        query: ``{node: weight}`` or iterable of ``Query`` / ``(node, weight)``
            / ``(node, weight, node_class)``
        walks_per_query: Walks started from every query node
        max_steps: Maximum steps per walk
        top_k: Maximum number of results
        weight_fn: Edge weighting policy ``(Node, Edge) -> float``
        target_class: Class of the recommended nodes. None ranks nodes of
            both classes, keyed by ``Node``.
        seed: Seed for reproducible results (ignored when ``rng`` is given)
        rng: Generator to derive per-query generators from
        num_workers: Worker threads walking queries in parallel
        boost: Use Pixie boosting instead of linear weighting
        exclude_queries: Drop query nodes from the results

    Returns:
        Up to ``top_k`` (node, score) pairs, best first

    Raises:
        InvalidInputError: On non-positive weights or parameters or an
            invalid target class, before
            any walk is performed

    Example:
        >>> graph = BipartiteGraph.from_edges([("A", "X"), ("A", "Y"), ("B", "Y"), ("B", "Z")])
        >>> results = recommend(graph, [("A", 1.0)], walks_per_query=1000, max_steps=2, top_k=2, seed=7)
        >>> sorted(node for node, _ in results)
        ['X', 'Y']
    """
    _check_positive_int('walks_per_query', walks_per_query)
    _check_positive_int('max_steps', max_steps)
    _check_positive_int('top_k', top_k)
    _check_positive_int('num_workers', num_workers)
    _check_target_class(target_class)
    queries = normalize_query(query)

    if not queries:
        return []

    return _run_walks(
        graph, queries, [walks_per_query] * len(queries), max_steps, top_k,
        weight_fn, target_class, seed, rng, num_workers, boost, exclude_queries
    )


def recommend_with_budget(
    graph: BipartiteGraph,
    query: QueryLike,
    total_walks: int,
    max_steps: int,
    top_k: int,
    weight_fn: WeightFunction = uniform_weight,
    target_class: Optional[NodeClass] = NodeClass.RIGHT,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    num_workers: int = 1,
    boost: bool = False,
    exclude_queries: bool = True
) -> List[Tuple[Hashable, float]]:
    """
    Like ``recommend`` but with a total walk budget split by ``allocate_walks``.

    Query weights still scale each query's visit counts.
    """
    _check_positive_int('total_walks', total_walks)
    _check_positive_int('max_steps', max_steps)
    _check_positive_int('top_k', top_k)
    _check_positive_int('num_workers', num_workers)
    _check_target_class(target_class)
    queries = normalize_query(query)

    if not queries:
        return []

    walk_counts = allocate_walks(graph, queries, total_walks)
    return _run_walks(
        graph, queries, walk_counts, max_steps, top_k,
        weight_fn, target_class, seed, rng, num_workers, boost, exclude_queries
    )


class PixieRecommender:
    """
    Graph plus weight function plus defaults, ready to answer queries.

    Example:
        >>> from config import load_config
        >>> config = RecommendConfig.from_dict(load_config()['recommend'])
        >>> recommender = PixieRecommender(graph, config=config)
        >>> recommender.recommend({"user_1": 1.0, "user_2": 0.5}, top_k=5)
    """

    def __init__(
        self,
        graph: BipartiteGraph,
        weight_fn: WeightFunction = uniform_weight,
        config: Optional[RecommendConfig] = None
    ):
        self.graph = graph
        self.weight_fn = weight_fn
        self.config = config or RecommendConfig()

    def recommend(self, query: QueryLike, top_k: Optional[int] = None, **overrides):
        """
        Recommend with the configured defaults.

        Args:
            query: Weighted query (see ``recommend``)
            top_k: Number of results (config default if None)
            **overrides: Any other ``recommend`` keyword argument

        Returns:
            List of (node, score) pairs
        """
        params = self._params(overrides)
        params['top_k'] = top_k if top_k is not None else self.config.top_k
        params['walks_per_query'] = overrides.get('walks_per_query', self.config.walks_per_query)
        return recommend(self.graph, query, **params)

    def recommend_with_budget(self, query: QueryLike, top_k: Optional[int] = None, **overrides):
        """Budgeted variant using ``config.total_walks``."""
        params = self._params(overrides)
        params['top_k'] = top_k if top_k is not None else self.config.top_k
        params['total_walks'] = overrides.get('total_walks', self.config.total_walks)
        return recommend_with_budget(self.graph, query, **params)

    def _params(self, overrides: Dict[str, Any]) -> Dict[str, Any]:
        params = {
            'max_steps': self.config.max_steps,
            'weight_fn': self.weight_fn,
            'target_class': self.config.target_class,
            'seed': self.config.seed,
            'num_workers': self.config.num_workers,
            'boost': self.config.boost,
            'exclude_queries': self.config.exclude_queries,
        }
        params.update({k: v for k, v in overrides.items() if k not in ('walks_per_query', 'total_walks')})
        return params
