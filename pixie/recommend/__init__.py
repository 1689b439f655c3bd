"""
Recommendation Module.

This module aggregates walks from weighted query nodes into ranked
recommendations:
- Validation and merging of weighted queries
- Parallel per-query walks with independent random generators
- Linear weighting or Pixie boosting of visit counts
- Deterministic top-K ranking

Components:
    recommend: Fixed number of walks per query node
    recommend_with_budget: Walk budget split over query nodes by degree
    PixieRecommender: Graph + weight function + configured defaults
    Recommender: Object/tag convenience layer
    VisitTally: Weighted visit counts with ranking

Example:
    >>> from pixie.recommend import recommend
    >>>
    >>> recommend(graph, {"user_1": 1.0, "user_2": 2.0},
    ...           walks_per_query=200, max_steps=10, top_k=5, seed=42)
"""

from .aggregator import (
    InvalidInputError,
    PixieRecommender,
    Query,
    RecommendConfig,
    allocate_walks,
    normalize_query,
    recommend,
    recommend_with_budget,
)
from .recommender import Recommender
from .tally import VisitTally

__all__ = [
    'recommend',
    'recommend_with_budget',
    'allocate_walks',
    'normalize_query',
    'Query',
    'RecommendConfig',
    'PixieRecommender',
    'InvalidInputError',
    'Recommender',
    'VisitTally',
]
