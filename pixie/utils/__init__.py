"""
Utilities Module.

Components:
    graph_utils: Degree distributions and graph statistics
"""

from .graph_utils import (
    compute_degree_distribution,
    compute_graph_statistics
)

__all__ = [
    'compute_degree_distribution',
    'compute_graph_statistics',
]
