"""
Graph Utilities Module.

This module provides helper functions for graph analysis.
"""

from collections import Counter
from typing import Dict

import numpy as np

from ..graph import BipartiteGraph, NodeClass


def compute_degree_distribution(graph: BipartiteGraph, node_class: NodeClass) -> Dict:
    """
    Compute degree distribution statistics for one node class.

    Args:
        graph: Bipartite graph
        node_class: Class to summarize

    Returns:
        Dictionary with degree statistics
    """
    degrees = np.array(
        [graph.degree(node, node_class) for node in graph.nodes(node_class)],
        dtype=np.int64
    )

    if degrees.size == 0:
        return {
            'degrees': degrees,
            'mean': 0.0,
            'std': 0.0,
            'min': 0,
            'max': 0,
            'histogram': {},
            'isolated_nodes': 0
        }

    degree_counts = Counter(degrees.tolist())
    histogram = {int(k): v for k, v in sorted(degree_counts.items())}

    return {
        'degrees': degrees,
        'mean': float(degrees.mean()),
        'std': float(degrees.std()),
        'min': int(degrees.min()),
        'max': int(degrees.max()),
        'histogram': histogram,
        'isolated_nodes': int((degrees == 0).sum())
    }


def compute_graph_statistics(graph: BipartiteGraph) -> Dict:
    """
    Compute comprehensive graph statistics.

    Args:
        graph: Bipartite graph

    Returns:
        Dictionary with graph statistics
    """
    left = compute_degree_distribution(graph, NodeClass.LEFT)
    right = compute_degree_distribution(graph, NodeClass.RIGHT)

    num_left = len(left['degrees'])
    num_right = len(right['degrees'])
    max_edges = num_left * num_right
    density = graph.num_edges / max_edges if max_edges > 0 else 0.0

    return {
        'num_nodes': graph.num_nodes,
        'num_left': num_left,
        'num_right': num_right,
        'num_edges': graph.num_edges,
        'density': density,
        'left_avg_degree': left['mean'],
        'left_max_degree': left['max'],
        'left_isolated': left['isolated_nodes'],
        'right_avg_degree': right['mean'],
        'right_max_degree': right['max'],
        'right_isolated': right['isolated_nodes'],
    }
