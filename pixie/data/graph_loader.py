"""
Graph Loader Module.

This module builds ``BipartiteGraph`` instances from external sources and
creates mock graphs for testing/development. It is glue around the core:
the recommender itself only ever reads a finished graph.

Supported sources:
    - Edge list files (``left<TAB>right[<TAB>count]`` per line)
    - JSON files written by ``GraphLoader.save``
    - NetworkX bipartite graphs
    - Synthetic user/item graphs
"""

import json
import logging
from pathlib import Path
from typing import Hashable, Iterable, Optional, Union

import networkx as nx
import numpy as np

from ..graph import BipartiteGraph, NodeClass

logger = logging.getLogger(__name__)


def _parse_count(value: str, line_no: int) -> Union[int, float]:
    try:
        count = float(value)
    except ValueError:
        raise ValueError(f"Line {line_no}: invalid count {value!r}") from None
    return int(count) if count.is_integer() else count


class GraphLoader:
    """
    Load bipartite graphs from various sources.

    Example:
        >>> loader = GraphLoader()
        >>>
        >>> # Load from interaction log
        >>> graph = loader.from_edge_list("data/raw/interactions.tsv")
        >>>
        >>> # Load from file
        >>> graph = loader.from_file("data/processed/graph.json")
        >>>
        >>> # Create mock graph
        >>> graph = loader.create_mock(num_left=500, num_right=200)
    """

    @staticmethod
    def from_edge_list(path: Union[str, Path], delimiter: str = '\t') -> BipartiteGraph:
        """
        Load an edge list file.

        Each non-empty line holds ``left``, ``right`` and an optional
        interaction ``count``. Lines starting with ``#`` are comments.
        Repeated pairs are merged and their counts summed.

        Args:
            path: Path to the file
            delimiter: Field separator

        Returns:
            BipartiteGraph with string identifiers

        Raises:
            ValueError: On lines with the wrong number of fields
        """
        graph = BipartiteGraph()

        with open(path, 'r') as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue

                fields = [field.strip() for field in line.split(delimiter)]
                if len(fields) == 2:
                    graph.add_edge(fields[0], fields[1], count=1)
                elif len(fields) == 3:
                    graph.add_edge(fields[0], fields[1], count=_parse_count(fields[2], line_no))
                else:
                    raise ValueError(
                        f"Line {line_no}: expected 2 or 3 fields, got {len(fields)}"
                    )

        logger.info("Loaded %r from %s", graph, path)
        return graph

    @staticmethod
    def save(graph: BipartiteGraph, path: Union[str, Path]) -> None:
        """
        Save graph to JSON file.

        Args:
            graph: Graph to save
            path: Output file path
        """
        data = {
            'left_nodes': graph.nodes(NodeClass.LEFT),
            'right_nodes': graph.nodes(NodeClass.RIGHT),
            'edges': [
                {'left': e.left, 'right': e.right, 'attributes': e.attributes}
                for e in graph.edges()
            ],
        }

        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def from_file(path: Union[str, Path]) -> BipartiteGraph:
        """
        Load graph from JSON file.

        Args:
            path: Input file path

        Returns:
            BipartiteGraph populated from file
        """
        with open(path, 'r') as f:
            data = json.load(f)

        graph = BipartiteGraph()
        for node in data.get('left_nodes', []):
            graph.add_node(node, NodeClass.LEFT)
        for node in data.get('right_nodes', []):
            graph.add_node(node, NodeClass.RIGHT)
        for edge in data['edges']:
            graph.add_edge(edge['left'], edge['right'], **edge.get('attributes', {}))

        logger.info("Loaded %r from %s", graph, path)
        return graph

    @staticmethod
    def from_networkx(
        nx_graph: nx.Graph,
        left_nodes: Optional[Iterable[Hashable]] = None
    ) -> BipartiteGraph:
        """Convert a NetworkX bipartite graph (see ``BipartiteGraph.from_networkx``)."""
        return BipartiteGraph.from_networkx(nx_graph, left_nodes=left_nodes)

    @staticmethod
    def create_mock(
        num_left: int = 200,
        num_right: int = 50,
        edge_prob: float = 0.05,
        max_count: int = 5,
        seed: int = 42
    ) -> BipartiteGraph:
        """
        Create a synthetic user/item graph for testing.

        Users are LEFT nodes ``user_0000``..., items are RIGHT nodes
        ``item_0000``... Every edge carries a random interaction ``count``
        in ``[1, max_count]``.

        Args:
            num_left: Number of LEFT (user) nodes
            num_right: Number of RIGHT (item) nodes
            edge_prob: Probability of an edge between any user and item
            max_count: Largest interaction count
            seed: Random seed for reproducibility

        Returns:
            BipartiteGraph with synthetic data
        """
        nx_graph = nx.bipartite.random_graph(num_left, num_right, edge_prob, seed=seed)

        mapping = {
            n: f"user_{n:04d}" if n < num_left else f"item_{n - num_left:04d}"
            for n in nx_graph.nodes()
        }
        nx_graph = nx.relabel_nodes(nx_graph, mapping)

        rng = np.random.default_rng(seed)
        for u, v in nx_graph.edges():
            nx_graph[u][v]['count'] = int(rng.integers(1, max_count + 1))

        graph = BipartiteGraph.from_networkx(nx_graph)

        logger.info(
            "Generated synthetic graph: %d users, %d items, %d edges",
            num_left, num_right, graph.num_edges
        )
        return graph
