#!/usr/bin/env python3
"""
Recommendation Script.

Loads a graph and prints recommendations for a weighted query.

Usage:
    python scripts/recommend.py --graph data/processed/graph.json --query user_0001
    python scripts/recommend.py --graph data/processed/graph.json \
        --query user_0001:2.0 --query user_0002:0.5 --top-k 20 --weighted
    python scripts/recommend.py --edge-list interactions.tsv --query alice --budget 2000
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import load_config
from pixie.data import GraphLoader
from pixie.graph import NodeClass
from pixie.recommend import InvalidInputError, PixieRecommender, Query, RecommendConfig
from pixie.walks import EdgeAttributeWeight, uniform_weight


def parse_query(value: str, node_class: NodeClass) -> Query:
    """Parse ``node`` or ``node:weight``."""
    node, sep, weight = value.rpartition(':')
    if not sep:
        return Query(value, 1.0, node_class)
    try:
        return Query(node, float(weight), node_class)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid query weight in {value!r}") from None


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Pixie random-walk recommendations')

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--graph', type=str,
        help='Graph JSON written by generate_data.py'
    )
    source.add_argument(
        '--edge-list', type=str,
        help='Tab separated left/right[/count] edge list'
    )
    parser.add_argument(
        '--config', type=str, default=None,
        help='Path to configuration file (default: config/default.yaml)'
    )
    parser.add_argument(
        '--query', action='append', required=True,
        help='Query node, optionally with weight as node:weight (repeatable)'
    )
    parser.add_argument(
        '--query-class', choices=['left', 'right'], default='left',
        help='Class of the query nodes'
    )
    parser.add_argument(
        '--top-k', type=int, default=None,
        help='Number of results (overrides config)'
    )
    parser.add_argument(
        '--walks', type=int, default=None,
        help='Walks per query node (overrides config)'
    )
    parser.add_argument(
        '--budget', type=int, default=None,
        help='Split this many walks over the queries by degree'
    )
    parser.add_argument(
        '--steps', type=int, default=None,
        help='Maximum steps per walk (overrides config)'
    )
    parser.add_argument(
        '--workers', type=int, default=None,
        help='Worker threads (overrides config)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed (overrides config)'
    )
    parser.add_argument(
        '--weighted', action='store_true',
        help='Weight steps by the edge interaction count'
    )
    parser.add_argument(
        '--boost', action='store_true',
        help='Combine queries with Pixie boosting'
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main recommendation function."""
    args = parse_args(argv)
    config = load_config(args.config)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config['logging'].get('level', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    rec_config = RecommendConfig.from_dict(config['recommend'])
    if args.steps is not None:
        rec_config.max_steps = args.steps
    if args.walks is not None:
        rec_config.walks_per_query = args.walks
    if args.workers is not None:
        rec_config.num_workers = args.workers
    if args.seed is not None:
        rec_config.seed = args.seed
    if args.boost:
        rec_config.boost = True

    if args.graph:
        graph = GraphLoader.from_file(args.graph)
    else:
        graph = GraphLoader.from_edge_list(args.edge_list)

    query_class = NodeClass(args.query_class)
    try:
        query = [parse_query(q, query_class) for q in args.query]
    except argparse.ArgumentTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    weight_fn = EdgeAttributeWeight('count') if args.weighted else uniform_weight

    recommender = PixieRecommender(graph, weight_fn=weight_fn, config=rec_config)

    start = time.perf_counter()
    try:
        if args.budget is not None:
            results = recommender.recommend_with_budget(query, top_k=args.top_k, total_walks=args.budget)
        else:
            results = recommender.recommend(query, top_k=args.top_k)
    except InvalidInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    elapsed_ms = (time.perf_counter() - start) * 1000

    print(f"Recommendations for {', '.join(f'{q.node} ({q.weight:g})' for q in query)}:")
    if not results:
        print("  (none)")
    for rank, (node, score) in enumerate(results, start=1):
        print(f"  {rank:3d}. {node}  {score:.2f}")
    print(f"\n{len(results)} results in {elapsed_ms:.1f} ms")
    return 0


if __name__ == '__main__':
    sys.exit(main())
