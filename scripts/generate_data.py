#!/usr/bin/env python3
"""
Data Generation Script.

This script creates a synthetic user/item interaction graph and saves it:
1. Creates the graph (or converts an edge list)
2. Prints graph statistics
3. Saves the graph as JSON

Usage:
    python scripts/generate_data.py --config config/default.yaml
    python scripts/generate_data.py --num-left 1000 --num-right 300
    python scripts/generate_data.py --edge-list data/raw/interactions.tsv
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
from pixie.utils import compute_graph_statistics


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Generate a Pixie interaction graph')

    parser.add_argument(
        '--config', type=str, default=None,
        help='Path to configuration file (default: config/default.yaml)'
    )
    parser.add_argument(
        '--edge-list', type=str, default=None,
        help='Convert this edge list instead of generating a graph'
    )
    parser.add_argument(
        '--num-left', type=int, default=None,
        help='Number of user nodes (overrides config)'
    )
    parser.add_argument(
        '--num-right', type=int, default=None,
        help='Number of item nodes (overrides config)'
    )
    parser.add_argument(
        '--output', type=str, default='data/processed/graph.json',
        help='Output JSON file'
    )
    parser.add_argument(
        '--seed', type=int, default=42,
        help='Random seed'
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Print detailed progress'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main data generation function."""
    args = parse_args(argv)
    config = load_config(args.config)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config['logging'].get('level', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    print("=" * 60)
    print("Pixie Data Generation")
    print("=" * 60)

    data_config = config['data']

    # Step 1: Load or create graph
    print("\n[1/2] Loading/creating graph...")
    start_time = time.time()

    if args.edge_list:
        print(f"  Loading from: {args.edge_list}")
        graph = GraphLoader.from_edge_list(args.edge_list)
    else:
        num_left = args.num_left or data_config.get('num_left', 500)
        num_right = args.num_right or data_config.get('num_right', 200)
        print(f"  Creating synthetic graph: {num_left} users, {num_right} items")
        graph = GraphLoader.create_mock(
            num_left=num_left,
            num_right=num_right,
            edge_prob=data_config.get('edge_prob', 0.02),
            max_count=data_config.get('max_count', 5),
            seed=args.seed
        )

    print(f"  Done in {time.time() - start_time:.2f}s")

    stats = compute_graph_statistics(graph)
    for key, value in stats.items():
        if isinstance(value, float):
            print(f"  {key}: {value:.4f}")
        else:
            print(f"  {key}: {value}")

    # Step 2: Save
    print("\n[2/2] Saving graph...")
    output = Path(args.output)
    GraphLoader.save(graph, output)
    print(f"  Saved to: {output} ({output.stat().st_size / 1024:.1f} KB)")

    print("\n" + "=" * 60)
    print("Data generation complete!")
    print("=" * 60)


if __name__ == '__main__':
    main()
