#!/usr/bin/env python3
"""
Latency Benchmarking Script.

This script benchmarks recommendation latency on a synthetic graph:
- Single query latency
- Multi-query latency with 1 and N worker threads

Usage:
    python scripts/benchmark_latency.py
    python scripts/benchmark_latency.py --num-left 5000 --num-right 2000 --workers 4
"""

import argparse
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np

from pixie.data import GraphLoader
from pixie.graph import NodeClass
from pixie.recommend import recommend


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Benchmark Pixie recommendation latency')

    parser.add_argument(
        '--num-left', type=int, default=2000,
        help='Number of user nodes for synthetic graph'
    )
    parser.add_argument(
        '--num-right', type=int, default=500,
        help='Number of item nodes for synthetic graph'
    )
    parser.add_argument(
        '--num-queries', type=int, default=8,
        help='Query nodes in the multi-query benchmark'
    )
    parser.add_argument(
        '--walks', type=int, default=100,
        help='Walks per query node'
    )
    parser.add_argument(
        '--steps', type=int, default=10,
        help='Maximum steps per walk'
    )
    parser.add_argument(
        '--workers', type=int, default=4,
        help='Worker threads for the parallel run'
    )
    parser.add_argument(
        '--num-iterations', type=int, default=20,
        help='Number of benchmark iterations'
    )
    parser.add_argument(
        '--warmup', type=int, default=2,
        help='Number of warmup iterations'
    )

    return parser.parse_args(argv)


def benchmark(label, fn, num_iterations, warmup):
    """Time ``fn`` and print latency percentiles."""
    print(f"\n{label}")
    print("-" * 40)

    for _ in range(warmup):
        fn()

    times_ms = []
    for _ in range(num_iterations):
        start = time.perf_counter()
        fn()
        times_ms.append((time.perf_counter() - start) * 1000)

    print(f"  Mean: {np.mean(times_ms):.3f} ms")
    print(f"  Std:  {np.std(times_ms):.3f} ms")
    print(f"  P50:  {np.percentile(times_ms, 50):.3f} ms")
    print(f"  P95:  {np.percentile(times_ms, 95):.3f} ms")

    return {
        'mean_ms': float(np.mean(times_ms)),
        'p50_ms': float(np.percentile(times_ms, 50)),
        'p95_ms': float(np.percentile(times_ms, 95)),
    }


def main(argv=None):
    """Main benchmarking function."""
    args = parse_args(argv)

    print("=" * 60)
    print("Pixie Latency Benchmark")
    print("=" * 60)

    graph = GraphLoader.create_mock(
        num_left=args.num_left,
        num_right=args.num_right,
        edge_prob=0.01,
        seed=42
    )
    print(f"Graph: {graph!r}")

    users = [u for u in graph.nodes(NodeClass.LEFT) if graph.degree(u, NodeClass.LEFT) > 0]
    if not users:
        print("Graph has no edges, nothing to benchmark")
        return
    single = [(users[0], 1.0)]
    multi = [(u, 1.0) for u in users[:args.num_queries]]

    results = {
        'single': benchmark(
            "[1] Single query",
            lambda: recommend(graph, single, args.walks, args.steps, 10, seed=0),
            args.num_iterations, args.warmup
        ),
        'multi_serial': benchmark(
            f"[2] {len(multi)} queries, 1 worker",
            lambda: recommend(graph, multi, args.walks, args.steps, 10, seed=0),
            args.num_iterations, args.warmup
        ),
        'multi_parallel': benchmark(
            f"[3] {len(multi)} queries, {args.workers} workers",
            lambda: recommend(graph, multi, args.walks, args.steps, 10, seed=0, num_workers=args.workers),
            args.num_iterations, args.warmup
        ),
    }

    speedup = results['multi_serial']['mean_ms'] / results['multi_parallel']['mean_ms']
    print(f"\nParallel speedup: {speedup:.2f}x")

    print("\n" + "=" * 60)
    print("Benchmark complete!")
    print("=" * 60)


if __name__ == '__main__':
    main()
