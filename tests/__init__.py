"""
Test Suite for the Pixie Recommender.

This package contains tests for all modules:
- test_graph.py: Bipartite graph structure
- test_walks.py: Weight functions and the random walker
- test_recommend.py: Aggregation, ranking and the object/tag recommender
- test_data.py: Graph loading and statistics
- test_integration.py: Configuration and scripts end to end
"""
