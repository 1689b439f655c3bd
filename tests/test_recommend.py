"""
Tests for Recommend Module.

Tests query validation, weighted aggregation, ranking and the object/tag
recommender.
"""

import os
import subprocess

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pixie.graph import BipartiteGraph, Node, NodeClass
from pixie.recommend import (
    InvalidInputError,
    PixieRecommender,
    Query,
    RecommendConfig,
    Recommender,
    VisitTally,
    allocate_walks,
    normalize_query,
    recommend,
    recommend_with_budget,
)


@pytest.fixture
def graph():
    """Left {A, B}, right {X, Y, Z}; A-X, A-Y, B-Y, B-Z."""
    return BipartiteGraph.from_edges([("A", "X"), ("A", "Y"), ("B", "Y"), ("B", "Z")])


@pytest.fixture
def mock_graph():
    """A larger random graph for property checks."""
    edges = []
    for u in range(30):
        for i in range(20):
            if (u * 7 + i * 3) % 5 == 0:
                edges.append((f"u{u}", f"i{i}"))
    return BipartiteGraph.from_edges(edges)


class TestVisitTally:
    """Tests for VisitTally."""

    def test_update_with_scale(self):
        tally = VisitTally()
        tally.update({"X": 3, "Y": 1}, scale=2.0)
        tally.add("Y", 1.0)

        assert tally["X"] == 6.0
        assert tally["Y"] == 3.0
        assert tally["missing"] == 0.0
        assert tally.total() == 9.0

    def test_ranked_tie_break_by_id(self):
        tally = VisitTally({"b": 2.0, "c": 5.0, "a": 2.0})
        assert tally.ranked() == [("c", 5.0), ("a", 2.0), ("b", 2.0)]
        assert tally.ranked(top_k=2) == [("c", 5.0), ("a", 2.0)]

    def test_ranked_mixed_identifier_types(self):
        """Unorderable ids fall back to repr ordering."""
        tally = VisitTally({1: 1.0, "1": 1.0, 2: 3.0})
        ranked = tally.ranked()

        # repr("1") == "'1'" sorts before repr(1) == "1"
        assert ranked == [(2, 3.0), ("1", 1.0), (1, 1.0)]

    def test_scaled_and_discard(self):
        tally = VisitTally({"X": 2.0, "Y": 1.0})
        scaled = tally.scaled(1.5)
        scaled.discard(["Y", "missing"])

        assert scaled.as_dict() == {"X": 3.0}
        assert tally.as_dict() == {"X": 2.0, "Y": 1.0}

    def test_merge(self):
        tally = VisitTally({"X": 1.0})
        tally.merge(VisitTally({"X": 1.0, "Y": 2.0}))
        assert tally.as_dict() == {"X": 2.0, "Y": 2.0}
        assert len(tally) == 2
        assert "Y" in tally


class TestNormalizeQuery:
    """Tests for query validation."""

    def test_pairs_default_to_left(self):
        assert normalize_query([("A", 2.0)]) == [Query("A", 2.0, NodeClass.LEFT)]

    def test_mapping_and_triples(self):
        assert normalize_query({"A": 1.0}) == [Query("A", 1.0)]
        assert normalize_query([("X", 1.5, NodeClass.RIGHT)]) == [Query("X", 1.5, NodeClass.RIGHT)]

    def test_duplicates_are_additive(self):
        queries = normalize_query([("A", 1.0), ("B", 1.0), Query("A", 2.0)])
        assert queries == [Query("A", 3.0), Query("B", 1.0)]

    def test_sorted_by_class_then_node(self):
        queries = normalize_query([("B", 1.0), ("X", 1.0, NodeClass.RIGHT), ("A", 2.0)])
        assert queries == [Query("A", 2.0), Query("B", 1.0), Query("X", 1.0, NodeClass.RIGHT)]

    def test_sorted_with_incomparable_ids(self):
        queries = normalize_query([("1", 1.0), (2, 1.0), (1, 1.0)])
        # repr order: "'1'" < "1" < "2"
        assert [q.node for q in queries] == ["1", 1, 2]

    def test_same_id_different_class_kept_apart(self):
        queries = normalize_query([("A", 1.0), ("A", 1.0, NodeClass.RIGHT)])
        assert len(queries) == 2

    def test_empty(self):
        assert normalize_query([]) == []

    @pytest.mark.parametrize("weight", [0, 0.0, -1.0, float('nan'), float('inf'), "1.0", None, True])
    def test_invalid_weights(self, weight):
        with pytest.raises(InvalidInputError):
            normalize_query([("A", weight)])

    def test_malformed_entry(self):
        with pytest.raises(InvalidInputError):
            normalize_query(["A"])
        with pytest.raises(InvalidInputError):
            normalize_query([("A", 1.0, "left")])


class TestRecommend:
    """Tests for the recommend operation."""

    def test_two_step_scenario(self, graph):
        """X and Y share A's visits; Z is unreachable in two steps."""
        results = recommend(graph, [("A", 1.0)], walks_per_query=1000, max_steps=2, top_k=2, seed=42)
        scores = dict(results)

        assert set(scores) == {"X", "Y"}
        assert scores["X"] + scores["Y"] == 1000
        assert 400 <= scores["X"] <= 600
        assert 400 <= scores["Y"] <= 600

    def test_unreachable_node_not_listed(self, graph):
        results = recommend(graph, [("A", 1.0)], walks_per_query=1000, max_steps=2, top_k=10, seed=42)
        assert "Z" not in dict(results)

    def test_deterministic_under_fixed_seed(self, mock_graph):
        first = recommend(mock_graph, [("u1", 1.0)], 200, 6, 10, seed=7)
        second = recommend(mock_graph, [("u1", 1.0)], 200, 6, 10, seed=7)
        assert first == second

    def test_results_sorted_descending(self, mock_graph):
        results = recommend(mock_graph, {"u1": 1.0, "u2": 2.0}, 100, 6, 20, seed=1)
        scores = [score for _, score in results]
        assert scores == sorted(scores, reverse=True)

    def test_visit_total_bounded_by_walks(self, mock_graph):
        """Each walk contributes at most max_steps visits."""
        results = recommend(mock_graph, [("u3", 1.0)], 50, 7, 1000, seed=3)
        assert sum(score for _, score in results) <= 50 * 7

    def test_weight_linearity(self, mock_graph):
        """Scaling a query weight by c scales its scores by exactly c."""
        base = recommend(mock_graph, [("u4", 1.0)], 100, 6, 1000, seed=9)
        tripled = recommend(mock_graph, [("u4", 3.0)], 100, 6, 1000, seed=9)

        assert [node for node, _ in tripled] == [node for node, _ in base]
        for (_, s1), (_, s3) in zip(base, tripled):
            assert s3 == pytest.approx(3.0 * s1)

    def test_top_k_is_prefix_of_full_ranking(self, mock_graph):
        query = {"u1": 1.0, "u5": 0.5}
        full = recommend(mock_graph, query, 100, 6, 1000, seed=2)
        top = recommend(mock_graph, query, 100, 6, 3, seed=2)

        assert len(top) <= 3
        assert top == full[:3]

    def test_dead_end_query_contributes_nothing(self, graph):
        graph.add_node("lonely", NodeClass.LEFT)

        alone = recommend(graph, [("A", 1.0)], 100, 4, 10, seed=5)
        with_dead_end = recommend(graph, [("A", 1.0), ("lonely", 5.0)], 100, 4, 10, seed=5)

        assert with_dead_end == alone

    def test_unknown_query_node(self, graph):
        assert recommend(graph, [("missing", 1.0)], 100, 4, 10, seed=5) == []

    def test_empty_query(self, graph):
        assert recommend(graph, [], 100, 4, 10) == []
        assert recommend(graph, {}, 100, 4, 10) == []

    def test_zero_weight_rejected_before_walking(self, graph):
        calls = []

        def recording(current, edge):
            calls.append(edge)
            return 1.0

        with pytest.raises(InvalidInputError):
            recommend(graph, [("A", 1.0), ("B", 0.0)], 100, 4, 10, weight_fn=recording)
        assert calls == []

    @pytest.mark.parametrize("kwargs", [
        {'walks_per_query': 0},
        {'max_steps': -1},
        {'top_k': 0},
        {'top_k': 2.5},
        {'walks_per_query': True},
        {'num_workers': 0},
    ])
    def test_invalid_parameters(self, graph, kwargs):
        params = {'walks_per_query': 10, 'max_steps': 4, 'top_k': 5}
        params.update(kwargs)
        with pytest.raises(InvalidInputError):
            recommend(graph, [("A", 1.0)], **params)

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)

    def test_duplicate_queries_are_additive(self, mock_graph):
        merged = recommend(mock_graph, [("u1", 1.0), ("u1", 2.0)], 100, 6, 50, seed=4)
        single = recommend(mock_graph, [("u1", 3.0)], 100, 6, 50, seed=4)
        assert merged == single

    def test_input_order_does_not_change_results(self, mock_graph):
        query = [(f"u{i}", 1.0) for i in range(6)]
        forward = recommend(mock_graph, query, 50, 6, 5, seed=42)
        backward = recommend(mock_graph, list(reversed(query)), 50, 6, 5, seed=42)
        assert forward == backward

    def test_set_query_reproducible_across_hash_seeds(self):
        """A set of pairs iterates in hash order; results must not follow it."""
        code = (
            "from pixie.graph import BipartiteGraph\n"
            "from pixie.recommend import recommend\n"
            "edges = [(f'u{u}', f'i{i}') for u in range(30) for i in range(20)"
            " if (u * 7 + i * 3) % 5 == 0]\n"
            "graph = BipartiteGraph.from_edges(edges)\n"
            "query = {(f'u{i}', 1.0) for i in range(6)}\n"
            "print(recommend(graph, query, 50, 6, 5, seed=42))\n"
        )
        outputs = set()
        for hash_seed in ("1", "2", "3"):
            env = dict(os.environ, PYTHONHASHSEED=hash_seed)
            result = subprocess.run(
                [sys.executable, "-c", code],
                cwd=str(project_root), env=env,
                capture_output=True, text=True, check=True
            )
            outputs.add(result.stdout)

        assert len(outputs) == 1

    @pytest.mark.parametrize("target_class", ["right", "left", 1])
    def test_invalid_target_class(self, graph, target_class):
        with pytest.raises(InvalidInputError):
            recommend(graph, [("A", 1.0)], 10, 2, 5, target_class=target_class)
        with pytest.raises(InvalidInputError):
            recommend_with_budget(graph, [("A", 1.0)], 10, 2, 5, target_class=target_class)

    def test_worker_count_does_not_change_results(self, mock_graph):
        query = [(f"u{i}", 1.0 + i) for i in range(6)]
        serial = recommend(mock_graph, query, 50, 6, 20, seed=8, num_workers=1)
        parallel = recommend(mock_graph, query, 50, 6, 20, seed=8, num_workers=4)
        assert serial == parallel

    def test_injected_rng(self, mock_graph):
        first = recommend(mock_graph, [("u1", 1.0)], 50, 6, 10, rng=np.random.default_rng(0))
        second = recommend(mock_graph, [("u1", 1.0)], 50, 6, 10, rng=np.random.default_rng(0))
        assert first == second

    def test_exclude_queries_same_class_target(self, graph):
        """Walks targeting LEFT nodes return to the query node itself."""
        excluded = recommend(graph, [("A", 1.0)], 200, 4, 10, target_class=NodeClass.LEFT, seed=1)
        included = recommend(
            graph, [("A", 1.0)], 200, 4, 10,
            target_class=NodeClass.LEFT, seed=1, exclude_queries=False
        )

        assert "A" not in dict(excluded)
        assert "A" in dict(included)
        assert "B" in dict(excluded)

    def test_right_class_query(self, graph):
        results = recommend(
            graph, [("Y", 1.0, NodeClass.RIGHT)], 200, 2, 10,
            target_class=NodeClass.LEFT, seed=1
        )
        assert set(dict(results)) == {"A", "B"}

    def test_both_classes_as_nodes(self, graph):
        results = recommend(graph, [("A", 1.0)], 100, 3, 10, target_class=None, seed=1)
        nodes = [node for node, _ in results]

        assert all(isinstance(node, Node) for node in nodes)
        assert Node("A", NodeClass.LEFT) not in nodes
        assert Node("X", NodeClass.RIGHT) in nodes

    def test_boost_rewards_shared_neighbors(self):
        """Boosted score is (sum of square roots) squared."""
        graph = BipartiteGraph.from_edges([("A", "X"), ("B", "X")])
        query = [("A", 1.0), ("B", 1.0)]

        linear = recommend(graph, query, 10, 1, 5, seed=0)
        boosted = recommend(graph, query, 10, 1, 5, seed=0, boost=True)

        assert linear == [("X", 20.0)]
        assert boosted[0][0] == "X"
        assert boosted[0][1] == pytest.approx(40.0)


class TestWalkBudget:
    """Tests for Pixie walk allocation."""

    def test_allocate_walks(self):
        # Degrees: A=1, B=2, max=2 -> s_A = 1 * (2 - 0), s_B = 2 * (2 - 1)
        graph = BipartiteGraph.from_edges([("A", "X"), ("B", "X"), ("B", "Y")])
        queries = normalize_query([("A", 1.0), ("B", 1.0), ("missing", 1.0)])

        assert allocate_walks(graph, queries, 100) == [50, 50, 0]

    def test_allocate_walks_no_edges(self, graph):
        assert allocate_walks(graph, normalize_query([("missing", 1.0)]), 100) == [0]

    def test_allocate_walks_invalid_budget(self, graph):
        with pytest.raises(InvalidInputError):
            allocate_walks(graph, [], 0)

    def test_recommend_with_budget(self, mock_graph):
        results = recommend_with_budget(mock_graph, {"u1": 1.0, "u2": 1.0}, 200, 5, 1000, seed=1)

        assert results
        assert sum(score for _, score in results) <= 200 * 5

    def test_recommend_with_budget_empty(self, graph):
        assert recommend_with_budget(graph, [], 100, 4, 10) == []


class TestPixieRecommender:
    """Tests for the configured recommender."""

    def test_config_from_dict(self):
        config = RecommendConfig.from_dict({
            'walks_per_query': 20,
            'target_class': 'left',
            'unknown_key': 1,
        })
        assert config.walks_per_query == 20
        assert config.target_class is NodeClass.LEFT
        assert config.max_steps == RecommendConfig().max_steps

        assert RecommendConfig.from_dict({'target_class': None}).target_class is None

    def test_uses_config_defaults(self, mock_graph):
        config = RecommendConfig(walks_per_query=50, max_steps=4, top_k=3, seed=11)
        recommender = PixieRecommender(mock_graph, config=config)

        results = recommender.recommend({"u1": 1.0})
        expected = recommend(mock_graph, {"u1": 1.0}, 50, 4, 3, seed=11)

        assert results == expected

    def test_overrides(self, mock_graph):
        recommender = PixieRecommender(mock_graph, config=RecommendConfig(seed=1))
        results = recommender.recommend({"u1": 1.0}, top_k=2, walks_per_query=30, max_steps=2)
        assert results == recommend(mock_graph, {"u1": 1.0}, 30, 2, 2, seed=1)

    def test_budget(self, mock_graph):
        recommender = PixieRecommender(mock_graph, config=RecommendConfig(total_walks=100, seed=1))
        results = recommender.recommend_with_budget({"u1": 1.0}, top_k=5)
        assert 0 < len(results) <= 5


class TestRecommender:
    """Tests for the object/tag recommender."""

    @pytest.fixture
    def movies(self):
        recommender = Recommender()
        for movie in ["The Raid", "Rocky", "Monty Python"]:
            recommender.add_object(movie)
        for genre in ["Action", "Comedy", "Drama"]:
            recommender.add_tag(genre)

        recommender.tag_object("The Raid", "Action")
        recommender.tag_object("Rocky", "Action")
        recommender.tag_object("Rocky", "Drama")
        recommender.tag_object("Monty Python", "Comedy")
        return recommender

    def test_object_recommendations(self, movies):
        results = movies.object_recommendations(["The Raid"], max_steps=50, total_walks=50, seed=0)

        assert len(results) > 0
        assert results[0] == "Rocky"
        assert "The Raid" not in results
        assert "Monty Python" not in results

    def test_tag_query(self, movies):
        results = movies.recommendations(
            [Node("Action", NodeClass.RIGHT)], max_steps=10, total_walks=10, seed=0
        )
        objects = [n for n in results if n.node_class is NodeClass.LEFT]

        assert Node("Action", NodeClass.RIGHT) not in results
        assert objects[0] in (Node("Rocky", NodeClass.LEFT), Node("The Raid", NodeClass.LEFT))

    def test_directional_weights(self):
        """Weights of "to - from" stop every walk at object 2.0."""
        recommender = Recommender()
        recommender.tag_object("0.0", "1.0")
        recommender.tag_object("2.0", "1.0")

        results = set(recommender.recommendations(
            [Node("0.0", NodeClass.LEFT)],
            max_steps=10,
            total_walks=10,
            object_to_tag_weight=lambda obj, tag: float(tag) - float(obj),
            tag_to_object_weight=lambda tag, obj: float(obj) - float(tag),
            seed=0
        ))

        assert Node("0.0", NodeClass.LEFT) not in results
        assert Node("1.0", NodeClass.RIGHT) in results
        assert Node("2.0", NodeClass.LEFT) in results

    def test_top_k(self, movies):
        results = movies.object_recommendations(["Rocky"], max_steps=10, total_walks=50, top_k=1, seed=0)
        assert results == ["The Raid"]
