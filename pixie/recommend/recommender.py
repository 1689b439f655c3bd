"""
Object/Tag Recommender Module.

A convenience layer for the common case of objects (products, movies, pins)
tagged with categories. Objects are LEFT nodes and tags are RIGHT nodes.
Walks record every node they visit, so recommendations may contain both
objects and tags; ``object_recommendations`` keeps only objects.
"""

from typing import Callable, Hashable, Iterable, List, Optional

from ..graph import BipartiteGraph, Node, NodeClass
from ..walks import DirectionalWeight
from .aggregator import Query, recommend_with_budget


class Recommender:
    """
    Holds objects, tags and their relationship, and returns recommendations.

    Example:
        >>> recommender = Recommender()
        >>> for movie, genre in [("The Raid", "Action"), ("Rocky", "Action"),
        ...                      ("Rocky", "Drama"), ("Monty Python", "Comedy")]:
        ...     recommender.tag_object(movie, genre)
        >>> recommender.object_recommendations(["The Raid"], max_steps=10, total_walks=50)
        ['Rocky']
    """

    def __init__(self, graph: Optional[BipartiteGraph] = None):
        self.graph = graph if graph is not None else BipartiteGraph()

    def add_object(self, obj: Hashable) -> None:
        self.graph.add_node(obj, NodeClass.LEFT)

    def add_tag(self, tag: Hashable) -> None:
        self.graph.add_node(tag, NodeClass.RIGHT)

    def tag_object(self, obj: Hashable, tag: Hashable, **attributes) -> None:
        """Assign a tag to an object. Both are created if needed."""
        self.graph.add_edge(obj, tag, **attributes)

    def recommendations(
        self,
        queries: Iterable[Node],
        max_steps: int = 10,
        total_walks: int = 100,
        object_to_tag_weight: Optional[Callable[[Hashable, Hashable], float]] = None,
        tag_to_object_weight: Optional[Callable[[Hashable, Hashable], float]] = None,
        top_k: Optional[int] = None,
        seed: Optional[int] = None,
        boost: bool = True
    ) -> List[Node]:
        """
        Recommend objects and tags for a set of query objects/tags.

        The walk budget is split over the queries by degree and per-query
        visits are combined with Pixie boosting. Query nodes never appear in
        the result.

        Args:
            queries: Query nodes, e.g. ``Node("Action", NodeClass.RIGHT)``
            max_steps: Maximum steps per walk
            total_walks: Walk budget shared by all queries
            object_to_tag_weight: ``(object, tag) -> float`` for object->tag steps
            tag_to_object_weight: ``(tag, object) -> float`` for tag->object steps
            top_k: Maximum number of results (all visited nodes if None)
            seed: Random seed
            boost: Combine queries with Pixie boosting

        Returns:
            Recommended nodes, best first
        """
        query = [Query(node.id, 1.0, node.node_class) for node in queries]
        weight_fn = DirectionalWeight(object_to_tag_weight, tag_to_object_weight)
        if top_k is None:
            top_k = max(1, self.graph.num_nodes)

        ranked = recommend_with_budget(
            self.graph,
            query,
            total_walks=total_walks,
            max_steps=max_steps,
            top_k=top_k,
            weight_fn=weight_fn,
            target_class=None,
            seed=seed,
            boost=boost,
            exclude_queries=True
        )
        return [node for node, _ in ranked]

    def object_recommendations(self, objects: Iterable[Hashable], **kwargs) -> List[Hashable]:
        """
        Recommend objects similar to the given objects.

        Accepts the same keyword arguments as ``recommendations``; ``top_k``
        is applied to the object list.
        """
        top_k = kwargs.pop('top_k', None)
        nodes = self.recommendations([Node(obj, NodeClass.LEFT) for obj in objects], **kwargs)
        result = [node.id for node in nodes if node.node_class is NodeClass.LEFT]
        return result[:top_k] if top_k is not None else result

    def __repr__(self) -> str:
        return f"Recommender({self.graph!r})"
