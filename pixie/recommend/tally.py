"""
Visit Tally Module.

Accumulates weight-scaled visit counts per node and ranks them. A tally is
created fresh for every recommendation call and discarded afterwards.
"""

from collections import defaultdict
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Tuple


class VisitTally:
    """
    Mapping from node to accumulated real-valued score.

    Example:
        >>> tally = VisitTally()
        >>> tally.update({"X": 3, "Y": 1}, scale=2.0)
        >>> tally.ranked(top_k=1)
        [('X', 6.0)]
    """

    def __init__(self, scores: Optional[Mapping[Hashable, float]] = None):
        self._scores: Dict[Hashable, float] = defaultdict(float)
        if scores:
            self.update(scores)

    def add(self, node: Hashable, amount: float = 1.0) -> None:
        self._scores[node] += amount

    def update(self, counts: Mapping[Hashable, float], scale: float = 1.0) -> None:
        """Add every count in ``counts`` multiplied by ``scale``."""
        for node, count in counts.items():
            self._scores[node] += count * scale

    def merge(self, other: 'VisitTally') -> None:
        self.update(other._scores)

    def scaled(self, factor: float) -> 'VisitTally':
        """Return a new tally with every score multiplied by ``factor``."""
        return VisitTally({node: score * factor for node, score in self._scores.items()})

    def discard(self, nodes: Iterable[Hashable]) -> None:
        for node in nodes:
            self._scores.pop(node, None)

    def total(self) -> float:
        return sum(self._scores.values())

    def items(self):
        return self._scores.items()

    def as_dict(self) -> Dict[Hashable, float]:
        return dict(self._scores)

    def ranked(self, top_k: Optional[int] = None) -> List[Tuple[Hashable, float]]:
        """
        Sort by score descending and truncate.

        Equal scores are ordered by node identifier so that results are
        reproducible. Identifiers that cannot be compared with each other
        (e.g. mixed ``int`` and ``str``) are ordered by their ``repr``.

        Args:
            top_k: Number of entries to keep (None keeps all)

        Returns:
            List of (node, score) pairs
        """
        entries = list(self._scores.items())
        try:
            entries.sort(key=lambda kv: (-kv[1], kv[0]))
        except TypeError:
            entries.sort(key=lambda kv: (-kv[1], repr(kv[0])))

        if top_k is not None:
            entries = entries[:top_k]
        return entries

    def __getitem__(self, node: Hashable) -> float:
        return self._scores.get(node, 0.0)

    def __contains__(self, node: Hashable) -> bool:
        return node in self._scores

    def __len__(self) -> int:
        return len(self._scores)

    def __repr__(self) -> str:
        return f"VisitTally(nodes={len(self._scores)}, total={self.total():.1f})"
