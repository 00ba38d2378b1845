"""
Brute-force nearest-neighbor query over a single table.
"""

from typing import Iterable, List, Optional

from .distance import VectorLike, cosine_distance
from .types import Match, VectorRecord


def rank_matches(matches: List[Match], limit: Optional[int] = None) -> List[Match]:
    """
    Sort matches closest first and clamp to ``limit``.

    Equal scores are ordered by id so results are deterministic.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0: {limit}")

    ranked = sorted(matches, key=lambda match: (match.score, match.id))
    if limit is None:
        return ranked
    return ranked[:min(limit, len(ranked))]


def execute_query(
    records: Iterable[VectorRecord],
    query_vector: VectorLike,
    limit: Optional[int] = None,
) -> List[Match]:
    """
    Score every record that has a vector against ``query_vector``.

    Records without values are skipped. A DimensionMismatchError from any
    record aborts the whole query.
    """
    matches = []
    for record in records:
        if not record.has_vector:
            continue
        score = cosine_distance(query_vector, record.values)
        matches.append(Match(id=record.id, score=score, metadata=record.metadata))

    return rank_matches(matches, limit)
