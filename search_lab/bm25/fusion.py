"""
RRF (Reciprocal Rank Fusion) for combining multiple rankings.

RRF is a simple and effective method for combining results from multiple ranking systems.
It doesn't require normalization of scores and is robust to outliers: only ranks are used,
so a BM25 score and a cosine distance can be fused without calibrating one against the other.

Formula (weighted):
    RRF(item, k=60) = Σ weight_i / (k + rank_i(item))

Where:
    k = constant (default: 60, from literature)
    rank_i = rank of item in i-th ranking (1-based)
    weight_i = caller-supplied weight of the i-th ranking (not clamped)

An item missing from a ranking gets nothing from it; it is not given a
"worst rank". The output is the union of all rankings.

Reference: https://plg.uwaterloo.ca/~gvcormac/cormacksigir09-rrf.pdf
"""

import logging
from typing import Dict, List, NamedTuple, Sequence, Tuple, Union

from ..errors import InvalidArgumentError
from ..models import DocId, FusedResult, doc_id_sort_key

logger = logging.getLogger(__name__)

DEFAULT_RRF_K = 60.0


class WeightedRanking(NamedTuple):
    """A ranked list of doc ids (best first) with its fusion weight."""
    weight: float
    doc_ids: Sequence[DocId]
    name: str = ""


RankingInput = Union[WeightedRanking, Tuple[float, Sequence[DocId]]]


def _normalize(rankings: Sequence[RankingInput]) -> List[WeightedRanking]:
    normalized = []
    for position, ranking in enumerate(rankings):
        if not isinstance(ranking, WeightedRanking):
            ranking = WeightedRanking(*ranking)
        if not ranking.name:
            ranking = ranking._replace(name=f"list_{position}")
        normalized.append(ranking)

    names = [ranking.name for ranking in normalized]
    if len(set(names)) != len(names):
        raise InvalidArgumentError(f"Ranking names must be unique, got {names}")
    return normalized


def reciprocal_rank_fusion(
    rankings: Sequence[RankingInput],
    k: float = DEFAULT_RRF_K,
) -> List[FusedResult]:
    """
    Combine multiple rankings using weighted Reciprocal Rank Fusion.

    Args:
        rankings: Ranked lists to fuse
            Each entry is a ``WeightedRanking`` or a ``(weight, doc_ids)`` tuple
            doc_ids are ordered best first; a repeated id keeps its first rank

        k: RRF constant (default: 60)
            Standard value from literature
            Prevents divide-by-zero and controls fusion behavior

    Returns:
        Fused ranking sorted by RRF score (descending, ties by ascending doc id)
        Each result records the rank it had in every list it appeared in

    Raises:
        InvalidArgumentError: if k <= 0

    Example:
        >>> keyword = WeightedRanking(0.5, [3, 1, 5], "keyword")
        >>> vector = WeightedRanking(0.5, [1, 2, 3], "vector")
        >>> fused = reciprocal_rank_fusion([vector, keyword])
        >>> [r.doc_id for r in fused]
        [1, 3, 2, 5]
        >>> fused[0].ranks
        {'vector': 1, 'keyword': 2}
    """
    if k <= 0:
        raise InvalidArgumentError(f"RRF k must be > 0, got {k}")

    if not rankings:
        return []

    normalized = _normalize(rankings)

    # Compute RRF scores
    rrf_scores: Dict[DocId, float] = {}
    ranks: Dict[DocId, Dict[str, int]] = {}

    for ranking in normalized:
        seen = set()
        for rank, doc_id in enumerate(ranking.doc_ids, start=1):
            if doc_id in seen:
                continue
            seen.add(doc_id)
            rrf_scores[doc_id] = rrf_scores.get(doc_id, 0.0) + ranking.weight / (k + rank)
            ranks.setdefault(doc_id, {})[ranking.name] = rank

    # Sort by RRF score
    ordered = sorted(rrf_scores, key=lambda doc_id: (-rrf_scores[doc_id], doc_id_sort_key(doc_id)))

    fused = [
        FusedResult(doc_id=doc_id, score=rrf_scores[doc_id], rank=position, ranks=ranks[doc_id])
        for position, doc_id in enumerate(ordered, start=1)
    ]

    logger.debug(
        f"RRF fused {len(normalized)} rankings "
        f"({', '.join(f'{r.name}={len(r.doc_ids)}' for r in normalized)}) into {len(fused)} results"
    )

    return fused
