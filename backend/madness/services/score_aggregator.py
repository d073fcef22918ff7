"""
Score aggregation: vote records -> ranked, tie-broken scored entries.

Points scale: rank 1 = 5 points ... rank 5 = 1 point.
Order: avg_points desc (None as 0), votes desc, title asc.
Recomputed from the full vote set on every call; nothing is cached.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

MIN_RANK = 1
MAX_RANK = 5
ATTENDED_WEIGHT = 1.0
ABSENT_WEIGHT = 0.5


@dataclass(frozen=True)
class VoteRecord:
    option_id: int
    rank: int  # 1..5
    weight: float = ATTENDED_WEIGHT


@dataclass(frozen=True)
class Candidate:
    """One option in the universe being ranked."""
    option_id: int
    title: str


@dataclass(frozen=True)
class ScoredEntry:
    option_id: int
    title: str
    votes: float
    avg_points: Optional[float]
    avg_rank: Optional[float]
    overall_rank: int


def rank_points(rank: int) -> int:
    return (MAX_RANK + 1) - rank


def score_sort_key(entry: ScoredEntry) -> tuple:
    """Sort key for ranking. Lower = better.

    Titles compare case-insensitively first, so "apple" sorts before "Banana".
    """
    return (-(entry.avg_points or 0.0), -entry.votes, entry.title.casefold(), entry.title)


def aggregate_scores(
    candidates: Sequence[Candidate],
    votes: Iterable[VoteRecord],
) -> List[ScoredEntry]:
    """Return one ScoredEntry per candidate, ordered and ranked 1..N.

    Candidates with no votes are included with votes=0 and null averages.
    Votes for option ids outside the candidate list are ignored.
    Candidates sharing a title keep their input order (stable sort).
    """
    weight_sum: Dict[int, float] = {c.option_id: 0.0 for c in candidates}
    points_sum: Dict[int, float] = {c.option_id: 0.0 for c in candidates}
    rank_sum: Dict[int, float] = {c.option_id: 0.0 for c in candidates}

    for vote in votes:
        if vote.option_id not in weight_sum:
            continue
        weight_sum[vote.option_id] += vote.weight
        points_sum[vote.option_id] += rank_points(vote.rank) * vote.weight
        rank_sum[vote.option_id] += vote.rank * vote.weight

    unranked: List[ScoredEntry] = []
    for c in candidates:
        total = weight_sum[c.option_id]
        unranked.append(ScoredEntry(
            option_id=c.option_id,
            title=c.title,
            votes=total,
            avg_points=points_sum[c.option_id] / total if total > 0 else None,
            avg_rank=rank_sum[c.option_id] / total if total > 0 else None,
            overall_rank=0,
        ))

    unranked.sort(key=score_sort_key)

    return [
        ScoredEntry(
            option_id=e.option_id,
            title=e.title,
            votes=e.votes,
            avg_points=e.avg_points,
            avg_rank=e.avg_rank,
            overall_rank=idx + 1,
        )
        for idx, e in enumerate(unranked)
    ]


def unweighted(votes: Iterable[VoteRecord]) -> List[VoteRecord]:
    """Same votes with every weight forced to 1.0 (per-voter comparison ranks)."""
    return [VoteRecord(option_id=v.option_id, rank=v.rank, weight=1.0) for v in votes]
