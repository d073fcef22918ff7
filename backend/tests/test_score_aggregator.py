"""
Tests for score aggregation: weighted averages, ordering, and tie-breaks.
"""
import random

import pytest

from madness.services.score_aggregator import (
    Candidate,
    VoteRecord,
    aggregate_scores,
    unweighted,
)


def _candidates(*titles: str) -> list[Candidate]:
    return [Candidate(option_id=i + 1, title=t) for i, t in enumerate(titles)]


class TestAverages:
    def test_weighted_points_and_rank(self):
        candidates = _candidates("Alpha")
        votes = [
            VoteRecord(option_id=1, rank=1, weight=1.0),  # 5 points
            VoteRecord(option_id=1, rank=5, weight=0.5),  # 1 point, half weight
        ]
        [entry] = aggregate_scores(candidates, votes)

        assert entry.votes == pytest.approx(1.5)
        assert entry.avg_points == pytest.approx((5 * 1.0 + 1 * 0.5) / 1.5)
        assert entry.avg_rank == pytest.approx((1 * 1.0 + 5 * 0.5) / 1.5)
        assert entry.overall_rank == 1

    def test_zero_vote_option_has_null_averages(self):
        candidates = _candidates("Alpha", "Bravo")
        votes = [VoteRecord(option_id=1, rank=3)]
        entries = aggregate_scores(candidates, votes)

        bravo = next(e for e in entries if e.title == "Bravo")
        assert bravo.votes == 0
        assert bravo.avg_points is None
        assert bravo.avg_rank is None

    def test_votes_for_unknown_options_are_ignored(self):
        candidates = _candidates("Alpha")
        votes = [VoteRecord(option_id=99, rank=1), VoteRecord(option_id=1, rank=2)]
        [entry] = aggregate_scores(candidates, votes)
        assert entry.votes == 1.0
        assert entry.avg_points == 4.0

    def test_unweighted_forces_full_weight(self):
        votes = unweighted([VoteRecord(option_id=1, rank=2, weight=0.5)])
        assert votes[0].weight == 1.0
        assert votes[0].rank == 2


class TestOrdering:
    def test_overall_rank_is_a_permutation(self):
        rng = random.Random(7)
        candidates = _candidates(*[f"Option {i:02d}" for i in range(40)])
        votes = [
            VoteRecord(
                option_id=rng.randint(1, 40),
                rank=rng.randint(1, 5),
                weight=rng.choice([0.5, 1.0]),
            )
            for _ in range(300)
        ]
        entries = aggregate_scores(candidates, votes)
        assert [e.overall_rank for e in entries] == list(range(1, 41))
        assert sorted(e.option_id for e in entries) == list(range(1, 41))

    def test_higher_points_first_and_null_points_last(self):
        candidates = _candidates("Low", "High", "Unvoted")
        votes = [
            VoteRecord(option_id=1, rank=4),
            VoteRecord(option_id=2, rank=1),
        ]
        entries = aggregate_scores(candidates, votes)
        assert [e.title for e in entries] == ["High", "Low", "Unvoted"]

    def test_equal_points_more_votes_first(self):
        candidates = _candidates("Few", "Many")
        votes = [
            VoteRecord(option_id=1, rank=2),
            VoteRecord(option_id=2, rank=2),
            VoteRecord(option_id=2, rank=2),
        ]
        entries = aggregate_scores(candidates, votes)
        assert [e.title for e in entries] == ["Many", "Few"]

    def test_equal_points_and_votes_title_ascending(self):
        candidates = _candidates("Zulu", "Alpha", "Mike")
        votes = [VoteRecord(option_id=i, rank=3) for i in (1, 2, 3)]
        entries = aggregate_scores(candidates, votes)
        assert [e.title for e in entries] == ["Alpha", "Mike", "Zulu"]

    def test_title_tie_break_ignores_case(self):
        entries = aggregate_scores(_candidates("Banana", "apple", "Cherry"), [])
        assert [e.title for e in entries] == ["apple", "Banana", "Cherry"]
        assert [e.overall_rank for e in entries] == [1, 2, 3]

    def test_identical_titles_keep_input_order(self):
        candidates = [Candidate(option_id=10, title="Same"), Candidate(option_id=3, title="Same")]
        entries = aggregate_scores(candidates, [])
        assert [e.option_id for e in entries] == [10, 3]

    def test_deterministic_across_vote_order(self):
        candidates = _candidates("A", "B", "C", "D")
        votes = [VoteRecord(option_id=(i % 4) + 1, rank=(i % 5) + 1) for i in range(20)]
        shuffled = list(votes)
        random.Random(1).shuffle(shuffled)
        first = [(e.option_id, e.overall_rank) for e in aggregate_scores(candidates, votes)]
        second = [(e.option_id, e.overall_rank) for e in aggregate_scores(candidates, shuffled)]
        assert first == second
