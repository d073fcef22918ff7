"""
Ballots: pick the next five options for a voter and record ranked submissions.

Next ballot: options the voter has ranked fewer than TARGET_TIMES_RANKED
times come first (shuffled), then the rest (shuffled).
Submission: exactly five rankings, ranks unique 1..5, options unique and known.
Weight per vote comes from the option's attendee list.
"""
from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlmodel import Session, select

from madness.models.option import Option
from madness.models.tenant import Tenant
from madness.models.vote import Vote
from madness.services.score_aggregator import MAX_RANK, MIN_RANK
from madness.settings import BALLOT_SIZE, TARGET_TIMES_RANKED
from madness.utils.attendees import vote_weight

logger = logging.getLogger(__name__)


class BallotError(ValueError):
    """Submitted ballot failed validation."""


@dataclass
class Ranking:
    option_id: int
    rank: int


@dataclass
class Progress:
    done: bool
    total_options: int
    remaining: int


def times_ranked(session: Session, tenant_id: int) -> Dict[int, int]:
    """option id -> number of votes this tenant cast for it (0 included)."""
    counts: Dict[int, int] = {o_id: 0 for o_id in session.exec(select(Option.id)).all()}
    rows = session.exec(
        select(Vote.option_id, func.count(Vote.id))
        .where(Vote.tenant_id == tenant_id)
        .group_by(Vote.option_id)
    ).all()
    for option_id, count in rows:
        counts[option_id] = int(count)
    return counts


def tenant_progress(session: Session, tenant_id: int) -> Progress:
    counts = times_ranked(session, tenant_id)
    remaining = sum(1 for c in counts.values() if c < TARGET_TIMES_RANKED)
    return Progress(done=remaining == 0, total_options=len(counts), remaining=remaining)


def new_round_id() -> str:
    return uuid.uuid4().hex[:10]


def next_ballot(
    session: Session,
    tenant_id: int,
    rng: Optional[random.Random] = None,
) -> Tuple[List[Option], Dict[int, int]]:
    """Return up to BALLOT_SIZE options for the tenant plus their times-ranked counts."""
    rng = rng or random.Random()
    counts = times_ranked(session, tenant_id)
    options = session.exec(select(Option).order_by(Option.id)).all()

    need = [o for o in options if counts.get(o.id, 0) < TARGET_TIMES_RANKED]
    rest = [o for o in options if counts.get(o.id, 0) >= TARGET_TIMES_RANKED]
    rng.shuffle(need)
    rng.shuffle(rest)

    return (need + rest)[:BALLOT_SIZE], counts


def validate_rankings(rankings: Sequence[Ranking]) -> None:
    if len(rankings) != BALLOT_SIZE:
        raise BallotError(f"Expected {BALLOT_SIZE} rankings, got {len(rankings)}")

    ranks = [r.rank for r in rankings]
    valid_ranks = set(range(MIN_RANK, MAX_RANK + 1))
    if len(set(ranks)) != BALLOT_SIZE or not all(r in valid_ranks for r in ranks):
        raise BallotError(f"Ranks must be unique {MIN_RANK}-{MAX_RANK}")

    option_ids = [r.option_id for r in rankings]
    if len(set(option_ids)) != BALLOT_SIZE:
        raise BallotError("Duplicate options")


def submit_ballot(
    session: Session,
    tenant: Tenant,
    round_id: str,
    rankings: Sequence[Ranking],
) -> List[Vote]:
    """Validate and store one ballot. All five votes commit together or not at all."""
    if not round_id:
        raise BallotError("round_id required")
    validate_rankings(rankings)

    option_ids = [r.option_id for r in rankings]
    options = {
        o.id: o for o in session.exec(select(Option).where(Option.id.in_(option_ids))).all()
    }
    if len(options) != BALLOT_SIZE:
        raise BallotError("Unknown option_id")

    votes: List[Vote] = []
    for r in rankings:
        votes.append(Vote(
            tenant_id=tenant.id,
            round_id=round_id,
            option_id=r.option_id,
            rank=r.rank,
            weight=vote_weight(options[r.option_id].attendees, tenant.name),
        ))

    for vote in votes:
        session.add(vote)
    session.commit()
    for vote in votes:
        session.refresh(vote)

    logger.info("Recorded ballot %s for tenant %s", round_id, tenant.id)
    return votes
