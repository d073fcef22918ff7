"""
Database-backed rankings: load options and votes, aggregate, seed.

Every call reads the current vote set; nothing is cached between calls.
"""
from typing import Dict, List, Optional

from sqlmodel import Session, select

from madness.models.option import Option
from madness.models.tenant import Tenant
from madness.models.vote import Vote
from madness.services.score_aggregator import (
    Candidate,
    ScoredEntry,
    VoteRecord,
    aggregate_scores,
    unweighted,
)
from madness.services.seeder import Region, seed_regions


def load_options(session: Session) -> List[Option]:
    return list(session.exec(select(Option).order_by(Option.id)).all())


def load_vote_records(session: Session, tenant_id: Optional[int] = None) -> List[VoteRecord]:
    query = select(Vote)
    if tenant_id is not None:
        query = query.where(Vote.tenant_id == tenant_id)
    return [
        VoteRecord(option_id=v.option_id, rank=v.rank, weight=v.weight)
        for v in session.exec(query.order_by(Vote.id)).all()
    ]


def candidates_for(options: List[Option]) -> List[Candidate]:
    return [Candidate(option_id=o.id, title=o.title) for o in options]


def ranked_entries(session: Session, tenant_id: Optional[int] = None) -> List[ScoredEntry]:
    """Weighted ranking over all votes, or over one tenant's votes."""
    options = load_options(session)
    return aggregate_scores(candidates_for(options), load_vote_records(session, tenant_id))


def seeded_regions(session: Session, tenant_id: Optional[int] = None) -> List[Region]:
    return seed_regions(ranked_entries(session, tenant_id))


def compare_ranks(session: Session) -> Dict[str, Dict[int, int]]:
    """tenant id (str) -> {option id -> overall rank}, unweighted per tenant."""
    tenants = session.exec(select(Tenant).order_by(Tenant.id)).all()
    candidates = candidates_for(load_options(session))

    ranks_by_tenant: Dict[str, Dict[int, int]] = {}
    for tenant in tenants:
        votes = unweighted(load_vote_records(session, tenant.id))
        ranked = aggregate_scores(candidates, votes)
        ranks_by_tenant[str(tenant.id)] = {e.option_id: e.overall_rank for e in ranked}
    return ranks_by_tenant
