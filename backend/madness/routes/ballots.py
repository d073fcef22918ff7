"""
Ballot endpoints: next set of five options, vote submission, raw vote log.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session, select

from madness.database import get_session
from madness.models.option import Option
from madness.models.tenant import Tenant
from madness.models.vote import Vote
from madness.routes.tenants import TenantOut, require_tenant, tenant_out
from madness.services.ballot_service import (
    BallotError,
    Ranking,
    new_round_id,
    next_ballot,
    submit_ballot,
)
from madness.settings import BALLOT_SIZE, RAW_DEFAULT_LIMIT, RAW_MAX_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()


class OptionOut(BaseModel):
    id: int
    title: str
    month: str
    year: Optional[int] = None
    location: str
    photo_url: str
    additional_notes: str
    attendees: str
    times_ranked: int = 0


class NextBallotResponse(BaseModel):
    tenant: TenantOut
    round_id: str
    options: List[OptionOut]


class RankingIn(BaseModel):
    option_id: int
    rank: int


class VoteRequest(BaseModel):
    round_id: str
    rankings: List[RankingIn]


class VoteResponse(BaseModel):
    ok: bool
    vote_ids: List[int]


class RawVoteRow(BaseModel):
    created_at: datetime
    round_id: str
    rank: int
    weight: float
    tenant_name: str
    option_id: int
    option_title: str
    option_month: str
    option_year: Optional[int] = None
    option_location: str


class RawVotesResponse(BaseModel):
    rows: List[RawVoteRow]


def option_out(option: Option, times_ranked: int = 0) -> OptionOut:
    return OptionOut(
        id=option.id,
        title=option.title,
        month=option.month,
        year=option.year,
        location=option.location,
        photo_url=option.photo_url,
        additional_notes=option.additional_notes,
        attendees=option.attendees,
        times_ranked=times_ranked,
    )


@router.get("/next", response_model=NextBallotResponse)
def get_next_ballot(
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> NextBallotResponse:
    options, counts = next_ballot(session, tenant.id)
    if len(options) < BALLOT_SIZE:
        raise HTTPException(status_code=500, detail="Not enough options to pick from")
    return NextBallotResponse(
        tenant=tenant_out(tenant),
        round_id=new_round_id(),
        options=[option_out(o, counts.get(o.id, 0)) for o in options],
    )


@router.post("/vote", response_model=VoteResponse)
def post_vote(
    payload: VoteRequest,
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> VoteResponse:
    rankings = [Ranking(option_id=r.option_id, rank=r.rank) for r in payload.rankings]
    try:
        votes = submit_ballot(session, tenant, payload.round_id, rankings)
    except BallotError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VoteResponse(ok=True, vote_ids=[v.id for v in votes])


@router.get("/raw", response_model=RawVotesResponse)
def get_raw_votes(
    limit: int = Query(default=RAW_DEFAULT_LIMIT, ge=1),
    session: Session = Depends(get_session),
) -> RawVotesResponse:
    limit = min(limit, RAW_MAX_LIMIT)
    rows = session.exec(
        select(Vote, Tenant, Option)
        .join(Tenant, Tenant.id == Vote.tenant_id)
        .join(Option, Option.id == Vote.option_id)
        .order_by(Vote.created_at.desc(), Vote.id.desc())
        .limit(limit)
    ).all()
    return RawVotesResponse(rows=[
        RawVoteRow(
            created_at=vote.created_at,
            round_id=vote.round_id,
            rank=vote.rank,
            weight=vote.weight,
            tenant_name=tenant.name,
            option_id=option.id,
            option_title=option.title,
            option_month=option.month,
            option_year=option.year,
            option_location=option.location,
        )
        for vote, tenant, option in rows
    ])
