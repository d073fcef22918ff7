"""
Ranking + seeding views: global bracket, personal bracket, per-voter comparison.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session, select

from madness.database import get_session
from madness.models.option import Option
from madness.models.tenant import Tenant
from madness.routes.tenants import TenantOut, require_tenant, tenant_out
from madness.services.bracket_graph import first_round_pairings
from madness.services.ranking_service import compare_ranks, load_options, ranked_entries
from madness.services.seeder import SEEDS_PER_REGION, Region, SeededTeam, seed_regions

router = APIRouter()


class SeededTeamOut(BaseModel):
    overall_rank: int
    seed: int
    id: int
    title: str
    month: str = ""
    year: Optional[int] = None
    location: str = ""
    photo_url: str = ""
    votes: float
    avg_points: Optional[float] = None
    avg_rank: Optional[float] = None


class RegionOut(BaseModel):
    name: str
    teams: List[SeededTeamOut]


class MatchupOut(BaseModel):
    top: Optional[SeededTeamOut] = None
    bottom: Optional[SeededTeamOut] = None


class RegionMatchupsOut(BaseModel):
    name: str
    games: List[MatchupOut]


class BracketsResponse(BaseModel):
    regions: List[RegionOut]
    matchups: List[RegionMatchupsOut]


class PersonalBracketResponse(BaseModel):
    tenant: TenantOut
    regions: List[RegionOut]


class CompareOption(BaseModel):
    id: int
    title: str


class CompareResponse(BaseModel):
    tenants: List[TenantOut]
    options: List[CompareOption]
    ranks_by_tenant: Dict[str, Dict[int, int]]


def _team_out(team: SeededTeam, options_by_id: Dict[int, Option]) -> SeededTeamOut:
    option = options_by_id.get(team.option_id)
    return SeededTeamOut(
        overall_rank=team.overall_rank,
        seed=team.seed,
        id=team.option_id,
        title=team.title,
        month=option.month if option else "",
        year=option.year if option else None,
        location=option.location if option else "",
        photo_url=option.photo_url if option else "",
        votes=team.votes,
        avg_points=team.avg_points,
        avg_rank=team.avg_rank,
    )


def _regions_out(regions: List[Region], options_by_id: Dict[int, Option]) -> List[RegionOut]:
    return [
        RegionOut(name=r.name, teams=[_team_out(t, options_by_id) for t in r.teams])
        for r in regions
    ]


def _matchups_out(regions: List[Region], options_by_id: Dict[int, Option]) -> List[RegionMatchupsOut]:
    pairings = first_round_pairings(SEEDS_PER_REGION)
    out: List[RegionMatchupsOut] = []
    for region in regions:
        by_seed = region.by_seed()
        games = []
        for seed_a, seed_b in pairings:
            top = by_seed.get(seed_a)
            bottom = by_seed.get(seed_b)
            games.append(MatchupOut(
                top=_team_out(top, options_by_id) if top else None,
                bottom=_team_out(bottom, options_by_id) if bottom else None,
            ))
        out.append(RegionMatchupsOut(name=region.name, games=games))
    return out


@router.get("/brackets", response_model=BracketsResponse)
def get_brackets(session: Session = Depends(get_session)) -> BracketsResponse:
    """Global weighted ranking seeded into four regions, with first-round matchups."""
    options_by_id = {o.id: o for o in load_options(session)}
    regions = seed_regions(ranked_entries(session))
    return BracketsResponse(
        regions=_regions_out(regions, options_by_id),
        matchups=_matchups_out(regions, options_by_id),
    )


@router.get("/personal-bracket", response_model=PersonalBracketResponse)
def get_personal_bracket(
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> PersonalBracketResponse:
    options_by_id = {o.id: o for o in load_options(session)}
    regions = seed_regions(ranked_entries(session, tenant.id))
    return PersonalBracketResponse(
        tenant=tenant_out(tenant),
        regions=_regions_out(regions, options_by_id),
    )


@router.get("/compare", response_model=CompareResponse)
def get_compare(session: Session = Depends(get_session)) -> CompareResponse:
    tenants = session.exec(select(Tenant).order_by(Tenant.id)).all()
    options = load_options(session)
    return CompareResponse(
        tenants=[tenant_out(t) for t in tenants],
        options=[CompareOption(id=o.id, title=o.title) for o in options],
        ranks_by_tenant=compare_ranks(session),
    )
