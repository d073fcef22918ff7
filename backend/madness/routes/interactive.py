"""
Interactive bracket: pick winners game by game, undo, reset.

Each request rebuilds the graph from the current global ranking and
restores the caller's picks from the BracketBlob store by game id.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from madness.database import get_session
from madness.models.tenant import Tenant
from madness.routes.tenants import require_tenant
from madness.services.blob_store import SqlBlobStore
from madness.services.bracket_session import ActionResult, BracketLoadError, BracketSession
from madness.services.ranking_service import seeded_regions
from madness.settings import UNDO_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()


class PickRequest(BaseModel):
    game_id: str
    team_id: int


class MadnessResponse(BaseModel):
    session_key: str
    regions: List[Dict[str, Any]]
    cross_rounds: List[Dict[str, Any]]
    champion: Optional[Dict[str, Any]] = None
    undo_depth: int


class MadnessActionResponse(BaseModel):
    changed: bool
    persisted: bool
    error: Optional[str] = None
    bracket: MadnessResponse


def session_key_for(tenant: Tenant) -> str:
    return f"madness:{tenant.id}"


def _load_session(session: Session, tenant: Tenant) -> BracketSession:
    bracket = BracketSession(SqlBlobStore(session), session_key_for(tenant), undo_limit=UNDO_LIMIT)
    try:
        bracket.load(lambda: seeded_regions(session))
    except BracketLoadError as e:
        raise HTTPException(status_code=503, detail=f"Bracket unavailable: {e}")
    return bracket


def _action_response(bracket: BracketSession, result: ActionResult) -> MadnessActionResponse:
    return MadnessActionResponse(
        changed=result.changed,
        persisted=result.persisted,
        error=result.error,
        bracket=MadnessResponse(**bracket.view()),
    )


@router.get("/madness", response_model=MadnessResponse)
def get_madness(
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> MadnessResponse:
    bracket = _load_session(session, tenant)
    return MadnessResponse(**bracket.view())


@router.post("/madness/pick", response_model=MadnessActionResponse)
def post_pick(
    payload: PickRequest,
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> MadnessActionResponse:
    """Pick a winner; picking the current winner again clears it.
    Picks against TBD sides or non-occupants are no-ops (changed=false)."""
    bracket = _load_session(session, tenant)
    result = bracket.pick(payload.game_id, payload.team_id)
    return _action_response(bracket, result)


@router.post("/madness/undo", response_model=MadnessActionResponse)
def post_undo(
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> MadnessActionResponse:
    bracket = _load_session(session, tenant)
    result = bracket.undo()
    return _action_response(bracket, result)


@router.post("/madness/reset", response_model=MadnessActionResponse)
def post_reset(
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> MadnessActionResponse:
    bracket = _load_session(session, tenant)
    result = bracket.reset()
    return _action_response(bracket, result)
