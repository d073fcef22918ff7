"""
Voters (tenants) and their ballot progress.

Identity is the X-Tenant-Id header; it identifies, it does not authenticate.
"""
from typing import List

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from madness.database import get_session
from madness.models.tenant import Tenant
from madness.services.ballot_service import tenant_progress

router = APIRouter()


class TenantOut(BaseModel):
    id: int
    name: str


class TenantsResponse(BaseModel):
    tenants: List[TenantOut]


class ProgressResponse(BaseModel):
    tenant: TenantOut
    done: bool
    total_options: int
    remaining_to_target: int


def require_tenant(
    x_tenant_id: str = Header(default=""),
    session: Session = Depends(get_session),
) -> Tenant:
    try:
        tenant_id = int(x_tenant_id)
    except ValueError:
        tenant_id = 0
    if not tenant_id:
        raise HTTPException(status_code=400, detail="Missing X-Tenant-Id header")
    tenant = session.get(Tenant, tenant_id)
    if not tenant:
        raise HTTPException(status_code=400, detail="Invalid tenant")
    return tenant


def tenant_out(tenant: Tenant) -> TenantOut:
    return TenantOut(id=tenant.id, name=tenant.name)


@router.get("/tenants", response_model=TenantsResponse)
def list_tenants(session: Session = Depends(get_session)) -> TenantsResponse:
    tenants = session.exec(select(Tenant).order_by(Tenant.id)).all()
    return TenantsResponse(tenants=[tenant_out(t) for t in tenants])


@router.get("/progress", response_model=ProgressResponse)
def get_progress(
    tenant: Tenant = Depends(require_tenant),
    session: Session = Depends(get_session),
) -> ProgressResponse:
    progress = tenant_progress(session, tenant.id)
    return ProgressResponse(
        tenant=tenant_out(tenant),
        done=progress.done,
        total_options=progress.total_options,
        remaining_to_target=progress.remaining,
    )
