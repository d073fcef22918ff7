from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from madness.models.option import Option
    from madness.models.tenant import Tenant


class Vote(SQLModel, table=True):
    __table_args__ = (CheckConstraint("rank BETWEEN 1 AND 5", name="ck_vote_rank"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenant.id", index=True)
    round_id: str = Field(index=True)  # one ballot of five rankings
    option_id: int = Field(foreign_key="option.id", index=True)
    rank: int  # 1 (best) .. 5
    weight: float = Field(default=1.0)  # 1.0 attended, 0.5 otherwise
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    # Relationships
    tenant: "Tenant" = Relationship(back_populates="votes")
    option: "Option" = Relationship(back_populates="votes")
