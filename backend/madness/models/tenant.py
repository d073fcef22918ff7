from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from madness.models.vote import Vote


class Tenant(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True)  # matched against option attendee names
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    votes: List["Vote"] = Relationship(back_populates="tenant")
