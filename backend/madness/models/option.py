from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from madness.models.vote import Vote


class Option(SQLModel, table=True):
    """A candidate being ranked (one past event)."""

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    month: str = Field(default="")
    year: Optional[int] = Field(default=None)
    location: str = Field(default="")
    photo_url: str = Field(default="")
    additional_notes: str = Field(default="")
    # Raw attendee data: "true", "false", JSON array string, or "a, b | c"
    attendees: str = Field(default="")

    # Relationships
    votes: List["Vote"] = Relationship(back_populates="option")
