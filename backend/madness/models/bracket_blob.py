from datetime import datetime

from sqlmodel import Field, SQLModel


class BracketBlob(SQLModel, table=True):
    """Opaque key/value row backing interactive bracket persistence."""

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
