from pathlib import Path
from typing import Any, Generator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from madness.settings import DATABASE_URL, SQL_ECHO


def create_db_engine(url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """Engine for url. File-backed SQLite gets its parent directory created."""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if ":memory:" not in url:
            Path(url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, connect_args=connect_args, **kwargs)


engine: Engine = create_db_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db(target: Engine = engine) -> None:
    """Create every table that is missing. Existing tables are left alone."""
    # Models register themselves on SQLModel metadata at import
    import madness.models  # noqa: F401

    SQLModel.metadata.create_all(target)
