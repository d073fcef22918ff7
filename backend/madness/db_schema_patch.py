from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Columns we must ensure exist in the "vote" table.
# (name, sqlite_type, postgres_type); types carry their defaults
REQUIRED_VOTE_COLUMNS: List[Tuple[str, str, str]] = [
    ("weight", "REAL NOT NULL DEFAULT 1", "DOUBLE PRECISION NOT NULL DEFAULT 1"),
]

# Columns we must ensure exist in the "option" table.
REQUIRED_OPTION_COLUMNS: List[Tuple[str, str, str]] = [
    ("attendees", "TEXT NOT NULL DEFAULT ''", "TEXT NOT NULL DEFAULT ''"),
    ("additional_notes", "TEXT NOT NULL DEFAULT ''", "TEXT NOT NULL DEFAULT ''"),
]


def _is_sqlite(engine: Engine) -> bool:
    return engine.dialect.name.lower() == "sqlite"


def _get_existing_columns_sqlite(engine: Engine, table_name: str) -> Dict[str, str]:
    cols: Dict[str, str] = {}
    with engine.connect() as conn:
        res = conn.execute(text(f'PRAGMA table_info("{table_name}");')).fetchall()
        # PRAGMA table_info returns rows: (cid, name, type, notnull, dflt_value, pk)
        for row in res:
            cols[str(row[1])] = str(row[2])
    return cols


def _get_existing_columns_postgres(engine: Engine, table_name: str) -> Dict[str, str]:
    cols: Dict[str, str] = {}
    sql = """
    SELECT column_name, data_type
    FROM information_schema.columns
    WHERE table_schema = 'public' AND table_name = :table_name;
    """
    with engine.connect() as conn:
        res = conn.execute(text(sql), {"table_name": table_name}).fetchall()
        for row in res:
            cols[str(row[0])] = str(row[1])
    return cols


def _table_exists(engine: Engine, table_name: str) -> bool:
    with engine.connect() as conn:
        if _is_sqlite(engine):
            result = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='table' AND name=:table_name"),
                {"table_name": table_name},
            ).fetchone()
            return bool(result)
        result = conn.execute(
            text("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public' AND table_name = :table_name
            )
        """),
            {"table_name": table_name},
        ).fetchone()
        return bool(result and result[0])


def _ensure_columns(engine: Engine, table: str, required: List[Tuple[str, str, str]]) -> List[str]:
    """Add any missing columns. Returns the names added."""
    if not _table_exists(engine, table):
        # create_all will build it with every column
        return []

    added: List[str] = []
    if _is_sqlite(engine):
        existing = _get_existing_columns_sqlite(engine, table)
        with engine.begin() as conn:
            for name, sqlite_type, _pg_type in required:
                if name in existing:
                    continue
                conn.execute(text(f'ALTER TABLE "{table}" ADD COLUMN {name} {sqlite_type};'))
                added.append(name)
    else:
        existing = _get_existing_columns_postgres(engine, table)
        with engine.begin() as conn:
            for name, _sqlite_type, pg_type in required:
                if name in existing:
                    continue
                conn.execute(text(f'ALTER TABLE "{table}" ADD COLUMN IF NOT EXISTS {name} {pg_type};'))
                added.append(name)
    return added


def ensure_vote_columns(engine: Engine) -> None:
    """
    Idempotently adds required columns to the 'vote' table if missing.
    Safe to run at every startup. Votes recorded before weighting existed
    default to full weight.
    """
    try:
        from madness.models.vote import Vote

        added = _ensure_columns(engine, Vote.__table__.name, REQUIRED_VOTE_COLUMNS)
        if added:
            logger.info("Migrated vote table: added %s", ", ".join(added))
    except Exception as e:
        # Log error but don't crash the server
        logger.warning(f"Failed to ensure vote columns (this is OK if table doesn't exist yet): {e}")


def ensure_option_columns(engine: Engine) -> None:
    """
    Idempotently adds required columns to the 'option' table if missing.
    Safe to run at every startup.
    """
    try:
        from madness.models.option import Option

        added = _ensure_columns(engine, Option.__table__.name, REQUIRED_OPTION_COLUMNS)
        if added:
            logger.info("Migrated option table: added %s", ", ".join(added))
    except Exception as e:
        logger.warning(f"Failed to ensure option columns (this is OK if table doesn't exist yet): {e}")
