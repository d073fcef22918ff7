"""
First-start seeding of tenants and options.

Both are skipped when the table already has rows.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from sqlmodel import Session, select

from madness.models.option import Option
from madness.models.tenant import Tenant

logger = logging.getLogger(__name__)

EXPECTED_OPTION_COUNT = 64


def seed_tenants(session: Session, names: Sequence[str]) -> int:
    if session.exec(select(Tenant)).first() is not None:
        return 0
    for name in names:
        session.add(Tenant(name=name))
    session.commit()
    logger.info("Seeded tenants: %d", len(names))
    return len(names)


def _attendees_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return json.dumps([str(v) for v in value])
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def option_from_record(record: Dict[str, Any]) -> Option:
    """Map one options.json record (camelCase keys as exported) to an Option."""
    return Option(
        id=record.get("id"),
        title=str(record.get("title", "")),
        month=str(record.get("month", "")),
        year=record.get("year"),
        location=str(record.get("location", "")),
        photo_url=str(record.get("photoUrl", record.get("photo_url", ""))),
        additional_notes=str(record.get("Additional_Notes", record.get("additional_notes", "")) or ""),
        attendees=_attendees_text(record.get("Attendees", record.get("attendees"))),
    )


def seed_options(session: Session, records: List[Dict[str, Any]]) -> int:
    if session.exec(select(Option)).first() is not None:
        return 0
    if len(records) != EXPECTED_OPTION_COUNT:
        logger.warning(
            "Options file should contain exactly %d items, found %d",
            EXPECTED_OPTION_COUNT, len(records),
        )
    for record in records:
        session.add(option_from_record(record))
    session.commit()
    logger.info("Seeded options: %d", len(records))
    return len(records)


def seed_options_from_file(session: Session, path: Path) -> int:
    if not path.is_file():
        logger.warning("Options file %s not found; skipping option seeding", path)
        return 0
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        logger.warning("Options file %s is not a JSON array; skipping option seeding", path)
        return 0
    return seed_options(session, records)
