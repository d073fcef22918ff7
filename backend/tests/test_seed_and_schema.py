"""
Startup helpers: option/tenant seeding and the additive column patch.
"""
import json

from sqlalchemy import text
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, select

from madness.database import create_db_engine
from madness.db_schema_patch import _get_existing_columns_sqlite, ensure_vote_columns
from madness.models.option import Option
from madness.models.tenant import Tenant
from madness.seed_data import option_from_record, seed_options, seed_options_from_file, seed_tenants


def test_seed_tenants_only_once(session: Session):
    assert seed_tenants(session, ["Alice", "Bob"]) == 2
    assert seed_tenants(session, ["Carol"]) == 0
    names = [t.name for t in session.exec(select(Tenant).order_by(Tenant.id)).all()]
    assert names == ["Alice", "Bob"]


def test_option_from_exported_record():
    option = option_from_record({
        "id": 7,
        "title": "Ski Week",
        "month": "February",
        "year": 2019,
        "location": "Vail",
        "photoUrl": "/photos/7.jpg",
        "Additional_Notes": "snowed in",
        "Attendees": ["Alice", "Bob"],
    })
    assert option.id == 7
    assert option.photo_url == "/photos/7.jpg"
    assert option.additional_notes == "snowed in"
    assert json.loads(option.attendees) == ["Alice", "Bob"]


def test_boolean_attendees_are_stored_as_text():
    assert option_from_record({"title": "x", "Attendees": True}).attendees == "true"
    assert option_from_record({"title": "x"}).attendees == ""


def test_seed_options_skips_when_populated(session: Session):
    records = [{"title": f"Trip {i}"} for i in range(3)]
    assert seed_options(session, records) == 3
    assert seed_options(session, records) == 0
    assert len(session.exec(select(Option)).all()) == 3


def test_seed_options_from_missing_file(session: Session, tmp_path):
    assert seed_options_from_file(session, tmp_path / "nope.json") == 0


def test_seed_options_from_file(session: Session, tmp_path):
    path = tmp_path / "options.json"
    path.write_text(json.dumps([{"title": "Lake Trip", "Attendees": "false"}]), encoding="utf-8")
    assert seed_options_from_file(session, path) == 1
    assert session.exec(select(Option)).one().title == "Lake Trip"


def test_vote_weight_column_is_added_to_old_table():
    engine = create_db_engine("sqlite:///:memory:", poolclass=StaticPool)
    with engine.begin() as conn:
        conn.execute(text(
            'CREATE TABLE "vote" (id INTEGER PRIMARY KEY, tenant_id INTEGER, round_id TEXT, '
            "option_id INTEGER, rank INTEGER, created_at TIMESTAMP)"
        ))
        conn.execute(text(
            'INSERT INTO "vote" (tenant_id, round_id, option_id, rank) VALUES (1, \'r\', 1, 2)'
        ))

    ensure_vote_columns(engine)
    ensure_vote_columns(engine)  # second run is a no-op

    assert "weight" in _get_existing_columns_sqlite(engine, "vote")
    with engine.connect() as conn:
        assert conn.execute(text('SELECT weight FROM "vote"')).scalar() == 1
