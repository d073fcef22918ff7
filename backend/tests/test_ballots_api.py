from fastapi.testclient import TestClient
from sqlmodel import Session, select

from madness.models.option import Option
from madness.models.tenant import Tenant
from madness.models.vote import Vote


def _seed(session: Session, n_options: int = 8):
    alice = Tenant(name="Alice")
    bob = Tenant(name="Bob")
    session.add(alice)
    session.add(bob)
    for i in range(1, n_options + 1):
        session.add(Option(
            title=f"Trip {i:02d}",
            month="June",
            year=2020 + i % 4,
            location="Lake",
            attendees="Alice" if i % 2 else "false",
        ))
    session.commit()
    session.refresh(alice)
    session.refresh(bob)
    options = session.exec(select(Option).order_by(Option.id)).all()
    return alice, bob, options


def _headers(tenant: Tenant) -> dict:
    return {"X-Tenant-Id": str(tenant.id)}


def _ballot(options, round_id: str = "r1") -> dict:
    return {
        "round_id": round_id,
        "rankings": [{"option_id": o.id, "rank": i + 1} for i, o in enumerate(options[:5])],
    }


def test_list_tenants(client: TestClient, session: Session):
    _seed(session)
    response = client.get("/api/tenants")
    assert response.status_code == 200
    assert [t["name"] for t in response.json()["tenants"]] == ["Alice", "Bob"]


def test_missing_tenant_header_is_rejected(client: TestClient, session: Session):
    _seed(session)
    response = client.get("/api/next")
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing X-Tenant-Id header"


def test_unknown_tenant_is_rejected(client: TestClient, session: Session):
    _seed(session)
    response = client.get("/api/progress", headers={"X-Tenant-Id": "999"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid tenant"


def test_next_returns_five_options(client: TestClient, session: Session):
    alice, _, _ = _seed(session)
    response = client.get("/api/next", headers=_headers(alice))
    assert response.status_code == 200
    data = response.json()
    assert data["tenant"]["name"] == "Alice"
    assert data["round_id"]
    assert len(data["options"]) == 5
    assert len({o["id"] for o in data["options"]}) == 5


def test_next_fails_with_too_few_options(client: TestClient, session: Session):
    alice, _, _ = _seed(session, n_options=3)
    response = client.get("/api/next", headers=_headers(alice))
    assert response.status_code == 500


def test_next_prefers_options_under_target(client: TestClient, session: Session):
    alice, _, options = _seed(session, n_options=10)
    # first five options reach the target of two rankings
    client.post("/api/vote", json=_ballot(options, "r1"), headers=_headers(alice))
    client.post("/api/vote", json=_ballot(options, "r2"), headers=_headers(alice))

    response = client.get("/api/next", headers=_headers(alice))
    ids = {o["id"] for o in response.json()["options"]}
    assert ids == {o.id for o in options[5:]}


def test_vote_records_weights_from_attendees(client: TestClient, session: Session):
    alice, bob, options = _seed(session)

    response = client.post("/api/vote", json=_ballot(options), headers=_headers(alice))
    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert len(response.json()["vote_ids"]) == 5

    client.post("/api/vote", json=_ballot(options, "r2"), headers=_headers(bob))

    votes = session.exec(select(Vote).order_by(Vote.id)).all()
    alice_weights = [v.weight for v in votes if v.tenant_id == alice.id]
    bob_weights = [v.weight for v in votes if v.tenant_id == bob.id]
    # odd option ids list Alice as attendee
    assert alice_weights == [1.0, 0.5, 1.0, 0.5, 1.0]
    assert bob_weights == [0.5] * 5


def test_vote_rejects_duplicate_ranks(client: TestClient, session: Session):
    alice, _, options = _seed(session)
    payload = _ballot(options)
    payload["rankings"][1]["rank"] = 1

    response = client.post("/api/vote", json=payload, headers=_headers(alice))
    assert response.status_code == 400
    assert session.exec(select(Vote)).all() == []


def test_vote_rejects_wrong_count(client: TestClient, session: Session):
    alice, _, options = _seed(session)
    payload = _ballot(options)
    payload["rankings"] = payload["rankings"][:4]
    response = client.post("/api/vote", json=payload, headers=_headers(alice))
    assert response.status_code == 400


def test_vote_rejects_unknown_option(client: TestClient, session: Session):
    alice, _, options = _seed(session)
    payload = _ballot(options)
    payload["rankings"][0]["option_id"] = 9999
    response = client.post("/api/vote", json=payload, headers=_headers(alice))
    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown option_id"


def test_progress_counts_remaining(client: TestClient, session: Session):
    alice, _, options = _seed(session)
    client.post("/api/vote", json=_ballot(options, "r1"), headers=_headers(alice))
    client.post("/api/vote", json=_ballot(options, "r2"), headers=_headers(alice))

    response = client.get("/api/progress", headers=_headers(alice))
    data = response.json()
    assert data["total_options"] == 8
    assert data["remaining_to_target"] == 3
    assert data["done"] is False


def test_raw_lists_newest_first_with_limit(client: TestClient, session: Session):
    alice, _, options = _seed(session)
    client.post("/api/vote", json=_ballot(options, "r1"), headers=_headers(alice))
    client.post("/api/vote", json=_ballot(options, "r2"), headers=_headers(alice))

    response = client.get("/api/raw", params={"limit": 3})
    rows = response.json()["rows"]
    assert len(rows) == 3
    assert all(r["round_id"] == "r2" for r in rows)
    assert rows[0]["tenant_name"] == "Alice"
