from __future__ import annotations

import datetime as dt
import uuid

from fastapi.testclient import TestClient

from eventhub.models import RSVP, Event, User
from tests.test_auth_rbac import auth_headers, make_user

TOMORROW = dt.date.today() + dt.timedelta(days=1)


def event_payload(**overrides) -> dict:
    payload = {
        "title": "Standup",
        "description": "Daily sync for the whole team",
        "date": TOMORROW.isoformat(),
        "start_time": "09:00",
        "end_time": "09:30",
        "location": "Room A",
    }
    payload.update(overrides)
    return payload


def create_event(client: TestClient, token: str, **overrides) -> dict:
    resp = client.post("/api/events", json=event_payload(**overrides), headers=auth_headers(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["event"]


def insert_past_event(db_session, title: str = "Retro", days_ago: int = 3) -> Event:
    event = Event(
        title=title,
        description="Something that already happened",
        date=dt.date.today() - dt.timedelta(days=days_ago),
        start_time=dt.time(10, 0),
        end_time=dt.time(11, 0),
        location="Room B",
    )
    db_session.add(event)
    db_session.commit()
    db_session.refresh(event)
    return event


def test_standup_scenario(client: TestClient):
    admin = make_user(client, "alice@example.com", name="Alice", role="admin")
    bob = make_user(client, "bob@example.com", name="Bob")

    event = create_event(client, admin)
    assert event["title"] == "Standup"
    assert event["start_time"] == "09:00"
    assert event["end_time"] == "09:30"
    assert event["created_by_name"] == "Alice"

    rsvp = client.post(
        "/api/rsvps",
        json={"event_id": event["id"], "status": "going"},
        headers=auth_headers(bob),
    )
    assert rsvp.status_code == 200
    assert rsvp.json()["message"] == "RSVP created successfully"
    assert rsvp.json()["data"]["rsvp"]["event_title"] == "Standup"

    summary = client.get(f"/api/events/{event['id']}/rsvp-summary", headers=auth_headers(admin))
    assert summary.status_code == 200
    data = summary.json()["data"]
    assert data["summary"] == [{"status": "going", "count": 1}]
    assert set(data["users"]) == {"going", "maybe", "decline"}
    assert [u["name"] for u in data["users"]["going"]] == ["Bob"]
    assert data["users"]["going"][0]["email"] == "bob@example.com"
    assert data["users"]["maybe"] == []
    assert data["users"]["decline"] == []


def test_create_event_rejects_bad_time_range(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")

    for start, end in (("10:00", "10:00"), ("10:00", "09:59")):
        resp = client.post(
            "/api/events",
            json=event_payload(start_time=start, end_time=end),
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "End time must be after start time"}


def test_create_event_rejects_past_date_but_accepts_today(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")
    yesterday = (dt.date.today() - dt.timedelta(days=1)).isoformat()

    past = client.post(
        "/api/events", json=event_payload(date=yesterday), headers=auth_headers(admin)
    )
    assert past.status_code == 400
    assert past.json()["error"] == "Event date cannot be in the past"

    today = create_event(client, admin, date=dt.date.today().isoformat())
    assert today["date"] == dt.date.today().isoformat()


def test_create_event_field_validation(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")

    resp = client.post(
        "/api/events",
        json=event_payload(title="ab", description="short", start_time="25:00"),
        headers=auth_headers(admin),
    )
    assert resp.status_code == 400
    details = {d["field"]: d["message"] for d in resp.json()["details"]}
    assert {"title", "description", "start_time"} <= set(details)
    assert details["start_time"] == "Please provide a valid start time in HH:MM format"


def test_get_event_includes_counts(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")
    u1 = make_user(client, "u1@example.com")
    u2 = make_user(client, "u2@example.com")
    event = create_event(client, admin)

    client.post("/api/rsvps", json={"event_id": event["id"], "status": "going"}, headers=auth_headers(u1))
    client.post("/api/rsvps", json={"event_id": event["id"], "status": "decline"}, headers=auth_headers(u2))

    resp = client.get(f"/api/events/{event['id']}")
    assert resp.status_code == 200
    data = resp.json()["data"]["event"]
    assert data["total_rsvps"] == 2
    assert data["going_count"] == 1
    assert data["maybe_count"] == 0
    assert data["decline_count"] == 1


def test_get_event_bad_and_unknown_ids(client: TestClient):
    bad = client.get("/api/events/not-a-uuid")
    assert bad.status_code == 400
    assert bad.json() == {"success": False, "error": "Invalid event ID"}

    missing = client.get(f"/api/events/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Event not found"}


def test_list_events_order_and_upcoming_filter(client: TestClient, db_session):
    admin = make_user(client, "admin@example.com", role="admin")
    later = (dt.date.today() + dt.timedelta(days=5)).isoformat()

    create_event(client, admin, title="Late one", date=later, start_time="08:00", end_time="09:00")
    create_event(client, admin, title="Afternoon", start_time="14:00", end_time="15:00")
    create_event(client, admin, title="Morning", start_time="08:00", end_time="09:00")
    insert_past_event(db_session, title="Old retro")

    upcoming = client.get("/api/events").json()["data"]
    assert [e["title"] for e in upcoming["events"]] == ["Morning", "Afternoon", "Late one"]
    assert all(e["total_rsvps"] == 0 for e in upcoming["events"])
    assert upcoming["pagination"] == {"page": 1, "limit": 10, "total": 3}

    everything = client.get("/api/events", params={"upcoming": "false"}).json()["data"]
    assert [e["title"] for e in everything["events"]][0] == "Old retro"
    assert everything["pagination"]["total"] == 4

    page2 = client.get("/api/events", params={"page": 2, "limit": 2}).json()["data"]
    assert [e["title"] for e in page2["events"]] == ["Late one"]
    assert page2["pagination"] == {"page": 2, "limit": 2, "total": 3}


def test_list_events_rejects_bad_paging(client: TestClient):
    assert client.get("/api/events", params={"page": 0}).status_code == 400
    assert client.get("/api/events", params={"limit": 1000}).status_code == 400


def test_my_events_lists_only_own(client: TestClient):
    a1 = make_user(client, "a1@example.com", role="admin")
    a2 = make_user(client, "a2@example.com", role="admin")
    create_event(client, a1, title="Mine")
    create_event(client, a2, title="Theirs")

    resp = client.get("/api/events/mine", headers=auth_headers(a1))
    assert resp.status_code == 200
    assert [e["title"] for e in resp.json()["data"]["events"]] == ["Mine"]


def test_update_event_partial_and_merged_validation(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")
    event = create_event(client, admin)

    ok = client.put(
        f"/api/events/{event['id']}",
        json={"title": "Renamed standup", "location": "Room C"},
        headers=auth_headers(admin),
    )
    assert ok.status_code == 200
    updated = ok.json()["data"]["event"]
    assert updated["title"] == "Renamed standup"
    assert updated["location"] == "Room C"
    assert updated["description"] == event["description"]

    bad_range = client.put(
        f"/api/events/{event['id']}",
        json={"end_time": "08:00"},
        headers=auth_headers(admin),
    )
    assert bad_range.status_code == 400
    assert bad_range.json()["error"] == "End time must be after start time"

    empty = client.put(f"/api/events/{event['id']}", json={}, headers=auth_headers(admin))
    assert empty.status_code == 400
    assert empty.json()["error"] == "No fields to update"

    missing = client.put(
        f"/api/events/{uuid.uuid4()}", json={"title": "Whatever"}, headers=auth_headers(admin)
    )
    assert missing.status_code == 404


def test_delete_event_cascades_rsvps(client: TestClient, db_session):
    admin = make_user(client, "admin@example.com", role="admin")
    users = [make_user(client, f"u{i}@example.com") for i in range(3)]
    event = create_event(client, admin)
    keep = create_event(client, admin, title="Other event")

    for token in users:
        client.post("/api/rsvps", json={"event_id": event["id"], "status": "maybe"}, headers=auth_headers(token))
    client.post("/api/rsvps", json={"event_id": keep["id"], "status": "going"}, headers=auth_headers(users[0]))

    resp = client.delete(f"/api/events/{event['id']}", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Event deleted successfully"

    event_id = uuid.UUID(event["id"])
    assert db_session.get(Event, event_id) is None
    assert db_session.query(RSVP).filter_by(event_id=event_id).count() == 0
    assert db_session.query(RSVP).filter_by(event_id=uuid.UUID(keep["id"])).count() == 1

    assert client.get(f"/api/events/{event['id']}").status_code == 404
    again = client.delete(f"/api/events/{event['id']}", headers=auth_headers(admin))
    assert again.status_code == 404


def test_summary_for_unknown_event_is_404(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")
    resp = client.get(f"/api/events/{uuid.uuid4()}/rsvp-summary", headers=auth_headers(admin))
    assert resp.status_code == 404


def test_summary_for_event_without_rsvps(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")
    event = create_event(client, admin)

    data = client.get(
        f"/api/events/{event['id']}/rsvp-summary", headers=auth_headers(admin)
    ).json()["data"]
    assert data == {"summary": [], "users": {"going": [], "maybe": [], "decline": []}}


def test_event_rsvps_listing_for_admin(client: TestClient):
    admin = make_user(client, "admin@example.com", role="admin")
    guest = make_user(client, "guest@example.com", name="Guest Person")
    event = create_event(client, admin)
    client.post("/api/rsvps", json={"event_id": event["id"], "status": "maybe"}, headers=auth_headers(guest))

    resp = client.get(f"/api/events/{event['id']}/rsvps", headers=auth_headers(admin))
    assert resp.status_code == 200
    rows = resp.json()["data"]["rsvps"]
    assert len(rows) == 1
    assert rows[0]["user_name"] == "Guest Person"
    assert rows[0]["user_email"] == "guest@example.com"
    assert rows[0]["status"] == "maybe"

    assert client.get(f"/api/events/{event['id']}/rsvps", headers=auth_headers(guest)).status_code == 403


def test_admin_delete_user_keeps_events(client: TestClient, db_session):
    admin = make_user(client, "admin@example.com", role="admin")
    other_admin = make_user(client, "organizer@example.com", name="Organizer", role="admin")
    guest = make_user(client, "guest@example.com")

    event = create_event(client, other_admin)
    client.post("/api/rsvps", json={"event_id": event["id"], "status": "going"}, headers=auth_headers(guest))

    organizer = db_session.query(User).filter_by(email="organizer@example.com").one()
    guest_user = db_session.query(User).filter_by(email="guest@example.com").one()

    assert client.delete(f"/api/admin/users/{organizer.id}", headers=auth_headers(admin)).status_code == 200
    assert client.delete(f"/api/admin/users/{guest_user.id}", headers=auth_headers(admin)).status_code == 200

    remaining = client.get(f"/api/events/{event['id']}").json()["data"]["event"]
    assert remaining["created_by"] is None
    assert remaining["created_by_name"] is None
    assert remaining["total_rsvps"] == 0

    missing = client.delete(f"/api/admin/users/{uuid.uuid4()}", headers=auth_headers(admin))
    assert missing.status_code == 404
