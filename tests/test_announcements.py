# Announcements: admins post, verified users read newest first.
from __future__ import annotations

from fastapi.testclient import TestClient


def test_post_and_list(client: TestClient, make_user, headers_for):
    make_user("admin@example.com", "admin")
    admin_h = headers_for("admin@example.com")
    for title in ("Water outage", "Elevator maintenance"):
        r = client.post(
            "/announcements",
            json={"title": title, "description": "Details inside", "importance": "high", "type": "maintenance"},
            headers=admin_h,
        )
        assert r.status_code == 201, r.text
        assert r.json()["message"] == "Announcement created successfully"

    r = client.get("/announcements", headers=headers_for("resident@example.com"))
    assert r.status_code == 200
    assert [a["title"] for a in r.json()] == ["Elevator maintenance", "Water outage"]


def test_posting_is_admin_only_and_reading_needs_credential(client: TestClient, make_user, headers_for):
    make_user("member@example.com", "member")
    r = client.post(
        "/announcements",
        json={"title": "Party", "description": "Rooftop"},
        headers=headers_for("member@example.com"),
    )
    assert r.status_code == 403
    assert client.get("/announcements").status_code == 401
