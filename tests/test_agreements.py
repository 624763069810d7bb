# Agreement API test suite: submit, uniqueness, accept/reject transitions, and member-only reads.
from __future__ import annotations

from fastapi.testclient import TestClient

from skytower import models


def agreement_payload(email: str, **overrides) -> dict:
    payload = {"userEmail": email, "apartmentNo": "A-101", "floor": 1, "block": "A", "rent": 1200}
    payload.update(overrides)
    return payload


def submit(client: TestClient, headers: dict, email: str, **overrides):
    return client.post("/agreements", json=agreement_payload(email, **overrides), headers=headers)


def get_user(db, email: str) -> models.User:
    db.expire_all()
    return db.query(models.User).filter(models.User.email == email).one()


def test_submit_creates_pending_agreement_with_server_timestamp(client: TestClient, make_user, headers_for):
    make_user("guest@example.com", "guest")
    r = submit(client, headers_for("guest@example.com"), "guest@example.com", createdAt="1999-01-01T00:00:00Z", status="checked")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["userEmail"] == "guest@example.com"
    assert body["status"] == "pending"
    assert not body["createdAt"].startswith("1999")
    assert body["checkedAt"] is None


def test_submit_accepts_numeric_apartment_fields(client: TestClient, headers_for):
    r = submit(client, headers_for("n@example.com"), "n@example.com", apartmentNo=101, block=7)
    assert r.status_code == 200, r.text
    assert r.json()["apartmentNo"] == "101"
    assert r.json()["block"] == "7"


def test_duplicate_submit_is_conflict_and_stores_one(client: TestClient, db, headers_for):
    h = headers_for("dup@example.com")
    r1 = submit(client, h, "dup@example.com")
    assert r1.status_code == 200, r1.text

    r2 = submit(client, h, "dup@example.com", apartmentNo="B-202", block="B")
    assert r2.status_code == 400, r2.text
    assert r2.json()["detail"] == "User already has an agreement."

    rows = db.query(models.Agreement).filter(models.Agreement.user_email == "dup@example.com").all()
    assert len(rows) == 1
    assert rows[0].apartment_no == "A-101"


def test_submit_missing_fields_is_400_with_field_names(client: TestClient, headers_for):
    r = client.post(
        "/agreements",
        json={"userEmail": "x@example.com", "block": "A"},
        headers=headers_for("x@example.com"),
    )
    assert r.status_code == 400, r.text
    fields = r.json()["fields"]
    assert "apartmentNo" in fields and "floor" in fields and "rent" in fields


def test_submit_on_behalf_of_someone_else_is_forbidden(client: TestClient, headers_for):
    r = submit(client, headers_for("me@example.com"), "victim@example.com")
    assert r.status_code == 403, r.text


def test_submit_requires_credential(client: TestClient):
    r = client.post("/agreements", json=agreement_payload("anon@example.com"))
    assert r.status_code == 401


def test_accept_checks_agreement_and_promotes_owner(client: TestClient, db, make_user, headers_for):
    make_user("admin@example.com", "admin")
    make_user("tenant@example.com", "guest")
    agreement = submit(client, headers_for("tenant@example.com"), "tenant@example.com").json()
    admin_h = headers_for("admin@example.com")

    r = client.patch(f"/agreements/{agreement['id']}/accept", json={"email": "tenant@example.com"}, headers=admin_h)
    assert r.status_code == 200, r.text
    assert r.json() == {
        "agreementResult": {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1},
        "userResult": {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1},
    }
    assert get_user(db, "tenant@example.com").role == "member"

    # Re-accepting a checked agreement is a guarded no-op
    r = client.patch(f"/agreements/{agreement['id']}/accept", json={"email": "tenant@example.com"}, headers=admin_h)
    assert r.status_code == 200, r.text
    assert r.json()["agreementResult"]["modifiedCount"] == 0
    assert r.json()["userResult"]["matchedCount"] == 0


def test_accept_without_body_derives_owner(client: TestClient, db, make_user, headers_for):
    make_user("admin@example.com", "admin")
    make_user("tenant@example.com", "guest")
    agreement = submit(client, headers_for("tenant@example.com"), "tenant@example.com").json()

    r = client.patch(f"/agreements/{agreement['id']}/accept", headers=headers_for("admin@example.com"))
    assert r.status_code == 200, r.text
    assert get_user(db, "tenant@example.com").role == "member"


def test_accept_with_mismatched_email_is_rejected(client: TestClient, db, make_user, headers_for):
    make_user("admin@example.com", "admin")
    make_user("tenant@example.com", "guest")
    make_user("bystander@example.com", "guest")
    agreement = submit(client, headers_for("tenant@example.com"), "tenant@example.com").json()

    r = client.patch(
        f"/agreements/{agreement['id']}/accept",
        json={"email": "bystander@example.com"},
        headers=headers_for("admin@example.com"),
    )
    assert r.status_code == 400, r.text
    assert get_user(db, "bystander@example.com").role == "guest"
    assert get_user(db, "tenant@example.com").role == "guest"
    db.expire_all()
    assert db.get(models.Agreement, agreement["id"]).status == "pending"


def test_accept_unknown_agreement_is_zero_match(client: TestClient, make_user, headers_for):
    make_user("admin@example.com", "admin")
    r = client.patch("/agreements/9999/accept", json={"email": "nobody@example.com"}, headers=headers_for("admin@example.com"))
    assert r.status_code == 200, r.text
    assert r.json()["agreementResult"]["matchedCount"] == 0
    assert r.json()["userResult"]["matchedCount"] == 0


def test_reject_checks_without_role_change(client: TestClient, db, make_user, headers_for):
    make_user("admin@example.com", "admin")
    make_user("tenant@example.com", "guest")
    agreement = submit(client, headers_for("tenant@example.com"), "tenant@example.com").json()

    r = client.patch(f"/agreements/{agreement['id']}/reject", headers=headers_for("admin@example.com"))
    assert r.status_code == 200, r.text
    assert r.json() == {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1}
    assert get_user(db, "tenant@example.com").role == "guest"
    db.expire_all()
    stored = db.get(models.Agreement, agreement["id"])
    assert stored.status == "checked"
    assert stored.checked_at is not None

    # A rejected agreement cannot be accepted afterwards
    r = client.patch(f"/agreements/{agreement['id']}/accept", headers=headers_for("admin@example.com"))
    assert r.json()["agreementResult"]["modifiedCount"] == 0
    assert get_user(db, "tenant@example.com").role == "guest"


def test_accept_and_reject_are_admin_only(client: TestClient, make_user, headers_for):
    make_user("member@example.com", "member")
    agreement = submit(client, headers_for("member@example.com"), "member@example.com").json()

    r = client.patch(f"/agreements/{agreement['id']}/accept", headers=headers_for("member@example.com"))
    assert r.status_code == 403
    r = client.patch(f"/agreements/{agreement['id']}/reject", headers=headers_for("member@example.com"))
    assert r.status_code == 403
    r = client.patch(f"/agreements/{agreement['id']}/reject")
    assert r.status_code == 401


def test_member_agreement_requires_member_role(client: TestClient, make_user, headers_for):
    make_user("admin@example.com", "admin")
    make_user("tenant@example.com", "guest")
    h = headers_for("tenant@example.com")
    agreement = submit(client, h, "tenant@example.com").json()

    r = client.get("/member-agreements", params={"email": "tenant@example.com"}, headers=h)
    assert r.status_code == 403, r.text

    client.patch(f"/agreements/{agreement['id']}/accept", headers=headers_for("admin@example.com"))

    r = client.get("/member-agreements", params={"email": "tenant@example.com"}, headers=h)
    assert r.status_code == 200, r.text
    assert r.json()["id"] == agreement["id"]
    assert r.json()["status"] == "checked"

    r = client.get("/member-agreements", headers=h)
    assert r.status_code == 400

    r = client.get("/member-agreements", params={"email": "admin@example.com"}, headers=h)
    assert r.status_code == 403


def test_list_agreements_scoping(client: TestClient, make_user, headers_for):
    make_user("admin@example.com", "admin")
    for email in ("one@example.com", "two@example.com"):
        submit(client, headers_for(email), email)

    r = client.get("/agreements", headers=headers_for("admin@example.com"))
    assert r.status_code == 200
    assert {a["userEmail"] for a in r.json()} == {"one@example.com", "two@example.com"}

    r = client.get("/agreements", params={"email": "two@example.com"}, headers=headers_for("admin@example.com"))
    assert [a["userEmail"] for a in r.json()] == ["two@example.com"]

    r = client.get("/agreements", headers=headers_for("one@example.com"))
    assert [a["userEmail"] for a in r.json()] == ["one@example.com"]

    r = client.get("/agreements", params={"email": "two@example.com"}, headers=headers_for("one@example.com"))
    assert r.status_code == 403
