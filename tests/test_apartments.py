# Apartment catalog: pagination math and rent filters.
from __future__ import annotations

from fastapi.testclient import TestClient

from skytower import models


def seed_apartments(db, rents):
    for i, rent in enumerate(rents, start=1):
        db.add(models.Apartment(block="A", floor=(i - 1) // 4 + 1, apartment_no=f"A-{i:03d}", rent=rent))
    db.commit()


def test_second_page_of_thirteen(client: TestClient, db):
    seed_apartments(db, [1000] * 13)
    r = client.get("/apartments", params={"page": 2})
    assert r.status_code == 200, r.text
    body = r.json()
    assert len(body["apartments"]) == 6
    assert body["totalPages"] == 3
    assert body["currentPage"] == 2
    assert body["apartments"][0]["apartmentNo"] == "A-007"

    r = client.get("/apartments", params={"page": 3})
    assert len(r.json()["apartments"]) == 1


def test_total_pages_counts_filtered_set(client: TestClient, db):
    seed_apartments(db, [500] * 10 + [1500] * 3)
    r = client.get("/apartments", params={"minRent": 1000})
    body = r.json()
    assert body["totalPages"] == 1
    assert body["currentPage"] == 1
    assert {a["rent"] for a in body["apartments"]} == {1500}

    r = client.get("/apartments", params={"maxRent": 600})
    assert r.json()["totalPages"] == 2


def test_empty_catalog(client: TestClient):
    r = client.get("/apartments")
    assert r.json() == {"totalPages": 0, "currentPage": 1, "apartments": []}


def test_unusable_params_fall_back_to_defaults(client: TestClient, db):
    seed_apartments(db, [1000] * 8)

    r = client.get("/apartments", params={"page": 0})
    assert r.status_code == 200, r.text
    assert r.json()["currentPage"] == 1
    assert len(r.json()["apartments"]) == 6

    r = client.get("/apartments", params={"page": "abc", "minRent": "", "maxRent": "cheap"})
    assert r.status_code == 200, r.text
    assert r.json()["currentPage"] == 1
    assert r.json()["totalPages"] == 2

    # maxRent=0 means no upper bound, not an empty catalog
    r = client.get("/apartments", params={"maxRent": 0})
    assert r.json()["totalPages"] == 2
    assert len(r.json()["apartments"]) == 6
