import asyncio
import io
import os
from decimal import Decimal

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from app import config
from app.services import storage, uploads


def test_weight_routes_require_login(client):
    assert client.get("/api/weight-entries").status_code == 401
    response = client.post("/api/weight-entries", json={"weight": 150.5})
    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized"}


def test_create_and_list_weight_entries(client, login):
    login()
    response = client.post(
        "/api/weight-entries",
        json={"weight": 150.5, "unit": "lbs", "notes": "morning"},
    )
    assert response.status_code == 200
    body = response.json()
    assert Decimal(str(body["weight"])) == Decimal("150.5")
    assert body["unit"] == "lbs"
    assert body["entryType"] == "manual"
    assert body["notes"] == "morning"
    assert body["userId"] == "auth0|alice"

    client.post("/api/weight-entries", json={"weight": "68.2", "unit": "kg"})

    entries = client.get("/api/weight-entries").json()
    assert len(entries) == 2
    # newest first
    assert entries[0]["unit"] == "kg"
    assert entries[1]["id"] == body["id"]

    logs = client.get("/api/activity-logs").json()
    assert [log["action"] for log in logs] == ["weight_entry", "weight_entry"]
    assert logs[1]["metadata"]["entryId"] == body["id"]
    assert logs[1]["description"].startswith("Manually added weight: 150.5")


def test_invalid_weight_entry_is_400(client, login):
    login()
    response = client.post("/api/weight-entries", json={"weight": -3})
    assert response.status_code == 400
    assert "weight" in response.json()["message"]

    response = client.post("/api/weight-entries", json={"weight": 150, "unit": "stone"})
    assert response.status_code == 400

    # server-owned fields are rejected
    response = client.post("/api/weight-entries", json={"weight": 150, "userId": "auth0|mallory"})
    assert response.status_code == 400

    assert client.get("/api/weight-entries").json() == []


def test_weight_entries_are_scoped_to_owner(client, login):
    login("auth0|alice")
    entry_id = client.post("/api/weight-entries", json={"weight": 150}).json()["id"]

    login("auth0|bob", first_name="Bob")
    assert client.get("/api/weight-entries").json() == []
    assert client.get(f"/api/weight-entries/{entry_id}").status_code == 404
    assert client.patch(f"/api/weight-entries/{entry_id}", json={"weight": 1}).status_code == 404
    assert client.delete(f"/api/weight-entries/{entry_id}").status_code == 404

    login("auth0|alice")
    assert client.get(f"/api/weight-entries/{entry_id}").status_code == 200


def test_update_weight_entry(client, login):
    login()
    entry_id = client.post("/api/weight-entries", json={"weight": 150}).json()["id"]

    response = client.patch(f"/api/weight-entries/{entry_id}", json={"weight": 149.2, "notes": "after run"})
    assert response.status_code == 200
    assert Decimal(str(response.json()["weight"])) == Decimal("149.2")
    assert response.json()["notes"] == "after run"

    assert client.patch(f"/api/weight-entries/{entry_id}", json={}).status_code == 400

    logs = client.get("/api/activity-logs").json()
    assert logs[0]["action"] == "weight_update"
    assert logs[0]["metadata"]["fields"] == ["notes", "weight"]


def test_delete_weight_entry_logs_deleted_values(client, login):
    login()
    entry_id = client.post("/api/weight-entries", json={"weight": 150.5}).json()["id"]

    response = client.delete(f"/api/weight-entries/{entry_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Weight entry deleted successfully"}
    assert client.get(f"/api/weight-entries/{entry_id}").status_code == 404

    log = client.get("/api/activity-logs").json()[0]
    assert log["action"] == "weight_delete"
    assert log["metadata"]["entryId"] == entry_id
    assert Decimal(log["metadata"]["deletedWeight"]) == Decimal("150.5")
    assert log["metadata"]["deletedUnit"] == "lbs"
    actions = [entry["action"] for entry in client.get("/api/activity-logs").json()]
    assert actions == ["weight_delete", "weight_entry"]

    assert client.delete(f"/api/weight-entries/{entry_id}").status_code == 404


def test_upload_weight_photo_creates_photo_entry(client, login):
    login()
    response = client.post(
        "/api/upload-weight-photo",
        files={"image": ("scale.jpg", b"\xff\xd8\xff\xe0fake-jpeg", "image/jpeg")},
    )
    assert response.status_code == 200
    body = response.json()
    assert 100.0 <= body["detectedWeight"] <= 250.0
    assert body["photoPath"].startswith("/uploads/")
    assert body["photoPath"].endswith(".jpg")
    assert body["message"] == "Photo uploaded and weight detected successfully"

    entry = body["weightEntry"]
    assert entry["entryType"] == "photo"
    assert entry["unit"] == "lbs"
    assert entry["photoPath"] == body["photoPath"]
    assert Decimal(str(entry["weight"])) == Decimal(str(body["detectedWeight"]))

    stored = os.path.join(config.UPLOAD_DIR, body["photoPath"].rsplit("/", 1)[-1])
    assert os.path.exists(stored)
    assert client.get(body["photoPath"]).content == b"\xff\xd8\xff\xe0fake-jpeg"

    logs = client.get("/api/activity-logs").json()
    assert [entry["action"] for entry in logs] == ["photo_upload"]
    log = logs[0]
    assert log["metadata"]["photoPath"] == body["photoPath"]


def test_upload_rejects_non_images(client, login):
    login()
    response = client.post(
        "/api/upload-weight-photo",
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Only image files are allowed"}

    response = client.post(
        "/api/upload-weight-photo",
        files={"image": ("empty.png", b"", "image/png")},
    )
    assert response.status_code == 400
    assert client.get("/api/weight-entries").json() == []
    assert client.get("/api/activity-logs").json() == []


def test_activity_log_limit(client, login):
    login()
    for w in (150, 151, 152):
        client.post("/api/weight-entries", json={"weight": w})
    assert len(client.get("/api/activity-logs", params={"limit": 2}).json()) == 2
    assert len(client.get("/api/activity-logs").json()) == 3


def test_each_successful_mutation_logs_exactly_once(client, login):
    login()
    entry_id = client.post("/api/weight-entries", json={"weight": 150}).json()["id"]
    client.delete(f"/api/weight-entries/{entry_id}")
    client.post(
        "/api/upload-weight-photo",
        files={"image": ("scale.png", b"\x89PNGfake", "image/png")},
    )
    rejected = client.post(
        "/api/upload-weight-photo",
        files={"image": ("scale.gif", b"GIF89a", "text/plain")},
    )
    assert rejected.status_code == 400

    actions = [log["action"] for log in client.get("/api/activity-logs").json()]
    assert actions == ["photo_upload", "weight_delete", "weight_entry"]


def test_oversized_upload_is_rejected_before_anything_is_stored(client, login, monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_SIZE_BYTES", 1024)
    login()
    before = set(os.listdir(config.UPLOAD_DIR))

    response = client.post(
        "/api/upload-weight-photo",
        files={"image": ("big.jpg", b"\xff" * 5000, "image/jpeg")},
    )
    assert response.status_code == 400
    assert response.json()["message"].startswith("File too large")
    assert set(os.listdir(config.UPLOAD_DIR)) == before
    assert client.get("/api/weight-entries").json() == []
    assert client.get("/api/activity-logs").json() == []


def test_read_limited_stops_at_the_first_chunk_over_the_limit(monkeypatch):
    monkeypatch.setattr(uploads, "CHUNK_SIZE", 512)
    raw = io.BytesIO(b"\xff" * 50000)
    upload = UploadFile(file=raw, filename="big.jpg", headers=Headers({"content-type": "image/jpeg"}))

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(uploads.read_limited(upload, 1024))
    assert exc_info.value.status_code == 400
    # three 512-byte chunks, not the whole 50 KB body
    assert raw.tell() == 1536

    small = UploadFile(file=io.BytesIO(b"abc"), filename="s.jpg")
    assert asyncio.run(uploads.read_limited(small, 1024)) == b"abc"


def test_failed_photo_insert_removes_saved_file(client, login, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("insert failed")

    login()
    before = set(os.listdir(config.UPLOAD_DIR))
    monkeypatch.setattr(storage, "create_weight_entry", broken)

    with pytest.raises(RuntimeError):
        client.post(
            "/api/upload-weight-photo",
            files={"image": ("scale.jpg", b"\xff\xd8fake", "image/jpeg")},
        )
    assert set(os.listdir(config.UPLOAD_DIR)) == before
