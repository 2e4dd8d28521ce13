"""End-to-end tests through the HTTP layer."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch
from app.config import settings
from app.main import app
from app.routers import vehicles as vehicles_router
from app.utils.rate_limiter import rate_limiter

API = "/api/v1"


@pytest.fixture
def client(db):
    rate_limiter.reset()
    return TestClient(app)


def register(client, code, name="Ana", password="secret"):
    resp = client.post(f"{API}/auth/register",
                       json={"name": name, "registration_code": code, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def admin(client):
    return register(client, "000000", name="Admin")


@pytest.fixture
def user(client):
    return register(client, "111111")


def create_vehicle(client, admin, model="Sedan", plate="abc-123"):
    resp = client.post(f"{API}/vehicles", data={"model": model, "plate": plate}, headers=admin)
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestAuthentication:
    def test_no_token(self, client):
        resp = client.get(f"{API}/trips/available")
        assert resp.status_code == 401

    def test_garbage_token(self, client):
        resp = client.get(f"{API}/trips/available", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_query_token_accepted(self, client, user):
        token = user["Authorization"].split(" ", 1)[1]
        assert client.get(f"{API}/trips/available?token={token}").status_code == 200

    @pytest.mark.parametrize("method,path", [
        ("get", "/admin/trips/pending"),
        ("get", "/admin/trips/active"),
        ("get", "/admin/stats"),
        ("get", "/admin/trips/export"),
        ("post", "/admin/trips/1/start"),
        ("post", "/admin/trips/1/stop"),
    ])
    def test_admin_routes_forbidden_for_standard(self, client, user, method, path):
        resp = getattr(client, method)(f"{API}{path}", headers=user)
        assert resp.status_code == 403

    def test_vehicle_creation_forbidden_for_standard(self, client, user):
        resp = client.post(f"{API}/vehicles", data={"model": "Van", "plate": "X"}, headers=user)
        assert resp.status_code == 403

    def test_login(self, client, user):
        resp = client.post(f"{API}/auth/login", json={"registration_code": "111111", "password": "secret"})
        assert resp.status_code == 200
        assert resp.json()["account"]["is_admin"] is False

    def test_login_wrong_password(self, client, user):
        resp = client.post(f"{API}/auth/login", json={"registration_code": "111111", "password": "bad"})
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Invalid credentials"}

    def test_duplicate_registration(self, client, user):
        resp = client.post(f"{API}/auth/register",
                           json={"name": "Ana 2", "registration_code": "111111", "password": "x"})
        assert resp.status_code == 409


class TestFleet:
    def test_plate_uppercased_and_unique(self, client, admin):
        vehicle = create_vehicle(client, admin, plate="abc-123")
        assert vehicle["plate"] == "ABC-123"
        assert vehicle["is_active"] is True
        resp = client.post(f"{API}/vehicles", data={"model": "Other", "plate": "ABC-123"}, headers=admin)
        assert resp.status_code == 409

    def test_missing_fields(self, client, admin):
        resp = client.post(f"{API}/vehicles", data={"model": "Van"}, headers=admin)
        assert resp.status_code == 400

    def test_photo_upload_unavailable_still_creates(self, client, admin):
        with patch("app.routers.vehicles.storage_service.upload_image", return_value=None) as mock_upload:
            resp = client.post(f"{API}/vehicles", data={"model": "Van", "plate": "VAN-001"},
                               files={"photo": ("van.jpg", b"jpegdata", "image/jpeg")}, headers=admin)
        assert resp.status_code == 200
        assert resp.json()["photo_url"] is None
        mock_upload.assert_called_once_with(b"jpegdata", "image/jpeg", "van.jpg")

    def test_create_runs_in_threadpool(self):
        # Photo upload and DB writes block, so the handler must not run on the event loop
        assert not asyncio.iscoroutinefunction(vehicles_router.create_vehicle)

    def test_non_image_rejected(self, client, admin):
        resp = client.post(f"{API}/vehicles", data={"model": "Van", "plate": "VAN-001"},
                           files={"photo": ("doc.pdf", b"%PDF", "application/pdf")}, headers=admin)
        assert resp.status_code == 400

    def test_toggle_hides_from_available(self, client, admin, user):
        vehicle = create_vehicle(client, admin)
        resp = client.patch(f"{API}/vehicles/{vehicle['id']}/toggle", headers=admin)
        assert resp.json()["is_active"] is False
        assert client.get(f"{API}/trips/available", headers=user).json() == []
        claim = client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "x"}, headers=user)
        assert claim.status_code == 404

    def test_delete_removes_history(self, client, admin, user):
        vehicle = create_vehicle(client, admin)
        client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "x"}, headers=user)
        assert client.delete(f"{API}/vehicles/{vehicle['id']}", headers=admin).status_code == 200
        assert client.get(f"{API}/trips/mine", headers=user).json() == []
        assert client.delete(f"{API}/vehicles/{vehicle['id']}", headers=admin).status_code == 404

    def test_list_shows_in_use(self, client, admin, user):
        vehicle = create_vehicle(client, admin)
        client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "x"}, headers=user)
        listed = client.get(f"{API}/vehicles", headers=user).json()
        assert listed[0]["in_use"] is True


class TestTripLifecycle:
    def test_full_scenario(self, client, admin, user):
        vehicle = create_vehicle(client, admin, model="Sedan", plate="ABC-123")

        resp = client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "client visit"},
                           headers=user)
        assert resp.status_code == 200
        trip = resp.json()
        assert trip["status"] == "requested"
        assert client.get(f"{API}/trips/available", headers=user).json() == []

        pending = client.get(f"{API}/admin/trips/pending", headers=admin).json()
        assert [p["id"] for p in pending] == [trip["id"]]

        started = client.post(f"{API}/admin/trips/{trip['id']}/start", headers=admin).json()
        assert started["status"] == "active"
        assert started["started_at"] is not None
        active = client.get(f"{API}/admin/trips/active", headers=admin).json()
        assert active[0]["started_at_local"]

        stopped = client.post(f"{API}/admin/trips/{trip['id']}/stop", headers=admin).json()
        assert stopped["status"] == "completed"
        assert stopped["ended_at"] is not None
        assert stopped["duration_days"] == 0
        assert stopped["duration_hours"] is not None

        available = client.get(f"{API}/trips/available", headers=user).json()
        assert [v["id"] for v in available] == [vehicle["id"]]

        stats = client.get(f"{API}/admin/stats", headers=admin).json()
        assert stats["completed_trips"] == 1
        assert stats["total_accounts"] == 2

        mine = client.get(f"{API}/trips/mine", headers=user).json()
        assert mine[0]["plate"] == "ABC-123"

    def test_second_requester_conflicts(self, client, admin, user):
        other = register(client, "222222", name="Bruno")
        vehicle = create_vehicle(client, admin)
        first = client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "a"}, headers=user)
        second = client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "b"}, headers=other)
        assert first.status_code == 200
        assert second.status_code == 409

    def test_missing_justification(self, client, admin, user):
        vehicle = create_vehicle(client, admin)
        resp = client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"]}, headers=user)
        assert resp.status_code == 400

    def test_repeat_transitions_not_found(self, client, admin, user):
        vehicle = create_vehicle(client, admin)
        trip = client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "a"},
                           headers=user).json()
        assert client.post(f"{API}/admin/trips/{trip['id']}/stop", headers=admin).status_code == 404
        assert client.post(f"{API}/admin/trips/{trip['id']}/start", headers=admin).status_code == 200
        assert client.post(f"{API}/admin/trips/{trip['id']}/start", headers=admin).status_code == 404
        assert client.post(f"{API}/admin/trips/{trip['id']}/stop", headers=admin).status_code == 200
        assert client.post(f"{API}/admin/trips/{trip['id']}/stop", headers=admin).status_code == 404
        assert client.post(f"{API}/admin/trips/99999/start", headers=admin).json() == {"detail": "Trip not found"}

    def test_export_download(self, client, admin, user):
        vehicle = create_vehicle(client, admin)
        trip = client.post(f"{API}/trips", json={"vehicle_id": vehicle["id"], "justification": "a"},
                           headers=user).json()
        client.post(f"{API}/admin/trips/{trip['id']}/start", headers=admin)
        client.post(f"{API}/admin/trips/{trip['id']}/stop", headers=admin)

        resp = client.get(f"{API}/admin/trips/export", headers=admin)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")
        assert "attachment; filename=fleet_trips_" in resp.headers["content-disposition"]
        assert resp.content[:2] == b"PK"


class TestAdminTools:
    def test_reset_password(self, client, admin, user):
        resp = client.post(f"{API}/admin/reset-password", json={"registration_code": "111111"}, headers=admin)
        assert resp.status_code == 200
        login = client.post(f"{API}/auth/login", json={"registration_code": "111111", "password": "123456"})
        assert login.status_code == 200

    def test_reset_unknown(self, client, admin):
        resp = client.post(f"{API}/admin/reset-password", json={"registration_code": "999999"}, headers=admin)
        assert resp.status_code == 404

    def test_health(self, client):
        body = client.get(f"{API}/health").json()
        assert body["database"] == "ok"
        assert body["expiry_sweeper"] == "stopped"


class TestMalformedInput:
    def test_non_integer_vehicle_id(self, client, user):
        resp = client.post(f"{API}/trips", json={"vehicle_id": "abc", "justification": "x"}, headers=user)
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Invalid input"}

    def test_non_integer_trip_id_in_path(self, client, admin):
        resp = client.post(f"{API}/admin/trips/abc/start", headers=admin)
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Invalid input"}

    def test_non_integer_vehicle_id_in_path(self, client, admin):
        resp = client.patch(f"{API}/vehicles/abc/toggle", headers=admin)
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Invalid input"}


class TestRateLimit:
    def test_over_limit_gets_429(self, client):
        with patch.object(settings, "RATE_LIMIT_REQUESTS", 3):
            codes = [client.get(f"{API}/health").status_code for _ in range(4)]
            last = client.get(f"{API}/health")
        assert codes == [200, 200, 200, 429]
        assert last.status_code == 429
        assert last.json() == {"detail": "Too many requests"}
        assert int(last.headers["Retry-After"]) > 0

    def test_disabled_limiter_lets_everything_through(self, client):
        with patch.object(settings, "RATE_LIMIT_REQUESTS", 1), \
                patch.object(settings, "RATE_LIMIT_ENABLED", False):
            codes = {client.get(f"{API}/health").status_code for _ in range(3)}
        assert codes == {200}


class TestSecurityHeaders:
    def test_headers_on_api_responses(self, client):
        resp = client.get(f"{API}/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Referrer-Policy"] == "no-referrer"
        assert "default-src 'none'" in resp.headers["Content-Security-Policy"]

    def test_headers_on_error_responses(self, client):
        resp = client.get(f"{API}/trips/available")
        assert resp.status_code == 401
        assert resp.headers["X-Frame-Options"] == "DENY"

    def test_docs_page_keeps_cdn_assets(self, client):
        resp = client.get("/docs")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert "Content-Security-Policy" not in resp.headers
