import pytest

from conftest import ADMIN_ID, admin_headers
from models.slot import Slot
from security.rbac import require_admin
from utils.errors import AuthorizationError


def _create_slot(client, when="2030-01-01T10:00:00Z"):
    r = client.post("/api/slots", json={"datetimeUtc": when}, headers=admin_headers())
    assert r.status_code == 201
    return r.get_json()


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}
    r = client.get("/api/test")
    assert r.status_code == 200
    assert r.get_data(as_text=True) == "Hello World"


def test_whoami_roles(client):
    assert client.post("/api/whoami", json={"telegramId": ADMIN_ID}).get_json() == {"role": "admin"}
    assert client.post("/api/whoami", json={"telegramId": int(ADMIN_ID)}).get_json() == {"role": "admin"}
    assert client.post("/api/whoami", json={"telegramId": "42"}).get_json() == {"role": "user"}
    assert client.post("/api/whoami", json={}).get_json() == {"role": "user"}


def test_create_slot_requires_admin(client):
    r = client.post("/api/slots", json={"datetimeUtc": "2030-01-01T10:00:00Z"})
    assert r.status_code == 401

    r = client.post("/api/slots", json={"datetimeUtc": "2030-01-01T10:00:00Z", "telegramId": "42"})
    assert r.status_code == 403
    assert r.get_json() == {"error": "Forbidden"}


def test_create_slot_validation(client):
    r = client.post("/api/slots", json={}, headers=admin_headers())
    assert r.status_code == 400
    assert r.get_json() == {"error": "datetimeUtc is required"}

    r = client.post("/api/slots", json={"datetimeUtc": "soon"}, headers=admin_headers())
    assert r.status_code == 400


def test_admin_identity_from_query_param(client):
    r = client.post(f"/api/slots?telegramId={ADMIN_ID}", json={"datetimeUtc": "2030-01-01T10:00:00Z"})
    assert r.status_code == 201


def test_slot_listing_and_booking_flow(client, telegram):
    slot = _create_slot(client)
    assert slot == {"id": slot["id"], "datetimeUtc": "2030-01-01T10:00:00Z", "available": True}
    assert client.get("/api/slots").get_json() == [slot]

    r = client.post("/api/bookings", json={
        "telegramId": "42", "name": "Ada", "email": "ada@example.com",
        "phone": "+100", "motive": "Intro call", "slotId": slot["id"],
    })
    assert r.status_code == 201
    body = r.get_json()
    assert body["success"] is True
    assert body["status"] == "pending"

    assert client.get("/api/slots").get_json() == []
    assert telegram.sent[0]["chat_id"] == ADMIN_ID

    bookings = client.get("/api/bookings", headers=admin_headers()).get_json()
    assert len(bookings) == 1
    assert bookings[0]["id"] == body["bookingId"]
    assert bookings[0]["user"]["telegramId"] == "42"
    assert bookings[0]["slot"]["id"] == slot["id"]
    assert bookings[0]["slot"]["available"] is False


def test_booking_errors(client):
    r = client.post("/api/bookings", json={"telegramId": "42", "name": "Ada"})
    assert r.status_code == 400
    assert r.get_json() == {"error": "slotId is required"}

    r = client.post("/api/bookings", json={"telegramId": "42", "slotId": 999})
    assert r.status_code == 404

    slot = _create_slot(client)
    client.post("/api/bookings", json={"telegramId": "42", "slotId": slot["id"]})
    r = client.post("/api/bookings", json={"telegramId": "43", "slotId": slot["id"]})
    assert r.status_code == 409


def test_list_bookings_requires_admin(client):
    assert client.get("/api/bookings").status_code == 401
    assert client.get("/api/bookings", headers={"X-Telegram-Id": "42"}).status_code == 403
    assert client.get("/api/bookings", headers=admin_headers()).get_json() == []


def test_past_slots_hidden(client, app):
    _create_slot(client, "2001-01-01T10:00:00Z")
    future = _create_slot(client)

    assert [s["id"] for s in client.get("/api/slots").get_json()] == [future["id"]]
    with app.app_context():
        assert Slot.query.count() == 2


def test_require_admin_raises_authorization_error(app):
    @require_admin
    def admin_only():
        return "ok"

    with app.test_request_context("/api/bookings", headers={"X-Telegram-Id": "42"}):
        app.preprocess_request()
        with pytest.raises(AuthorizationError):
            admin_only()

    with app.test_request_context("/api/bookings", headers=admin_headers()):
        app.preprocess_request()
        assert admin_only() == "ok"


def test_boolean_slot_id_rejected_over_http(client):
    slot = _create_slot(client)
    assert slot["id"] == 1

    r = client.post("/api/bookings", json={"telegramId": "42", "slotId": True})
    assert r.status_code == 400
    assert r.get_json() == {"error": "slotId must be an integer"}
    assert client.get("/api/slots").get_json() == [slot]
