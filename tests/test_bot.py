import pytest

from conftest import ADMIN_ID
from models import db
from models.booking import Booking
from models.slot import Slot


@pytest.fixture()
def booking_id(client):
    r = client.post("/api/slots", json={"datetimeUtc": "2030-01-01T10:00:00Z"},
                    headers={"X-Telegram-Id": ADMIN_ID})
    slot_id = r.get_json()["id"]
    r = client.post("/api/bookings", json={"telegramId": "42", "name": "Ada", "slotId": slot_id})
    return r.get_json()["bookingId"]


def _callback(client, data, sender=int(ADMIN_ID)):
    update = {
        "update_id": 1,
        "callback_query": {
            "id": "cbq-1",
            "from": {"id": sender},
            "data": data,
            "message": {"message_id": 55, "chat": {"id": sender}},
        },
    }
    return client.post("/api/bot", json=update)


def _message(client, text, sender=42):
    return client.post("/api/bot", json={
        "update_id": 2,
        "message": {"message_id": 3, "from": {"id": sender}, "chat": {"id": sender}, "text": text},
    })


def test_start_for_user(client, telegram):
    assert _message(client, "/start").status_code == 200
    [msg] = telegram.sent
    assert msg["chat_id"] == 42
    assert msg["text"].startswith("Welcome!")
    button = msg["reply_markup"]["inline_keyboard"][0][0]
    assert button == {"text": "Book a Call", "web_app": {"url": "https://front.example"}}


def test_start_for_admin(client, telegram):
    _message(client, "/start", sender=int(ADMIN_ID))
    button = telegram.sent[0]["reply_markup"]["inline_keyboard"][0][0]
    assert button["text"] == "Open Admin Panel"


def test_other_message_echoes_user_id(client, telegram):
    _message(client, "hello", sender=777)
    assert telegram.sent == [{"chat_id": 777, "text": "Your Telegram user ID is: 777", "reply_markup": None}]


def test_approve_callback(client, app, telegram, booking_id):
    assert _callback(client, f"approve_{booking_id}").status_code == 200

    assert telegram.answered[-1] == {"id": "cbq-1", "text": "Booking approved."}
    assert telegram.sent[-1]["chat_id"] == "42"
    assert telegram.edited[-1]["location"].message_id == 55
    with app.app_context():
        booking = db.session.get(Booking, booking_id)
        assert booking.status == "approved"
        assert db.session.get(Slot, booking.slot_id).available is False


def test_decline_callback_frees_slot(client, app, telegram, booking_id):
    _callback(client, f"decline_{booking_id}")

    assert telegram.answered[-1]["text"] == "Booking declined."
    with app.app_context():
        booking = db.session.get(Booking, booking_id)
        assert booking.status == "declined"
        assert db.session.get(Slot, booking.slot_id).available is True
    assert len(client.get("/api/slots").get_json()) == 1


def test_second_decision_is_refused(client, app, telegram, booking_id):
    _callback(client, f"approve_{booking_id}")
    _callback(client, f"decline_{booking_id}")

    assert telegram.answered[-1]["text"] == "Booking already approved."
    with app.app_context():
        assert db.session.get(Booking, booking_id).status == "approved"


def test_unknown_booking_callback(client, telegram):
    assert _callback(client, "decline_424242").status_code == 200
    assert telegram.answered == [{"id": "cbq-1", "text": "Booking not found."}]
    assert telegram.sent == []


def test_malformed_callback(client, telegram):
    _callback(client, "cancel_1")
    _callback(client, "approve_abc")
    assert [a["text"] for a in telegram.answered] == ["Unknown action.", "Unknown action."]


def test_non_admin_callback_rejected(client, app, telegram, booking_id):
    _callback(client, f"approve_{booking_id}", sender=42)

    assert telegram.answered[-1]["text"] == "Not allowed."
    with app.app_context():
        assert db.session.get(Booking, booking_id).status == "pending"


def test_webhook_secret(client, app, telegram):
    app.config["TELEGRAM_WEBHOOK_SECRET"] = "s3cret"

    r = _message(client, "/start")
    assert r.status_code == 403
    assert telegram.sent == []

    r = client.post("/api/bot", json={"update_id": 9, "message": {"chat": {"id": 1}, "from": {"id": 1}, "text": "/start"}},
                    headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"})
    assert r.status_code == 200
    assert len(telegram.sent) == 1


def test_webhook_rejects_non_json(client):
    r = client.post("/api/bot", data="nope", content_type="text/plain")
    assert r.status_code == 400
