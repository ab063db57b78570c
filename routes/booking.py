from flask import Blueprint, request, jsonify, current_app, g

from messaging import get_telegram
from security.rbac import current_role, require_admin
from services import booking as booking_service
from utils.formatting import to_iso_utc

booking_bp = Blueprint("booking", __name__, url_prefix="/api")


def _slot_json(slot):
    return {
        "id": slot.id,
        "datetimeUtc": to_iso_utc(slot.datetime_utc),
        "available": slot.available,
    }


def _user_json(user):
    return {
        "id": user.id,
        "telegramId": user.telegram_id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "motive": user.motive,
    }


def _booking_json(b):
    return {
        "id": b.id,
        "motive": b.motive,
        "status": b.status,
        "createdAt": b.created_at.isoformat(),
        "decidedAt": b.decided_at.isoformat() if b.decided_at else None,
        "user": _user_json(b.user),
        "slot": _slot_json(b.slot),
    }


# ---------- PUBLIC: who am I ----------
@booking_bp.post("/whoami")
def whoami():
    return jsonify(role=current_role()), 200


# ---------- PUBLIC: view slots ----------
@booking_bp.get("/slots")
def list_slots():
    slots = booking_service.list_available_slots()
    return jsonify([_slot_json(s) for s in slots]), 200


# ---------- ADMIN: create slots ----------
@booking_bp.post("/slots")
@require_admin
def create_slot():
    data = request.get_json(silent=True) or {}
    slot = booking_service.create_slot(data.get("datetimeUtc"), actor_telegram_id=g.telegram_id)
    return jsonify(_slot_json(slot)), 201


# ---------- PUBLIC: book a slot ----------
@booking_bp.post("/bookings")
def create_booking():
    data = request.get_json(silent=True) or {}
    booking = booking_service.create_booking(
        get_telegram(),
        current_app.config.get("ADMIN_TELEGRAM_ID"),
        telegram_id=data.get("telegramId"),
        name=data.get("name"),
        email=data.get("email"),
        phone=data.get("phone"),
        motive=data.get("motive"),
        slot_id=data.get("slotId"),
    )
    return jsonify(success=True, bookingId=booking.id, status=booking.status), 201


# ---------- ADMIN: list upcoming bookings ----------
@booking_bp.get("/bookings")
@require_admin
def list_bookings():
    rows = booking_service.list_bookings()
    return jsonify([_booking_json(b) for b in rows]), 200
