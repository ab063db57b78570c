"""
Booking lifecycle shared by the HTTP API and the Telegram callback handler.

A Slot is reserved (available=False) for as long as one of its bookings is
pending or approved, and handed back only when that booking is declined.
Store mutations are committed before any Telegram message goes out; a failed
send is logged and never undoes the mutation.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from messaging import CallbackAction, MessageLocation, TelegramClient, TelegramError
from messaging.keyboards import decision_keyboard
from models import db
from models.booking import Booking, BookingStatus
from models.slot import Slot
from models.user import User
from utils.audit import log_event
from utils.errors import BookingAlreadyDecided, ConflictError, NotFoundError, ValidationError
from utils.formatting import display_utc, parse_utc

logger = logging.getLogger(__name__)


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


def _notify(send, *args, **kwargs) -> bool:
    try:
        send(*args, **kwargs)
        return True
    except TelegramError:
        logger.exception("Telegram delivery failed (%s)", getattr(send, "__name__", "send"))
        return False


# ---------- slots ----------
def create_slot(datetime_utc, actor_telegram_id=None) -> Slot:
    if not datetime_utc:
        raise ValidationError("datetimeUtc is required")
    try:
        when = parse_utc(datetime_utc)
    except ValueError:
        raise ValidationError("Invalid datetimeUtc. Use ISO e.g. 2030-01-01T10:00:00Z")

    slot = Slot(datetime_utc=when, available=True)
    db.session.add(slot)
    db.session.flush()
    log_event("SLOT_CREATE", telegram_id=actor_telegram_id, entity="slot", entity_id=slot.id, commit=False)
    db.session.commit()

    logger.info("slot %s created for %s", slot.id, display_utc(when))
    return slot


def list_available_slots(now: Optional[datetime] = None) -> List[Slot]:
    now = now or datetime.utcnow()
    return (
        Slot.query
        .filter(Slot.available.is_(True), Slot.datetime_utc >= now)
        .order_by(Slot.datetime_utc.asc())
        .all()
    )


# ---------- users ----------
def upsert_user(telegram_id, name=None, email=None, phone=None, motive=None) -> User:
    """
    Find-or-create keyed on telegram_id. An existing user is returned untouched,
    contact details from later bookings are not written back.
    """
    telegram_id = _clean(telegram_id)
    if telegram_id is None:
        raise ValidationError("telegramId is required")

    user = User.query.filter_by(telegram_id=telegram_id).first()
    if user:
        return user

    user = User(
        telegram_id=telegram_id,
        name=_clean(name),
        email=_clean(email),
        phone=_clean(phone),
        motive=_clean(motive),
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # a concurrent request inserted the same telegram_id first
        db.session.rollback()
        user = User.query.filter_by(telegram_id=telegram_id).one()
    return user


# ---------- bookings ----------
def _parse_slot_id(value) -> int:
    if value is None or value == "":
        raise ValidationError("slotId is required")
    # JSON true/false and fractional numbers are not ids
    if isinstance(value, bool):
        raise ValidationError("slotId must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("slotId must be an integer")
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError("slotId must be an integer")


def create_booking(telegram: TelegramClient, admin_telegram_id, telegram_id, name=None,
                   email=None, phone=None, motive=None, slot_id=None) -> Booking:
    slot_id = _parse_slot_id(slot_id)

    user = upsert_user(telegram_id, name=name, email=email, phone=phone, motive=motive)

    slot = db.session.get(Slot, slot_id)
    if not slot:
        raise NotFoundError("Slot not found")

    # Conditional update: only one request can flip available True -> False
    reserved = (
        Slot.query
        .filter_by(id=slot_id, available=True)
        .update({"available": False}, synchronize_session="fetch")
    )
    if not reserved:
        db.session.rollback()
        log_event("BOOKING_FAIL_SLOT_TAKEN", telegram_id=user.telegram_id, entity="slot", entity_id=slot_id)
        raise ConflictError("Slot is no longer available")

    booking = Booking(user_id=user.id, slot_id=slot_id, motive=_clean(motive), status=BookingStatus.PENDING)
    db.session.add(booking)
    db.session.flush()
    # audit row shares the booking's transaction
    log_event("BOOKING_CREATE", telegram_id=user.telegram_id, entity="booking", entity_id=booking.id,
              metadata={"slot_id": slot_id}, commit=False)
    db.session.commit()

    logger.info("booking %s created for slot %s by %s", booking.id, slot_id, user.telegram_id)

    if admin_telegram_id:
        text = (
            f"New booking request from {user.name or name or 'unknown'} "
            f"for {booking.motive or 'an unspecified motive'} "
            f"on {display_utc(slot.datetime_utc)}. Approve?"
        )
        _notify(telegram.send_message, admin_telegram_id, text, reply_markup=decision_keyboard(booking.id))
    else:
        logger.warning("ADMIN_TELEGRAM_ID not configured, booking %s has no decision prompt", booking.id)

    return booking


def list_bookings(now: Optional[datetime] = None) -> List[Booking]:
    """Bookings whose slot is still ahead; older ones stay stored but are not listed."""
    now = now or datetime.utcnow()
    return (
        Booking.query
        .join(Slot, Booking.slot_id == Slot.id)
        .options(joinedload(Booking.user), joinedload(Booking.slot))
        .filter(Slot.datetime_utc >= now)
        .order_by(Slot.datetime_utc.asc())
        .all()
    )


def decide_booking(telegram: TelegramClient, booking_id: int, action: CallbackAction,
                   admin_message: Optional[MessageLocation] = None,
                   actor_telegram_id=None) -> Optional[Booking]:
    """
    Apply the administrator's decision to a pending booking.

    Returns None when the booking does not exist (nothing is changed).
    Raises BookingAlreadyDecided for approved/declined bookings.
    """
    action = CallbackAction(action)

    booking = (
        Booking.query
        .options(joinedload(Booking.user), joinedload(Booking.slot))
        .filter_by(id=booking_id)
        .first()
    )
    if not booking:
        logger.warning("decision %s for unknown booking %s ignored", action.value, booking_id)
        return None

    if booking.is_terminal:
        raise BookingAlreadyDecided(booking.id, booking.status)

    new_status = BookingStatus.APPROVED if action is CallbackAction.APPROVE else BookingStatus.DECLINED

    # Conditional update: only one decision can move a booking out of pending
    decided = (
        Booking.query
        .filter_by(id=booking.id, status=BookingStatus.PENDING)
        .update({"status": new_status, "decided_at": datetime.utcnow()}, synchronize_session="fetch")
    )
    if not decided:
        db.session.rollback()
        current = db.session.get(Booking, booking_id)
        if current is None:
            return None
        raise BookingAlreadyDecided(current.id, current.status)

    if new_status == BookingStatus.DECLINED:
        Slot.query.filter_by(id=booking.slot_id).update({"available": True}, synchronize_session="fetch")

    log_event(f"BOOKING_{action.value.upper()}", telegram_id=actor_telegram_id, entity="booking",
              entity_id=booking.id, metadata={"slot_id": booking.slot_id}, commit=False)
    db.session.commit()

    logger.info("booking %s %s", booking.id, booking.status)

    when = display_utc(booking.slot.datetime_utc)
    if action is CallbackAction.APPROVE:
        user_text = f"Your booking for {when} is approved!"
    else:
        user_text = f"Sorry, your booking for {when} was declined."
    _notify(telegram.send_message, booking.user.telegram_id, user_text)

    if admin_message is not None:
        _notify(
            telegram.edit_message_text,
            admin_message,
            f"Booking for {booking.user.name or booking.user.telegram_id} ({when}) has been {booking.status}.",
        )

    return booking
