"""
Dispatch of inbound Telegram updates (webhook mode).

Only two kinds of update matter: text messages (``/start`` and everything
else) and callback queries from the Approve/Decline buttons.
"""
import logging

from flask import current_app

from security.rbac import is_admin
from services.booking import decide_booking
from utils.errors import BookingAlreadyDecided

from .callbacks import CallbackPayload
from .keyboards import web_app_keyboard
from .telegram import MessageLocation, TelegramClient, TelegramError

logger = logging.getLogger(__name__)

WELCOME_USER = "Welcome! Click below to book a call."
WELCOME_ADMIN = "Welcome back! Open the admin panel to manage slots and bookings."


def handle_update(update: dict, telegram: TelegramClient) -> None:
    if not isinstance(update, dict):
        logger.warning("ignoring non-object update")
        return

    if "callback_query" in update:
        handle_callback_query(update["callback_query"], telegram)
    elif "message" in update:
        handle_message(update["message"], telegram)
    else:
        logger.debug("ignoring update %s", update.get("update_id"))


def handle_message(message: dict, telegram: TelegramClient) -> None:
    chat_id = (message.get("chat") or {}).get("id")
    sender_id = (message.get("from") or {}).get("id")
    text = (message.get("text") or "").strip()
    if chat_id is None:
        return

    if text.split(" ", 1)[0].split("@", 1)[0] == "/start":
        handle_start(chat_id, sender_id, telegram)
        return

    logger.info("message from Telegram user %s", sender_id)
    try:
        telegram.send_message(chat_id, f"Your Telegram user ID is: {sender_id}")
    except TelegramError:
        logger.exception("could not reply to chat %s", chat_id)


def handle_start(chat_id, sender_id, telegram: TelegramClient) -> None:
    frontend_url = current_app.config.get("FRONTEND_URL")
    if is_admin(sender_id, current_app.config.get("ADMIN_TELEGRAM_ID")):
        text, markup = WELCOME_ADMIN, web_app_keyboard("Open Admin Panel", frontend_url)
    else:
        text, markup = WELCOME_USER, web_app_keyboard("Book a Call", frontend_url)

    try:
        telegram.send_message(chat_id, text, reply_markup=markup)
    except TelegramError:
        logger.exception("could not send welcome to chat %s", chat_id)


def handle_callback_query(query: dict, telegram: TelegramClient) -> None:
    query_id = query.get("id")
    sender_id = (query.get("from") or {}).get("id")
    payload = CallbackPayload.parse(query.get("data"))

    if payload is None:
        logger.warning("unrecognised callback data %r", query.get("data"))
        _answer(telegram, query_id, "Unknown action.")
        return

    # Only the configured administrator may decide
    if not is_admin(sender_id, current_app.config.get("ADMIN_TELEGRAM_ID")):
        logger.warning("callback %s from non-admin %s rejected", payload.encode(), sender_id)
        _answer(telegram, query_id, "Not allowed.")
        return

    message = query.get("message") or {}
    location = None
    if message.get("message_id") is not None and (message.get("chat") or {}).get("id") is not None:
        location = MessageLocation(chat_id=message["chat"]["id"], message_id=message["message_id"])

    try:
        booking = decide_booking(
            telegram,
            payload.booking_id,
            payload.action,
            admin_message=location,
            actor_telegram_id=sender_id,
        )
    except BookingAlreadyDecided as exc:
        _answer(telegram, query_id, f"Booking already {exc.status}.")
        return

    if booking is None:
        _answer(telegram, query_id, "Booking not found.")
        return

    _answer(telegram, query_id, f"Booking {payload.action.past_tense}.")


def _answer(telegram: TelegramClient, query_id, text: str) -> None:
    if not query_id:
        return
    try:
        telegram.answer_callback_query(query_id, text)
    except TelegramError:
        logger.exception("could not answer callback %s", query_id)
