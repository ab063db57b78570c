from flask import current_app

from .telegram import TelegramClient, TelegramError, MessageLocation
from .callbacks import CallbackAction, CallbackPayload


def get_telegram() -> TelegramClient:
    """The client built once by create_app."""
    return current_app.extensions["telegram"]
