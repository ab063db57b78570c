"""
Thin client for the Telegram Bot HTTP API.

Only the handful of methods the booking flow needs are wrapped. Every call
raises TelegramError on transport failures and on responses with ``ok: false``.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class TelegramError(RuntimeError):
    pass


@dataclass(frozen=True)
class MessageLocation:
    """Where a previously sent message lives, used for editMessageText."""
    chat_id: int
    message_id: int


class TelegramClient:
    def __init__(self, token: Optional[str], api_base: str = "https://api.telegram.org",
                 timeout_seconds: float = 10.0, session: Optional[requests.Session] = None):
        self.token = (token or "").strip() or None
        self.api_base = api_base.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        if not self.token:
            raise TelegramError("Bot token not configured")

        url = f"{self.api_base}/bot{self.token}/{method}"
        try:
            r = self.session.post(url, json=payload, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise TelegramError(f"{method} failed: {exc}") from exc

        try:
            data = r.json()
        except ValueError:
            raise TelegramError(f"{method} failed: HTTP {r.status_code}, non-JSON body")

        if not r.ok or not data.get("ok", False):
            raise TelegramError(f"{method} failed: {data.get('description') or r.status_code}")

        logger.debug("telegram %s ok", method)
        return data.get("result")

    def send_message(self, chat_id, text: str, reply_markup: Optional[dict] = None):
        payload = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return self._call("sendMessage", payload)

    def edit_message_text(self, location: MessageLocation, text: str):
        return self._call("editMessageText", {
            "chat_id": location.chat_id,
            "message_id": location.message_id,
            "text": text,
        })

    def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None):
        payload = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        return self._call("answerCallbackQuery", payload)

    def set_webhook(self, url: str, secret_token: Optional[str] = None):
        payload = {"url": url, "allowed_updates": ["message", "callback_query"]}
        if secret_token:
            payload["secret_token"] = secret_token
        return self._call("setWebhook", payload)
