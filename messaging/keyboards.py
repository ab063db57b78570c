from typing import Optional

from .callbacks import CallbackAction, CallbackPayload


def decision_keyboard(booking_id: int) -> dict:
    return {
        "inline_keyboard": [[
            {"text": "Approve", "callback_data": CallbackPayload(CallbackAction.APPROVE, booking_id).encode()},
            {"text": "Decline", "callback_data": CallbackPayload(CallbackAction.DECLINE, booking_id).encode()},
        ]]
    }


def web_app_keyboard(label: str, url: Optional[str]) -> Optional[dict]:
    if not url:
        return None
    return {"inline_keyboard": [[{"text": label, "web_app": {"url": url}}]]}
