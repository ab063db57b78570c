from flask import g, request

IDENTITY_HEADER = "X-Telegram-Id"

def _identity_from_request():
    value = request.headers.get(IDENTITY_HEADER)
    if not value:
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            value = data.get("telegramId")
    if not value:
        value = request.args.get("telegramId")
    if value is None:
        return None
    value = str(value).strip()
    return value or None

def load_current_identity():
    g.telegram_id = _identity_from_request()
