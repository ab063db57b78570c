from functools import wraps
from flask import current_app, g, jsonify

from utils.errors import AuthorizationError

def is_admin(telegram_id, admin_telegram_id) -> bool:
    """Plain equality against the configured administrator identity."""
    if telegram_id is None or not admin_telegram_id:
        return False
    return str(telegram_id).strip() == str(admin_telegram_id).strip()

def current_role() -> str:
    admin_id = current_app.config.get("ADMIN_TELEGRAM_ID")
    return "admin" if is_admin(getattr(g, "telegram_id", None), admin_id) else "user"

def require_admin(fn):
    """
    Usage: @require_admin
    Caller identity comes from utils.auth_context.load_current_identity.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "telegram_id", None) is None:
            return jsonify(error="telegramId required"), 401

        if current_role() != "admin":
            raise AuthorizationError("Forbidden")

        return fn(*args, **kwargs)
    return wrapper
