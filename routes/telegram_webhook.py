import hmac
import logging

from flask import Blueprint, current_app, jsonify, request

from messaging import get_telegram
from messaging.handlers import handle_update

logger = logging.getLogger(__name__)

webhook_bp = Blueprint("webhook", __name__, url_prefix="/api")

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


@webhook_bp.post("/bot")
def telegram_webhook():
    expected = current_app.config.get("TELEGRAM_WEBHOOK_SECRET")
    if expected:
        supplied = request.headers.get(SECRET_HEADER) or ""
        if not hmac.compare_digest(supplied, expected):
            logger.warning("webhook call with bad secret token from %s", request.remote_addr)
            return jsonify(error="Invalid webhook secret"), 403

    update = request.get_json(silent=True)
    if update is None:
        return jsonify(error="Invalid JSON"), 400

    handle_update(update, get_telegram())
    return jsonify(ok=True), 200
