import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate

from config import Config
from messaging import TelegramClient, TelegramError
from models import db
from routes import health_bp, booking_bp, webhook_bp
from utils.auth_context import load_current_identity
from utils.errors import BookingError

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(webhook_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # One Bot API client per app
    app.extensions["telegram"] = TelegramClient(
        token=app.config.get("BOT_TOKEN"),
        api_base=app.config.get("TELEGRAM_API_BASE", "https://api.telegram.org"),
        timeout_seconds=app.config.get("TELEGRAM_TIMEOUT_SECONDS", 10),
    )

    @app.before_request
    def _load_identity():
        load_current_identity()

    @app.errorhandler(BookingError)
    def _booking_error(exc):
        return jsonify(error=exc.message), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        return resp

    register_cli(app)

    if app.config.get("REGISTER_WEBHOOK_ON_STARTUP"):
        register_webhook(app)

    return app


def webhook_url(app, url=None):
    if url:
        return url
    base = app.config.get("BACKEND_URL")
    if not base:
        return None
    return base.rstrip("/") + "/api/bot"


def register_webhook(app, url=None) -> bool:
    """Point Telegram at this service. Failures are logged, never raised."""
    url = webhook_url(app, url)
    if not url:
        logger.error("Cannot set Telegram webhook: BACKEND_URL not configured")
        return False
    try:
        app.extensions["telegram"].set_webhook(url, secret_token=app.config.get("TELEGRAM_WEBHOOK_SECRET"))
    except TelegramError as exc:
        logger.error("Failed to set Telegram webhook: %s", exc)
        return False
    logger.info("Telegram webhook set to %s", url)
    return True

#-------------------------

def register_cli(app):
    @app.cli.command("set-webhook")
    @click.argument("url", required=False)
    def set_webhook(url):
        """Register <BACKEND_URL>/api/bot (or URL) as the Telegram webhook."""
        if not register_webhook(app, url):
            raise click.ClickException("Webhook not set, see log for details")
        click.echo(f"Webhook set to {webhook_url(app, url)}")

    @app.cli.command("create-slot")
    @click.argument("datetime_utc")
    def create_slot(datetime_utc):
        """Create an available slot, e.g. 2030-01-01T10:00:00Z."""
        from services.booking import create_slot as _create_slot

        try:
            slot = _create_slot(datetime_utc)
        except BookingError as exc:
            raise click.ClickException(exc.message)
        click.echo(f"Slot {slot.id} created for {slot.datetime_utc.isoformat()}Z")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5000)
