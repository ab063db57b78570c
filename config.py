import os

from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

load_dotenv(os.path.join(BASE_DIR, ".env"))


def _get_bool(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to this file as scheduler.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "scheduler.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # The single Telegram identity allowed on admin routes and shown decision prompts
    ADMIN_TELEGRAM_ID = (os.getenv("ADMIN_TELEGRAM_ID") or "").strip() or None

    # Telegram Bot API
    BOT_TOKEN = os.getenv("BOT_TOKEN")
    TELEGRAM_API_BASE = os.getenv("TELEGRAM_API_BASE", "https://api.telegram.org")
    TELEGRAM_TIMEOUT_SECONDS = float(os.getenv("TELEGRAM_TIMEOUT_SECONDS", "10"))
    # Echoed back by Telegram in X-Telegram-Bot-Api-Secret-Token when set
    TELEGRAM_WEBHOOK_SECRET = os.getenv("TELEGRAM_WEBHOOK_SECRET")

    # Web app opened by the /start button
    FRONTEND_URL = os.getenv("FRONTEND_URL")

    # Public base URL of this service, the webhook lives at <BACKEND_URL>/api/bot
    BACKEND_URL = os.getenv("BACKEND_URL")
    REGISTER_WEBHOOK_ON_STARTUP = _get_bool("REGISTER_WEBHOOK_ON_STARTUP", False)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Basic app settings
    DEBUG = False
