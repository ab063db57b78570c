import pytest

from app import create_app
from config import Config
from messaging import TelegramError
from models import db


ADMIN_ID = "1000"


class SchedulerTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    ADMIN_TELEGRAM_ID = ADMIN_ID
    BOT_TOKEN = "TEST_TOKEN"
    FRONTEND_URL = "https://front.example"
    BACKEND_URL = "https://api.example"
    TELEGRAM_WEBHOOK_SECRET = None
    REGISTER_WEBHOOK_ON_STARTUP = False
    LOG_LEVEL = "DEBUG"


class FakeTelegram:
    """Records Bot API calls instead of sending them."""

    def __init__(self):
        self.sent = []
        self.edited = []
        self.answered = []
        self.webhooks = []
        self.fail = False

    def _maybe_fail(self):
        if self.fail:
            raise TelegramError("network down")

    def send_message(self, chat_id, text, reply_markup=None):
        self._maybe_fail()
        self.sent.append({"chat_id": chat_id, "text": text, "reply_markup": reply_markup})

    def edit_message_text(self, location, text):
        self._maybe_fail()
        self.edited.append({"location": location, "text": text})

    def answer_callback_query(self, callback_query_id, text=None):
        self._maybe_fail()
        self.answered.append({"id": callback_query_id, "text": text})

    def set_webhook(self, url, secret_token=None):
        self._maybe_fail()
        self.webhooks.append({"url": url, "secret_token": secret_token})


@pytest.fixture()
def app():
    app = create_app(SchedulerTestConfig)
    app.extensions["telegram"] = FakeTelegram()
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def telegram(app):
    return app.extensions["telegram"]


def admin_headers():
    return {"X-Telegram-Id": ADMIN_ID}
