from .health import health_bp
from .booking import booking_bp
from .telegram_webhook import webhook_bp
