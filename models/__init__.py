from .db import db
from .user import User
from .slot import Slot
from .booking import Booking, BookingStatus
from .audit_log import AuditLog
