from datetime import datetime
from models.db import db


class BookingStatus:
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"

    ALL = (PENDING, APPROVED, DECLINED)
    TERMINAL = (APPROVED, DECLINED)


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    slot_id = db.Column(db.Integer, db.ForeignKey("slots.id"), nullable=False, index=True)

    # may differ from the motive stored on the user
    motive = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=BookingStatus.PENDING, index=True)
    # status values: pending, approved, declined

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    decided_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", back_populates="bookings")
    slot = db.relationship("Slot")

    @property
    def is_terminal(self) -> bool:
        return self.status in BookingStatus.TERMINAL
