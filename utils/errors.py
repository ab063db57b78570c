class BookingError(Exception):
    """Base class for errors surfaced to API callers as ``{"error": ...}``."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    status_code = 400


class AuthorizationError(BookingError):
    status_code = 403


class NotFoundError(BookingError):
    status_code = 404


class ConflictError(BookingError):
    status_code = 409


class BookingAlreadyDecided(ConflictError):
    def __init__(self, booking_id: int, status: str):
        super().__init__(f"Booking {booking_id} is already {status}")
        self.booking_id = booking_id
        self.status = status
