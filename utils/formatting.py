from datetime import datetime, timezone


def parse_utc(value) -> datetime:
    """
    Parse an ISO-8601 timestamp into a naive UTC datetime.
    Accepts a trailing "Z"; offsets are converted to UTC, naive input is taken as UTC.
    Raises ValueError on anything else.
    """
    if not isinstance(value, str):
        raise ValueError("timestamp must be an ISO-8601 string")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def to_iso_utc(dt: datetime) -> str:
    return dt.replace(microsecond=0).isoformat() + "Z"


def display_utc(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M UTC")
