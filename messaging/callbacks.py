from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CallbackAction(str, Enum):
    APPROVE = "approve"
    DECLINE = "decline"

    @property
    def past_tense(self) -> str:
        return f"{self.value}d"


@dataclass(frozen=True)
class CallbackPayload:
    """
    Inline button payload. On the wire it stays "<action>_<bookingId>",
    e.g. "approve_17", split on the first underscore.
    """
    action: CallbackAction
    booking_id: int

    def encode(self) -> str:
        return f"{self.action.value}_{self.booking_id}"

    @classmethod
    def parse(cls, data: Optional[str]) -> Optional["CallbackPayload"]:
        """Returns None for anything that is not a known action with an integer id."""
        if not data or "_" not in data:
            return None
        action, _, raw_id = data.partition("_")
        try:
            return cls(action=CallbackAction(action), booking_id=int(raw_id))
        except ValueError:
            return None
