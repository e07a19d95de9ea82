"""Process-wide contest flags."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ContestFlags:
    """Mutable control state read by every component on each event."""

    test_mode: bool = False
    submissions_open: bool = True
    winners_locked: bool = False
    guest_counter: int = 0
    last_activity: datetime | None = None
