"""Control surface for contest-wide flags."""

import logging
from dataclasses import dataclass, field

from photo_contest.domain.control import ContestFlags

_logger = logging.getLogger(__name__)


@dataclass
class ControlService:
    """Owns the contest flags and applies admin toggles."""

    flags: ContestFlags = field(default_factory=ContestFlags)
    guest_name_prefix: str = "Guest "

    def snapshot(self) -> dict[str, object]:
        """Return the current flag values."""
        return {
            "test_mode": self.flags.test_mode,
            "submissions_open": self.flags.submissions_open,
            "winners_locked": self.flags.winners_locked,
            "guest_counter": self.flags.guest_counter,
            "last_activity": self.flags.last_activity.isoformat()
            if self.flags.last_activity
            else None,
        }

    def update(
        self,
        *,
        test_mode: bool | None = None,
        submissions_open: bool | None = None,
        winners_locked: bool | None = None,
    ) -> dict[str, object]:
        """Flip the given flags and return the new snapshot."""
        changes = {
            "test_mode": test_mode,
            "submissions_open": submissions_open,
            "winners_locked": winners_locked,
        }
        for name, value in changes.items():
            if value is None or getattr(self.flags, name) == value:
                continue
            setattr(self.flags, name, value)
            _logger.info("Flag %s set to %s", name, value)
        return self.snapshot()

    def next_guest_name(self) -> str:
        """Return the next auto-generated uploader name for test mode."""
        self.flags.guest_counter += 1
        return f"{self.guest_name_prefix}{self.flags.guest_counter}"
