"""Clock and timer abstractions."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


class TimerHandle(Protocol):
    """Handle for a scheduled callback."""

    def cancel(self) -> None:
        """Cancel the callback if it has not run yet."""


class TimerService(Protocol):
    """Source of the current time and delayed callbacks."""

    def now(self) -> datetime:
        """Return the current UTC time."""

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> TimerHandle:
        """Schedule a callback after a delay."""


@dataclass
class AsyncioTimerService(TimerService):
    """Timer service backed by the running asyncio event loop."""

    def now(self) -> datetime:
        """Return the current UTC time."""
        return datetime.now(tz=UTC)

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        """Schedule a callback on the running loop."""
        loop = asyncio.get_running_loop()
        return loop.call_later(delay_seconds, callback)
