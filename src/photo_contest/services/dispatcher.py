"""Routing of inbound chat events into the submission flow."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from photo_contest.domain.errors import (
    ContestError,
    IngestionError,
    LockedError,
    SubmissionsClosedError,
)
from photo_contest.domain.events import (
    EventOutcome,
    EventType,
    InboundEvent,
    OutcomeKind,
)
from photo_contest.services.housekeeping import Housekeeper
from photo_contest.services.sessions import SessionService, is_entry_command

CLOSED_TEXT = (
    "⏸️ Photo submissions are closed.\n\n"
    "Thanks for joining in! Feel free to share your photos with us directly 🙏"
)
RETRY_TEXT = (
    "😅 The connection was unstable, please try again.\n\n"
    "If it keeps failing, wait a few seconds and pick your category again 📶"
)
LOCKED_TEXT = (
    "🔒 Your entry has already been confirmed and can no longer be replaced.\n\n"
    "Thanks for taking part!"
)
SELECT_CATEGORY_TEXT = (
    "Please pick a category from the menu first 🎯\n\n"
    "Then send your best photo 📸"
)
PHOTOS_ONLY_TEXT = (
    "📷 Sorry, only photos are accepted for now.\n\nPlease send a photo instead 📸"
)

_logger = logging.getLogger(__name__)
_MEDIA_EVENTS = (EventType.IMAGE, EventType.VIDEO)


@dataclass
class UserLocks:
    """Per-user mutexes, dropped once nobody holds or waits on them."""

    _locks: dict[str, asyncio.Lock] = field(default_factory=dict)
    _holders: dict[str, int] = field(default_factory=dict)

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        """Serialize everything done for one user inside the block."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._holders[user_id] = self._holders.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[user_id] -= 1
            if not self._holders[user_id]:
                del self._holders[user_id]
                del self._locks[user_id]

    def __len__(self) -> int:
        return len(self._locks)


@dataclass
class EventDispatcher:
    """Classify events, run them one user at a time, and map errors to replies."""

    session_service: SessionService
    housekeeper: Housekeeper
    locks: UserLocks = field(default_factory=UserLocks)
    debug_errors: bool = False

    async def dispatch(self, event: InboundEvent) -> EventOutcome:
        """Handle a single inbound event and return what to send back."""
        async with self.locks.hold(event.user_id):
            if event.type in _MEDIA_EVENTS and event.payload:
                self.housekeeper.record_activity()
            try:
                outcome = await self._route(event)
            except ContestError as exc:
                outcome = _error_outcome(exc, self.debug_errors)
            except Exception:
                _logger.exception(
                    "Unexpected error while handling event",
                    extra={"user_id": event.user_id, "event_type": event.type},
                )
                return EventOutcome.silent()
        if outcome.kind is not OutcomeKind.PASSTHROUGH:
            self.housekeeper.record_activity()
        return outcome

    async def _route(self, event: InboundEvent) -> EventOutcome:
        sessions = self.session_service
        if event.type is EventType.TEXT:
            text = (event.payload or "").strip()
            if sessions.is_waiting_name(event.user_id):
                return sessions.on_name_text(event.user_id, text)
            if is_entry_command(text):
                return sessions.on_category_command(event.user_id, text)
            return EventOutcome.passthrough()
        if event.type is EventType.IMAGE and event.payload:
            return await sessions.on_image_event(event.user_id, event.payload)
        if event.type is EventType.VIDEO:
            return EventOutcome.reply(PHOTOS_ONLY_TEXT)
        return EventOutcome.passthrough()


def _error_outcome(exc: ContestError, debug: bool = False) -> EventOutcome:
    """Turn an expected flow failure into a user-facing reply."""
    if isinstance(exc, SubmissionsClosedError):
        return EventOutcome.reply(CLOSED_TEXT)
    if isinstance(exc, IngestionError):
        return EventOutcome.reply(_with_debug(RETRY_TEXT, exc, debug))
    if isinstance(exc, LockedError):
        return EventOutcome.reply(LOCKED_TEXT)
    return EventOutcome.reply(SELECT_CATEGORY_TEXT)


def _with_debug(text: str, exc: Exception, debug: bool) -> str:
    """Append the underlying failure to a reply when running locally."""
    if not debug:
        return text
    cause = exc.__cause__ or exc
    return f"{text}\n\n(debug: {type(cause).__name__}: {cause})"
