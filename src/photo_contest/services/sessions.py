"""Session state machine for photo contest entries."""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import uuid4

from photo_contest.domain.errors import (
    IngestionError,
    LockedError,
    StateError,
    SubmissionsClosedError,
)
from photo_contest.domain.events import EventOutcome
from photo_contest.domain.sessions import Session, WaitingName, WaitingPhoto
from photo_contest.domain.submissions import (
    CATEGORY_LABELS,
    CATEGORY_TOKENS,
    Category,
    SubmissionRecord,
)
from photo_contest.services.catalog import SubmissionCatalog
from photo_contest.services.control import ControlService
from photo_contest.services.ingestion import MediaIngestionPipeline
from photo_contest.services.timers import TimerService

ENTRY_MARKERS = ("#entry", "/entry", "#我要報名")

_logger = logging.getLogger(__name__)


@dataclass
class SessionService:
    """Guides each user from category choice to photo to nickname.

    A user has no session (idle), a ``WaitingPhoto`` session after picking a
    category, or a ``WaitingName`` session once the photo has been stored.
    Finishing the name step commits the entry to the catalog and ends the
    session.
    """

    catalog: SubmissionCatalog
    ingestion: MediaIngestionPipeline
    control: ControlService
    timer: TimerService
    max_nickname_length: int = 10
    max_remembered_categories: int = 1000
    sessions: dict[str, Session] = field(default_factory=dict)
    last_categories: OrderedDict[str, Category] = field(default_factory=OrderedDict)

    def get_session(self, user_id: str) -> Session | None:
        """Return the active session for a user, if any."""
        return self.sessions.get(user_id)

    def is_waiting_name(self, user_id: str) -> bool:
        """Return true when the user's next text is their nickname."""
        return isinstance(self.sessions.get(user_id), WaitingName)

    def on_category_command(self, user_id: str, text: str) -> EventOutcome:
        """Start (or restart) an entry for the category named in the text."""
        if not self.control.flags.submissions_open:
            raise SubmissionsClosedError(user_id)
        category = parse_category(text)
        if category is None:
            return EventOutcome.passthrough()
        self.sessions[user_id] = WaitingPhoto(
            user_id=user_id, category=category, last_updated=self.timer.now()
        )
        self._remember_category(user_id, category)
        return EventOutcome.silent()

    async def on_image_event(self, user_id: str, media_handle: str) -> EventOutcome:
        """Store the photo for the user's pending entry."""
        flags = self.control.flags
        if not flags.submissions_open:
            raise SubmissionsClosedError(user_id)
        if flags.test_mode:
            return await self._auto_submit(user_id, media_handle)
        if self.catalog.is_finalized(user_id):
            self.sessions.pop(user_id, None)
            raise LockedError(user_id)

        session = self.sessions.get(user_id)
        if not isinstance(session, WaitingPhoto):
            raise StateError("Select a category before sending a photo.")

        try:
            media_ref = await self.ingestion.ingest(media_handle, user_id)
        except IngestionError:
            self.sessions.pop(user_id, None)
            _logger.exception("Photo ingestion failed", extra={"user_id": user_id})
            raise

        if self.sessions.get(user_id) is not session:
            _logger.info(
                "Session ended during photo ingestion, dropping photo",
                extra={"user_id": user_id},
            )
            raise StateError("Session expired while the photo was being stored.")

        self.sessions[user_id] = WaitingName(
            user_id=user_id,
            category=session.category,
            media_ref=media_ref,
            last_updated=self.timer.now(),
        )
        return EventOutcome.reply(
            "📸 Got your photo!\n\n"
            f"Reply with your nickname (up to {self.max_nickname_length} "
            "characters) to finish your entry.\n"
            "For example: Cousin Alex 👇"
        )

    def on_name_text(self, user_id: str, text: str) -> EventOutcome:
        """Commit the entry under the given nickname."""
        session = self.sessions.get(user_id)
        if not isinstance(session, WaitingName):
            raise StateError("There is no photo waiting for a nickname.")
        name = truncate_nickname(text, self.max_nickname_length)
        if not name:
            return EventOutcome.reply("Please reply with a nickname to finish.")

        key = user_id if not self.control.flags.test_mode else _unique_key(user_id)
        record = SubmissionRecord(
            key=key,
            user_id=user_id,
            category=session.category,
            media_ref=session.media_ref,
            uploader_name=name,
            created_at=self.timer.now(),
        )
        try:
            result = self.catalog.put(record)
        finally:
            self.sessions.pop(user_id, None)

        _logger.info(
            "Entry saved for %s (%s), %s entries in catalog",
            name,
            session.category,
            len(self.catalog),
        )
        if result.replaced:
            return EventOutcome.reply(f"Got it, {name}! Your entry has been updated ✨")
        return EventOutcome.reply(f"You're in! Thanks for taking part, {name} 🏆")

    def expire_stale(self, now: datetime, timeout_seconds: float) -> int:
        """Drop sessions idle for longer than the timeout."""
        cutoff = now - timedelta(seconds=timeout_seconds)
        stale = [
            user_id
            for user_id, session in self.sessions.items()
            if session.last_updated < cutoff
        ]
        for user_id in stale:
            del self.sessions[user_id]
        return len(stale)

    def clear(self) -> int:
        """Drop every session and remembered category."""
        removed = len(self.sessions)
        self.sessions.clear()
        self.last_categories.clear()
        return removed

    def _remember_category(self, user_id: str, category: Category) -> None:
        self.last_categories[user_id] = category
        self.last_categories.move_to_end(user_id)
        while len(self.last_categories) > self.max_remembered_categories:
            self.last_categories.popitem(last=False)

    async def _auto_submit(self, user_id: str, media_handle: str) -> EventOutcome:
        session = self.sessions.get(user_id)
        if isinstance(session, WaitingPhoto):
            category = session.category
        else:
            category = self.last_categories.get(user_id, Category.CREATIVE)

        try:
            media_ref = await self.ingestion.ingest(media_handle, user_id)
        except IngestionError:
            _logger.exception(
                "Test mode photo ingestion failed", extra={"user_id": user_id}
            )
            raise
        name = self.control.next_guest_name()
        self.catalog.put(
            SubmissionRecord(
                key=_unique_key(user_id),
                user_id=user_id,
                category=category,
                media_ref=media_ref,
                uploader_name=name,
                created_at=self.timer.now(),
            )
        )
        _logger.info("Test entry saved for %s (%s)", name, category)
        return EventOutcome.reply(
            "🧪 Test mode entry received!\n\n"
            f"Auto name: {name}\n"
            f"Category: {CATEGORY_LABELS[category]}\n\n"
            "Further photos go to the same category.\n"
            "Pick another category from the menu to switch 📸"
        )


def is_entry_command(text: str) -> bool:
    """Return true when the text asks to enter the contest."""
    lowered = text.lower()
    return any(marker in lowered for marker in ENTRY_MARKERS)


def parse_category(text: str) -> Category | None:
    """Return the first category named in the text, in priority order."""
    lowered = text.lower()
    for category in Category:
        if any(token in lowered for token in CATEGORY_TOKENS[category]):
            return category
    return None


def truncate_nickname(text: str, max_length: int) -> str:
    """Strip and cut a nickname to the maximum length."""
    return text.strip()[:max_length].strip()


def _unique_key(user_id: str) -> str:
    return f"{user_id}_{uuid4().hex[:12]}"
