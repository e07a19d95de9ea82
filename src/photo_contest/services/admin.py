"""Admin service for curating submissions and toggling contest flags."""

from dataclasses import dataclass

from photo_contest.domain.errors import SubmissionNotFoundError
from photo_contest.domain.sessions import Session, WaitingName
from photo_contest.domain.submissions import SubmissionRecord, SubmissionUpdate
from photo_contest.services.catalog import SubmissionCatalog
from photo_contest.services.control import ControlService
from photo_contest.services.sessions import SessionService


@dataclass
class AdminService:
    """Service behind the admin endpoints."""

    catalog: SubmissionCatalog
    session_service: SessionService
    control: ControlService

    def list_submissions(self) -> list[dict[str, object]]:
        """Return every catalog entry, oldest first."""
        return [_serialize_record(record) for record in self.catalog.list_records()]

    def get_submission(self, key: str) -> dict[str, object] | None:
        """Return a single entry, if present."""
        record = self.catalog.get(key)
        return _serialize_record(record) if record else None

    def update_submission(
        self, key: str, status: str | None = None, is_winner: bool | None = None
    ) -> dict[str, object]:
        """Apply a winner and/or status change to one entry."""
        if key not in self.catalog:
            raise SubmissionNotFoundError(key)
        if is_winner is not None:
            self.catalog.set_winner(key, is_winner)
        if status is not None:
            self.catalog.set_status(key, status)
        return _serialize_record(self.catalog.get(key))

    def batch_update(self, updates: list[SubmissionUpdate]) -> dict[str, int]:
        """Apply many changes; failures are counted, not raised."""
        result = self.catalog.batch_update(updates)
        return {"updated": result.updated, "skipped": result.skipped}

    def clear_submissions(self) -> dict[str, int]:
        """Remove every entry and session."""
        return {
            "removed": self.catalog.clear(),
            "sessions_removed": self.session_service.clear(),
        }

    def list_sessions(self) -> list[dict[str, object]]:
        """Return in-progress sessions."""
        return [
            _serialize_session(session)
            for session in self.session_service.sessions.values()
        ]

    def get_flags(self) -> dict[str, object]:
        """Return the contest flags and catalog size."""
        return {**self.control.snapshot(), "submissions": len(self.catalog)}

    def update_flags(
        self,
        test_mode: bool | None = None,
        submissions_open: bool | None = None,
        winners_locked: bool | None = None,
    ) -> dict[str, object]:
        """Flip contest flags."""
        self.control.update(
            test_mode=test_mode,
            submissions_open=submissions_open,
            winners_locked=winners_locked,
        )
        return self.get_flags()


def _serialize_record(record: SubmissionRecord) -> dict[str, object]:
    return {
        "key": record.key,
        "user_id": record.user_id,
        "category": str(record.category),
        "url": record.media_ref,
        "uploader": record.uploader_name,
        "status": record.status,
        "is_winner": record.is_winner,
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }


def _serialize_session(session: Session) -> dict[str, object]:
    return {
        "user_id": session.user_id,
        "state": "WAITING_NAME" if isinstance(session, WaitingName) else "WAITING_PHOTO",
        "category": str(session.category),
        "last_updated": session.last_updated.isoformat(),
    }
