"""Bounded in-memory catalog of contest submissions."""

import logging
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from photo_contest.domain.control import ContestFlags
from photo_contest.domain.errors import (
    ContestError,
    LockedError,
    SubmissionNotFoundError,
)
from photo_contest.domain.submissions import (
    BatchResult,
    PutResult,
    SubmissionRecord,
    SubmissionUpdate,
)

_logger = logging.getLogger(__name__)


@dataclass
class SubmissionCatalog:
    """Submission store with FIFO eviction and finalized-record protection.

    Entries keep the position of their first insert, so a user who keeps
    re-submitting still ages out in arrival order.
    """

    capacity: int
    flags: ContestFlags
    _records: OrderedDict[str, SubmissionRecord] = field(
        default_factory=OrderedDict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be positive")

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def get(self, key: str) -> SubmissionRecord | None:
        """Return a record by key, if present."""
        return self._records.get(key)

    def list_records(self) -> list[SubmissionRecord]:
        """Return all records, oldest first."""
        return list(self._records.values())

    def is_finalized(self, key: str) -> bool:
        """Return true when the record under key is approved or a winner."""
        record = self._records.get(key)
        return record is not None and record.is_finalized

    def put(self, record: SubmissionRecord) -> PutResult:
        """Insert or overwrite a record, evicting the oldest entry when full."""
        current = self._records.get(record.key)
        if current is not None:
            if current.is_finalized:
                _logger.info(
                    "Rejected overwrite of finalized submission",
                    extra={"key": record.key},
                )
                raise LockedError(record.key)
            self._records[record.key] = record
            return PutResult(record=record, replaced=True)

        evicted_key = None
        if len(self._records) >= self.capacity:
            evicted_key, _ = self._records.popitem(last=False)
            _logger.info(
                "Catalog at capacity, evicted oldest submission %s", evicted_key
            )
        self._records[record.key] = record
        return PutResult(record=record, replaced=False, evicted_key=evicted_key)

    def set_status(self, key: str, status: str) -> SubmissionRecord:
        """Set the curator status of a record."""
        record = self._require(key)
        updated = replace(record, status=status)
        self._records[key] = updated
        return updated

    def set_winner(self, key: str, value: bool = True) -> SubmissionRecord:
        """Mark a record as its category winner, clearing any previous one."""
        if self.flags.winners_locked:
            raise LockedError("winners are locked")
        record = self._require(key)
        if value:
            for other_key, other in self._records.items():
                if (
                    other_key != key
                    and other.is_winner
                    and other.category == record.category
                ):
                    self._records[other_key] = replace(other, is_winner=False)
        updated = replace(record, is_winner=value)
        self._records[key] = updated
        return updated

    def batch_update(self, updates: Iterable[SubmissionUpdate]) -> BatchResult:
        """Apply several status/winner changes, skipping the ones that fail."""
        updated = 0
        skipped = 0
        for update in updates:
            try:
                self._require(update.key)
                if update.is_winner is not None:
                    self.set_winner(update.key, update.is_winner)
                if update.status is not None:
                    self.set_status(update.key, update.status)
            except ContestError as exc:
                skipped += 1
                _logger.info("Skipped batch update for %s: %r", update.key, exc)
                continue
            updated += 1
        return BatchResult(updated=updated, skipped=skipped)

    def clear(self) -> int:
        """Remove every record and reset the guest counter."""
        removed = len(self._records)
        self._records.clear()
        self.flags.guest_counter = 0
        return removed

    def _require(self, key: str) -> SubmissionRecord:
        record = self._records.get(key)
        if record is None:
            raise SubmissionNotFoundError(key)
        return record
