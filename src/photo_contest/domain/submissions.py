"""Domain models for contest submissions."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Category(StrEnum):
    """Contest categories, in matching priority order."""

    GROOM = "groom"
    BRIDE = "bride"
    CREATIVE = "creative"


CATEGORY_TOKENS: dict[Category, tuple[str, ...]] = {
    Category.GROOM: ("groom", "新郎"),
    Category.BRIDE: ("bride", "新娘"),
    Category.CREATIVE: ("creative", "創意"),
}

CATEGORY_LABELS: dict[Category, str] = {
    Category.GROOM: "Best Groom Award",
    Category.BRIDE: "Best Bride Award",
    Category.CREATIVE: "Best Creative Award",
}

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"


@dataclass(frozen=True)
class SubmissionRecord:
    """A single photo submission held in the catalog."""

    key: str
    user_id: str
    category: Category
    media_ref: str
    uploader_name: str
    status: str = STATUS_PENDING
    is_winner: bool = False
    created_at: datetime | None = None

    @property
    def is_finalized(self) -> bool:
        """Approved or winning records cannot be replaced by the uploader."""
        return self.status == STATUS_APPROVED or self.is_winner


@dataclass(frozen=True)
class PutResult:
    """Outcome of inserting a record into the catalog."""

    record: SubmissionRecord
    replaced: bool
    evicted_key: str | None = None


@dataclass(frozen=True)
class SubmissionUpdate:
    """Admin change for a single catalog entry."""

    key: str
    status: str | None = None
    is_winner: bool | None = None


@dataclass(frozen=True)
class BatchResult:
    """Summary of a batch update."""

    updated: int
    skipped: int
