"""Domain models for submission sessions."""

from dataclasses import dataclass
from datetime import datetime

from photo_contest.domain.submissions import Category


@dataclass(frozen=True)
class WaitingPhoto:
    """Category chosen, waiting for the photo."""

    user_id: str
    category: Category
    last_updated: datetime


@dataclass(frozen=True)
class WaitingName:
    """Photo stored, waiting for the uploader nickname."""

    user_id: str
    category: Category
    media_ref: str
    last_updated: datetime


Session = WaitingPhoto | WaitingName
