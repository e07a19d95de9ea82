"""Inbound events and outbound outcomes of the submission flow."""

from dataclasses import dataclass
from enum import StrEnum


class EventType(StrEnum):
    """Kinds of chat messages the flow distinguishes."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"


@dataclass(frozen=True)
class InboundEvent:
    """Platform-neutral chat event.

    ``payload`` is the message text for text events and an opaque media handle
    (e.g. a Telegram file id) for image events.
    """

    type: EventType
    user_id: str
    payload: str | None = None


class OutcomeKind(StrEnum):
    """What the transport should do with an event."""

    REPLY = "reply"
    SILENT = "silent"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class EventOutcome:
    """Result of handling one inbound event."""

    kind: OutcomeKind
    text: str | None = None

    @classmethod
    def reply(cls, text: str) -> "EventOutcome":
        return cls(kind=OutcomeKind.REPLY, text=text)

    @classmethod
    def silent(cls) -> "EventOutcome":
        return cls(kind=OutcomeKind.SILENT)

    @classmethod
    def passthrough(cls) -> "EventOutcome":
        return cls(kind=OutcomeKind.PASSTHROUGH)
