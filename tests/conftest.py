"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from photo_contest.adapters.passthrough_client import PassthroughClient
from photo_contest.adapters.telegram_client import TelegramClient
from photo_contest.config import Settings
from photo_contest.containers import AppContainer
from photo_contest.domain.control import ContestFlags
from photo_contest.services.admin import AdminService
from photo_contest.services.catalog import SubmissionCatalog
from photo_contest.services.commands import StartCommandHandler
from photo_contest.services.control import ControlService
from photo_contest.services.dispatcher import EventDispatcher
from photo_contest.services.housekeeping import Housekeeper
from photo_contest.services.ingestion import (
    MediaIngestionPipeline,
    MediaSource,
    MediaStore,
)
from photo_contest.services.sessions import SessionService
from photo_contest.services.timers import TimerService


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None

    async def send_message(self, chat_id: int, text: str) -> None:
        self.messages.append((chat_id, text))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button


@dataclass
class FakeMediaSource(MediaSource):
    """Fake media source that returns static bytes or fails."""

    content: bytes = b"fake-image-bytes"
    fail: bool = False
    requested: list[str] = field(default_factory=list)

    async def download_file_bytes(self, file_id: str) -> bytes:
        self.requested.append(file_id)
        if self.fail:
            raise RuntimeError("download failed")
        return self.content


@dataclass
class InMemoryMediaStore(MediaStore):
    """In-memory media store returning predictable URLs."""

    stored: list[tuple[str, bytes]] = field(default_factory=list)
    fail: bool = False

    async def store(self, image_bytes: bytes, user_id: str) -> str:
        if self.fail:
            raise RuntimeError("upload failed")
        self.stored.append((user_id, image_bytes))
        return f"https://cdn.example.com/{user_id}/{len(self.stored)}.jpg"


@dataclass
class FakePassthroughClient(PassthroughClient):
    """Fake passthrough client that records forwarded updates."""

    forwarded: list[dict[str, object]] = field(default_factory=list)

    async def forward(self, update: dict[str, object]) -> None:
        self.forwarded.append(update)


@dataclass
class FakeTimerHandle:
    """Handle returned by the fake timer."""

    when: datetime
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeTimerService(TimerService):
    """Manually advanced clock with scheduled callbacks."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    )
    handles: list[FakeTimerHandle] = field(default_factory=list)

    def now(self) -> datetime:
        return self.current

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> FakeTimerHandle:
        handle = FakeTimerHandle(
            when=self.current + timedelta(seconds=delay_seconds), callback=callback
        )
        self.handles.append(handle)
        return handle

    def pending(self) -> list[FakeTimerHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.current + timedelta(seconds=seconds)
        while True:
            due = [handle for handle in self.pending() if handle.when <= target]
            if not due:
                break
            handle = min(due, key=lambda entry: entry.when)
            self.handles.remove(handle)
            self.current = max(self.current, handle.when)
            handle.callback()
        self.current = target


@dataclass
class ContestHarness:
    """Core services wired together over fakes."""

    timer: FakeTimerService
    control: ControlService
    catalog: SubmissionCatalog
    media_source: FakeMediaSource
    media_store: InMemoryMediaStore
    session_service: SessionService
    housekeeper: Housekeeper
    dispatcher: EventDispatcher


def build_harness(
    capacity: int = 10,
    inactivity_purge_seconds: float | None = None,
    max_nickname_length: int = 10,
) -> ContestHarness:
    timer = FakeTimerService()
    control = ControlService(flags=ContestFlags())
    catalog = SubmissionCatalog(capacity=capacity, flags=control.flags)
    media_source = FakeMediaSource()
    media_store = InMemoryMediaStore()
    session_service = SessionService(
        catalog=catalog,
        ingestion=MediaIngestionPipeline(source=media_source, store=media_store),
        control=control,
        timer=timer,
        max_nickname_length=max_nickname_length,
    )
    housekeeper = Housekeeper(
        timer=timer,
        session_service=session_service,
        catalog=catalog,
        control=control,
        session_timeout_seconds=300,
        sweep_interval_seconds=60,
        inactivity_purge_seconds=inactivity_purge_seconds,
    )
    dispatcher = EventDispatcher(
        session_service=session_service, housekeeper=housekeeper
    )
    return ContestHarness(
        timer=timer,
        control=control,
        catalog=catalog,
        media_source=media_source,
        media_store=media_store,
        session_service=session_service,
        housekeeper=housekeeper,
        dispatcher=dispatcher,
    )


@pytest.fixture
def harness() -> ContestHarness:
    return build_harness()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        admin_token="admin-token",
        media_strategy="inline",
        environment="production",
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def passthrough_client() -> FakePassthroughClient:
    return FakePassthroughClient()


@pytest.fixture
def container(
    settings: Settings,
    harness: ContestHarness,
    telegram_client: FakeTelegramClient,
    passthrough_client: FakePassthroughClient,
) -> AppContainer:
    admin_service = AdminService(
        catalog=harness.catalog,
        session_service=harness.session_service,
        control=harness.control,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        passthrough_client=passthrough_client,
        control=harness.control,
        catalog=harness.catalog,
        session_service=harness.session_service,
        housekeeper=harness.housekeeper,
        dispatcher=harness.dispatcher,
        start_command_handler=StartCommandHandler(harness.control, telegram_client),
        admin_service=admin_service,
        close_resources=close_resources,
    )
