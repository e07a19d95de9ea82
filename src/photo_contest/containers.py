"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photo_contest.adapters.passthrough_client import (
    HttpxPassthroughClient,
    PassthroughClient,
)
from photo_contest.adapters.supabase_media_store import SupabaseMediaStore
from photo_contest.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from photo_contest.adapters.telegram_file_client import HttpxTelegramFileClient
from photo_contest.config import Settings
from photo_contest.domain.control import ContestFlags
from photo_contest.services.admin import AdminService
from photo_contest.services.catalog import SubmissionCatalog
from photo_contest.services.commands import StartCommandHandler
from photo_contest.services.control import ControlService
from photo_contest.services.dispatcher import EventDispatcher
from photo_contest.services.housekeeping import Housekeeper
from photo_contest.services.ingestion import (
    InlineMediaStore,
    MediaIngestionPipeline,
    MediaStore,
    PillowImageCompressor,
)
from photo_contest.services.sessions import SessionService
from photo_contest.services.timers import AsyncioTimerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    passthrough_client: PassthroughClient | None
    control: ControlService
    catalog: SubmissionCatalog
    session_service: SessionService
    housekeeper: Housekeeper
    dispatcher: EventDispatcher
    start_command_handler: StartCommandHandler
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    media_store = _build_media_store(resolved_settings)
    timer = AsyncioTimerService()
    control = ControlService(
        flags=ContestFlags(
            test_mode=resolved_settings.test_mode,
            submissions_open=resolved_settings.submissions_open,
            winners_locked=resolved_settings.winners_locked,
        ),
        guest_name_prefix=resolved_settings.guest_name_prefix,
    )
    catalog = SubmissionCatalog(
        capacity=resolved_settings.catalog_capacity, flags=control.flags
    )
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )
    compressor = (
        PillowImageCompressor(
            max_dimension=resolved_settings.image_max_dimension,
            quality=resolved_settings.image_jpeg_quality,
        )
        if resolved_settings.compress_images
        else None
    )
    ingestion = MediaIngestionPipeline(
        source=telegram_file_client,
        store=media_store,
        compressor=compressor,
    )
    session_service = SessionService(
        catalog=catalog,
        ingestion=ingestion,
        control=control,
        timer=timer,
        max_nickname_length=resolved_settings.max_nickname_length,
    )
    housekeeper = Housekeeper(
        timer=timer,
        session_service=session_service,
        catalog=catalog,
        control=control,
        session_timeout_seconds=resolved_settings.session_timeout_seconds,
        sweep_interval_seconds=resolved_settings.session_sweep_interval_seconds,
        inactivity_purge_seconds=resolved_settings.inactivity_purge_seconds,
    )
    dispatcher = EventDispatcher(
        session_service=session_service,
        housekeeper=housekeeper,
        debug_errors=resolved_settings.environment == "local",
    )
    admin_service = AdminService(
        catalog=catalog, session_service=session_service, control=control
    )
    start_handler = StartCommandHandler(control, telegram_client)
    passthrough_client = (
        HttpxPassthroughClient.create(resolved_settings.passthrough_url)
        if resolved_settings.passthrough_url
        else None
    )

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()
        if passthrough_client is not None:
            await passthrough_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        passthrough_client=passthrough_client,
        control=control,
        catalog=catalog,
        session_service=session_service,
        housekeeper=housekeeper,
        dispatcher=dispatcher,
        start_command_handler=start_handler,
        admin_service=admin_service,
        close_resources=close_resources,
    )


def _build_media_store(settings: Settings) -> MediaStore:
    """Select the media store for the configured strategy."""
    if settings.media_strategy == "inline":
        return InlineMediaStore()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError("supabase_url and supabase_service_key are required")
    supabase_client = create_client(
        settings.supabase_url, settings.supabase_service_key
    )
    return SupabaseMediaStore(client=supabase_client, bucket=settings.supabase_bucket)
