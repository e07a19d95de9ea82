"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from photo_contest.api.admin import router as admin_router
from photo_contest.api.telegram_models import (
    TelegramMessage,
    TelegramPhotoSize,
    TelegramUpdate,
)
from photo_contest.app_logging import configure_logging
from photo_contest.config import parse_allowed_user_ids
from photo_contest.containers import AppContainer
from photo_contest.domain.events import EventType, InboundEvent, OutcomeKind
from photo_contest.telegram_commands import CHAT_MENU_BUTTON, telegram_commands


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(telegram_commands())
            await state_container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        state_container.housekeeper.start()
        yield
        state_container.housekeeper.stop()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        message = update.message
        if message and not _is_user_allowed(message.from_user.id, allowed_user_ids):
            await state_container.telegram_client.send_message(
                chat_id=message.chat.id,
                text="This bot is private.",
            )
            return {"status": "ok"}

        if message and message.text and message.text.startswith(("/start", "/help")):
            await state_container.start_command_handler.handle(chat_id=message.chat.id)
            return {"status": "ok"}

        if message is None:
            await _forward(state_container, await request.json(), logger)
            return {"status": "ok"}

        outcome = await state_container.dispatcher.dispatch(_to_inbound_event(message))
        if outcome.kind is OutcomeKind.REPLY and outcome.text:
            await state_container.telegram_client.send_message(
                chat_id=message.chat.id,
                text=outcome.text,
            )
        elif outcome.kind is OutcomeKind.PASSTHROUGH:
            await _forward(state_container, await request.json(), logger)
        return {"status": "ok"}

    return app


def _to_inbound_event(message: TelegramMessage) -> InboundEvent:
    """Map a Telegram message to a platform-neutral event."""
    user_id = str(message.from_user.id)
    if message.photo:
        photo = _select_largest_photo(message.photo)
        return InboundEvent(type=EventType.IMAGE, user_id=user_id, payload=photo.file_id)
    if message.video:
        return InboundEvent(
            type=EventType.VIDEO, user_id=user_id, payload=message.video.file_id
        )
    if message.text is not None:
        return InboundEvent(type=EventType.TEXT, user_id=user_id, payload=message.text)
    return InboundEvent(type=EventType.OTHER, user_id=user_id)


def _select_largest_photo(photos: list[TelegramPhotoSize]) -> TelegramPhotoSize:
    """Select the largest photo size from the Telegram payload."""
    return max(photos, key=lambda photo: (photo.width * photo.height))


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed


async def _forward(
    state_container: AppContainer, update: dict[str, object], logger: logging.Logger
) -> None:
    """Hand an unhandled update to the downstream service, if configured."""
    if state_container.passthrough_client is None:
        return
    try:
        await state_container.passthrough_client.forward(update)
    except Exception:
        logger.exception("Failed to forward update downstream")
