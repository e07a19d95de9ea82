"""Command handlers for Telegram updates."""

from dataclasses import dataclass

from photo_contest.adapters.telegram_client import TelegramClient
from photo_contest.domain.submissions import CATEGORY_LABELS
from photo_contest.services.control import ControlService


@dataclass
class StartCommandHandler:
    """Handle the /start and /help Telegram commands."""

    control: ControlService
    telegram_client: TelegramClient

    async def handle(self, chat_id: int) -> None:
        """Send the contest instructions."""
        if not self.control.flags.submissions_open:
            await self.telegram_client.send_message(
                chat_id=chat_id,
                text="Welcome! Photo submissions are closed right now.",
            )
            return
        awards = "\n".join(f"- {label}" for label in CATEGORY_LABELS.values())
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=(
                "Welcome to the wedding photo contest! 📸\n\n"
                f"Awards:\n{awards}\n\n"
                "1. Pick a category from the menu\n"
                "2. Send your photo\n"
                "3. Reply with your nickname"
            ),
        )
