"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    ENTRY_GROOM = TelegramCommand("entry_groom", "Enter the Best Groom Award")
    ENTRY_BRIDE = TelegramCommand("entry_bride", "Enter the Best Bride Award")
    ENTRY_CREATIVE = TelegramCommand("entry_creative", "Enter the Best Creative Award")
    HELP = TelegramCommand("help", "How to take part")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
