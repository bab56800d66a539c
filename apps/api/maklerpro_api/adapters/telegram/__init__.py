"""Telegram messenger adapters."""

from .base import TelegramMessenger
from .bot_api import TelegramBotMessenger
from .mock_telegram import RecordingMessenger, SentVideo

__all__ = [
    "RecordingMessenger",
    "SentVideo",
    "TelegramBotMessenger",
    "TelegramMessenger",
]
