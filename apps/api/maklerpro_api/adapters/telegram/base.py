"""Telegram messaging interface."""

from abc import ABC, abstractmethod


class TelegramMessenger(ABC):
    """Outbound Telegram Bot API operations used by the backend."""

    @abstractmethod
    async def send_video(self, chat_id: str, video_url: str, caption: str) -> int | None:
        """Send a video by URL; return the message id. Raises ``NotificationError``."""


__all__ = ["TelegramMessenger"]
