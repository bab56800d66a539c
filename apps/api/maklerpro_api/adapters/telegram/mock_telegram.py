"""Recording messenger for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from maklerpro_api.adapters.telegram.base import TelegramMessenger
from maklerpro_api.errors import NotificationError


@dataclass(slots=True)
class SentVideo:
    chat_id: str
    video_url: str
    caption: str


@dataclass(slots=True)
class RecordingMessenger(TelegramMessenger):
    sent: list[SentVideo] = field(default_factory=list)
    failure_message: str | None = None

    async def send_video(self, chat_id: str, video_url: str, caption: str) -> int | None:
        if self.failure_message is not None:
            raise NotificationError(self.failure_message)
        self.sent.append(SentVideo(chat_id=chat_id, video_url=video_url, caption=caption))
        return len(self.sent)


__all__ = ["RecordingMessenger", "SentVideo"]
