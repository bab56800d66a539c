"""Owner notification for finished videos."""

from __future__ import annotations

import logging

from maklerpro_api.adapters.telegram.base import TelegramMessenger
from maklerpro_api.core.logging_safety import safe_log_identifier
from maklerpro_api.repositories.base import JobStore
from maklerpro_api.services.results import SideEffectResult

logger = logging.getLogger(__name__)

NOTIFICATION = "notify"


class VideoReadyNotifier:
    """Sends the finished video to its owner's Telegram chat.

    ``messenger=None`` means no bot token is configured and every call is a
    skipped no-op. Lookup and send failures are logged and returned as a
    failed ``SideEffectResult``; nothing here raises.
    """

    def __init__(self, store: JobStore, messenger: TelegramMessenger | None, caption: str) -> None:
        self._store = store
        self._messenger = messenger
        self._caption = caption

    @property
    def enabled(self) -> bool:
        return self._messenger is not None

    async def notify(self, owner_id: str, video_url: str) -> SideEffectResult:
        safe_owner_id = safe_log_identifier(owner_id, prefix="uid")
        if self._messenger is None:
            logger.debug("notify.skipped owner_id=%s reason=bot_token_missing", safe_owner_id)
            return SideEffectResult.skipped_because(NOTIFICATION, "bot token not configured")

        try:
            chat_id = await self._store.get_telegram_id(owner_id)
            if not chat_id:
                logger.info("notify.skipped owner_id=%s reason=no_telegram_id", safe_owner_id)
                return SideEffectResult.skipped_because(NOTIFICATION, "no telegram id on file")

            message_id = await self._messenger.send_video(chat_id, video_url, self._caption)
        except Exception as exc:
            logger.warning(
                "notify.failed owner_id=%s reason=%s",
                safe_owner_id,
                type(exc).__name__,
                exc_info=True,
            )
            return SideEffectResult.failed(NOTIFICATION, exc)

        logger.info(
            "notify.sent owner_id=%s chat_id=%s message_id=%s",
            safe_owner_id,
            safe_log_identifier(chat_id, prefix="cid"),
            message_id,
        )
        return SideEffectResult.succeeded(NOTIFICATION)
