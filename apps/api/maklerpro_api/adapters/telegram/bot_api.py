"""Telegram Bot API messenger adapter."""

from __future__ import annotations

from typing import Any

import httpx

from maklerpro_api.adapters.telegram.base import TelegramMessenger
from maklerpro_api.errors import NotificationError

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramBotMessenger(TelegramMessenger):
    """Calls the Bot API over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        bot_token: str,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = 10.0,
        api_base: str = TELEGRAM_API_BASE,
    ) -> None:
        if not bot_token:
            raise ValueError("bot_token is required")
        self._api_base = f"{api_base}/bot{bot_token}"
        self._http = http_client
        self._timeout = timeout

    async def send_video(self, chat_id: str, video_url: str, caption: str) -> int | None:
        payload: dict[str, Any] = {
            "chat_id": chat_id,
            "video": video_url,
            "caption": caption,
            "parse_mode": "HTML",
        }
        data = await self._call("sendVideo", payload)
        result = data.get("result") or {}
        return result.get("message_id")

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http.post(f"{self._api_base}/{method}", json=payload, timeout=self._timeout)
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            # Never include the request URL here; it embeds the bot token.
            raise NotificationError(f"Telegram {method} request failed: {type(exc).__name__}") from exc

        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise NotificationError(f"Telegram {method} rejected: {description or 'Unknown error'}")
        return data


__all__ = ["TELEGRAM_API_BASE", "TelegramBotMessenger"]
