"""Gallery history summarization."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from maklerpro_api.schemas.history import HistoryEntry, VideoSummary


def _first_image_url(images: list[Any]) -> str | None:
    if not images:
        return None
    first = images[0]
    if isinstance(first, dict):
        url = first.get("url")
        return url if isinstance(url, str) and url else None
    if isinstance(first, str) and first:
        return first
    return None


def build_history_entry(
    *,
    owner_id: str,
    video_url: str,
    config: dict[str, Any] | None,
    now: datetime,
) -> HistoryEntry:
    """Summarize a job config into its gallery row; missing fields fall back to generator defaults."""
    config = config if isinstance(config, dict) else {}
    images = config.get("images")
    images = images if isinstance(images, list) else []

    summary = VideoSummary(url=video_url, image_count=len(images))
    aspect_ratio = config.get("aspectRatio")
    if isinstance(aspect_ratio, str) and aspect_ratio:
        summary.aspect_ratio = aspect_ratio
    transition = config.get("transition")
    if isinstance(transition, str) and transition:
        summary.transition = transition

    return HistoryEntry(
        user_id=owner_id,
        title=f"Slideshow - {now.strftime('%d.%m.%Y')}",
        data=summary,
        thumbnail=_first_image_url(images),
        created_at=now,
    )
