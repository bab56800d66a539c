"""Job store interface."""

from abc import ABC, abstractmethod
from typing import Any

from maklerpro_api.schemas.job import VideoJob, VideoJobStatus


class JobStore(ABC):
    """Owner of ``video_jobs`` and ``history`` persistence.

    The terminal-state guard lives here: ``mark_*`` calls against a job that
    is already completed or failed leave it untouched and return ``False``.
    Job reads and writes raise ``DatastoreError``; history writes raise
    ``HistoryWriteError``.
    """

    @abstractmethod
    async def find_by_external_id(self, external_id: str) -> VideoJob | None:
        """Return the job correlated with a render id, or ``None``."""

    @abstractmethod
    async def mark_completed(self, external_id: str, result_url: str) -> bool:
        """Move a job to completed with its public result URL."""

    @abstractmethod
    async def mark_failed(self, external_id: str, error_detail: str) -> bool:
        """Move a job to failed with the render error."""

    @abstractmethod
    async def mark_intermediate(self, external_id: str, status: VideoJobStatus) -> bool:
        """Record a non-terminal render status."""

    @abstractmethod
    async def append_history(self, owner_id: str, video_url: str, config: dict[str, Any] | None) -> None:
        """Insert one gallery row for a completed video."""

    @abstractmethod
    async def get_telegram_id(self, owner_id: str) -> str | None:
        """Resolve the owner's Telegram chat id, if one is on file."""


__all__ = ["JobStore"]
