"""In-memory storage gateway for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from maklerpro_api.adapters.storage.base import VideoStorageGateway, video_object_key
from maklerpro_api.errors import StorageWriteError, UpstreamFetchError


@dataclass(slots=True)
class InMemoryStorageGateway(VideoStorageGateway):
    """Records stored objects by key.

    URLs listed in ``unreachable_urls`` fail the download step;
    ``upload_failure_message`` fails the next upload once.
    """

    public_base_url: str = "https://storage.local/videos"
    objects: dict[str, str] = field(default_factory=dict)
    unreachable_urls: set[str] = field(default_factory=set)
    upload_failure_message: str | None = None
    store_calls: int = 0

    async def store(self, remote_video_url: str, owner_id: str, job_id: str) -> str:
        self.store_calls += 1
        if remote_video_url in self.unreachable_urls:
            raise UpstreamFetchError("Failed to download rendered video: HTTP 404")
        if self.upload_failure_message is not None:
            message = self.upload_failure_message
            self.upload_failure_message = None
            raise StorageWriteError(message)

        key = video_object_key(owner_id, job_id)
        self.objects[key] = remote_video_url
        return f"{self.public_base_url}/{key}"


__all__ = ["InMemoryStorageGateway"]
