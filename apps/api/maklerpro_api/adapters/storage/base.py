"""Video storage gateway interface."""

from abc import ABC, abstractmethod

VIDEO_CONTENT_TYPE = "video/mp4"


def video_object_key(owner_id: str, job_id: str) -> str:
    """Deterministic key so retries for the same job overwrite one object."""
    return f"slideshows/{owner_id}/{job_id}.mp4"


class VideoStorageGateway(ABC):
    """Copies a rendered video into durable public storage."""

    @abstractmethod
    async def store(self, remote_video_url: str, owner_id: str, job_id: str) -> str:
        """Fetch ``remote_video_url``, persist it and return its public URL.

        Raises ``UpstreamFetchError`` when the download fails and
        ``StorageWriteError`` when the upload fails.
        """


__all__ = ["VIDEO_CONTENT_TYPE", "VideoStorageGateway", "video_object_key"]
