"""Supabase Storage gateway adapter."""

from __future__ import annotations

import logging

import httpx
from supabase import AsyncClient, StorageException

from maklerpro_api.adapters.storage.base import VIDEO_CONTENT_TYPE, VideoStorageGateway, video_object_key
from maklerpro_api.core.logging_safety import safe_log_url
from maklerpro_api.errors import StorageWriteError, UpstreamFetchError

logger = logging.getLogger(__name__)


class SupabaseStorageGateway(VideoStorageGateway):
    """Downloads renders over HTTP and upserts them into a public bucket."""

    def __init__(self, client: AsyncClient, http_client: httpx.AsyncClient, bucket: str = "videos") -> None:
        self._client = client
        self._http = http_client
        self._bucket = bucket

    async def store(self, remote_video_url: str, owner_id: str, job_id: str) -> str:
        payload = await self._download(remote_video_url)
        key = video_object_key(owner_id, job_id)
        bucket = self._client.storage.from_(self._bucket)

        try:
            await bucket.upload(
                path=key,
                file=payload,
                file_options={
                    "content-type": VIDEO_CONTENT_TYPE,
                    "cache-control": "3600",
                    "upsert": "true",
                },
            )
            public_url = await bucket.get_public_url(key)
        except (StorageException, httpx.HTTPError) as exc:
            raise StorageWriteError(f"Storage upload failed: {exc}") from exc

        logger.info(
            "storage.uploaded job_id=%s bucket=%s bytes=%d",
            job_id,
            self._bucket,
            len(payload),
        )
        return public_url

    async def _download(self, url: str) -> bytes:
        try:
            response = await self._http.get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.warning("storage.fetch_failed url=%s reason=%s", safe_log_url(url), type(exc).__name__)
            raise UpstreamFetchError("Failed to download rendered video") from exc

        if not response.is_success:
            logger.warning("storage.fetch_failed url=%s status=%d", safe_log_url(url), response.status_code)
            raise UpstreamFetchError(f"Failed to download rendered video: HTTP {response.status_code}")
        return response.content


__all__ = ["SupabaseStorageGateway"]
