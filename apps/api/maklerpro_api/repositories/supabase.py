"""Supabase-backed job store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
import logging

import httpx
from pydantic import ValidationError
from supabase import AsyncClient, PostgrestAPIError

from maklerpro_api.domain.history import build_history_entry
from maklerpro_api.domain.job_fsm import TERMINAL_STATES, ensure_intermediate
from maklerpro_api.errors import DatastoreError, HistoryWriteError
from maklerpro_api.repositories.base import JobStore
from maklerpro_api.schemas.job import VideoJob, VideoJobStatus

logger = logging.getLogger(__name__)

VIDEO_JOBS_TABLE = "video_jobs"
HISTORY_TABLE = "history"
USERS_TABLE = "users"

_TERMINAL_VALUES = sorted(status.value for status in TERMINAL_STATES)
_DATASTORE_ERRORS = (PostgrestAPIError, httpx.HTTPError)


def _row_to_job(row: dict[str, Any]) -> VideoJob:
    return VideoJob(
        external_id=row["shotstack_id"],
        owner_id=row["user_id"],
        status=row["status"],
        result_url=row.get("video_url"),
        error_detail=row.get("error"),
        config=row.get("config"),
        created_at=row["created_at"],
        completed_at=row.get("completed_at"),
        updated_at=row.get("updated_at"),
    )


class SupabaseJobStore(JobStore):
    """Job store over the ``video_jobs``, ``history`` and ``users`` tables.

    The terminal guard is part of the UPDATE itself (``status NOT IN
    (completed, failed)``), so a concurrent redelivery that lost the race
    matches no rows instead of overwriting a terminal job.
    """

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def find_by_external_id(self, external_id: str) -> VideoJob | None:
        try:
            response = await (
                self._client.table(VIDEO_JOBS_TABLE)
                .select("*")
                .eq("shotstack_id", external_id)
                .limit(1)
                .execute()
            )
        except _DATASTORE_ERRORS as exc:
            raise DatastoreError(f"video_jobs lookup failed: {exc}") from exc

        rows = response.data or []
        if not rows:
            return None
        try:
            return _row_to_job(rows[0])
        except (KeyError, ValidationError) as exc:
            raise DatastoreError("Malformed video_jobs row") from exc

    async def mark_completed(self, external_id: str, result_url: str) -> bool:
        return await self._guarded_update(
            external_id,
            {
                "status": VideoJobStatus.COMPLETED.value,
                "video_url": result_url,
                "completed_at": datetime.now(UTC).isoformat(),
            },
        )

    async def mark_failed(self, external_id: str, error_detail: str) -> bool:
        return await self._guarded_update(
            external_id,
            {
                "status": VideoJobStatus.FAILED.value,
                "error": error_detail,
                "completed_at": datetime.now(UTC).isoformat(),
            },
        )

    async def mark_intermediate(self, external_id: str, status: VideoJobStatus) -> bool:
        ensure_intermediate(status)
        return await self._guarded_update(external_id, {"status": status.value})

    async def append_history(self, owner_id: str, video_url: str, config: dict[str, Any] | None) -> None:
        entry = build_history_entry(
            owner_id=owner_id,
            video_url=video_url,
            config=config,
            now=datetime.now(UTC),
        )
        try:
            await self._client.table(HISTORY_TABLE).insert(entry.to_row()).execute()
        except _DATASTORE_ERRORS as exc:
            raise HistoryWriteError(f"history insert failed: {exc}") from exc

    async def get_telegram_id(self, owner_id: str) -> str | None:
        try:
            response = await (
                self._client.table(USERS_TABLE)
                .select("telegram_id")
                .eq("id", owner_id)
                .limit(1)
                .execute()
            )
        except _DATASTORE_ERRORS as exc:
            raise DatastoreError(f"users lookup failed: {exc}") from exc

        rows = response.data or []
        if not rows:
            return None
        telegram_id = rows[0].get("telegram_id")
        return str(telegram_id) if telegram_id else None

    async def _guarded_update(self, external_id: str, values: dict[str, Any]) -> bool:
        try:
            response = await (
                self._client.table(VIDEO_JOBS_TABLE)
                .update(values)
                .eq("shotstack_id", external_id)
                .not_.in_("status", _TERMINAL_VALUES)
                .execute()
            )
        except _DATASTORE_ERRORS as exc:
            raise DatastoreError(f"video_jobs update failed: {exc}") from exc

        applied = bool(response.data)
        if not applied:
            logger.info(
                "store.transition_skipped job_id=%s attempted_status=%s",
                external_id,
                values["status"],
            )
        return applied
