"""In-memory job store used by the local scaffold and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
import logging

from maklerpro_api.domain.history import build_history_entry
from maklerpro_api.domain.job_fsm import ensure_intermediate, transition_allowed
from maklerpro_api.errors import DatastoreError, HistoryWriteError
from maklerpro_api.repositories.base import JobStore
from maklerpro_api.schemas.history import HistoryEntry
from maklerpro_api.schemas.job import VideoJob, VideoJobStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class VideoJobRecord:
    external_id: str
    owner_id: str
    status: VideoJobStatus
    created_at: datetime
    config: dict[str, Any] | None = None
    result_url: str | None = None
    error_detail: str | None = None
    completed_at: datetime | None = None
    updated_at: datetime | None = None

    def to_job(self) -> VideoJob:
        return VideoJob(
            external_id=self.external_id,
            owner_id=self.owner_id,
            status=self.status,
            result_url=self.result_url,
            error_detail=self.error_detail,
            config=self.config,
            created_at=self.created_at,
            completed_at=self.completed_at,
            updated_at=self.updated_at,
        )


@dataclass(slots=True)
class InMemoryStore(JobStore):
    """Deterministic persistence with injectable failures for tests."""

    jobs: dict[str, VideoJobRecord] = field(default_factory=dict)
    history: list[HistoryEntry] = field(default_factory=list)
    telegram_ids: dict[str, str] = field(default_factory=dict)
    job_write_count: int = 0
    datastore_failure_message: str | None = None
    history_failure_message: str | None = None
    identity_failure_message: str | None = None

    def create_job(
        self,
        *,
        external_id: str,
        owner_id: str,
        status: VideoJobStatus = VideoJobStatus.QUEUED,
        config: dict[str, Any] | None = None,
        created_at: datetime | None = None,
    ) -> VideoJobRecord:
        now = created_at or datetime.now(UTC)
        record = VideoJobRecord(
            external_id=external_id,
            owner_id=owner_id,
            status=status,
            created_at=now,
            config=config,
            updated_at=now,
        )
        self.jobs[external_id] = record
        return record

    def history_for_owner(self, owner_id: str) -> list[HistoryEntry]:
        return [entry for entry in self.history if entry.user_id == owner_id]

    async def find_by_external_id(self, external_id: str) -> VideoJob | None:
        self._maybe_raise_datastore_failure()
        record = self.jobs.get(external_id)
        return record.to_job() if record is not None else None

    async def mark_completed(self, external_id: str, result_url: str) -> bool:
        record = self._guarded_record(external_id, VideoJobStatus.COMPLETED)
        if record is None:
            return False
        now = datetime.now(UTC)
        record.status = VideoJobStatus.COMPLETED
        record.result_url = result_url
        record.completed_at = now
        self._touch(record, now)
        return True

    async def mark_failed(self, external_id: str, error_detail: str) -> bool:
        record = self._guarded_record(external_id, VideoJobStatus.FAILED)
        if record is None:
            return False
        now = datetime.now(UTC)
        record.status = VideoJobStatus.FAILED
        record.error_detail = error_detail
        record.completed_at = now
        self._touch(record, now)
        return True

    async def mark_intermediate(self, external_id: str, status: VideoJobStatus) -> bool:
        ensure_intermediate(status)
        record = self._guarded_record(external_id, status)
        if record is None:
            return False
        record.status = status
        self._touch(record, datetime.now(UTC))
        return True

    async def append_history(self, owner_id: str, video_url: str, config: dict[str, Any] | None) -> None:
        if self.history_failure_message is not None:
            message = self.history_failure_message
            self.history_failure_message = None
            raise HistoryWriteError(message)

        entry = build_history_entry(
            owner_id=owner_id,
            video_url=video_url,
            config=config,
            now=datetime.now(UTC),
        )
        self.history.append(entry)

    async def get_telegram_id(self, owner_id: str) -> str | None:
        if self.identity_failure_message is not None:
            raise DatastoreError(self.identity_failure_message)
        return self.telegram_ids.get(owner_id)

    def _guarded_record(self, external_id: str, new_status: VideoJobStatus) -> VideoJobRecord | None:
        self._maybe_raise_datastore_failure()
        record = self.jobs.get(external_id)
        if record is None:
            return None
        if not transition_allowed(record.status, new_status):
            logger.info(
                "store.transition_skipped job_id=%s current_status=%s attempted_status=%s",
                external_id,
                record.status.value,
                new_status.value,
            )
            return None
        return record

    def _touch(self, record: VideoJobRecord, now: datetime) -> None:
        record.updated_at = now
        self.job_write_count += 1

    def _maybe_raise_datastore_failure(self) -> None:
        if self.datastore_failure_message is None:
            return
        message = self.datastore_failure_message
        self.datastore_failure_message = None
        raise DatastoreError(message)
