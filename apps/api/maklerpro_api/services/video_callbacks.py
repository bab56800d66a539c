"""Render callback service layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
import logging

from maklerpro_api.adapters.storage.base import VideoStorageGateway
from maklerpro_api.core.logging_safety import safe_log_identifier, safe_log_url
from maklerpro_api.domain.job_fsm import is_terminal, job_status_for_callback
from maklerpro_api.errors import ApiError, StorageWriteError, UpstreamFetchError
from maklerpro_api.repositories.base import JobStore
from maklerpro_api.schemas.callback import CallbackStatus, VideoCallbackRequest
from maklerpro_api.schemas.job import VideoJob, VideoJobStatus
from maklerpro_api.services.notifier import VideoReadyNotifier
from maklerpro_api.services.results import SideEffectResult, capture

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_DETAIL = "Unknown error"
MISSING_RESULT_URL_DETAIL = "Render finished without a result URL"

CallbackAction = Literal["completed", "failed", "intermediate", "ignored"]


@dataclass(slots=True)
class CallbackOutcome:
    action: CallbackAction
    status: VideoJobStatus
    history: SideEffectResult | None = None
    notification: SideEffectResult | None = None


class VideoCallbackService:
    """Drives a video job from render-service status pushes.

    Stateless: every call rehydrates the job from the store. Safe under
    at-least-once delivery because the store refuses to move terminal jobs.
    """

    def __init__(self, store: JobStore, storage: VideoStorageGateway, notifier: VideoReadyNotifier) -> None:
        self._store = store
        self._storage = storage
        self._notifier = notifier

    async def process_callback(self, payload: VideoCallbackRequest) -> CallbackOutcome:
        logger.info(
            "callback.received job_id=%s status=%s url=%s",
            payload.id,
            payload.status.value,
            safe_log_url(payload.url),
        )

        job = await self._store.find_by_external_id(payload.id)
        if job is None:
            logger.warning("callback.rejected job_id=%s code=JOB_NOT_FOUND", payload.id)
            raise ApiError(status_code=404, code="JOB_NOT_FOUND", message="Job not found")

        if is_terminal(job.status):
            logger.info(
                "callback.ignored job_id=%s current_status=%s attempted_status=%s",
                job.external_id,
                job.status.value,
                payload.status.value,
            )
            return CallbackOutcome(action="ignored", status=job.status)

        if payload.status is CallbackStatus.DONE:
            if not payload.url:
                logger.warning("callback.done_without_url job_id=%s", job.external_id)
                return await self._fail(job, MISSING_RESULT_URL_DETAIL)
            return await self._complete(job, payload.url)

        if payload.status is CallbackStatus.FAILED:
            return await self._fail(job, payload.error or DEFAULT_FAILURE_DETAIL)

        new_status = job_status_for_callback(payload.status)
        applied = await self._store.mark_intermediate(job.external_id, new_status)
        logger.info(
            "callback.intermediate job_id=%s prev_status=%s new_status=%s applied=%s",
            job.external_id,
            job.status.value,
            new_status.value,
            applied,
        )
        if not applied:
            return CallbackOutcome(action="ignored", status=job.status)
        return CallbackOutcome(action="intermediate", status=new_status)

    async def _complete(self, job: VideoJob, render_url: str) -> CallbackOutcome:
        safe_owner_id = safe_log_identifier(job.owner_id, prefix="uid")
        try:
            public_url = await self._storage.store(render_url, job.owner_id, job.external_id)
        except (UpstreamFetchError, StorageWriteError) as exc:
            # Job stays non-terminal so the redelivered callback re-enters this branch.
            logger.error(
                "callback.storage_failed job_id=%s owner_id=%s code=%s current_status=%s",
                job.external_id,
                safe_owner_id,
                exc.code,
                job.status.value,
            )
            raise

        applied = await self._store.mark_completed(job.external_id, public_url)
        if not applied:
            logger.info("callback.completed_concurrently job_id=%s", job.external_id)
            return CallbackOutcome(action="ignored", status=VideoJobStatus.COMPLETED)

        history = await capture(
            "history",
            self._store.append_history(job.owner_id, public_url, job.config),
            job_id=job.external_id,
        )
        notification = await self._notifier.notify(job.owner_id, public_url)

        logger.info(
            "callback.completed job_id=%s owner_id=%s prev_status=%s history_ok=%s notification_ok=%s",
            job.external_id,
            safe_owner_id,
            job.status.value,
            history.ok,
            notification.ok,
        )
        return CallbackOutcome(
            action="completed",
            status=VideoJobStatus.COMPLETED,
            history=history,
            notification=notification,
        )

    async def _fail(self, job: VideoJob, error_detail: str) -> CallbackOutcome:
        applied = await self._store.mark_failed(job.external_id, error_detail)
        logger.info(
            "callback.failed job_id=%s prev_status=%s applied=%s",
            job.external_id,
            job.status.value,
            applied,
        )
        if not applied:
            return CallbackOutcome(action="ignored", status=job.status)
        return CallbackOutcome(action="failed", status=VideoJobStatus.FAILED)
