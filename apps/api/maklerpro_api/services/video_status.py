"""Job status polling service."""

from __future__ import annotations

from datetime import UTC, datetime

from maklerpro_api.errors import ApiError
from maklerpro_api.repositories.base import JobStore
from maklerpro_api.schemas.job import VideoJob, VideoJobStatus, VideoJobStatusResponse

_STATUS_PROGRESS: dict[VideoJobStatus, int] = {
    VideoJobStatus.QUEUED: 5,
    VideoJobStatus.FETCHING: 20,
    VideoJobStatus.RENDERING: 50,
    VideoJobStatus.SAVING: 85,
    VideoJobStatus.COMPLETED: 100,
    VideoJobStatus.FAILED: 0,
}
_RENDER_PHASE_SPAN = 30
_SECONDS_PER_IMAGE = 5.0
_DEFAULT_IMAGE_COUNT = 5


def _image_count(config: dict | None) -> int:
    images = config.get("images") if isinstance(config, dict) else None
    if isinstance(images, list) and images:
        return len(images)
    return _DEFAULT_IMAGE_COUNT


def estimate_progress(job: VideoJob, now: datetime) -> int:
    """Map status to a percentage; rendering also advances with elapsed time."""
    base = _STATUS_PROGRESS[job.status]
    if job.status is not VideoJobStatus.RENDERING:
        return base

    created_at = job.created_at if job.created_at.tzinfo else job.created_at.replace(tzinfo=UTC)
    elapsed = max((now - created_at).total_seconds(), 0.0)
    estimated_total = _image_count(job.config) * _SECONDS_PER_IMAGE
    render_progress = min(_RENDER_PHASE_SPAN, elapsed / estimated_total * _RENDER_PHASE_SPAN)
    return round(base + render_progress)


class VideoStatusService:
    def __init__(self, store: JobStore) -> None:
        self._store = store

    async def get_status(self, *, job_id: str) -> VideoJobStatusResponse:
        job = await self._store.find_by_external_id(job_id)
        if job is None:
            raise ApiError(status_code=404, code="JOB_NOT_FOUND", message="Job not found")

        return VideoJobStatusResponse(
            job_id=job.external_id,
            status=job.status,
            progress=estimate_progress(job, datetime.now(UTC)),
            video_url=job.result_url,
            error=job.error_detail,
            created_at=job.created_at,
            completed_at=job.completed_at,
        )
