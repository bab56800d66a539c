"""Video job schemas."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VideoJobStatus(str, Enum):
    QUEUED = "queued"
    FETCHING = "fetching"
    RENDERING = "rendering"
    SAVING = "saving"
    COMPLETED = "completed"
    FAILED = "failed"


class VideoJob(BaseModel):
    """One render request submitted to the render service."""

    external_id: str
    owner_id: str
    status: VideoJobStatus
    result_url: str | None = None
    error_detail: str | None = None
    config: dict[str, Any] | None = None
    created_at: datetime
    completed_at: datetime | None = None
    updated_at: datetime | None = None


class VideoJobStatusResponse(BaseModel):
    """Polling payload consumed by the Mini App."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_id: str
    status: VideoJobStatus
    progress: int = Field(ge=0, le=100)
    video_url: str | None = None
    error: str | None = None
    created_at: datetime
    completed_at: datetime | None = None
