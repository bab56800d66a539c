"""Render callback schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CallbackStatus(str, Enum):
    QUEUED = "queued"
    FETCHING = "fetching"
    RENDERING = "rendering"
    SAVING = "saving"
    DONE = "done"
    FAILED = "failed"


class VideoCallbackRequest(BaseModel):
    """Status push sent by the render service.

    Only ``id``, ``status``, ``url`` and ``error`` drive processing; the
    remaining render envelope fields (``type``, ``action``, ``owner``,
    ``completed``) are accepted and ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    status: CallbackStatus
    url: str | None = None
    error: str | None = None
