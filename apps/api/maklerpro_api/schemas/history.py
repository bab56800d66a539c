"""History schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class VideoSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    aspect_ratio: str = Field(default="9:16", alias="aspectRatio")
    image_count: int = Field(default=0, alias="imageCount")
    transition: str = "fade"


class HistoryEntry(BaseModel):
    """Denormalized, append-only gallery row for one completed video."""

    user_id: str
    type: Literal["video"] = "video"
    title: str
    data: VideoSummary
    thumbnail: str | None = None
    created_at: datetime

    def to_row(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
