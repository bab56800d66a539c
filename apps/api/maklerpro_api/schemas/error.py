"""API error response schemas."""

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class JobNotFoundError(BaseModel):
    code: Literal["JOB_NOT_FOUND"]
    message: str


class InternalError(BaseModel):
    code: str
    message: Literal["Internal error"]
