"""Render callback and job status routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import PlainTextResponse

from maklerpro_api.routes.dependencies import (
    get_video_callback_service,
    get_video_status_service,
    require_callback_secret,
)
from maklerpro_api.schemas.callback import VideoCallbackRequest
from maklerpro_api.schemas.error import ErrorResponse, InternalError, JobNotFoundError
from maklerpro_api.schemas.job import VideoJobStatusResponse
from maklerpro_api.services.video_callbacks import VideoCallbackService
from maklerpro_api.services.video_status import VideoStatusService

router = APIRouter(tags=["Video"])

_NO_CACHE = "no-cache, no-store, must-revalidate"


@router.post(
    "/video-callback",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    responses={
        200: {"description": "Callback applied", "content": {"text/plain": {"example": "OK"}}},
        401: {"model": ErrorResponse},
        404: {"model": JobNotFoundError},
        500: {"model": InternalError},
    },
)
async def post_video_callback(
    payload: VideoCallbackRequest,
    __: Annotated[None, Depends(require_callback_secret)],
    callback_service: Annotated[VideoCallbackService, Depends(get_video_callback_service)],
) -> PlainTextResponse:
    await callback_service.process_callback(payload)
    return PlainTextResponse("OK", status_code=status.HTTP_200_OK)


@router.get(
    "/video-status",
    response_model=VideoJobStatusResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": JobNotFoundError},
        500: {"model": InternalError},
    },
)
async def get_video_status(
    response: Response,
    job_id: Annotated[str, Query(alias="jobId", min_length=1)],
    status_service: Annotated[VideoStatusService, Depends(get_video_status_service)],
) -> VideoJobStatusResponse:
    response.headers["Cache-Control"] = _NO_CACHE
    return await status_service.get_status(job_id=job_id)
