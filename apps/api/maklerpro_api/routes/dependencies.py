"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from secrets import compare_digest
from typing import Annotated

from fastapi import Depends, Query, Request, Security
from fastapi.security import APIKeyHeader

from maklerpro_api.adapters.storage.base import VideoStorageGateway
from maklerpro_api.adapters.telegram.base import TelegramMessenger
from maklerpro_api.core.config import Settings, get_settings
from maklerpro_api.errors import ApiError
from maklerpro_api.repositories.base import JobStore
from maklerpro_api.services.notifier import VideoReadyNotifier
from maklerpro_api.services.video_callbacks import VideoCallbackService
from maklerpro_api.services.video_status import VideoStatusService

callback_secret_scheme = APIKeyHeader(
    name="X-Callback-Secret",
    auto_error=False,
    scheme_name="renderCallbackSecret",
)
logger = logging.getLogger(__name__)


def _not_configured() -> ApiError:
    return ApiError(status_code=500, code="DATASTORE_NOT_CONFIGURED", message="Internal error")


async def require_callback_secret(
    request: Request,
    header_secret: Annotated[str | None, Security(callback_secret_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
    token: Annotated[str | None, Query(include_in_schema=False)] = None,
) -> None:
    """Check the shared callback secret when one is configured.

    The render service cannot sign callbacks with custom headers, so the
    secret may also arrive as a ``token`` query parameter on the callback URL.
    """
    if settings.callback_secret is None:
        return

    supplied = header_secret or token
    if supplied is None or not compare_digest(supplied.encode("utf-8"), settings.callback_secret.encode("utf-8")):
        logger.warning(
            "callback.auth_rejected method=%s path=%s reason=invalid_callback_secret",
            request.method,
            request.url.path,
        )
        raise ApiError(status_code=401, code="UNAUTHORIZED", message="Invalid callback authentication")


def get_store(request: Request) -> JobStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise _not_configured()
    return store


def get_storage_gateway(request: Request) -> VideoStorageGateway:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise _not_configured()
    return storage


def get_messenger(request: Request) -> TelegramMessenger | None:
    return getattr(request.app.state, "messenger", None)


def get_notifier(
    store: Annotated[JobStore, Depends(get_store)],
    messenger: Annotated[TelegramMessenger | None, Depends(get_messenger)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoReadyNotifier:
    return VideoReadyNotifier(store, messenger, caption=settings.notification_caption)


def get_video_callback_service(
    store: Annotated[JobStore, Depends(get_store)],
    storage: Annotated[VideoStorageGateway, Depends(get_storage_gateway)],
    notifier: Annotated[VideoReadyNotifier, Depends(get_notifier)],
) -> VideoCallbackService:
    return VideoCallbackService(store, storage, notifier)


def get_video_status_service(store: Annotated[JobStore, Depends(get_store)]) -> VideoStatusService:
    return VideoStatusService(store)
