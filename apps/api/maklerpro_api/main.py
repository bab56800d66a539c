"""FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from supabase import acreate_client

from maklerpro_api.adapters.storage import InMemoryStorageGateway, SupabaseStorageGateway
from maklerpro_api.adapters.telegram import RecordingMessenger, TelegramBotMessenger
from maklerpro_api.core.config import Settings, get_settings
from maklerpro_api.errors import ApiError, RetryableError
from maklerpro_api.repositories.memory import InMemoryStore
from maklerpro_api.repositories.supabase import SupabaseJobStore
from maklerpro_api.routes import video_router
from maklerpro_api.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/video-callback": {"post": {"200", "401", "404", "500"}},
    "/api/video-status": {"get": {"200", "400", "404", "500"}},
}

_API_PREFIX = "/api"

# Validation failures are keyed by the request path the client actually hit.
_CALLBACK_VALIDATION_PATHS: set[tuple[str, str]] = {
    ("POST", f"{_API_PREFIX}/video-callback"),
}

_STATUS_VALIDATION_PATHS: set[tuple[str, str]] = {
    ("GET", f"{_API_PREFIX}/video-status"),
}


def _apply_contract_response_codes(schema: dict) -> None:
    """Limit documented response codes to what the handlers actually return."""
    paths = schema.get("paths", {})
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        for method, allowed_codes in methods.items():
            operation = paths.get(path, {}).get(method)
            if operation is None:
                continue
            documented = operation.get("responses", {})
            operation["responses"] = {
                code: documented.get(code, {"description": "See API contract"}) for code in sorted(allowed_codes)
            }


async def _wire_supabase(app: FastAPI, settings: Settings) -> httpx.AsyncClient | None:
    """Build the process-wide Supabase and HTTP clients; return the client to close on shutdown."""
    if not settings.datastore_configured:
        logger.error("startup.datastore_not_configured backend=supabase missing=SUPABASE_URL|SUPABASE_SERVICE_ROLE_KEY")
        return None

    supabase_client = await acreate_client(settings.supabase_url, settings.supabase_service_role_key)
    http_client = httpx.AsyncClient(timeout=settings.fetch_timeout_seconds)
    app.state.store = SupabaseJobStore(supabase_client)
    app.state.storage = SupabaseStorageGateway(supabase_client, http_client, bucket=settings.storage_bucket)
    if settings.telegram_bot_token:
        app.state.messenger = TelegramBotMessenger(
            settings.telegram_bot_token,
            http_client,
            timeout=settings.telegram_timeout_seconds,
        )
    else:
        logger.warning("startup.notifier_disabled reason=TELEGRAM_BOT_TOKEN_missing")
    return http_client


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    if settings.callback_secret is None:
        # Known gap: the render service's signing scheme is not verified.
        logger.warning("startup.callback_auth_disabled path=/api/video-callback")

    http_client = None
    if settings.datastore_backend == "supabase":
        http_client = await _wire_supabase(app, settings)
    try:
        yield
    finally:
        if http_client is not None:
            await http_client.aclose()


def _wire_memory(app: FastAPI, settings: Settings) -> None:
    app.state.store = InMemoryStore()
    app.state.storage = InMemoryStorageGateway()
    if settings.telegram_bot_token:
        app.state.messenger = RecordingMessenger()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="MaklerPro API", version="1.0.0", lifespan=_lifespan)
    app.state.store = None
    app.state.storage = None
    app.state.messenger = None
    if settings.datastore_backend == "memory":
        _wire_memory(app, settings)

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RetryableError)
    async def handle_retryable_error(_, exc: RetryableError) -> JSONResponse:
        # 5xx tells the render service to redeliver the callback.
        payload = ErrorResponse(code=exc.code, message="Internal error")
        return JSONResponse(status_code=500, content=payload.model_dump(exclude_none=True))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        route_key = (request.method.upper(), request.url.path.rstrip("/"))
        if route_key in _CALLBACK_VALIDATION_PATHS:
            logger.warning("callback.rejected code=INVALID_CALLBACK_PAYLOAD errors=%d", len(exc.errors()))
            payload = ErrorResponse(code="INVALID_CALLBACK_PAYLOAD", message="Internal error")
            return JSONResponse(status_code=500, content=payload.model_dump(exclude_none=True))
        if route_key in _STATUS_VALIDATION_PATHS:
            payload = ErrorResponse(code="MISSING_JOB_ID", message="Missing jobId parameter")
            return JSONResponse(status_code=400, content=payload.model_dump(exclude_none=True))

        return await request_validation_exception_handler(request, exc)

    app.include_router(video_router, prefix=_API_PREFIX)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_contract_response_codes(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
