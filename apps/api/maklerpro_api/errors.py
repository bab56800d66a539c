"""Application exception types."""

from maklerpro_api.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class RetryableError(Exception):
    """Failure that leaves the job untouched; upstream is expected to redeliver."""

    code = "INTERNAL_ERROR"


class UpstreamFetchError(RetryableError):
    """Rendered video could not be downloaded from the render service."""

    code = "UPSTREAM_FETCH_FAILED"


class StorageWriteError(RetryableError):
    """Rendered video could not be written to object storage."""

    code = "STORAGE_WRITE_FAILED"


class DatastoreError(RetryableError):
    """Job record could not be read or written."""

    code = "DATASTORE_ERROR"


class HistoryWriteError(Exception):
    """History row could not be inserted."""


class NotificationError(Exception):
    """Telegram delivery or identity lookup failed."""


__all__ = [
    "ApiError",
    "DatastoreError",
    "HistoryWriteError",
    "NotificationError",
    "RetryableError",
    "StorageWriteError",
    "UpstreamFetchError",
]
