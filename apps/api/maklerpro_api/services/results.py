"""Captured outcomes for best-effort side effects."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SideEffectResult:
    """Outcome of a fire-and-log operation; never escalated to the caller."""

    name: str
    ok: bool
    skipped: bool = False
    error: str | None = None

    @classmethod
    def succeeded(cls, name: str) -> SideEffectResult:
        return cls(name=name, ok=True)

    @classmethod
    def skipped_because(cls, name: str, reason: str) -> SideEffectResult:
        return cls(name=name, ok=True, skipped=True, error=reason)

    @classmethod
    def failed(cls, name: str, exc: BaseException) -> SideEffectResult:
        return cls(name=name, ok=False, error=f"{type(exc).__name__}: {exc}")


async def capture(name: str, operation: Awaitable[object], *, job_id: str) -> SideEffectResult:
    """Await ``operation`` and record any failure instead of raising it."""
    try:
        await operation
    except Exception as exc:
        logger.warning(
            "%s.failed job_id=%s reason=%s",
            name,
            job_id,
            type(exc).__name__,
            exc_info=True,
        )
        return SideEffectResult.failed(name, exc)
    return SideEffectResult.succeeded(name)


__all__ = ["SideEffectResult", "capture"]
