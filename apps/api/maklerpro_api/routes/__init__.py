"""Route modules."""

from .video import router as video_router

__all__ = ["video_router"]
