"""Video storage gateway adapters."""

from .base import VideoStorageGateway, video_object_key
from .memory_storage import InMemoryStorageGateway
from .supabase_storage import SupabaseStorageGateway

__all__ = [
    "InMemoryStorageGateway",
    "SupabaseStorageGateway",
    "VideoStorageGateway",
    "video_object_key",
]
