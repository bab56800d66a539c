"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NOTIFICATION_CAPTION = (
    "🎬 Sizning slideshow videongiz tayyor!\n\n✅ Video yuklab olindi va galereyaga saqlandi."
)


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    datastore_backend: Literal["memory", "supabase"] = "supabase"
    supabase_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL", "MAKLER_SUPABASE_URL"),
    )
    supabase_service_role_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "MAKLER_SUPABASE_SERVICE_ROLE_KEY"),
    )
    telegram_bot_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TELEGRAM_BOT_TOKEN", "MAKLER_TELEGRAM_BOT_TOKEN"),
    )
    storage_bucket: str = "videos"
    fetch_timeout_seconds: float = Field(default=25.0, gt=0)
    telegram_timeout_seconds: float = Field(default=10.0, gt=0)
    notification_caption: str = DEFAULT_NOTIFICATION_CAPTION
    callback_secret: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="MAKLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def datastore_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
