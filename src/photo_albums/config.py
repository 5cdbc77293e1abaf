"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    album_base_path: Path = Path("albums")
    thumbnail_height: int = 512
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    video_probe_timeout_seconds: float = 30.0
    capture_timezone: str = "Europe/Stockholm"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
