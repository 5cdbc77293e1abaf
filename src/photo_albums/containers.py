"""Dependency container wiring for the application."""

import random
from dataclasses import dataclass

from photo_albums.adapters.ffmpeg_frame_grabber import FfmpegFrameGrabber
from photo_albums.adapters.file_album_repository import FileAlbumRepository
from photo_albums.adapters.file_user_repository import FileUserRepository
from photo_albums.config import Settings
from photo_albums.services.contents import AlbumRepository, ContentService
from photo_albums.services.previews import PreviewCompositor
from photo_albums.services.thumbnails import ThumbnailRenderer
from photo_albums.services.users import UserRepository, UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    album_repository: AlbumRepository
    user_repository: UserRepository
    thumbnail_renderer: ThumbnailRenderer
    preview_compositor: PreviewCompositor
    content_service: ContentService
    user_service: UserService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container and load both stores.

    This is the start-up step: no request may reach a store before it
    returns.
    """
    resolved_settings = settings or Settings()
    base_path = resolved_settings.album_base_path

    album_repository = FileAlbumRepository(base_path)
    user_repository = FileUserRepository(base_path)
    album_repository.initialize()
    user_repository.initialize()

    thumbnail_renderer = ThumbnailRenderer(
        frame_grabber=FfmpegFrameGrabber(
            ffmpeg_path=resolved_settings.ffmpeg_path,
            ffprobe_path=resolved_settings.ffprobe_path,
            timeout_seconds=resolved_settings.video_probe_timeout_seconds,
        ),
        target_height=resolved_settings.thumbnail_height,
    )
    preview_compositor = PreviewCompositor(
        base_path=base_path, rng=random.SystemRandom()
    )
    content_service = ContentService(
        album_repository=album_repository,
        thumbnail_renderer=thumbnail_renderer,
        base_path=base_path,
        capture_timezone=resolved_settings.capture_timezone,
    )
    user_service = UserService(user_repository)

    return AppContainer(
        settings=resolved_settings,
        album_repository=album_repository,
        user_repository=user_repository,
        thumbnail_renderer=thumbnail_renderer,
        preview_compositor=preview_compositor,
        content_service=content_service,
        user_service=user_service,
    )
