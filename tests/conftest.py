"""Shared test fixtures."""

import io
import random
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from PIL import Image

from photo_albums.adapters.file_album_repository import FileAlbumRepository
from photo_albums.adapters.file_user_repository import FileUserRepository
from photo_albums.config import Settings
from photo_albums.containers import AppContainer
from photo_albums.domain.errors import MediaDecodeError
from photo_albums.domain.media import Orientation, VideoFrame
from photo_albums.services.contents import ContentService
from photo_albums.services.previews import PreviewCompositor
from photo_albums.services.thumbnails import FrameGrabber, ThumbnailRenderer
from photo_albums.services.users import UserService


def make_image_bytes(
    width: int, height: int, image_format: str = "JPEG", color=(200, 40, 40)
) -> bytes:
    """Encode a solid color image."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=image_format)
    return buffer.getvalue()


@dataclass
class FakeFrameGrabber(FrameGrabber):
    """Frame grabber returning a fixed frame without running ffmpeg."""

    size: tuple[int, int] = (320, 180)
    orientation: Orientation | None = None
    fail: bool = False
    calls: list[Path] = field(default_factory=list)

    def grab_first_frame(self, path: Path) -> VideoFrame:
        self.calls.append(path)
        if self.fail:
            raise MediaDecodeError(f"Failed to generate video thumbnail for {path}")
        return VideoFrame(
            image=Image.new("RGB", self.size, (10, 120, 10)),
            orientation=self.orientation,
        )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(album_base_path=tmp_path / "albums", thumbnail_height=64)


@pytest.fixture
def album_repository(settings: Settings) -> FileAlbumRepository:
    repository = FileAlbumRepository(settings.album_base_path)
    repository.initialize()
    return repository


@pytest.fixture
def user_repository(settings: Settings) -> FileUserRepository:
    repository = FileUserRepository(settings.album_base_path)
    repository.initialize()
    return repository


@pytest.fixture
def frame_grabber() -> FakeFrameGrabber:
    return FakeFrameGrabber()


@pytest.fixture
def thumbnail_renderer(
    settings: Settings, frame_grabber: FakeFrameGrabber
) -> ThumbnailRenderer:
    return ThumbnailRenderer(
        frame_grabber=frame_grabber, target_height=settings.thumbnail_height
    )


@pytest.fixture
def content_service(
    settings: Settings,
    album_repository: FileAlbumRepository,
    thumbnail_renderer: ThumbnailRenderer,
) -> ContentService:
    return ContentService(
        album_repository=album_repository,
        thumbnail_renderer=thumbnail_renderer,
        base_path=settings.album_base_path,
        capture_timezone=settings.capture_timezone,
    )


@pytest.fixture
def container(
    settings: Settings,
    album_repository: FileAlbumRepository,
    user_repository: FileUserRepository,
    thumbnail_renderer: ThumbnailRenderer,
    content_service: ContentService,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        album_repository=album_repository,
        user_repository=user_repository,
        thumbnail_renderer=thumbnail_renderer,
        preview_compositor=PreviewCompositor(
            base_path=settings.album_base_path, rng=random.Random(7)
        ),
        content_service=content_service,
        user_service=UserService(user_repository),
    )
