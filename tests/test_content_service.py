"""Tests for the album content workflow."""

import io
from datetime import UTC, datetime

import pytest
from PIL import Image

from photo_albums.adapters.file_album_repository import FileAlbumRepository
from photo_albums.domain.errors import (
    ContentConflictError,
    InvalidFilenameError,
    MediaDecodeError,
    StorageIOError,
    UnknownIdentifierError,
    UnsupportedFormatError,
)
from photo_albums.services.contents import ContentService, read_capture_timestamp
from photo_albums.services.thumbnails import ThumbnailRenderer
from tests.conftest import FakeFrameGrabber, make_image_bytes

EXIF_IFD_POINTER = 0x8769
DATE_TIME_ORIGINAL = 0x9003


def _jpeg_with_capture_date(value: str) -> bytes:
    exif = Image.Exif()
    exif[EXIF_IFD_POINTER] = {DATE_TIME_ORIGINAL: value}
    buffer = io.BytesIO()
    Image.new("RGB", (40, 30), (1, 2, 3)).save(buffer, format="JPEG", exif=exif)
    return buffer.getvalue()


def test_add_image_writes_original_and_thumbnail(
    content_service: ContentService, album_repository: FileAlbumRepository, settings
) -> None:
    album = album_repository.create("Holiday")
    data = make_image_bytes(128, 96)

    content = content_service.add_content(album.id, "beach.jpg", data, "image/jpeg")

    base = settings.album_base_path / album.id / "contents"
    assert (base / "beach.jpg").read_bytes() == data
    with Image.open(base / ".thumbnails" / "beach.jpg") as thumbnail:
        assert thumbnail.size == (85, 64)
    assert (content.width, content.height) == (128, 96)
    assert content.content_type == "image/jpeg"
    assert album_repository.get(album.id).contents == [content]


def test_add_video_writes_png_thumbnail(
    content_service: ContentService,
    album_repository: FileAlbumRepository,
    frame_grabber: FakeFrameGrabber,
    settings,
) -> None:
    album = album_repository.create("Clips")

    content = content_service.add_content(album.id, "clip.MP4", b"\x00\x01video")

    base = settings.album_base_path / album.id / "contents"
    assert (base / ".thumbnails" / "clip.png").is_file()
    assert frame_grabber.calls == [base / "clip.MP4"]
    assert content.content_type == "video/mp4"
    assert content.timestamp is None
    assert content_service.thumbnail_file(album.id, "clip.MP4") == (
        base / ".thumbnails" / "clip.png"
    )


def test_failed_video_decode_removes_original(
    settings, album_repository: FileAlbumRepository
) -> None:
    service = ContentService(
        album_repository=album_repository,
        thumbnail_renderer=ThumbnailRenderer(FakeFrameGrabber(fail=True)),
        base_path=settings.album_base_path,
    )
    album = album_repository.create("Broken")

    with pytest.raises(MediaDecodeError):
        service.add_content(album.id, "bad.mp4", b"not a video")

    assert not (settings.album_base_path / album.id / "contents" / "bad.mp4").exists()
    assert album_repository.get(album.id).contents == []


def test_duplicate_filename_is_rejected(
    content_service: ContentService, album_repository: FileAlbumRepository
) -> None:
    album = album_repository.create("Dupes")
    content_service.add_content(album.id, "a.png", make_image_bytes(10, 10, "PNG"))

    with pytest.raises(ContentConflictError):
        content_service.add_content(album.id, "a.png", make_image_bytes(10, 10, "PNG"))
    assert len(album_repository.get(album.id).contents) == 1


@pytest.mark.parametrize(
    ("filename", "content_type", "error"),
    [
        ("../evil.jpg", "image/jpeg", InvalidFilenameError),
        ("notes.txt", None, InvalidFilenameError),
        ("photo.jpg", "image/gif", UnsupportedFormatError),
    ],
)
def test_add_content_validates_input(
    content_service: ContentService,
    album_repository: FileAlbumRepository,
    filename: str,
    content_type: str | None,
    error: type[Exception],
) -> None:
    album = album_repository.create("Checks")

    with pytest.raises(error):
        content_service.add_content(album.id, filename, b"data", content_type)


def test_add_content_to_unknown_album_fails(content_service: ContentService) -> None:
    with pytest.raises(UnknownIdentifierError):
        content_service.add_content("nope", "a.png", make_image_bytes(4, 4, "PNG"))


def test_add_content_rejects_empty_upload(
    content_service: ContentService, album_repository: FileAlbumRepository
) -> None:
    album = album_repository.create("Empty")

    with pytest.raises(UnsupportedFormatError):
        content_service.add_content(album.id, "a.png", b"")


def test_add_content_rejects_corrupt_image(
    content_service: ContentService, album_repository: FileAlbumRepository, settings
) -> None:
    album = album_repository.create("Corrupt")

    with pytest.raises(MediaDecodeError):
        content_service.add_content(album.id, "a.jpg", b"garbage", "image/jpeg")
    assert not (settings.album_base_path / album.id / "contents" / "a.jpg").exists()


def test_capture_timestamp_is_read_from_exif(
    content_service: ContentService, album_repository: FileAlbumRepository
) -> None:
    album = album_repository.create("Exif")

    content = content_service.add_content(
        album.id, "dated.jpg", _jpeg_with_capture_date("2023:06:01 12:00:00")
    )

    assert content.timestamp == datetime(2023, 6, 1, 10, 0, tzinfo=UTC)


def test_capture_timestamp_is_optional() -> None:
    assert read_capture_timestamp(make_image_bytes(4, 4), "Europe/Stockholm") is None
    assert read_capture_timestamp(b"garbage", "Europe/Stockholm") is None
    assert (
        read_capture_timestamp(
            _jpeg_with_capture_date("not a date"), "Europe/Stockholm"
        )
        is None
    )


def test_update_caption_changes_only_text(
    content_service: ContentService, album_repository: FileAlbumRepository
) -> None:
    album = album_repository.create("Captions")
    content_service.add_content(album.id, "a.png", make_image_bytes(20, 10, "PNG"))

    updated = content_service.update_caption(album.id, "a.png", "alt text", "caption")

    stored = album_repository.get(album.id).contents[0]
    assert (stored.alt, stored.text) == ("alt text", "caption")
    assert (stored.width, stored.height) == (20, 10)
    assert updated == stored
    assert content_service.update_caption(album.id, "b.png", "x", "y") is None


def test_remove_content_deletes_files(
    content_service: ContentService, album_repository: FileAlbumRepository, settings
) -> None:
    album = album_repository.create("Remove")
    content_service.add_content(album.id, "a.png", make_image_bytes(8, 8, "PNG"))
    base = settings.album_base_path / album.id / "contents"

    assert content_service.remove_content(album.id, "a.png") is True

    assert not (base / "a.png").exists()
    assert not (base / ".thumbnails" / "a.png").exists()
    assert album_repository.get(album.id).contents == []
    assert content_service.remove_content(album.id, "a.png") is False


def test_content_file_only_resolves_listed_contents(
    content_service: ContentService, album_repository: FileAlbumRepository, settings
) -> None:
    album = album_repository.create("Files")
    stray = settings.album_base_path / album.id / "contents" / "stray.png"
    stray.parent.mkdir(parents=True)
    stray.write_bytes(make_image_bytes(2, 2, "PNG"))

    assert content_service.content_file(album.id, "stray.png") is None
    content_service.add_content(album.id, "kept.png", make_image_bytes(2, 2, "PNG"))
    assert content_service.content_file(album.id, "kept.png") == stray.with_name(
        "kept.png"
    )


def test_failed_album_write_removes_uploaded_files(
    content_service: ContentService, album_repository: FileAlbumRepository, settings
) -> None:
    album = album_repository.create("Flaky")
    album_file = album_repository.album_path(album.id)
    album_file.unlink()
    album_file.mkdir()
    base = settings.album_base_path / album.id / "contents"
    data = make_image_bytes(16, 16)

    with pytest.raises(StorageIOError):
        content_service.add_content(album.id, "a.jpg", data)

    assert not (base / "a.jpg").exists()
    assert not (base / ".thumbnails" / "a.jpg").exists()
    assert album_repository.get(album.id).contents == []

    album_file.rmdir()
    content = content_service.add_content(album.id, "a.jpg", data)
    assert album_repository.get(album.id).contents == [content]


def test_rename_album_keeps_contents(
    content_service: ContentService, album_repository: FileAlbumRepository
) -> None:
    album = album_repository.create("Before")
    content_service.add_content(album.id, "a.png", make_image_bytes(4, 4, "PNG"))

    renamed = content_service.rename_album(album.id, "After")

    stored = album_repository.get(album.id)
    assert stored == renamed
    assert stored.name == "After"
    assert [content.src for content in stored.contents] == ["a.png"]
    with pytest.raises(UnknownIdentifierError):
        content_service.rename_album("missing", "Name")
