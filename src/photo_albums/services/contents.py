"""Album content workflow: uploads, captions and removal."""

import io
import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol
from zoneinfo import ZoneInfo

from PIL import ExifTags, Image, UnidentifiedImageError

from photo_albums.domain.albums import Album, ContentData
from photo_albums.domain.errors import (
    AlbumError,
    ContentConflictError,
    UnknownIdentifierError,
    UnsupportedFormatError,
)
from photo_albums.domain.formats import ContentFormat
from photo_albums.domain.paths import content_path, thumbnail_path
from photo_albums.domain.validation import check_valid_filename
from photo_albums.files import remove_file, write_atomically
from photo_albums.services.thumbnails import ThumbnailRenderer

EXIF_DATE_TIME_ORIGINAL = 0x9003
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

_logger = logging.getLogger(__name__)


class AlbumRepository(Protocol):
    """Persistence interface for albums."""

    def create(self, name: str) -> Album:
        """Create a new empty album and return it."""

    def get(self, album_id: str) -> Album | None:
        """Return an album by id, if present."""

    def get_all(self) -> list[Album]:
        """Return all albums."""

    def update(self, album: Album) -> None:
        """Replace an existing album."""

    def delete(self, album_id: str) -> None:
        """Delete an album."""


@dataclass
class ContentService:
    """Adds and removes photos and videos of an album.

    Filename uniqueness within an album is enforced here; the repository
    stores whatever content list it is given.
    """

    album_repository: AlbumRepository
    thumbnail_renderer: ThumbnailRenderer
    base_path: Path
    capture_timezone: str = "Europe/Stockholm"
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def add_content(
        self,
        album_id: str,
        filename: str,
        data: bytes,
        content_type: str | None = None,
    ) -> ContentData:
        """Store an uploaded file, render its thumbnail and add it to the album."""
        check_valid_filename(filename)
        content_format = ContentFormat.detect(content_type, filename)
        if not data:
            raise UnsupportedFormatError("The file is empty")

        with self._lock:
            album = self._require_album(album_id)
            if album.find_content(filename) is not None:
                raise ContentConflictError(f"{filename} already exists in {album_id}")
            original = content_path(self.base_path, album_id, filename)
            thumbnail = thumbnail_path(self.base_path, album_id, filename, content_format)
            if original.exists():
                raise ContentConflictError(f"{original} already exists")

            write_atomically(original, data)
            try:
                content = self._render_content(
                    original, thumbnail, data, filename, content_format
                )
                album.contents.append(content)
                self.album_repository.update(album)
            except AlbumError:
                # The album was not updated, so no file of this upload may stay.
                remove_file(thumbnail)
                remove_file(original)
                raise
        _logger.info("Added %s to album %s", filename, album_id)
        return content

    def rename_album(self, album_id: str, name: str) -> Album:
        """Change the name of an album, keeping its contents."""
        with self._lock:
            album = self._require_album(album_id)
            album.name = name
            self.album_repository.update(album)
        return album

    def update_caption(
        self, album_id: str, filename: str, alt: str | None, text: str | None
    ) -> ContentData | None:
        """Replace the alt and text of a content. Other fields are kept."""
        with self._lock:
            album = self._require_album(album_id)
            content = album.find_content(filename)
            if content is None:
                return None
            content.alt = alt
            content.text = text
            self.album_repository.update(album)
        return content

    def remove_content(self, album_id: str, filename: str) -> bool:
        """Remove a content and its files. Returns False if it was not found."""
        with self._lock:
            album = self._require_album(album_id)
            content = album.find_content(filename)
            if content is None:
                return False
            album.contents = [item for item in album.contents if item.src != filename]
            self.album_repository.update(album)

        remove_file(content_path(self.base_path, album_id, filename))
        try:
            content_format = ContentFormat.from_filename(filename)
        except UnsupportedFormatError:
            return True
        remove_file(thumbnail_path(self.base_path, album_id, filename, content_format))
        _logger.info("Removed %s from album %s", filename, album_id)
        return True

    def content_file(self, album_id: str, filename: str) -> Path | None:
        """Return the original file of a content listed in the album."""
        album = self._require_album(album_id)
        if album.find_content(filename) is None:
            return None
        path = content_path(self.base_path, album_id, filename)
        return path if path.is_file() else None

    def thumbnail_file(self, album_id: str, filename: str) -> Path | None:
        """Return the thumbnail of a content listed in the album."""
        album = self._require_album(album_id)
        if album.find_content(filename) is None:
            return None
        content_format = ContentFormat.from_filename(filename)
        path = thumbnail_path(self.base_path, album_id, filename, content_format)
        return path if path.is_file() else None

    def _render_content(
        self,
        original: Path,
        thumbnail: Path,
        data: bytes,
        filename: str,
        content_format: ContentFormat,
    ) -> ContentData:
        if content_format.is_image:
            result = self.thumbnail_renderer.make_thumbnail(
                data, output_format=content_format
            )
        else:
            result = self.thumbnail_renderer.render_video_thumbnail(original)
        write_atomically(thumbnail, result.data)
        return ContentData(
            content_type=content_format.content_type,
            src=filename,
            width=result.width,
            height=result.height,
            timestamp=(
                read_capture_timestamp(data, self.capture_timezone)
                if content_format.is_image
                else None
            ),
        )

    def _require_album(self, album_id: str) -> Album:
        album = self.album_repository.get(album_id)
        if album is None:
            raise UnknownIdentifierError(f"Album does not exist: {album_id}")
        return album


def read_capture_timestamp(data: bytes, timezone: str) -> datetime | None:
    """Return the EXIF ``DateTimeOriginal`` of an image as a UTC datetime."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            exif = image.getexif()
            value = exif.get_ifd(ExifTags.IFD.Exif).get(EXIF_DATE_TIME_ORIGINAL)
        if not value:
            return None
        local = datetime.strptime(str(value).strip("\x00 "), EXIF_DATE_FORMAT)
        return local.replace(tzinfo=ZoneInfo(timezone)).astimezone(UTC)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        KeyError,
    ) as exc:
        _logger.warning("Failed to read metadata: %s", exc)
        return None
