"""On-disk locations of album media."""

from pathlib import Path

from photo_albums.domain.formats import ContentFormat
from photo_albums.domain.validation import check_valid_album_id, check_valid_filename

CONTENT_DIR = "contents"
THUMBNAIL_DIR = ".thumbnails"
PREVIEW_FILENAME = "preview.png"


def content_path(base_path: Path, album_id: str, filename: str) -> Path:
    """Return ``<base>/<album>/contents/<filename>``."""
    check_valid_album_id(album_id)
    check_valid_filename(filename)
    return base_path / album_id / CONTENT_DIR / filename


def thumbnail_path(
    base_path: Path, album_id: str, filename: str, content_format: ContentFormat
) -> Path:
    """Return the thumbnail location. Video thumbnails are stored as PNG."""
    check_valid_album_id(album_id)
    check_valid_filename(filename)
    if not content_format.is_image:
        filename = f"{Path(filename).stem}.png"
    return base_path / album_id / CONTENT_DIR / THUMBNAIL_DIR / filename


def preview_path(base_path: Path, album_id: str) -> Path:
    """Return the location of an album's collage preview."""
    return content_path(base_path, album_id, PREVIEW_FILENAME)
