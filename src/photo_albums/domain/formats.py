"""Supported content formats."""

from enum import Enum

from photo_albums.domain.errors import UnsupportedFormatError


class ContentFormat(Enum):
    """Closed set of formats an album may hold."""

    JPEG = ("image/jpeg", frozenset({"jpeg", "jpg"}), True)
    PNG = ("image/png", frozenset({"png"}), True)
    MP4 = ("video/mp4", frozenset({"mp4"}), False)

    def __init__(
        self, content_type: str, suffixes: frozenset[str], is_image: bool
    ) -> None:
        self.content_type = content_type
        self.suffixes = suffixes
        self.is_image = is_image

    @property
    def pillow_format(self) -> str:
        """Format name understood by Pillow when encoding."""
        return self.name if self.is_image else "PNG"

    @classmethod
    def from_filename(cls, filename: str) -> "ContentFormat":
        """Resolve a format from the filename extension."""
        _, dot, suffix = filename.rpartition(".")
        if dot:
            for content_format in cls:
                if suffix.lower() in content_format.suffixes:
                    return content_format
        raise UnsupportedFormatError(f"Unsupported file type: {filename}")

    @classmethod
    def from_content_type(cls, content_type: str) -> "ContentFormat":
        """Resolve a format from a MIME type."""
        normalized = content_type.split(";", 1)[0].strip().lower()
        for content_format in cls:
            if content_format.content_type == normalized:
                return content_format
        raise UnsupportedFormatError(f"Unsupported content type: {content_type}")

    @classmethod
    def detect(
        cls, content_type: str | None, filename: str | None = None
    ) -> "ContentFormat":
        """Resolve a format from the content type, falling back to the filename."""
        if content_type and content_type != "application/octet-stream":
            return cls.from_content_type(content_type)
        if filename:
            return cls.from_filename(filename)
        raise UnsupportedFormatError("Content type could not be determined")
