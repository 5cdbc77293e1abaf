"""Value types produced by the media pipeline."""

from dataclasses import dataclass
from enum import IntEnum

from PIL import Image


class Orientation(IntEnum):
    """Clockwise rotation a video frame needs to be displayed upright."""

    D_0 = 0
    D_90 = 90
    D_180 = 180
    D_270 = 270

    @classmethod
    def from_degrees(cls, degrees: float | None) -> "Orientation | None":
        """Normalize a clockwise angle, or return None when it is not a right angle."""
        if degrees is None:
            return None
        normalized = int(round(degrees)) % 360
        try:
            return cls(normalized)
        except ValueError:
            return None


@dataclass(frozen=True)
class VideoFrame:
    """A decoded frame and the orientation hint stored with the video."""

    image: Image.Image
    orientation: Orientation | None = None


@dataclass(frozen=True)
class ThumbnailResult:
    """Encoded thumbnail plus the dimensions of the source it came from."""

    data: bytes
    width: int
    height: int
