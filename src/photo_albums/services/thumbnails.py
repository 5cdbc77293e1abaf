"""Thumbnail rendering for still images and videos."""

import io
import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageDraw, UnidentifiedImageError

from photo_albums.domain.errors import MediaDecodeError, UnsupportedFormatError
from photo_albums.domain.formats import ContentFormat
from photo_albums.domain.media import Orientation, ThumbnailResult, VideoFrame

THUMBNAIL_HEIGHT = 512
PLAY_GLYPH_SIZE = 96

_TRANSPOSE_FOR = {
    Orientation.D_90: Image.Transpose.ROTATE_270,
    Orientation.D_180: Image.Transpose.ROTATE_180,
    Orientation.D_270: Image.Transpose.ROTATE_90,
}

_logger = logging.getLogger(__name__)


class FrameGrabber(Protocol):
    """Interface for pulling a still frame out of a video file."""

    def grab_first_frame(self, path: Path) -> VideoFrame:
        """Return the frame at timestamp zero and its orientation hint."""


@dataclass
class ThumbnailRenderer:
    """Produces fixed-height thumbnails from images and videos."""

    frame_grabber: FrameGrabber
    target_height: int = THUMBNAIL_HEIGHT

    def make_thumbnail(
        self,
        image_bytes: bytes,
        target_height: int | None = None,
        output_format: ContentFormat | str = ContentFormat.JPEG,
    ) -> ThumbnailResult:
        """Scale encoded image bytes to the target height.

        The returned width and height are those of the source image.
        """
        try:
            with Image.open(io.BytesIO(image_bytes)) as source:
                source.load()
                image = source.convert("RGB")
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise MediaDecodeError("Failed to decode image") from exc
        thumbnail = scale_to_height(image, target_height or self.target_height)
        return ThumbnailResult(
            data=encode_image(thumbnail, output_format),
            width=image.width,
            height=image.height,
        )

    def make_video_thumbnail(self, path: Path) -> Image.Image:
        """Return the first frame of a video, rotated to display upright."""
        frame = self.frame_grabber.grab_first_frame(path)
        return orient_frame(frame)

    def render_video_thumbnail(
        self, path: Path, target_height: int | None = None
    ) -> ThumbnailResult:
        """Render a PNG thumbnail of a video with a centered play glyph."""
        frame = self.make_video_thumbnail(path)
        thumbnail = scale_to_height(frame, target_height or self.target_height)
        glyph = play_glyph()
        position = (
            thumbnail.width // 2 - glyph.width // 2,
            thumbnail.height // 2 - glyph.height // 2,
        )
        thumbnail.paste(glyph, position, glyph)
        _logger.debug("Rendered video thumbnail for %s", path)
        return ThumbnailResult(
            data=encode_image(thumbnail, ContentFormat.PNG),
            width=frame.width,
            height=frame.height,
        )


def orient_frame(frame: VideoFrame) -> Image.Image:
    """Rotate a frame clockwise by its orientation hint about its center.

    Quarter turns swap width and height. Unknown or zero orientation leaves
    the frame untouched.
    """
    transpose = _TRANSPOSE_FOR.get(frame.orientation)
    if transpose is None:
        return frame.image
    return frame.image.transpose(transpose)


def scale_to_height(image: Image.Image, target_height: int) -> Image.Image:
    """Scale the whole image to ``target_height`` keeping its aspect ratio."""
    if target_height <= 0:
        raise ValueError("Target height must be positive")
    ratio = image.height / target_height
    width = max(1, math.floor(image.width / ratio + 0.5))
    return image.convert("RGB").resize(
        (width, target_height), Image.Resampling.BICUBIC
    )


def encode_image(image: Image.Image, output_format: ContentFormat | str) -> bytes:
    """Encode an image in the given format."""
    if isinstance(output_format, ContentFormat):
        format_name = output_format.pillow_format
    else:
        format_name = "JPEG" if output_format.upper() == "JPG" else output_format.upper()
    if format_name not in {"JPEG", "PNG"}:
        raise UnsupportedFormatError(f"Unsupported thumbnail format: {output_format}")
    buffer = io.BytesIO()
    if format_name == "JPEG":
        image.convert("RGB").save(buffer, format="JPEG", quality=85)
    else:
        image.save(buffer, format="PNG")
    return buffer.getvalue()


@lru_cache(maxsize=1)
def play_glyph(size: int = PLAY_GLYPH_SIZE) -> Image.Image:
    """Return the translucent "play" badge drawn over video thumbnails."""
    scale = 4
    canvas = Image.new("RGBA", (size * scale, size * scale), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    full = size * scale
    draw.ellipse((0, 0, full - 1, full - 1), fill=(0, 0, 0, 140))
    draw.ellipse(
        (scale * 3, scale * 3, full - scale * 3, full - scale * 3),
        outline=(255, 255, 255, 230),
        width=scale * 3,
    )
    left = full * 0.38
    draw.polygon(
        [(left, full * 0.28), (left, full * 0.72), (full * 0.74, full * 0.5)],
        fill=(255, 255, 255, 230),
    )
    return canvas.resize((size, size), Image.Resampling.LANCZOS)
