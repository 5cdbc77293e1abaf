"""Collage previews built from a random subset of album images."""

import io
import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from photo_albums.domain.albums import Album
from photo_albums.domain.errors import AlbumError
from photo_albums.domain.paths import content_path, preview_path
from photo_albums.files import write_atomically

PREVIEW_WIDTH = 512
PREVIEW_HEIGHT = 512
MAX_PREVIEW_IMAGE_WIDTH = 256
MAX_PREVIEW_IMAGE_HEIGHT = 256
MAX_IMAGES = 10

_logger = logging.getLogger(__name__)


class Zone(Enum):
    """Fractional rectangles of the canvas an image may be placed in."""

    CENTER = (0.45, 0.45, 0.55, 0.55)
    TOP_LEFT = (0.0, 0.0, 0.25, 0.25)
    BOTTOM_LEFT = (0.0, 0.75, 0.25, 1.0)
    TOP_RIGHT = (0.75, 0.0, 1.0, 0.25)
    BOTTOM_RIGHT = (0.75, 0.75, 1.0, 1.0)
    LEFT = (0.0, 0.45, 0.25, 0.55)
    RIGHT = (0.75, 0.45, 1.0, 0.55)
    TOP = (0.45, 0.0, 0.55, 0.25)
    BOTTOM = (0.45, 0.75, 0.55, 1.0)

    def __init__(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.x1 = x1
        self.y1 = y1
        self.x2 = x2
        self.y2 = y2


def zone_for(index: int, count: int) -> Zone:
    """Zone of the ``index``-th of ``count`` images. The last one is centered."""
    if index + 1 >= count:
        return Zone.CENTER
    zones = list(Zone)
    return zones[index % len(zones)]


@dataclass
class PreviewCompositor:
    """Builds the 512x512 transparent collage shown for an album."""

    base_path: Path
    rng: random.Random = field(default_factory=random.SystemRandom)

    def make_preview(self, album: Album) -> Path:
        """Compose the album preview and write it as PNG. Returns its path."""
        path = preview_path(self.base_path, album.id)
        images = self.load_images(album)
        canvas = Image.new("RGBA", (PREVIEW_WIDTH, PREVIEW_HEIGHT), (0, 0, 0, 0))
        for index, image in enumerate(images):
            self.place_image(canvas, image, zone_for(index, len(images)))

        buffer = io.BytesIO()
        canvas.save(buffer, format="PNG")
        write_atomically(path, buffer.getvalue())
        _logger.info("Created preview for album %s from %s images", album.id, len(images))
        return path

    def load_images(self, album: Album) -> list[Image.Image]:
        """Load up to ten random images of the album. Videos are ignored."""
        contents = list(album.contents)
        self.rng.shuffle(contents)
        images: list[Image.Image] = []
        for content in contents:
            if len(images) >= MAX_IMAGES:
                break
            if not content.is_image:
                continue
            try:
                path = content_path(self.base_path, album.id, content.src)
                with Image.open(path) as source:
                    images.append(source.convert("RGBA"))
            except (
                AlbumError,
                UnidentifiedImageError,
                Image.DecompressionBombError,
                OSError,
            ) as exc:
                _logger.error(
                    "Could not load image %s of album %s: %s", content.src, album.id, exc
                )
        return images

    def place_image(self, canvas: Image.Image, source: Image.Image, zone: Zone) -> None:
        """Scale, tilt and drop an image at a random spot inside ``zone``."""
        angle = (self.rng.random() * 40 + 340) % 360
        rotated = rotate_image(scale_to_fit(source), angle)

        x = _round(
            canvas.width * zone.x1
            + self.rng.randrange(max(1, _round((zone.x2 - zone.x1) * canvas.width)))
        ) - _round(0.5 * rotated.width)
        y = _round(
            canvas.height * zone.y1
            + self.rng.randrange(max(1, _round((zone.y2 - zone.y1) * canvas.height)))
        ) - _round(0.5 * rotated.height)

        if x + rotated.width > canvas.width:
            x = canvas.width - rotated.width
        if y + rotated.height > canvas.height:
            y = canvas.height - rotated.height
        x = max(x, 0)
        y = max(y, 0)

        canvas.alpha_composite(rotated, dest=(x, y))


def scale_to_fit(source: Image.Image) -> Image.Image:
    """Scale so the long edge is 256 pixels."""
    width, height = source.size
    if width > height:
        ratio = width / MAX_PREVIEW_IMAGE_WIDTH
        size = (MAX_PREVIEW_IMAGE_WIDTH, int(height / ratio))
    else:
        ratio = height / MAX_PREVIEW_IMAGE_HEIGHT
        size = (int(width / ratio), MAX_PREVIEW_IMAGE_HEIGHT)
    size = (max(1, size[0]), max(1, size[1]))
    return source.convert("RGBA").resize(size, Image.Resampling.BICUBIC)


def rotate_image(image: Image.Image, angle: float) -> Image.Image:
    """Rotate clockwise by ``angle`` degrees, growing the canvas to fit."""
    radians = math.radians(angle)
    sin = abs(math.sin(radians))
    cos = abs(math.cos(radians))
    width, height = image.size
    new_width = max(1, math.floor(width * cos + height * sin))
    new_height = max(1, math.floor(height * cos + width * sin))

    offset_x = int((new_width - width) / 2)
    offset_y = int((new_height - height) / 2)
    padded = Image.new("RGBA", (new_width, new_height), (0, 0, 0, 0))
    padded.paste(image.convert("RGBA"), (offset_x, offset_y))
    return padded.rotate(
        -angle,
        resample=Image.Resampling.BILINEAR,
        center=(offset_x + width / 2, offset_y + height / 2),
    )


def _round(value: float) -> int:
    return math.floor(value + 0.5)
