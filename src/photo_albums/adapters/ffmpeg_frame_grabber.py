"""Video frame extraction through the ffmpeg command line tools."""

import io
import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from photo_albums.domain.errors import MediaDecodeError
from photo_albums.domain.media import Orientation, VideoFrame
from photo_albums.services.thumbnails import FrameGrabber

_logger = logging.getLogger(__name__)


@dataclass
class FfmpegFrameGrabber(FrameGrabber):
    """Grab the first frame of a video with ``ffmpeg`` and probe its rotation.

    Frames are decoded with auto-rotation disabled so the orientation hint can
    be applied by the caller.
    """

    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    timeout_seconds: float = 30.0

    def grab_first_frame(self, path: Path) -> VideoFrame:
        """Decode the frame at timestamp zero together with its orientation."""
        cmd = [
            self.ffmpeg_path,
            "-v",
            "error",
            "-noautorotate",
            "-ss",
            "0",
            "-i",
            str(path),
            "-frames:v",
            "1",
            "-f",
            "image2pipe",
            "-vcodec",
            "png",
            "-",
        ]
        try:
            result = subprocess.run(  # noqa: S603
                cmd, capture_output=True, check=True, timeout=self.timeout_seconds
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as exc:
            _logger.warning("ffmpeg frame extraction failed for %s: %s", path, exc)
            raise MediaDecodeError(f"Failed to generate video thumbnail for {path}") from exc
        if not result.stdout:
            raise MediaDecodeError(f"No video frame could be decoded from {path}")
        try:
            with Image.open(io.BytesIO(result.stdout)) as decoded:
                image = decoded.convert("RGB")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise MediaDecodeError(f"Invalid frame decoded from {path}") from exc
        return VideoFrame(image=image, orientation=self.probe_orientation(path))

    def probe_orientation(self, path: Path) -> Orientation | None:
        """Return the clockwise display rotation of the first video stream."""
        cmd = [
            self.ffprobe_path,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream_tags=rotate:stream_side_data=rotation",
            "-of",
            "json",
            str(path),
        ]
        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout_seconds,
            )
            payload = json.loads(result.stdout or "{}")
        except (
            subprocess.CalledProcessError,
            subprocess.TimeoutExpired,
            OSError,
            ValueError,
        ) as exc:
            _logger.debug("ffprobe orientation lookup failed for %s: %s", path, exc)
            return None
        return parse_orientation(payload)


def parse_orientation(payload: dict) -> Orientation | None:
    """Read the rotation from ffprobe JSON output.

    The legacy ``rotate`` tag is clockwise; the display matrix ``rotation``
    side data is counter-clockwise.
    """
    streams = payload.get("streams") or []
    if not streams:
        return None
    stream = streams[0]
    rotate_tag = (stream.get("tags") or {}).get("rotate")
    if rotate_tag is not None:
        try:
            return Orientation.from_degrees(float(rotate_tag))
        except ValueError:
            return None
    for side_data in stream.get("side_data_list") or []:
        rotation = side_data.get("rotation")
        if rotation is not None:
            try:
                return Orientation.from_degrees(-float(rotation))
            except (TypeError, ValueError):
                return None
    return None
