"""File helpers shared by the stores and the media pipeline."""

import logging
import os
import tempfile
from pathlib import Path

from photo_albums.domain.errors import StorageIOError

_logger = logging.getLogger(__name__)


def write_atomically(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers never see a partial file."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        _logger.error("Failed to write %s: %s", path, exc)
        raise StorageIOError(f"Failed to write {path}") from exc


def remove_file(path: Path) -> bool:
    """Delete ``path`` if it exists. Returns whether a file was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StorageIOError(f"Failed to delete {path}") from exc
    return True
