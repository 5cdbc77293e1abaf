"""Album repository storing one JSON document per album."""

import logging
from collections.abc import Callable
from pathlib import Path
from uuid import uuid4

from pydantic import ValidationError

from photo_albums.adapters.file_store import FileBackedStore
from photo_albums.domain.albums import Album
from photo_albums.domain.errors import (
    IdentifierAllocationError,
    InvalidIdentifierError,
    StorageIOError,
    UnknownIdentifierError,
)
from photo_albums.domain.validation import check_valid_album_id
from photo_albums.files import remove_file, write_atomically
from photo_albums.services.contents import AlbumRepository

ALBUM_SUFFIX = ".json"
MAX_ID_ATTEMPTS = 100

_logger = logging.getLogger(__name__)


def _random_album_id() -> str:
    return str(uuid4())


class FileAlbumRepository(FileBackedStore, AlbumRepository):
    """File-backed album store with a process-local cache.

    Albums are written to ``<base>/<id>.json`` before the cache is touched,
    and every album handed out is a deep copy.
    """

    def __init__(
        self,
        base_path: Path,
        id_generator: Callable[[], str] = _random_album_id,
    ) -> None:
        super().__init__(base_path)
        self.id_generator = id_generator
        self._albums: dict[str, Album] = {}

    def create(self, name: str) -> Album:
        """Create and persist an empty album with a fresh id."""
        self._check_ready()
        for _ in range(MAX_ID_ATTEMPTS):
            album_id = self.id_generator()
            try:
                path = self.album_path(album_id)
            except InvalidIdentifierError:
                _logger.error("Invalid album id was generated in create: %s", album_id)
                continue
            album = Album(id=album_id, name=name, contents=[])
            with self._lock:
                if album_id in self._albums:
                    continue
                self._write(path, album)
            _logger.info("Created album %s", album_id)
            return album.model_copy(deep=True)
        raise IdentifierAllocationError("Could not generate unique album id")

    def get(self, album_id: str) -> Album | None:
        """Return a copy of the album, or None if it does not exist."""
        self._check_ready()
        check_valid_album_id(album_id)
        album = self._albums.get(album_id)
        return album.model_copy(deep=True) if album is not None else None

    def get_all(self) -> list[Album]:
        """Return copies of all albums in no particular order."""
        self._check_ready()
        return [album.model_copy(deep=True) for album in list(self._albums.values())]

    def update(self, album: Album) -> None:
        """Replace an existing album. Updates never create albums."""
        self._check_ready()
        path = self.album_path(album.id)
        with self._lock:
            if album.id not in self._albums:
                raise UnknownIdentifierError(f"Album does not exist: {album.id}")
            self._write(path, album)

    def delete(self, album_id: str) -> None:
        """Delete the album document. Media files are left untouched."""
        self._check_ready()
        path = self.album_path(album_id)
        with self._lock:
            remove_file(path)
            self._albums.pop(album_id, None)
        _logger.info("Deleted album %s", album_id)

    def album_path(self, album_id: str) -> Path:
        """Return the document path for an album id."""
        check_valid_album_id(album_id)
        return self.base_path / f"{album_id}{ALBUM_SUFFIX}"

    def _write(self, path: Path, album: Album) -> None:
        # Caller holds the lock.
        write_atomically(path, album.model_dump_json(by_alias=True).encode("utf-8"))
        self._albums[album.id] = album.model_copy(deep=True)

    def _load(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            paths = sorted(self.base_path.iterdir())
        except OSError as exc:
            _logger.error("Failed to list albums in %s", self.base_path)
            raise StorageIOError(f"Failed to list albums in {self.base_path}") from exc

        loaded: set[str] = set()
        for path in paths:
            if not path.is_file() or path.suffix != ALBUM_SUFFIX:
                continue
            album_id = path.stem
            try:
                check_valid_album_id(album_id)
                album = Album.model_validate_json(path.read_bytes())
            except InvalidIdentifierError:
                _logger.error("Invalid album id: %s", album_id)
                continue
            except (OSError, ValidationError) as exc:
                _logger.error("Failed to read album %s: %s", album_id, exc)
                continue
            if album.id != album_id:
                _logger.warning(
                    "Album file %s declares id %s, using file name", path, album.id
                )
                album = album.model_copy(update={"id": album_id})
            self._albums[album_id] = album
            loaded.add(album_id)

        for stale in set(self._albums) - loaded:
            del self._albums[stale]
        _logger.info("Loaded %s albums from %s", len(loaded), self.base_path)
