"""Syntax checks for identifiers, filenames and user fields."""

import re

from photo_albums.domain.errors import InvalidFilenameError, InvalidIdentifierError

VALID_ALBUM_ID = re.compile(r"^[_a-zA-Z0-9\-]+$")
VALID_FILENAME = re.compile(r'^[^\\/:*?"<>|]+\.(png|jpe?g|mp4)$', re.IGNORECASE)
VALID_USERNAME = re.compile(r"^[_a-zA-Z0-9\-.]+$")
VALID_EMAIL = re.compile(
    r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}$"
)


def check_valid_album_id(album_id: str | None) -> str:
    """Return the album id or raise if it is malformed."""
    if not isinstance(album_id, str) or not VALID_ALBUM_ID.fullmatch(album_id):
        raise InvalidIdentifierError(f"Invalid album id: {album_id!r}")
    return album_id


def check_valid_filename(filename: str | None) -> str:
    """Return the filename or raise if it is not an allowed content filename."""
    if not isinstance(filename, str) or not VALID_FILENAME.fullmatch(filename):
        raise InvalidFilenameError(f"Invalid filename: {filename!r}")
    return filename


def check_valid_username(username: str | None) -> str:
    """Return the username or raise if it is malformed."""
    if not isinstance(username, str) or not VALID_USERNAME.fullmatch(username):
        raise InvalidIdentifierError(f"Invalid username: {username!r}")
    return username


def is_valid_email(email: str | None) -> bool:
    """Return True when the email looks like an address."""
    return isinstance(email, str) and VALID_EMAIL.fullmatch(email) is not None
