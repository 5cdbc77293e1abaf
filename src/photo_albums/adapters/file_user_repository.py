"""User repository storing every user in a single flat file.

Intended for a handful of users (family and friends). Each line holds one
user as nine escaped, ``;``-separated positional fields:

    username; enabled; role; email; album roles; password hash;
    first name; last name; last password reset

Password hashes are kept in a separate map and never attached to ``User``.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

from photo_albums.adapters.delimited_codec import decode_fields, encode_fields
from photo_albums.adapters.file_store import FileBackedStore
from photo_albums.domain.errors import (
    IdentifierConflictError,
    InvalidIdentifierError,
    InvalidUserDataError,
    StorageIOError,
    UnknownIdentifierError,
)
from photo_albums.domain.users import Role, User
from photo_albums.domain.validation import check_valid_username
from photo_albums.files import write_atomically
from photo_albums.services.users import UserRepository

USERS_FILE = "users"
FIELD_COUNT = 9

_logger = logging.getLogger(__name__)


class FileUserRepository(FileBackedStore, UserRepository):
    """Flat-file user store.

    Every mutation builds a new mapping, rewrites the whole file and then
    swaps the mapping in, so readers never observe an unwritten state.
    """

    def __init__(self, base_path: Path) -> None:
        super().__init__(base_path)
        self._users: dict[str, User] = {}
        self._password_hashes: dict[str, str] = {}
        self._dirty = False

    @property
    def users_path(self) -> Path:
        return self.base_path / USERS_FILE

    def create(self, user: User, password_hash: str | None = None) -> User:
        """Persist a new user. Fails if the username is taken."""
        self._check_ready()
        check_valid_username(user.username)
        _require_email(user)
        with self._lock:
            if user.username in self._users:
                raise IdentifierConflictError(f"User already exists: {user.username}")
            users = {**self._users, user.username: user.copy()}
            hashes = dict(self._password_hashes)
            if password_hash:
                hashes[user.username] = password_hash
            self._commit(users, hashes)
        _logger.info("Created user %s", user.username)
        return user.copy()

    def get(self, username: str) -> User | None:
        self._check_ready()
        check_valid_username(username)
        user = self._users.get(username)
        return user.copy() if user is not None else None

    def get_all(self) -> list[User]:
        self._check_ready()
        users = self._users
        return [users[username].copy() for username in sorted(users)]

    def update(self, user: User) -> None:
        """Replace an existing user. Updates never create users."""
        self._check_ready()
        check_valid_username(user.username)
        _require_email(user)
        with self._lock:
            if user.username not in self._users:
                raise UnknownIdentifierError(f"User does not exist: {user.username}")
            self._commit(
                {**self._users, user.username: user.copy()},
                dict(self._password_hashes),
            )

    def delete(self, username: str) -> None:
        """Delete a user and its password hash. Unknown users are ignored."""
        self._check_ready()
        check_valid_username(username)
        with self._lock:
            users = dict(self._users)
            hashes = dict(self._password_hashes)
            users.pop(username, None)
            hashes.pop(username, None)
            self._commit(users, hashes)

    def find_by_email(self, email: str) -> User | None:
        self._check_ready()
        if not email or not email.strip():
            raise InvalidUserDataError("Email cannot be blank")
        wanted = email.casefold()
        for user in list(self._users.values()):
            if user.email and user.email.casefold() == wanted:
                return user.copy()
        return None

    def set_password_hash(self, username: str, password_hash: str) -> None:
        self._check_ready()
        check_valid_username(username)
        if not password_hash or not password_hash.strip():
            raise InvalidUserDataError("Password hash cannot be blank")
        with self._lock:
            if username not in self._users:
                raise UnknownIdentifierError(f"User does not exist: {username}")
            self._commit(
                dict(self._users), {**self._password_hashes, username: password_hash}
            )

    def get_password_hash(self, username: str) -> str | None:
        """Return the stored hash, or None for unknown or disabled users."""
        self._check_ready()
        check_valid_username(username)
        user = self._users.get(username)
        if user is None or not user.enabled:
            return None
        return self._password_hashes.get(username) or None

    def _commit(self, users: dict[str, User], hashes: dict[str, str]) -> None:
        # Caller holds the lock.
        if users != self._users or hashes != self._password_hashes:
            self._dirty = True
        if not self._dirty:
            return
        lines = [
            encode_fields(_user_fields(users[username], hashes.get(username)))
            for username in sorted(users)
        ]
        payload = "".join(f"{line}\n" for line in lines)
        write_atomically(self.users_path, payload.encode("utf-8"))
        self._users = users
        self._password_hashes = hashes
        self._dirty = False

    def _load(self) -> None:
        path = self.users_path
        try:
            if not path.exists():
                _logger.warning("Users file %s does not exist, starting empty", path)
                self._users, self._password_hashes = {}, {}
                return
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            _logger.error("Failed to read users file %s", path)
            raise StorageIOError(f"Failed to read users file {path}") from exc

        users: dict[str, User] = {}
        hashes: dict[str, str] = {}
        for line in text.split("\n"):
            line = line.removesuffix("\r")
            if not line:
                continue
            parts = decode_fields(line)
            if len(parts) != FIELD_COUNT:
                _logger.warning("Invalid line in users file: %s", line)
                continue
            try:
                check_valid_username(parts[0])
            except InvalidIdentifierError:
                _logger.warning("Invalid username in users file: %r", parts[0])
                continue
            user = _parse_user(parts)
            users[user.username] = user
            if parts[5]:
                hashes[user.username] = parts[5]
        self._users = users
        self._password_hashes = hashes
        self._dirty = False
        _logger.info("Loaded %s users from %s", len(users), path)


def _require_email(user: User) -> None:
    if not user.email or not user.email.strip():
        raise InvalidUserDataError("Email cannot be blank")


def _user_fields(user: User, password_hash: str | None) -> list[str | None]:
    reset = user.last_password_reset_date
    return [
        user.username,
        "true" if user.enabled else "false",
        user.role.value,
        user.email,
        format_album_roles(user.album_roles),
        password_hash,
        user.first_name,
        user.last_name,
        format_instant(reset) if reset is not None else None,
    ]


def _parse_user(parts: list[str]) -> User:
    username = parts[0]
    try:
        role = Role(parts[2])
    except ValueError:
        _logger.warning("Unknown role %r for user %s", parts[2], username)
        role = Role.NONE
    reset: datetime | None = None
    if parts[8].strip():
        try:
            reset = datetime.fromisoformat(parts[8])
        except ValueError:
            _logger.warning("Failed to parse last password reset date for %s", username)
    return User(
        username=username,
        enabled=parts[1].lower() == "true",
        role=role,
        email=parts[3],
        album_roles=parse_album_roles(parts[4]),
        first_name=parts[6] or None,
        last_name=parts[7] or None,
        last_password_reset_date=reset,
    )


def format_album_roles(album_roles: dict[str, Role] | None) -> str:
    """Render album roles as ``albumId:ROLE`` pairs sorted by album id."""
    return ",".join(
        f"{album_id}:{role.value}" for album_id, role in sorted((album_roles or {}).items())
    )


def parse_album_roles(value: str) -> dict[str, Role]:
    """Parse ``albumId:ROLE`` pairs, skipping malformed entries."""
    album_roles: dict[str, Role] = {}
    for pair in value.split(","):
        album_id, sep, role = pair.partition(":")
        if not sep or not album_id or ":" in role:
            continue
        try:
            album_roles[album_id] = Role(role)
        except ValueError:
            _logger.warning("Unknown album role %r for album %s", role, album_id)
    return album_roles


def format_instant(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC instant."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")
