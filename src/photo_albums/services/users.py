"""User-related business logic."""

import logging
from dataclasses import dataclass
from typing import Protocol

from photo_albums.domain.errors import IdentifierConflictError, InvalidUserDataError
from photo_albums.domain.users import Role, User
from photo_albums.domain.validation import (
    check_valid_album_id,
    check_valid_username,
    is_valid_email,
)

_logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for users and their password hashes."""

    def create(self, user: User, password_hash: str | None = None) -> User:
        """Persist a new user and return a copy of it."""

    def get(self, username: str) -> User | None:
        """Return the user for a username, if present."""

    def get_all(self) -> list[User]:
        """Return all users sorted by username."""

    def update(self, user: User) -> None:
        """Replace an existing user."""

    def delete(self, username: str) -> None:
        """Delete a user if present."""

    def find_by_email(self, email: str) -> User | None:
        """Return the user with the given email, ignoring case."""

    def set_password_hash(self, username: str, password_hash: str) -> None:
        """Store the password hash for a user."""

    def get_password_hash(self, username: str) -> str | None:
        """Return the password hash of an enabled user."""


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    repository: UserRepository

    def register_user(self, username: str, email: str) -> User:
        """Create an enabled user with the default role."""
        check_valid_username(username)
        if not is_valid_email(email):
            raise InvalidUserDataError(f"Invalid email: {email}")
        if self.repository.find_by_email(email) is not None:
            _logger.info("Rejected user %s: e-mail already used", username)
            raise IdentifierConflictError(f"E-mail already used: {email}")
        user = self.repository.create(User(username=username, email=email))
        _logger.info("Registered user %s", username)
        return user

    def update_user(
        self,
        username: str,
        email: str | None = None,
        enabled: bool | None = None,
        role: Role | None = None,
    ) -> User | None:
        """Apply the given changes to a user and return the updated user."""
        check_valid_username(username)
        if email and not is_valid_email(email):
            raise InvalidUserDataError(f"Invalid email: {email}")
        user = self.repository.get(username)
        if user is None:
            return None
        if email:
            user.email = email
        if enabled is not None:
            user.enabled = enabled
        if role is not None:
            user.role = role
        self.repository.update(user)
        return user

    def set_album_role(self, username: str, album_id: str, role: Role) -> User | None:
        """Grant a role on one album. ``Role.NONE`` revokes it."""
        check_valid_username(username)
        check_valid_album_id(album_id)
        if role is Role.SUPERADMIN:
            raise InvalidUserDataError("Album role must not be SUPERADMIN")
        user = self.repository.get(username)
        if user is None:
            return None
        if role is Role.NONE:
            user.album_roles.pop(album_id, None)
        else:
            user.album_roles[album_id] = role
        self.repository.update(user)
        return user

    def forget_album(self, album_id: str) -> None:
        """Drop every role granted on a deleted album."""
        for user in self.repository.get_all():
            if album_id in user.album_roles:
                del user.album_roles[album_id]
                self.repository.update(user)
