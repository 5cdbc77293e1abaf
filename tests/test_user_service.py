"""Tests for user service behavior."""

import pytest

from photo_albums.adapters.file_user_repository import FileUserRepository
from photo_albums.domain.errors import (
    IdentifierConflictError,
    InvalidIdentifierError,
    InvalidUserDataError,
)
from photo_albums.domain.users import Role
from photo_albums.services.users import UserService


def test_register_user_creates_enabled_user(
    user_repository: FileUserRepository,
) -> None:
    service = UserService(user_repository)

    user = service.register_user("anna", "anna@example.com")

    assert user.enabled is True
    assert user.role is Role.USER
    assert user_repository.get("anna") == user


def test_register_user_rejects_used_email(user_repository: FileUserRepository) -> None:
    service = UserService(user_repository)
    service.register_user("anna", "anna@example.com")

    with pytest.raises(IdentifierConflictError):
        service.register_user("other", "ANNA@example.com")


def test_register_user_validates_fields(user_repository: FileUserRepository) -> None:
    service = UserService(user_repository)

    with pytest.raises(InvalidIdentifierError):
        service.register_user("bad name", "a@example.com")
    with pytest.raises(InvalidUserDataError):
        service.register_user("anna", "not-an-email")


def test_update_user_applies_given_fields(user_repository: FileUserRepository) -> None:
    service = UserService(user_repository)
    service.register_user("anna", "anna@example.com")

    updated = service.update_user("anna", enabled=False, role=Role.ADMIN)

    assert updated.enabled is False
    assert updated.role is Role.ADMIN
    assert updated.email == "anna@example.com"
    assert service.update_user("ghost", enabled=True) is None


def test_album_roles_are_granted_and_revoked(
    user_repository: FileUserRepository,
) -> None:
    service = UserService(user_repository)
    service.register_user("anna", "anna@example.com")

    service.set_album_role("anna", "summer", Role.ADMIN)
    assert user_repository.get("anna").album_roles == {"summer": Role.ADMIN}

    service.set_album_role("anna", "summer", Role.NONE)
    assert user_repository.get("anna").album_roles == {}

    with pytest.raises(InvalidUserDataError):
        service.set_album_role("anna", "summer", Role.SUPERADMIN)


def test_forget_album_drops_roles(user_repository: FileUserRepository) -> None:
    service = UserService(user_repository)
    service.register_user("anna", "anna@example.com")
    service.register_user("bob", "bob@example.com")
    service.set_album_role("anna", "summer", Role.USER)
    service.set_album_role("bob", "winter", Role.USER)

    service.forget_album("summer")

    assert user_repository.get("anna").album_roles == {}
    assert user_repository.get("bob").album_roles == {"winter": Role.USER}
