"""User management endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response, status

from photo_albums.api.models import (
    AlbumRoleRequest,
    CreateUserRequest,
    UpdateUserRequest,
)
from photo_albums.domain.errors import UnknownIdentifierError

if TYPE_CHECKING:
    from photo_albums.containers import AppContainer
    from photo_albums.domain.users import User

router = APIRouter(prefix="/users", tags=["users"])


def _user_payload(user: User) -> dict[str, object]:
    payload = asdict(user)
    payload["role"] = user.role.value
    payload["album_roles"] = {
        album_id: role.value for album_id, role in user.album_roles.items()
    }
    reset = user.last_password_reset_date
    payload["last_password_reset_date"] = reset.isoformat() if reset else None
    return payload


@router.get("")
def list_users(request: Request) -> list[dict[str, object]]:
    """Return all users sorted by username."""
    container: AppContainer = request.app.state.container
    return [_user_payload(user) for user in container.user_repository.get_all()]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: CreateUserRequest, request: Request, response: Response
) -> dict[str, object]:
    """Register a new user."""
    container: AppContainer = request.app.state.container
    user = container.user_service.register_user(payload.username, payload.email)
    response.headers["Location"] = f"/users/{user.username}"
    return _user_payload(user)


@router.get("/{username}")
def get_user(username: str, request: Request) -> dict[str, object]:
    """Return one user."""
    container: AppContainer = request.app.state.container
    user = container.user_repository.get(username)
    if user is None:
        raise UnknownIdentifierError(f"User does not exist: {username}")
    return _user_payload(user)


@router.patch("/{username}", status_code=status.HTTP_204_NO_CONTENT)
def update_user(username: str, payload: UpdateUserRequest, request: Request) -> None:
    """Change the e-mail, enabled flag or role of a user."""
    container: AppContainer = request.app.state.container
    user = container.user_service.update_user(
        username, email=payload.email, enabled=payload.enabled, role=payload.role
    )
    if user is None:
        raise UnknownIdentifierError(f"User does not exist: {username}")


@router.delete("/{username}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(username: str, request: Request) -> None:
    """Delete a user."""
    container: AppContainer = request.app.state.container
    container.user_repository.delete(username)


@router.put("/{username}/album-roles/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
def set_album_role(
    username: str, album_id: str, payload: AlbumRoleRequest, request: Request
) -> None:
    """Grant a role on an album. ``NONE`` revokes it."""
    container: AppContainer = request.app.state.container
    user = container.user_service.set_album_role(username, album_id, payload.role)
    if user is None:
        raise UnknownIdentifierError(f"User does not exist: {username}")
