"""Request payloads accepted by the HTTP API."""

from pydantic import BaseModel, Field

from photo_albums.domain.users import Role


class AlbumNameRequest(BaseModel):
    """Payload naming an album."""

    name: str = Field(min_length=1, max_length=200)


class CaptionRequest(BaseModel):
    """Alt text and caption of a content. Other fields cannot be changed."""

    alt: str | None = None
    text: str | None = None


class CreateUserRequest(BaseModel):
    """Payload for registering a user."""

    username: str
    email: str


class UpdateUserRequest(BaseModel):
    """Optional user changes."""

    email: str | None = None
    enabled: bool | None = None
    role: Role | None = None


class AlbumRoleRequest(BaseModel):
    """Role granted on one album."""

    role: Role
