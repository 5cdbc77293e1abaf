"""User models for the flat-file user store."""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Roles a user can hold globally or per album."""

    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    USER = "USER"
    NONE = "NONE"


@dataclass
class User:
    """Represents a user. The password hash is stored separately."""

    username: str
    email: str
    role: Role = Role.USER
    enabled: bool = True
    first_name: str | None = None
    last_name: str | None = None
    album_roles: dict[str, Role] = field(default_factory=dict)
    last_password_reset_date: datetime | None = None

    def copy(self) -> "User":
        """Return an independent copy of the user."""
        return copy.deepcopy(self)
