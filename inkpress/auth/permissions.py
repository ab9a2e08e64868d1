"""Roles and the authorization predicate used by every service.

Two roles exist: ``user`` and ``admin``. A user may manage (edit, delete)
only what they own; an admin may manage everything.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    """User roles carried in the access token."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, decoded from the bearer token.

    Identity is owned by the external auth provider; it is trusted as-is.
    """

    id: UUID
    role: UserRole = UserRole.USER
    display_name: str = ""
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def parse_role(role: UserRole | str | None) -> UserRole:
    """Parse a role claim, defaulting unknown values to ``user``."""
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return UserRole.USER


def can_manage(actor: Actor | None, owner_id: UUID) -> bool:
    """Check if ``actor`` may modify an entity owned by ``owner_id``.

    Admins manage everything; anyone else only what they own. Anonymous
    callers manage nothing.
    """
    if actor is None:
        return False
    return actor.is_admin or actor.id == owner_id
