from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from errors import AuthorizationError

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Actor:
    user_id: Optional[str]
    role: Optional[str]

    @property
    def is_admin(self) -> bool:
        return (self.role or "").strip().lower() == ADMIN_ROLE


def require_admin(actor: Optional[Actor]) -> None:
    if actor is None or not actor.is_admin:
        raise AuthorizationError("Access denied. Admin only.")


def current_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    """Actor as identified by the upstream auth gateway."""
    return Actor(user_id=x_user_id, role=x_user_role)
