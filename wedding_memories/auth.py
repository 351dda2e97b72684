"""
Caller resolution. The upstream gateway authenticates users and forwards
X-User-ID (UUID) and X-User-Role (host | photographer | admin). No headers -> guest.
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header

from wedding_memories.errors import AuthenticationRequired
from wedding_memories.services.moderation_service import SubmitterRole


@dataclass(frozen=True)
class Principal:
    role: SubmitterRole
    user_id: Optional[UUID] = None

    @property
    def is_guest(self) -> bool:
        return self.role == SubmitterRole.GUEST

    @property
    def is_admin(self) -> bool:
        return self.role == SubmitterRole.ADMIN

    @property
    def actor(self) -> str:
        """Audit actor string."""
        return str(self.user_id) if self.user_id else self.role.value


GUEST = Principal(role=SubmitterRole.GUEST)


def resolve_principal(user_id: Optional[str], role: Optional[str]) -> Principal:
    if not user_id:
        return GUEST
    try:
        uid = UUID(user_id)
    except ValueError:
        raise AuthenticationRequired("invalid_user_id", "X-User-ID must be a UUID")
    try:
        resolved = SubmitterRole((role or SubmitterRole.HOST.value).lower())
    except ValueError:
        raise AuthenticationRequired("invalid_user_role", "Unknown X-User-Role")
    if resolved == SubmitterRole.GUEST:
        raise AuthenticationRequired("invalid_user_role", "Authenticated users cannot act as guest")
    return Principal(role=resolved, user_id=uid)


async def get_optional_principal(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
) -> Principal:
    """Guest when no identity header is present."""
    return resolve_principal(x_user_id, x_user_role)


async def get_principal(principal: Principal = Depends(get_optional_principal)) -> Principal:
    """Authenticated host / photographer / admin only."""
    if principal.is_guest:
        raise AuthenticationRequired("authentication_required")
    return principal


async def get_event_password(
    x_event_password: Optional[str] = Header(None, alias="X-Event-Password"),
) -> Optional[str]:
    """Password guests send for password-protected events."""
    return x_event_password
