"""Author of a content item: tagged variant with discriminant `role`."""
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class GuestAuthor(BaseModel):
    """Self-asserted guest identity (no account)."""

    role: Literal["guest"] = "guest"
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)


class HostAuthor(BaseModel):
    role: Literal["host"] = "host"
    user_id: UUID


class PhotographerAuthor(BaseModel):
    role: Literal["photographer"] = "photographer"
    user_id: UUID


class AdminAuthor(BaseModel):
    role: Literal["admin"] = "admin"
    user_id: UUID


Author = Annotated[
    Union[GuestAuthor, HostAuthor, PhotographerAuthor, AdminAuthor],
    Field(discriminator="role"),
]

_AUTHOR_BY_ROLE = {
    "host": HostAuthor,
    "photographer": PhotographerAuthor,
    "admin": AdminAuthor,
}


def author_of(item) -> Union[GuestAuthor, HostAuthor, PhotographerAuthor, AdminAuthor]:
    """Rebuild the variant from the flattened author_* columns of a row."""
    if item.author_role == "guest" or item.author_user_id is None:
        return GuestAuthor(name=item.guest_name or "Guest", email=item.guest_email)
    return _AUTHOR_BY_ROLE[item.author_role](user_id=item.author_user_id)
