"""Domain models for accounts."""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_AVATAR = "👤"
DEFAULT_ZONE = "general"

# Zones a profile may belong to; "general" is the default for new accounts.
VALID_ZONES = ("general", "gaming", "life", "culture", "professional")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(BaseModel):
    """Identity and credential record for a registered user.

    ``password_hash`` never leaves the core; use :meth:`public_view` for
    anything returned to a caller.
    """

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    username: str
    email: str
    password_hash: str
    avatar: str = DEFAULT_AVATAR
    zone: str = DEFAULT_ZONE
    followers: List[int] = Field(default_factory=list)
    following: List[int] = Field(default_factory=list)
    posts_count: int = 0
    is_verified: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    last_login_at: Optional[datetime] = None

    def public_view(self) -> "PublicAccount":
        """Project the account onto the fields safe to expose."""
        return PublicAccount(
            id=self.id,
            username=self.username,
            email=self.email,
            avatar=self.avatar,
            zone=self.zone,
            followers=len(self.followers),
            posts_count=self.posts_count,
            is_verified=self.is_verified,
        )


class PublicAccount(BaseModel):
    """Public projection of an account, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(..., description="Account ID")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Unique email address")
    avatar: str = Field(..., description="Display avatar")
    zone: str = Field(..., description="Profile zone")
    followers: int = Field(..., description="Number of followers")
    posts_count: int = Field(..., description="Number of posts")
    is_verified: bool = Field(..., description="Whether the account is verified")
