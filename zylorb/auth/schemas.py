"""Pydantic schemas for authentication requests, responses and token claims."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from zylorb.core.models import PublicAccount


class TokenClaims(BaseModel):
    """Claims carried by a session token."""

    sub: str = Field(..., description="Account ID of the token subject")
    email: str = Field(..., description="Email address at issue time")
    username: str = Field(..., description="Username at issue time")
    iat: float = Field(..., description="Issue time, seconds since the epoch")
    exp: Optional[float] = Field(None, description="Informational expiry time")

    @field_validator("sub")
    @classmethod
    def validate_sub(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("sub must be a numeric account id")
        return v

    @property
    def subject_id(self) -> int:
        return int(self.sub)


class RegisterRequest(BaseModel):
    """Request schema for account registration."""

    username: str = Field(
        ...,
        max_length=100,
        description="Letters, digits and underscores, at least 3 characters",
        examples=["night_owl"],
    )
    email: str = Field(
        ...,
        max_length=254,
        description="Email address used to log in",
        examples=["owl@example.com"],
    )
    password: str = Field(
        ...,
        max_length=128,
        description="Password (minimum 6 characters)",
        examples=["hunter22"],
    )


class LoginRequest(BaseModel):
    """Request schema for login."""

    email: str = Field(..., max_length=254, description="Registered email address")
    password: str = Field(..., max_length=128, description="Account password")


class ProfileUpdateRequest(BaseModel):
    """Request schema for updating the current account's profile."""

    avatar: Optional[str] = Field(None, description="New display avatar")
    zone: Optional[str] = Field(None, description="New profile zone")


class AuthResponse(BaseModel):
    """Response for successful registration or login."""

    message: str = Field(..., description="Human-readable status message")
    token: str = Field(..., description="Bearer token valid for 24 hours")
    user: PublicAccount = Field(..., description="Public view of the account")


class AccountResponse(BaseModel):
    """Response wrapping the public view of an account."""

    message: Optional[str] = Field(None, description="Human-readable status message")
    user: PublicAccount
