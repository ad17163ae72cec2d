"""Authentication request/response models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Register/login request model.

    Extra fields are kept as profile data for registration.
    """

    model_config = ConfigDict(extra="allow")

    userName: str
    password: str
    password2: Optional[str] = None

    @property
    def profile(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class UserIdentity(BaseModel):
    """Identity carried by a bearer token."""

    model_config = ConfigDict(frozen=True)

    id: str
    userName: str


class TokenPayload(BaseModel):
    """JWT token payload model."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="_id")
    userName: str
    iat: int  # issued at timestamp
    exp: Optional[int] = None  # expiration timestamp, absent when tokens never expire

    def identity(self) -> UserIdentity:
        return UserIdentity(id=self.user_id, userName=self.userName)


class MessageResponse(BaseModel):
    """Plain message response model."""

    message: str


class LoginResponse(BaseModel):
    """Login response model."""

    message: str
    token: str
