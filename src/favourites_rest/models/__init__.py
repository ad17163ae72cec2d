"""Pydantic models for favourites-rest."""

from .auth import Credentials, LoginResponse, MessageResponse, TokenPayload, UserIdentity

__all__ = [
    "Credentials",
    "UserIdentity",
    "TokenPayload",
    "MessageResponse",
    "LoginResponse",
]
