"""Route handlers for favourites-rest API."""

from .users import create_user_router

__all__ = ["create_user_router"]
