"""User stores."""

from ..errors import ConfigurationError
from .base import UserRecord, UserStore
from .local import LocalUserStore

__all__ = ["UserRecord", "UserStore", "LocalUserStore", "create_user_store"]


def create_user_store(config: dict) -> UserStore:
    """Create user store based on configuration."""
    provider_type = config.get("provider", "local")
    max_favourites = config.get("max_favourites", 50)

    if provider_type == "local":
        return LocalUserStore({"max_favourites": max_favourites, **config.get("local", {})})
    elif provider_type == "mongo":
        from .mongo import MongoUserStore

        return MongoUserStore({"max_favourites": max_favourites, **config.get("mongo", {})})
    else:
        raise ConfigurationError(f"Unknown user store: {provider_type}")
