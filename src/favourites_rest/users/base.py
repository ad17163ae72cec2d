"""Abstract base class for user stores."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import AuthenticationError, StoreError, ValidationError
from ..models.auth import Credentials
from .passwords import hash_password, verify_password


@dataclass
class UserRecord:
    """User record held by a user store."""

    id: str
    user_name: str
    password_hash: str
    favourites: List[str] = field(default_factory=list)
    profile: Dict[str, Any] = field(default_factory=dict)


class UserStore(ABC):
    """Abstract base class for user and favourites storage.

    A store owns its connection. ``connect`` is idempotent, so the app can call
    it once at startup and again per request on hosts without a long-lived
    process.
    """

    def __init__(self, config: dict):
        self.config = config
        self.max_favourites = config.get("max_favourites", 50)
        self.logger = logging.getLogger(self.__class__.__module__)
        self._connected = False
        self._connect_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self):
        """Open the store connection if it is not open yet."""
        if self._connected:
            return
        async with self._connect_lock:
            if self._connected:
                return
            await self._open()
            self._connected = True

    async def close(self):
        """Close the store connection."""
        if not self._connected:
            return
        await self._close()
        self._connected = False

    async def register_user(self, credentials: Credentials) -> UserRecord:
        """Validate credentials and create a new user."""
        user_name = credentials.userName.strip()
        if not user_name or not credentials.password:
            raise ValidationError("User Name and password are required")

        if credentials.password2 is not None and credentials.password != credentials.password2:
            raise ValidationError("Passwords do not match")

        # PBKDF2 is CPU bound; keep it off the event loop
        password_hash = await asyncio.to_thread(hash_password, credentials.password)
        record = await self._insert_user(user_name, password_hash, credentials.profile)
        self.logger.info(f"Registered user {user_name}")
        return record

    async def check_user(self, user_name: str, password: str) -> UserRecord:
        """Return the user if the password matches."""
        user_name = user_name.strip()
        record = await self.find_user(user_name)
        if record is None:
            raise AuthenticationError(f"Unable to find user: {user_name}")

        if not await asyncio.to_thread(verify_password, password, record.password_hash):
            raise AuthenticationError(f"Incorrect password for user: {user_name}")

        return record

    async def get_favourites(self, user_id: str) -> List[str]:
        """Get favourite ids for a user."""
        record = await self.get_user(user_id)
        if record is None:
            raise StoreError(f"Unable to find user with id: {user_id}")
        return list(record.favourites)

    def _favourites_full(self, user_id: str) -> StoreError:
        return StoreError(f"Unable to update favourites for user with id: {user_id}")

    @abstractmethod
    async def _open(self):
        """Establish the underlying connection."""
        pass

    @abstractmethod
    async def _close(self):
        """Release the underlying connection."""
        pass

    @abstractmethod
    async def _insert_user(
        self, user_name: str, password_hash: str, profile: Dict[str, Any]
    ) -> UserRecord:
        """Persist a new user, raising ``ValidationError`` on duplicates."""
        pass

    @abstractmethod
    async def find_user(self, user_name: str) -> Optional[UserRecord]:
        """Get user by user name."""
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        """Get user by id."""
        pass

    @abstractmethod
    async def add_favourite(self, user_id: str, favourite_id: str) -> List[str]:
        """Add a favourite id and return the updated favourites."""
        pass

    @abstractmethod
    async def remove_favourite(self, user_id: str, favourite_id: str) -> List[str]:
        """Remove a favourite id and return the updated favourites."""
        pass
