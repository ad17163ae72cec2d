"""Local user store, in memory with optional YAML file persistence."""

import asyncio
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import StoreError, ValidationError
from .base import UserRecord, UserStore


class LocalUserStore(UserStore):
    """Local user store for development and single-process deployments."""

    def __init__(self, config: dict):
        super().__init__(config)
        users_file = config.get("users_file")
        self.users_file = Path(users_file) if users_file else None
        self.users_cache: Dict[str, dict] = {}
        self._write_lock = asyncio.Lock()

    async def _open(self):
        """Load users from YAML file."""
        if self.users_file is None:
            return

        if not self.users_file.exists():
            self.logger.warning(f"Users file not found, starting empty: {self.users_file}")
            return

        try:
            with open(self.users_file) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(
                f"Failed to load users file {self.users_file}: {e}",
                public_message="Unable to load user data",
            )

        self.users_cache = data.get("users") or {}
        self.logger.info(f"Loaded {len(self.users_cache)} users from {self.users_file}")

    async def _close(self):
        pass

    def _commit(self, users: Dict[str, dict]):
        """Write ``users`` to the users file, then make it the live state."""
        if self.users_file is not None:
            try:
                self.users_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.users_file, "w") as f:
                    yaml.safe_dump({"users": users}, f, sort_keys=False)
            except OSError as e:
                raise StoreError(
                    f"Failed to write users file {self.users_file}: {e}",
                    public_message="Unable to save user data",
                )

        self.users_cache = users

    def _record(self, user_id: str, user_data: dict) -> UserRecord:
        return UserRecord(
            id=user_id,
            user_name=user_data["userName"],
            password_hash=user_data["password_hash"],
            favourites=list(user_data.get("favourites", [])),
            profile=dict(user_data.get("profile", {})),
        )

    async def _insert_user(
        self, user_name: str, password_hash: str, profile: Dict[str, Any]
    ) -> UserRecord:
        async with self._write_lock:
            if await self.find_user(user_name) is not None:
                raise ValidationError("User Name already taken")

            user_id = uuid.uuid4().hex
            user_data = {
                "userName": user_name,
                "password_hash": password_hash,
                "favourites": [],
                "profile": profile,
            }
            self._commit({**self.users_cache, user_id: user_data})

        return self._record(user_id, user_data)

    async def find_user(self, user_name: str) -> Optional[UserRecord]:
        for user_id, user_data in self.users_cache.items():
            if user_data.get("userName") == user_name:
                return self._record(user_id, user_data)
        return None

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        user_data = self.users_cache.get(user_id)
        if user_data is None:
            return None
        return self._record(user_id, user_data)

    def _favourites(self, user_id: str) -> List[str]:
        user_data = self.users_cache.get(user_id)
        if user_data is None:
            raise StoreError(f"Unable to find user with id: {user_id}")
        return list(user_data.get("favourites", []))

    def _commit_favourites(self, user_id: str, favourites: List[str]):
        user_data = {**self.users_cache[user_id], "favourites": favourites}
        self._commit({**self.users_cache, user_id: user_data})

    async def add_favourite(self, user_id: str, favourite_id: str) -> List[str]:
        async with self._write_lock:
            favourites = self._favourites(user_id)
            if favourite_id not in favourites:
                if len(favourites) >= self.max_favourites:
                    raise self._favourites_full(user_id)
                favourites.append(favourite_id)
                self._commit_favourites(user_id, favourites)
            return list(favourites)

    async def remove_favourite(self, user_id: str, favourite_id: str) -> List[str]:
        async with self._write_lock:
            favourites = self._favourites(user_id)
            if favourite_id in favourites:
                favourites.remove(favourite_id)
                self._commit_favourites(user_id, favourites)
            return list(favourites)
