"""MongoDB user store."""

from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..errors import ConfigurationError, StoreError, ValidationError
from .base import UserRecord, UserStore


def _object_id(user_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


class MongoUserStore(UserStore):
    """User store backed by a MongoDB ``users`` collection."""

    def __init__(self, config: dict):
        super().__init__(config)
        self.url = config.get("url")
        if not self.url:
            raise ConfigurationError("MongoDB connection string is required (set MONGO_URL)")
        self.database_name = config.get("database", "favourites")
        self.timeout_ms = config.get("timeout_ms", 5000)
        self.client: Optional[AsyncIOMotorClient] = None
        self.users = None

    async def _open(self):
        try:
            self.client = AsyncIOMotorClient(self.url, serverSelectionTimeoutMS=self.timeout_ms)
            self.users = self.client[self.database_name]["users"]
            await self.users.create_index("userName", unique=True)
        except PyMongoError as e:
            self.logger.error(f"MongoDB connection error: {e}")
            await self._close()
            raise StoreError(
                f"MongoDB connection error: {e}", public_message="Unable to connect to user store"
            )

        self.logger.info(f"MongoDB connected (database={self.database_name})")

    async def _close(self):
        if self.client is not None:
            self.client.close()
        self.client = None
        self.users = None

    def _record(self, doc: dict) -> UserRecord:
        return UserRecord(
            id=str(doc["_id"]),
            user_name=doc["userName"],
            password_hash=doc["password"],
            favourites=list(doc.get("favourites", [])),
            profile=dict(doc.get("profile", {})),
        )

    def _store_error(self, action: str, error: PyMongoError) -> StoreError:
        self.logger.error(f"MongoDB {action} failed: {error}")
        return StoreError(f"MongoDB {action} failed: {error}", public_message=f"Unable to {action}")

    async def _insert_user(
        self, user_name: str, password_hash: str, profile: Dict[str, Any]
    ) -> UserRecord:
        doc = {
            "userName": user_name,
            "password": password_hash,
            "favourites": [],
            "profile": profile,
        }
        try:
            result = await self.users.insert_one(doc)
        except DuplicateKeyError:
            raise ValidationError("User Name already taken")
        except PyMongoError as e:
            raise self._store_error("create user", e)

        doc["_id"] = result.inserted_id
        return self._record(doc)

    async def find_user(self, user_name: str) -> Optional[UserRecord]:
        try:
            doc = await self.users.find_one({"userName": user_name})
        except PyMongoError as e:
            raise self._store_error("find user", e)
        return self._record(doc) if doc else None

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        oid = _object_id(user_id)
        if oid is None:
            return None

        try:
            doc = await self.users.find_one({"_id": oid})
        except PyMongoError as e:
            raise self._store_error("read user", e)
        return self._record(doc) if doc else None

    async def add_favourite(self, user_id: str, favourite_id: str) -> List[str]:
        oid = _object_id(user_id)
        if oid is None:
            raise StoreError(f"Unable to find user with id: {user_id}")

        # Matches only when the id is already present or there is room for one more.
        query = {
            "_id": oid,
            "$or": [
                {"favourites": favourite_id},
                {f"favourites.{self.max_favourites - 1}": {"$exists": False}},
            ],
        }
        try:
            doc = await self.users.find_one_and_update(
                query,
                {"$addToSet": {"favourites": favourite_id}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._store_error("update favourites", e)

        if doc is None:
            raise self._favourites_full(user_id)
        return list(doc.get("favourites", []))

    async def remove_favourite(self, user_id: str, favourite_id: str) -> List[str]:
        oid = _object_id(user_id)
        if oid is None:
            raise StoreError(f"Unable to find user with id: {user_id}")

        try:
            doc = await self.users.find_one_and_update(
                {"_id": oid},
                {"$pull": {"favourites": favourite_id}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._store_error("update favourites", e)

        if doc is None:
            raise StoreError(f"Unable to find user with id: {user_id}")
        return list(doc.get("favourites", []))
