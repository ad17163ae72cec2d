"""User account and favourites route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..auth import AuthManager
from ..errors import AuthenticationError, StoreError, ValidationError
from ..models.auth import Credentials, LoginResponse, MessageResponse, UserIdentity
from ..users import UserStore

logger = logging.getLogger(__name__)


def create_user_router(auth_manager: AuthManager, user_store: UserStore) -> APIRouter:
    """Create user router with auth manager and user store dependencies.

    Every handler opens the store inside its own ``try`` so connection
    failures get the same response shape as the operation's own failures.
    """
    router = APIRouter(prefix="/user", tags=["user"])

    def failure(key: str, message: str) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={key: message})

    def store_failure(e: StoreError, key: str = "error") -> JSONResponse:
        logger.error(f"User store error: {e}")
        return failure(key, e.public_message)

    @router.post("/register", response_model=MessageResponse)
    async def register(credentials: Credentials):
        """Register a new user."""
        try:
            await user_store.connect()
            user = await user_store.register_user(credentials)
        except ValidationError as e:
            logger.info(f"Registration rejected for {credentials.userName}: {e}")
            return failure("message", str(e))
        except StoreError as e:
            return store_failure(e, "message")

        return MessageResponse(message=f"User {user.user_name} successfully registered")

    @router.post("/login", response_model=LoginResponse)
    async def login(credentials: Credentials):
        """Authenticate user and return JWT token."""
        try:
            await user_store.connect()
            user = await user_store.check_user(credentials.userName, credentials.password)
        except AuthenticationError as e:
            logger.info(f"Login failed: {e}")
            return failure("message", str(e))
        except StoreError as e:
            return store_failure(e, "message")

        token = auth_manager.token_service.issue(UserIdentity(id=user.id, userName=user.user_name))
        logger.info(f"User {user.user_name} logged in")
        return LoginResponse(message="login successful", token=token)

    @router.get("/favourites", response_model=List[str])
    async def get_favourites(current_user: UserIdentity = Depends(auth_manager.get_current_user)):
        """Get the current user's favourites."""
        try:
            await user_store.connect()
            return await user_store.get_favourites(current_user.id)
        except StoreError as e:
            return store_failure(e)

    @router.put("/favourites/{favourite_id}", response_model=List[str])
    async def add_favourite(
        favourite_id: str, current_user: UserIdentity = Depends(auth_manager.get_current_user)
    ):
        """Add a favourite; adding an existing id changes nothing."""
        try:
            await user_store.connect()
            return await user_store.add_favourite(current_user.id, favourite_id)
        except StoreError as e:
            return store_failure(e)

    @router.delete("/favourites/{favourite_id}", response_model=List[str])
    async def remove_favourite(
        favourite_id: str, current_user: UserIdentity = Depends(auth_manager.get_current_user)
    ):
        """Remove a favourite; removing an absent id changes nothing."""
        try:
            await user_store.connect()
            return await user_store.remove_favourite(current_user.id, favourite_id)
        except StoreError as e:
            return store_failure(e)

    return router
