"""Authentication dependency for protected routes."""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import TokenError
from .models.auth import UserIdentity
from .tokens import TokenService
from .users import UserStore


class AuthManager:
    """Verifies bearer tokens for protected routes.

    With ``verify_against_store`` the user named by the token must still exist
    in the store; otherwise the signed claims are trusted as-is.
    """

    def __init__(
        self,
        token_service: TokenService,
        user_store: UserStore,
        verify_against_store: bool = False,
    ):
        self.token_service = token_service
        self.user_store = user_store
        self.verify_against_store = verify_against_store
        self.logger = logging.getLogger(__name__)

    def _unauthorized(self, detail: str) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    async def get_current_user(
        self,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(
            HTTPBearer(auto_error=False)
        ),
    ) -> UserIdentity:
        """Get current authenticated user from the bearer token."""
        if credentials is None or not credentials.credentials:
            raise self._unauthorized("Not authenticated")

        try:
            identity = self.token_service.verify(credentials.credentials)
        except TokenError as e:
            self.logger.warning(f"JWT verification failed: {e}")
            raise self._unauthorized("Invalid authentication credentials")

        if self.verify_against_store:
            await self.user_store.connect()
            user = await self.user_store.get_user(identity.id)
            if user is None or user.user_name != identity.userName:
                self.logger.warning(f"Token user no longer exists: {identity.userName}")
                raise self._unauthorized("User not found")

        return identity
