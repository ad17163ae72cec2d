"""Signed bearer tokens."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jws, jwt
from jose.exceptions import JWSError
from pydantic import ValidationError as PydanticValidationError

from .errors import (
    ConfigurationError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from .models.auth import TokenPayload, UserIdentity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies HS256 JWTs carrying a ``UserIdentity``.

    Verification only looks at the token itself: signature and expiry. It
    never consults the user store, so a token stays valid until it expires
    even if the user is removed.
    """

    def __init__(
        self,
        secret: str,
        expiry: Optional[int] = 3600,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ConfigurationError("JWT secret is required")
        self.secret = secret
        self.expiry = expiry or None
        self.algorithm = algorithm
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def issue(self, identity: UserIdentity) -> str:
        """Create a signed token for ``identity``."""
        now = self.clock()
        payload = TokenPayload(
            user_id=identity.id,
            userName=identity.userName,
            iat=int(now.timestamp()),
        )
        if self.expiry is not None:
            payload.exp = int((now + timedelta(seconds=self.expiry)).timestamp())

        claims = payload.model_dump(by_alias=True, exclude_none=True)
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> UserIdentity:
        """Verify ``token`` and return the identity it carries."""
        try:
            jwt.get_unverified_claims(token)
        except (JWTError, AttributeError) as e:
            raise MalformedTokenError(f"Malformed token: {e}")

        try:
            jws.verify(token, self.secret, algorithms=[self.algorithm])
        except JWSError as e:
            raise InvalidSignatureError(f"Invalid token signature: {e}")

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
            payload = TokenPayload(**claims)
        except (JWTError, PydanticValidationError) as e:
            raise MalformedTokenError(f"Malformed token claims: {e}")

        if payload.exp is not None and self.clock().timestamp() > payload.exp:
            raise TokenExpiredError("Token expired")

        return payload.identity()
