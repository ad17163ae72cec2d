"""Error types for favourites-rest."""


class FavouritesError(Exception):
    """Base class for service errors."""


class ConfigurationError(FavouritesError):
    """Service cannot start with the given configuration."""


class ValidationError(FavouritesError):
    """Invalid or duplicate registration input."""


class AuthenticationError(FavouritesError):
    """Bad login credentials or an unusable bearer token."""


class TokenError(AuthenticationError):
    """Bearer token could not be verified."""


class MalformedTokenError(TokenError):
    """Token cannot be decoded."""


class InvalidSignatureError(TokenError):
    """Token signature does not match the server secret."""


class TokenExpiredError(TokenError):
    """Token is past its expiry."""


class StoreError(FavouritesError):
    """User store operation failed.

    ``public_message`` is safe to return to clients; the full message (which
    may carry driver details) is only logged.
    """

    def __init__(self, message: str, public_message: str = None):
        super().__init__(message)
        self.public_message = public_message or message
