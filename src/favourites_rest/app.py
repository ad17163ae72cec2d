"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .auth import AuthManager
from .config import parse_expiry
from .errors import ConfigurationError, StoreError
from .routes.users import create_user_router
from .tokens import TokenService
from .users import create_user_store


def create_app(config: Dict[str, Any]) -> FastAPI:
    """Create FastAPI application with configuration."""
    logger = logging.getLogger(__name__)

    auth_config = config.get("auth", {})
    jwt_secret = auth_config.get("jwt_secret")
    if not jwt_secret:
        raise ConfigurationError("auth.jwt_secret is required (set JWT_SECRET)")

    # Create dependencies
    user_management_config = config.get("user_management", {"provider": "local"})
    user_store = create_user_store(user_management_config)

    token_service = TokenService(
        secret=jwt_secret,
        expiry=parse_expiry(auth_config.get("jwt_expiry", 3600)),
    )
    auth_manager = AuthManager(
        token_service=token_service,
        user_store=user_store,
        verify_against_store=auth_config.get("verify_against_store", False),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            await user_store.connect()
        except StoreError as e:
            # Requests retry the connection lazily
            logger.error(f"User store unavailable at startup: {e}")
        yield
        await user_store.close()

    app = FastAPI(
        title="Favourites REST API",
        description="User accounts and favourites",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Configure CORS
    cors_config = config.get("cors", {})
    if cors_config.get("enabled", True):
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_config.get("origins") or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"message": message}
        )

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.error(f"User store error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"error": exc.public_message}
        )

    app.include_router(create_user_router(auth_manager, user_store), prefix="/api")

    # Store dependencies for access in other parts of the app
    app.state.user_store = user_store
    app.state.auth_manager = auth_manager
    app.state.config = config

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": "Favourites REST API", "version": __version__, "docs": "/docs"}

    return app
