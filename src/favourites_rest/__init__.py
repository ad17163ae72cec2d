"""Favourites REST - user accounts with per-user favourites over HTTP."""

__version__ = "1.0.0"

from .app import create_app
from .config import ServiceConfig

__all__ = ["create_app", "ServiceConfig"]
