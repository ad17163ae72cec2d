"""Configuration management for favourites-rest."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml

from .errors import ConfigurationError


def parse_expiry(value) -> Optional[int]:
    """Normalize a token expiry setting; ``None`` means tokens never expire."""
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip().lower() in ("", "none", "never"):
            return None
        try:
            value = int(value)
        except ValueError:
            raise ConfigurationError(f"Invalid jwt_expiry: {value}")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"Invalid jwt_expiry: {value}")
    return value or None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: {value}")


@dataclass
class ServiceConfig:
    """Service configuration."""

    jwt_secret: Optional[str] = None
    jwt_expiry: Optional[int] = 3600
    verify_against_store: bool = False

    user_store: str = "local"
    users_file: Optional[str] = None
    mongo_url: Optional[str] = None
    mongo_db: str = "favourites"
    max_favourites: int = 50

    host: str = "0.0.0.0"
    port: int = 8080
    cors_enabled: bool = True
    cors_origins: Optional[List[str]] = None

    log_level: str = "INFO"
    structured_logging: bool = False

    def __post_init__(self):
        if self.cors_origins is None:
            self.cors_origins = ["*"]

    @classmethod
    def from_file(cls, config_path: str) -> "ServiceConfig":
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            return cls()

        try:
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            raise ConfigurationError(f"Failed to load config file {config_path}: {e}")

        server_config = data.get("server", {})
        auth_config = data.get("auth", {})
        users_config = data.get("user_management", {})
        local_config = users_config.get("local", {})
        mongo_config = users_config.get("mongo", {})
        cors_config = data.get("cors", {})
        logging_config = data.get("logging", {})

        return cls(
            jwt_secret=auth_config.get("jwt_secret", cls.jwt_secret),
            jwt_expiry=parse_expiry(auth_config.get("jwt_expiry", cls.jwt_expiry)),
            verify_against_store=auth_config.get(
                "verify_against_store", cls.verify_against_store
            ),
            user_store=users_config.get("provider", cls.user_store),
            users_file=local_config.get("users_file", cls.users_file),
            mongo_url=mongo_config.get("url", cls.mongo_url),
            mongo_db=mongo_config.get("database", cls.mongo_db),
            max_favourites=users_config.get("max_favourites", cls.max_favourites),
            host=server_config.get("host", cls.host),
            port=server_config.get("port", cls.port),
            cors_enabled=cors_config.get("enabled", cls.cors_enabled),
            cors_origins=cors_config.get("origins"),
            log_level=logging_config.get("level", cls.log_level),
            structured_logging=logging_config.get("structured", cls.structured_logging),
        )

    @classmethod
    def from_env(cls, base: Optional["ServiceConfig"] = None) -> "ServiceConfig":
        """Load configuration from environment variables, overriding ``base``."""
        config = base or cls()

        cors_origins = os.getenv("CORS_ORIGINS")
        if cors_origins is not None:
            cors_origins = [o.strip() for o in cors_origins.split(",") if o.strip()]

        return cls(
            jwt_secret=os.getenv("JWT_SECRET", config.jwt_secret),
            jwt_expiry=parse_expiry(os.getenv("JWT_EXPIRY", config.jwt_expiry)),
            verify_against_store=os.getenv(
                "VERIFY_AGAINST_STORE", str(config.verify_against_store)
            ).lower()
            == "true",
            user_store=os.getenv("USER_STORE", config.user_store),
            users_file=os.getenv("USERS_FILE", config.users_file),
            mongo_url=os.getenv("MONGO_URL", config.mongo_url),
            mongo_db=os.getenv("MONGO_DB", config.mongo_db),
            max_favourites=_env_int("MAX_FAVOURITES", config.max_favourites),
            host=os.getenv("HOST", config.host),
            port=_env_int("PORT", config.port),
            cors_enabled=config.cors_enabled,
            cors_origins=cors_origins if cors_origins is not None else config.cors_origins,
            log_level=os.getenv("LOG_LEVEL", config.log_level),
            structured_logging=config.structured_logging,
        )

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "ServiceConfig":
        """Load from ``config_path`` (if given) with environment overrides."""
        base = cls.from_file(config_path) if config_path else cls()
        return cls.from_env(base)

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.jwt_secret:
            errors.append("jwt_secret is required (set JWT_SECRET)")

        if self.user_store not in ("local", "mongo"):
            errors.append(f"Unknown user store: {self.user_store}")
        elif self.user_store == "mongo" and not self.mongo_url:
            errors.append("mongo_url is required for the mongo user store (set MONGO_URL)")

        if self.max_favourites <= 0:
            errors.append(f"max_favourites must be positive: {self.max_favourites}")

        if not (0 < self.port < 65536):
            errors.append(f"Invalid port: {self.port}")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_log_levels:
            errors.append(f"Invalid log_level: {self.log_level}")

        return errors

    def to_dict(self) -> dict:
        """Convert configuration to the dictionary consumed by ``create_app``."""
        return {
            "server": {"host": self.host, "port": self.port},
            "auth": {
                "jwt_secret": self.jwt_secret,
                "jwt_expiry": self.jwt_expiry,
                "verify_against_store": self.verify_against_store,
            },
            "user_management": {
                "provider": self.user_store,
                "max_favourites": self.max_favourites,
                "local": {"users_file": self.users_file},
                "mongo": {"url": self.mongo_url, "database": self.mongo_db},
            },
            "cors": {"enabled": self.cors_enabled, "origins": self.cors_origins},
            "logging": {"level": self.log_level, "structured": self.structured_logging},
        }
