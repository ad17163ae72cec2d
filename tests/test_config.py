"""Tests for configuration management."""

import pytest
import yaml

from favourites_rest import create_app
from favourites_rest.__main__ import run
from favourites_rest.config import ServiceConfig, parse_expiry
from favourites_rest.errors import ConfigurationError

ENV_VARS = [
    "JWT_SECRET",
    "JWT_EXPIRY",
    "VERIFY_AGAINST_STORE",
    "USER_STORE",
    "USERS_FILE",
    "MONGO_URL",
    "MONGO_DB",
    "MAX_FAVOURITES",
    "HOST",
    "PORT",
    "CORS_ORIGINS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clear service environment variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestServiceConfig:
    """Test service configuration."""

    def test_default_config(self):
        """Test default configuration values."""
        config = ServiceConfig()

        assert config.jwt_secret is None
        assert config.jwt_expiry == 3600
        assert config.verify_against_store is False
        assert config.user_store == "local"
        assert config.max_favourites == 50
        assert config.port == 8080
        assert config.cors_origins == ["*"]

    def test_from_file(self, temp_dir):
        """Test loading configuration from YAML file."""
        config_file = temp_dir / "config.yaml"
        config_data = {
            "server": {"port": 9000},
            "auth": {"jwt_secret": "file-secret", "jwt_expiry": "none"},
            "user_management": {
                "provider": "mongo",
                "mongo": {"url": "mongodb://db:27017", "database": "users"},
            },
            "logging": {"level": "DEBUG"},
        }

        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        config = ServiceConfig.from_file(str(config_file))

        assert config.port == 9000
        assert config.jwt_secret == "file-secret"
        assert config.jwt_expiry is None
        assert config.user_store == "mongo"
        assert config.mongo_url == "mongodb://db:27017"
        assert config.mongo_db == "users"
        assert config.log_level == "DEBUG"

    def test_from_file_nonexistent(self):
        """Test loading from non-existent file returns defaults."""
        config = ServiceConfig.from_file("/nonexistent/file.yaml")

        assert config.port == 8080
        assert config.log_level == "INFO"

    def test_from_file_invalid(self, temp_dir):
        config_file = temp_dir / "config.yaml"
        config_file.write_text("auth: [unclosed")

        with pytest.raises(ConfigurationError):
            ServiceConfig.from_file(str(config_file))

    def test_from_env(self, monkeypatch):
        """Test loading configuration from environment variables."""
        monkeypatch.setenv("JWT_SECRET", "env-secret")
        monkeypatch.setenv("JWT_EXPIRY", "60")
        monkeypatch.setenv("VERIFY_AGAINST_STORE", "true")
        monkeypatch.setenv("MONGO_URL", "mongodb://env:27017")
        monkeypatch.setenv("PORT", "3000")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

        config = ServiceConfig.from_env()

        assert config.jwt_secret == "env-secret"
        assert config.jwt_expiry == 60
        assert config.verify_against_store is True
        assert config.mongo_url == "mongodb://env:27017"
        assert config.port == 3000
        assert config.cors_origins == ["https://a.example", "https://b.example"]

    def test_env_overrides_file(self, temp_dir, monkeypatch):
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.dump({"auth": {"jwt_secret": "file-secret"}, "server": {"port": 9000}}))
        monkeypatch.setenv("JWT_SECRET", "env-secret")

        config = ServiceConfig.load(str(config_file))

        assert config.jwt_secret == "env-secret"
        assert config.port == 9000

    def test_validate(self):
        """Test validation reports missing secret and mongo url."""
        errors = ServiceConfig(user_store="mongo", port=0, log_level="LOUD").validate()

        assert any("jwt_secret" in e for e in errors)
        assert any("mongo_url" in e for e in errors)
        assert any("port" in e for e in errors)
        assert any("log_level" in e for e in errors)

    def test_validate_ok(self):
        assert ServiceConfig(jwt_secret="s").validate() == []

    def test_to_dict_builds_app(self):
        """Test the dictionary form is accepted by the app factory."""
        config = ServiceConfig(jwt_secret="s", jwt_expiry=None, verify_against_store=True)

        app = create_app(config.to_dict())

        assert app.state.auth_manager.token_service.expiry is None
        assert app.state.auth_manager.verify_against_store is True

    @pytest.mark.parametrize("name", ["PORT", "MAX_FAVOURITES"])
    def test_from_env_invalid_number(self, monkeypatch, name):
        """Test non-numeric settings are configuration errors."""
        monkeypatch.setenv(name, "eighty")

        with pytest.raises(ConfigurationError, match=name):
            ServiceConfig.from_env()


class TestParseExpiry:
    """Test token expiry parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [(None, None), (0, None), ("none", None), ("", None), (3600, 3600), ("60", 60)],
    )
    def test_values(self, value, expected):
        assert parse_expiry(value) == expected

    @pytest.mark.parametrize("value", [-1, "soon", True])
    def test_invalid(self, value):
        with pytest.raises(ConfigurationError):
            parse_expiry(value)


class TestRun:
    """Test service entry point."""

    @pytest.mark.asyncio
    async def test_missing_secret_exits(self, temp_dir):
        assert await run([str(temp_dir / "missing.yaml")]) == 1

    @pytest.mark.asyncio
    async def test_invalid_config_exits(self, temp_dir):
        config_file = temp_dir / "config.yaml"
        config_file.write_text("auth: [unclosed")

        assert await run([str(config_file)]) == 1

    @pytest.mark.asyncio
    async def test_invalid_port_exits(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s")
        monkeypatch.setenv("PORT", "eighty")

        assert await run([]) == 1
