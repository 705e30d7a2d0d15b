"""
Student Registry - Configuration Loader Tests
"""

from pathlib import Path

import pytest

from student_registry.config import (
    CacheBackend,
    CacheConfig,
    get_config,
    load_config,
    reload_config,
)
from student_registry.errors import ConfigurationError

CONFIG_VARS = (
    "ENVIRONMENT",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "CACHE_BACKEND",
    "CACHE_NAMESPACE",
    "CACHE_TTL_SECONDS",
    "CACHE_MAX_SIZE",
    "CACHE_COLLECTION_TTL_SECONDS",
    "CACHE_RECORD_TTL_SECONDS",
    "REDIS_URL",
    "REDIS_MAX_CONNECTIONS",
    "REDIS_SOCKET_TIMEOUT",
    "DATABASE_PATH",
    "DATABASE_ECHO",
    "DATABASE_SEED",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so monkeypatch restores variables that a loaded .env file adds
    for name in CONFIG_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def no_env_file(tmp_path: Path) -> str:
    return str(tmp_path / "missing.env")


class TestLoadConfig:
    def test_defaults(self, clean_env, no_env_file: str) -> None:
        config = load_config(env_file=no_env_file, reload=True)

        assert config.environment == "development"
        assert config.log_level == "INFO"
        assert config.log_format == "text"
        assert config.cache.backend == CacheBackend.MEMORY
        assert config.cache.namespace == "registry"
        assert config.cache.ttl_seconds == 600
        assert config.cache.max_size == 1000
        assert config.cache.collection_ttl_seconds == 300
        assert config.cache.record_ttl_seconds == 600
        assert config.cache.redis_url is None
        assert config.database.path == "./data/students.db"
        assert config.database.echo is False
        assert config.database.seed is True

    def test_environment_overrides(
        self, clean_env, no_env_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        monkeypatch.setenv("CACHE_COLLECTION_TTL_SECONDS", "30")
        monkeypatch.setenv("CACHE_RECORD_TTL_SECONDS", "60")
        monkeypatch.setenv("DATABASE_PATH", "/tmp/registry.db")
        monkeypatch.setenv("DATABASE_SEED", "no")
        monkeypatch.setenv("DATABASE_ECHO", "1")

        config = load_config(env_file=no_env_file, reload=True)

        assert config.environment == "production"
        assert config.log_level == "WARNING"
        assert config.log_format == "json"
        assert config.cache.collection_ttl_seconds == 30
        assert config.cache.record_ttl_seconds == 60
        assert config.database.path == "/tmp/registry.db"
        assert config.database.seed is False
        assert config.database.echo is True

    def test_redis_selected_when_url_present(
        self, clean_env, no_env_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("REDIS_URL", "redis://cache.internal:6379/0")

        config = load_config(env_file=no_env_file, reload=True)

        assert config.cache.backend == CacheBackend.REDIS
        assert config.cache.redis_url == "redis://cache.internal:6379/0"

    def test_explicit_memory_wins_over_url(
        self, clean_env, no_env_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("REDIS_URL", "redis://cache.internal:6379/0")
        monkeypatch.setenv("CACHE_BACKEND", "memory")

        assert load_config(env_file=no_env_file, reload=True).cache.backend == CacheBackend.MEMORY

    def test_redis_without_url_rejected(
        self, clean_env, no_env_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CACHE_BACKEND", "redis")

        with pytest.raises(ConfigurationError):
            load_config(env_file=no_env_file, reload=True)

    def test_non_numeric_value_rejected(
        self, clean_env, no_env_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CACHE_TTL_SECONDS", "ten minutes")

        with pytest.raises(ConfigurationError, match="Invalid numeric"):
            load_config(env_file=no_env_file, reload=True)

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("ENVIRONMENT", "moon"),
            ("CACHE_BACKEND", "memcached"),
            ("CACHE_MAX_SIZE", "0"),
            ("CACHE_NAMESPACE", "bad*ns"),
        ],
    )
    def test_invalid_values_rejected(
        self, clean_env, no_env_file: str, monkeypatch: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(env_file=no_env_file, reload=True)

        assert exc_info.value.details["validation_errors"]

    def test_env_file_loaded(self, clean_env, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("CACHE_NAMESPACE=fromfile\nCACHE_MAX_SIZE=42\n")

        config = load_config(env_file=str(env_file), reload=True)

        assert config.cache.namespace == "fromfile"
        assert config.cache.max_size == 42

    def test_singleton_and_reload(
        self, clean_env, no_env_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        first = load_config(env_file=no_env_file, reload=True)
        assert get_config() is first
        assert load_config() is first

        monkeypatch.setenv("CACHE_NAMESPACE", "changed")
        reloaded = reload_config(env_file=no_env_file)

        assert reloaded is not first
        assert get_config().cache.namespace == "changed"


class TestCacheConfig:
    def test_namespace_is_stripped(self) -> None:
        assert CacheConfig(namespace="  registry ").namespace == "registry"

    def test_zero_ttl_allowed(self) -> None:
        assert CacheConfig(ttl_seconds=0).ttl_seconds == 0
