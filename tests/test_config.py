"""Tests for configuration and component wiring."""

import logging

import pydantic
import pytest

from config import Config
from ttl_shortener.database import (
    InMemoryRecordStore,
    PocketBaseRecordStore,
    PostgresRecordStore,
    build_store,
)
from ttl_shortener.exceptions import StoreError
from ttl_shortener.factory import build_locks, build_service, start_service
from ttl_shortener.locks import LocalUrlLocks, RedisUrlLocks


class TestConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_EXPIRY_MS", raising=False)
        config = Config()

        assert config.default_expiry_ms == 3_600_000
        assert config.port == 3000
        assert config.short_code_length == 6
        assert config.recent_limit == 5
        assert not config.url_locking

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_EXPIRY_MS", "600000")
        monkeypatch.setenv("STORE_BACKEND", "pocketbase")

        config = Config()

        assert config.default_expiry_ms == 600000
        assert config.store_backend == "pocketbase"

    def test_frozen(self):
        config = Config()
        with pytest.raises(pydantic.ValidationError):
            config.default_expiry_ms = 1

    def test_rejects_non_positive_default(self):
        with pytest.raises(pydantic.ValidationError):
            Config(default_expiry_ms=0)

    def test_safe_dump_masks_password(self):
        config = Config(pocketbase_admin_password="hunter22")
        assert config.safe_dump()["pocketbase_admin_password"] == "***"


class TestWiring:

    def test_build_store(self, logger):
        assert isinstance(build_store(Config(store_backend="memory"), logger), InMemoryRecordStore)
        assert isinstance(build_store(Config(store_backend="pocketbase"), logger), PocketBaseRecordStore)
        assert isinstance(build_store(Config(store_backend="postgres"), logger), PostgresRecordStore)

    def test_build_locks(self, logger):
        assert build_locks(Config(url_locking=False), logger) is None
        assert isinstance(build_locks(Config(url_locking=True), logger), LocalUrlLocks)
        assert isinstance(
            build_locks(Config(url_locking=True, redis_url="redis://localhost:6379/0"), logger),
            RedisUrlLocks,
        )

    def test_build_service(self, logger, caplog):
        caplog.set_level(logging.INFO, logger="ttl_shortener")
        service = build_service(
            Config(default_expiry_ms=600000, short_code_length=8, rotation_resets_created=True),
            logger,
        )

        assert service.default_expiry_ms == 600000
        assert service.generator.default_length == 8
        assert service.rotation_resets_created
        assert f"{64 ** 8:,} possible codes" in caplog.text

    @pytest.mark.asyncio
    async def test_start_service_failure_closes(self, logger):
        service = build_service(
            Config(
                store_backend="pocketbase",
                pocketbase_url="http://127.0.0.1:9",
                pocketbase_admin_email="admin@example.com",
                pocketbase_admin_password="secret",
                store_timeout_seconds=0.5,
            ),
            logger,
        )

        with pytest.raises(StoreError):
            await start_service(service, logger)
        assert service.store._client.is_closed
