"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable

import httpx
import pytest

from config import Config
from ttl_shortener.common.logging_config import setup_logging
from ttl_shortener.database.memory import InMemoryRecordStore
from ttl_shortener.database.models import UrlRecord
from ttl_shortener.service import UrlShortenerService
from ttl_shortener.shortcode import ShortCodeGenerator
from web_app import create_app

HOUR_MS = 3_600_000


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def now() -> datetime:
    """Fixed decision instant."""
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_record(now) -> Callable[..., UrlRecord]:
    """Build records relative to ``now``."""
    counter = {"n": 0}

    def _make(
        original_url: str = "https://example.com/test",
        age: timedelta = timedelta(minutes=30),
        expiry="3600000",
        short_code: str = None,
        record_id: str = None,
    ) -> UrlRecord:
        counter["n"] += 1
        return UrlRecord(
            id=record_id or f"rec{counter['n']:012d}",
            original_url=original_url,
            short_code=short_code or f"code{counter['n']:02d}",
            created=now - age,
            expiry=expiry,
        )

    return _make


@pytest.fixture
def store(logger) -> InMemoryRecordStore:
    """Create an empty in-memory record store."""
    return InMemoryRecordStore(logger=logger)


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def service(store, short_code_generator, logger) -> UrlShortenerService:
    """Create service instance."""
    return UrlShortenerService(
        store=store,
        short_code_generator=short_code_generator,
        logger=logger,
        default_expiry_ms=HOUR_MS,
    )


@pytest.fixture
def config() -> Config:
    return Config(store_backend="memory")


@pytest.fixture
def app(store, service, config):
    """Create test FastAPI app."""
    return create_app(
        store_instance=store,
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create test client."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
