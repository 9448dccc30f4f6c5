"""Wiring of configured components."""

import logging
from typing import Optional

from .database import build_store
from .locks import LocalUrlLocks, RedisUrlLocks, UrlLocks
from .service import UrlShortenerService
from .shortcode import ShortCodeGenerator


def build_locks(config, logger: logging.Logger) -> Optional[UrlLocks]:
    """Per-URL lock manager selected by configuration, or None."""
    if not config.url_locking:
        return None
    if config.redis_url:
        logger.info(f"URL locking enabled via Redis at {config.redis_url}")
        return RedisUrlLocks(
            redis_url=config.redis_url,
            timeout_seconds=config.lock_timeout_seconds,
            logger=logger,
        )
    logger.info("URL locking enabled (in-process)")
    return LocalUrlLocks()


def build_service(config, logger: logging.Logger) -> UrlShortenerService:
    """Wire store, generator and locks into a service (nothing connected yet)."""
    generator = ShortCodeGenerator(default_length=config.short_code_length)
    logger.info(
        f"Short codes: {generator.default_length} characters, "
        f"{generator.keyspace():,} possible codes (no uniqueness check)"
    )
    return UrlShortenerService(
        store=build_store(config, logger=logger),
        short_code_generator=generator,
        logger=logger,
        default_expiry_ms=config.default_expiry_ms,
        rotation_resets_created=config.rotation_resets_created,
        recent_limit=config.recent_limit,
        locks=build_locks(config, logger),
    )


async def start_service(service: UrlShortenerService, logger: logging.Logger) -> None:
    """Initialize the store (authentication included) and the lock manager.

    Raises:
        StoreError: If either cannot be brought up; connections are closed first
    """
    try:
        await service.store.initialize()
        if service.locks:
            await service.locks.connect()
    except Exception as e:
        logger.error(f"Record store initialization failed: {e}")
        await service.close()
        raise
    logger.info("Record store initialized")
