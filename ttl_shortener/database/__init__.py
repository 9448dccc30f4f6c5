"""Record store layer for URL shortener."""

import logging
from typing import Optional

from .base import RecordStoreBase
from .memory import InMemoryRecordStore
from .models import UrlRecord
from .pocketbase import PocketBaseRecordStore
from .postgres import PostgresRecordStore

__all__ = [
    "RecordStoreBase",
    "InMemoryRecordStore",
    "PocketBaseRecordStore",
    "PostgresRecordStore",
    "UrlRecord",
    "build_store",
]


def build_store(config, logger: Optional[logging.Logger] = None) -> RecordStoreBase:
    """Create the record store selected by ``config.store_backend``.
    
    Args:
        config: Application configuration
        logger: Optional logger passed to the store
        
    Returns:
        Uninitialized store instance
        
    Raises:
        ValueError: If the backend name is unknown
    """
    backend = config.store_backend.lower()
    
    if backend == "memory":
        return InMemoryRecordStore(logger=logger)
    if backend == "pocketbase":
        return PocketBaseRecordStore(
            db_config=config.pocketbase_url,
            collection=config.pocketbase_collection,
            admin_email=config.pocketbase_admin_email,
            admin_password=config.pocketbase_admin_password,
            auth_collection=config.pocketbase_auth_collection,
            timeout_seconds=config.store_timeout_seconds,
            logger=logger,
        )
    if backend == "postgres":
        return PostgresRecordStore(
            db_config=config.postgres_url,
            create_tables=config.postgres_create_tables,
            connection_timeout_seconds=config.store_timeout_seconds,
            logger=logger,
        )
    
    raise ValueError(f"Unknown store backend: {config.store_backend}")
