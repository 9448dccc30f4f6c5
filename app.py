#!/usr/bin/env python3
"""
Main entry point for the TTL URL shortener service.

Concurrency: requests are served with async I/O (FastAPI + httpx / asyncpg).
Set WORKERS > 1 for multi-process scaling; enable URL_LOCKING together with
REDIS_URL if concurrent upserts of the same URL must be serialized across
workers.

Usage:
    python app.py

Environment variables:
    STORE_BACKEND - memory, pocketbase or postgres
    POCKETBASE_URL / POCKETBASE_ADMIN_EMAIL / POCKETBASE_ADMIN_PASSWORD
    POSTGRES_URL / POSTGRES_CREATE_TABLES
    DEFAULT_EXPIRY_MS - Default TTL of a short code (ms)
    URL_LOCKING / REDIS_URL - Per-URL locking
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from ttl_shortener.common.logging_config import setup_logging
from ttl_shortener.factory import build_service, start_service
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")

    service = build_service(config, logger)
    logger.info(f"Initializing {config.store_backend} record store")
    await start_service(service, logger)

    app.state.store = service.store
    app.state.service = service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down URL shortener service...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("TTL URL Shortener Service")
    logger.info(f"Configuration: {config.safe_dump()}")

    # Store and service are created in the lifespan
    app = create_app(
        store_instance=None,
        service_instance=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        log_config=None,  # handlers come from setup_logging
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
