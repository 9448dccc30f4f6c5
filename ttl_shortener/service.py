"""Business logic service for URL shortener."""

import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .common.validators import parse_expiry_ms, require_link, require_links
from .database.base import RecordStoreBase
from .database.models import UrlRecord, utc
from .locks import UrlLocks
from .policy import (
    DEFAULT_EXPIRY_MS,
    UpsertAction,
    canonical_by_url,
    decide,
    select_canonical,
)
from .reports import RECENT_LIMIT, ActiveStats, build_active_stats, build_recent
from .shortcode import ShortCodeGenerator


@dataclass
class UpsertResult:
    short_code: str
    action: UpsertAction
    record: UrlRecord


@dataclass
class BatchResult:
    link: str
    short_code: str
    action: UpsertAction

    @property
    def tag(self) -> str:
        return self.action.batch_tag


class UrlShortenerService:
    """Service layer for the expiry-aware upsert protocol and its reports."""

    def __init__(
        self,
        store: RecordStoreBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        default_expiry_ms: int = DEFAULT_EXPIRY_MS,
        rotation_resets_created: bool = False,
        recent_limit: int = RECENT_LIMIT,
        locks: Optional[UrlLocks] = None,
    ):
        """Initialize URL shortener service.

        Args:
            store: Record store
            short_code_generator: Optional short code generator
            logger: Optional logger
            default_expiry_ms: Process-wide default TTL, read-only after construction
            rotation_resets_created: Restart the validity window when rotating a code
            recent_limit: Number of records in the recent list
            locks: Optional per-URL lock manager
        """
        if default_expiry_ms <= 0:
            raise ValueError("Default expiry must be a positive number of milliseconds")

        self.store = store
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self._default_expiry_ms = default_expiry_ms
        self.rotation_resets_created = rotation_resets_created
        self.recent_limit = recent_limit
        self.locks = locks

    @property
    def default_expiry_ms(self) -> int:
        return self._default_expiry_ms

    def effective_expiry(self, caller_expiry: Any = None) -> int:
        """TTL applied to a request: the caller's if usable, else the default."""
        return parse_expiry_ms(caller_expiry, self._default_expiry_ms)

    def _hold(self, urls: List[str]):
        if self.locks is None:
            return contextlib.nullcontext()
        return self.locks.hold(urls)

    async def upsert(
        self,
        original_url: Any,
        caller_expiry: Any = None,
        now: Optional[datetime] = None,
    ) -> UpsertResult:
        """Return, refresh or mint the short code of a URL.

        Args:
            original_url: The original long URL
            caller_expiry: Optional TTL override in milliseconds
            now: Decision instant (defaults to the current UTC time)

        Returns:
            UpsertResult with the short code and the action taken

        Raises:
            ValidationError: If the URL is missing
            StoreError: If the record store fails
        """
        original_url = require_link(original_url)
        now = utc(now) if now else datetime.now(timezone.utc)
        effective = self.effective_expiry(caller_expiry)

        async with self._hold([original_url]):
            existing = select_canonical(await self.store.list_records([original_url]))
            result = await self._apply(original_url, existing, effective, now)

        self.logger.info(
            f"Upsert {result.action.value}: {result.short_code} -> {original_url} (expiry={effective}ms)"
        )
        return result

    async def upsert_batch(
        self,
        original_urls: Any,
        caller_expiry: Any = None,
        now: Optional[datetime] = None,
    ) -> List[BatchResult]:
        """Upsert several URLs against one snapshot of the store.

        Existing records are fetched once, before any write. Results follow
        the input order, duplicates included; a duplicate does not see the
        write made for its earlier occurrence.

        Args:
            original_urls: Sequence of original URLs
            caller_expiry: Optional TTL override in milliseconds, for every URL
            now: Decision instant (defaults to the current UTC time)

        Returns:
            One BatchResult per input URL

        Raises:
            ValidationError: If ``original_urls`` is not an array of URLs
            StoreError: If the record store fails; the batch is aborted
        """
        links = require_links(original_urls)
        if not links:
            return []

        now = utc(now) if now else datetime.now(timezone.utc)
        effective = self.effective_expiry(caller_expiry)
        unique_links = list(dict.fromkeys(links))

        results: List[BatchResult] = []
        async with self._hold(unique_links):
            snapshot = canonical_by_url(await self.store.list_records(unique_links))
            for link in links:
                result = await self._apply(link, snapshot.get(link), effective, now)
                results.append(BatchResult(link=link, short_code=result.short_code, action=result.action))

        self.logger.info(
            f"Batch upsert of {len(links)} link(s): "
            f"{sum(r.action is UpsertAction.CREATED for r in results)} created, "
            f"{sum(r.action is UpsertAction.REFRESHED_ACTIVE for r in results)} refreshed, "
            f"{sum(r.action is UpsertAction.ROTATED_EXPIRED for r in results)} rotated"
        )
        return results

    async def _apply(
        self,
        original_url: str,
        existing: Optional[UrlRecord],
        effective: int,
        now: datetime,
    ) -> UpsertResult:
        """Decide and write for one URL."""
        action = decide(existing, effective, now)
        expiry = str(effective)

        if action is UpsertAction.CREATED:
            record = await self.store.create_record(
                original_url=original_url,
                short_code=self.generator.generate(),
                created=now,
                expiry=expiry,
            )
        elif action is UpsertAction.ROTATED_EXPIRED:
            record = await self.store.update_record(
                existing.id,
                short_code=self.generator.generate(),
                created=now if self.rotation_resets_created else None,
                expiry=expiry,
            )
            self.logger.debug(f"Rotated {existing.short_code} -> {record.short_code} for {original_url}")
        else:
            record = await self.store.update_record(existing.id, created=now, expiry=expiry)

        return UpsertResult(short_code=record.short_code, action=action, record=record)

    async def active_stats(self, now: Optional[datetime] = None) -> ActiveStats:
        """Active records grouped by creation date.

        Raises:
            StoreError: If the record store fails
        """
        now = utc(now) if now else datetime.now(timezone.utc)
        records = await self.store.list_records()
        return build_active_stats(records, now, self._default_expiry_ms)

    async def recent_urls(self) -> List[Tuple[str, str]]:
        """Most recently created records as ``(short_code, original_url)`` pairs.

        Raises:
            StoreError: If the record store fails
        """
        records = await self.store.list_records()
        return build_recent(records, self.recent_limit)

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        store_healthy = await self.store.health_check()
        return {
            "store": store_healthy,
            "overall": store_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.store.close()
        if self.locks:
            await self.locks.close()
