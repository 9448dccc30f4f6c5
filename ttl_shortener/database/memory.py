"""In-process record store, for local runs and tests."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from ..exceptions import StoreError
from .base import RecordStoreBase
from .models import UrlRecord, new_record_id, utc


class InMemoryRecordStore(RecordStoreBase):
    """Dictionary backed store.
    
    Listings are ordered by ``created`` then ``id``, like the other stores.
    Records handed out are copies, so a caller's snapshot is not changed by
    later writes.
    """
    
    def __init__(
        self,
        records: Optional[Iterable[UrlRecord]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__("memory://")
        self.logger = logger or logging.getLogger(__name__)
        self._records: Dict[str, UrlRecord] = {}
        for record in records or ():
            self._records[record.id] = replace(record, created=utc(record.created))
    
    async def list_records(
        self,
        original_urls: Optional[Sequence[str]] = None,
    ) -> List[UrlRecord]:
        wanted = None if original_urls is None else set(original_urls)
        matching = [
            replace(record)
            for record in self._records.values()
            if wanted is None or record.original_url in wanted
        ]
        return sorted(matching, key=lambda record: (record.created, record.id))
    
    async def create_record(
        self,
        original_url: str,
        short_code: str,
        created: datetime,
        expiry: Optional[str],
    ) -> UrlRecord:
        record_id = new_record_id()
        while record_id in self._records:
            record_id = new_record_id()
        
        record = UrlRecord(
            id=record_id,
            original_url=original_url,
            short_code=short_code,
            created=utc(created),
            expiry=expiry,
        )
        self._records[record_id] = record
        self.logger.debug(f"Created record {record_id}: {short_code} -> {original_url}")
        return replace(record)
    
    async def update_record(
        self,
        record_id: str,
        *,
        short_code: Optional[str] = None,
        created: Optional[datetime] = None,
        expiry: Optional[str] = None,
    ) -> UrlRecord:
        record = self._records.get(record_id)
        if record is None:
            raise StoreError(f"Record not found: {record_id}")
        
        if short_code is not None:
            record.short_code = short_code
        if created is not None:
            record.created = utc(created)
        if expiry is not None:
            record.expiry = expiry
        
        self.logger.debug(f"Updated record {record_id}")
        return replace(record)
    
    async def health_check(self) -> bool:
        return True
    
    async def close(self) -> None:
        pass
    
    def __len__(self) -> int:
        return len(self._records)
