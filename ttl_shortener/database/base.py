"""Abstract base class for URL record store implementations."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from .models import UrlRecord


class RecordStoreBase(ABC):
    """Abstract base class for record store operations.
    
    Implementations wrap their own failures in
    :class:`ttl_shortener.exceptions.StoreError`.
    """
    
    def __init__(self, db_config: str):
        """Initialize record store.
        
        Args:
            db_config: Store connection string
        """
        self.db_config = db_config
    
    async def initialize(self) -> None:
        """Connect and authenticate before first use.
        
        Raises:
            StoreError: If the store cannot be reached or rejects the credentials
        """
    
    @abstractmethod
    async def list_records(
        self,
        original_urls: Optional[Sequence[str]] = None,
    ) -> List[UrlRecord]:
        """List records, optionally filtered by original URL.
        
        Args:
            original_urls: Exact-match URLs OR-ed together; None lists every record
            
        Returns:
            Matching records ordered by ``created`` then ``id``, both ascending
        """
        pass
    
    @abstractmethod
    async def create_record(
        self,
        original_url: str,
        short_code: str,
        created: datetime,
        expiry: Optional[str],
    ) -> UrlRecord:
        """Create a new record.
        
        Args:
            original_url: The original long URL
            short_code: Short code to assign
            created: Start of the validity window
            expiry: TTL in milliseconds, as text
            
        Returns:
            The stored record, with its assigned id
        """
        pass
    
    @abstractmethod
    async def update_record(
        self,
        record_id: str,
        *,
        short_code: Optional[str] = None,
        created: Optional[datetime] = None,
        expiry: Optional[str] = None,
    ) -> UrlRecord:
        """Partially update a record. Fields left as None are retained.
        
        Args:
            record_id: Id of the record to update
            short_code: New short code
            created: New validity window start
            expiry: New TTL in milliseconds, as text
            
        Returns:
            The stored record after the update
        """
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.
        
        Returns:
            True if healthy, False otherwise
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass
