"""Data models for URL shortener."""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_record_id(length: int = 15) -> str:
    """Generate an opaque record id (same shape PocketBase uses)."""
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp.
    
    Handles ``datetime`` objects, ISO 8601 text and PocketBase's
    ``YYYY-MM-DD HH:MM:SS.sssZ`` format.
    
    Args:
        value: Raw timestamp
        
    Returns:
        Aware UTC datetime, or None if it cannot be parsed
    """
    if isinstance(value, datetime):
        return utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    """Format a timestamp the way PocketBase stores it."""
    value = utc(value)
    return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


@dataclass
class UrlRecord:
    """Represents a URL record in the record store."""
    
    id: str
    original_url: str
    short_code: str
    created: datetime
    expiry: Optional[str] = None
    
    def to_dict(self) -> dict:
        """Convert to the wire representation (camelCase keys)."""
        return {
            "id": self.id,
            "originalUrl": self.original_url,
            "shortCode": self.short_code,
            "created": self.created.isoformat(),
            "expiry": self.expiry,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UrlRecord":
        """Create from a store row.
        
        Accepts camelCase and snake_case keys. A missing or unparsable
        ``created`` becomes the Unix epoch, so the record reads as expired
        instead of failing the request. ``expiry`` is kept as text.
        """
        def pick(camel: str, snake: str) -> Any:
            return data[camel] if camel in data else data.get(snake)
        
        expiry = data.get("expiry")
        return cls(
            id=str(data.get("id", "")),
            original_url=pick("originalUrl", "original_url") or "",
            short_code=pick("shortCode", "short_code") or "",
            created=parse_timestamp(data.get("created")) or EPOCH,
            expiry=None if expiry is None else str(expiry),
        )
