"""Aggregate views over the full record set."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Sequence, Tuple

from .database.models import UrlRecord
from .policy import DEFAULT_EXPIRY_MS, is_active

RECENT_LIMIT = 5


@dataclass
class DateCount:
    date: str
    count: int


@dataclass
class ActiveStats:
    """Active records grouped by the UTC calendar date of ``created``."""

    total: int
    groups: List[DateCount] = field(default_factory=list)
    active_records: List[UrlRecord] = field(default_factory=list)


def created_date(record: UrlRecord) -> str:
    """``YYYY-MM-DD`` of a record's ``created`` in UTC."""
    return record.created.astimezone(timezone.utc).date().isoformat()


def build_active_stats(
    records: Iterable[UrlRecord],
    now: datetime,
    default_expiry_ms: int = DEFAULT_EXPIRY_MS,
) -> ActiveStats:
    """Filter records with the activity predicate and count them per day.

    Groups are sorted by date, oldest first.
    """
    active = [record for record in records if is_active(record, now, default_expiry_ms)]
    counts = Counter(created_date(record) for record in active)

    return ActiveStats(
        total=len(active),
        groups=[DateCount(date=date, count=counts[date]) for date in sorted(counts)],
        active_records=active,
    )


def build_recent(
    records: Sequence[UrlRecord],
    limit: int = RECENT_LIMIT,
) -> List[Tuple[str, str]]:
    """Most recently created records as ``(short_code, original_url)`` pairs."""
    newest = sorted(records, key=lambda record: record.created, reverse=True)
    return [(record.short_code, record.original_url) for record in newest[:limit]]
