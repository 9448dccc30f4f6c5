"""Expiry policy: the rules deciding whether a URL record is created, refreshed or rotated.

Everything here is pure. The service performs the store I/O around it and
captures ``now`` once per request, so the decision and the persisted
``created`` value never disagree.

A record expires strictly after its window: it is expired iff
``now > created + expiry``. The same comparison backs the upsert decision
and :func:`is_active`, so a record at exactly ``created + expiry`` is active
everywhere. A window ending beyond ``datetime.max`` never expires.
"""

import enum
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional, Sequence

from .common.validators import parse_expiry_ms
from .database.models import UrlRecord

DEFAULT_EXPIRY_MS = 3_600_000  # 1 hour


class UpsertAction(str, enum.Enum):
    """Outcome of an upsert decision."""

    CREATED = "created"
    REFRESHED_ACTIVE = "refreshed"
    ROTATED_EXPIRED = "rotated"

    @property
    def batch_tag(self) -> str:
        """Coarse tag reported by batch requests: ``created`` or ``updated``."""
        return "created" if self is UpsertAction.CREATED else "updated"


def expires_at(created: datetime, expiry_ms: int) -> Optional[datetime]:
    """End of a validity window, or None when it lies past ``datetime.max``."""
    try:
        return created + timedelta(milliseconds=expiry_ms)
    except OverflowError:
        return None


def is_expired(created: datetime, expiry_ms: int, now: datetime) -> bool:
    end = expires_at(created, expiry_ms)
    return end is not None and now > end


def record_expiry_ms(record: UrlRecord, default: int = DEFAULT_EXPIRY_MS) -> int:
    """TTL stored on a record, falling back to ``default`` when unusable."""
    return parse_expiry_ms(record.expiry, default)


def is_active(record: UrlRecord, now: datetime, default: int = DEFAULT_EXPIRY_MS) -> bool:
    """Whether a record's own window (stored TTL) still covers ``now``."""
    return not is_expired(record.created, record_expiry_ms(record, default), now)


def decide(
    record: Optional[UrlRecord],
    effective_expiry_ms: int,
    now: datetime,
) -> UpsertAction:
    """Decide the upsert action for an incoming URL.

    The existing record is judged with the request's effective TTL, not the
    one it was stored with, so a new TTL can retroactively expire (or revive)
    a record.

    Args:
        record: Canonical existing record for the URL, if any
        effective_expiry_ms: Caller TTL or the default
        now: Decision instant

    Returns:
        The action to apply
    """
    if record is None:
        return UpsertAction.CREATED
    if is_expired(record.created, effective_expiry_ms, now):
        return UpsertAction.ROTATED_EXPIRED
    return UpsertAction.REFRESHED_ACTIVE


def select_canonical(records: Iterable[UrlRecord]) -> Optional[UrlRecord]:
    """Pick the record that stands for a URL when the store holds several.

    The most recently created wins; on equal ``created`` the first one in
    store order is kept. Stores list by ``created`` then ``id``, so that is
    the lowest ``id``.
    """
    canonical: Optional[UrlRecord] = None
    for record in records:
        if canonical is None or record.created > canonical.created:
            canonical = record
    return canonical


def canonical_by_url(records: Sequence[UrlRecord]) -> Dict[str, UrlRecord]:
    """Map each original URL to its canonical record (see :func:`select_canonical`)."""
    mapping: Dict[str, UrlRecord] = {}
    for record in records:
        current = mapping.get(record.original_url)
        if current is None or record.created > current.created:
            mapping[record.original_url] = record
    return mapping
