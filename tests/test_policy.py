"""Tests for the expiry policy."""

from datetime import timedelta

from ttl_shortener.policy import (
    UpsertAction,
    canonical_by_url,
    decide,
    expires_at,
    is_active,
    is_expired,
    select_canonical,
)

HOUR_MS = 3_600_000


class TestDecide:
    """Test the create / refresh / rotate decision."""

    def test_no_record_creates(self, now):
        assert decide(None, HOUR_MS, now) is UpsertAction.CREATED

    def test_active_record_refreshes(self, now, make_record):
        record = make_record(age=timedelta(minutes=30))
        assert decide(record, HOUR_MS, now) is UpsertAction.REFRESHED_ACTIVE

    def test_expired_record_rotates(self, now, make_record):
        record = make_record(age=timedelta(hours=2))
        assert decide(record, HOUR_MS, now) is UpsertAction.ROTATED_EXPIRED

    def test_window_end_is_still_active(self, now, make_record):
        """A record exactly at created + expiry is not expired yet."""
        record = make_record(age=timedelta(hours=1))

        assert decide(record, HOUR_MS, now) is UpsertAction.REFRESHED_ACTIVE
        assert decide(record, HOUR_MS, now + timedelta(milliseconds=1)) is UpsertAction.ROTATED_EXPIRED

    def test_effective_ttl_overrides_stored_ttl(self, now, make_record):
        """The decision uses the request TTL, not the stored one."""
        record = make_record(age=timedelta(minutes=10), expiry=str(HOUR_MS))
        assert decide(record, 60_000, now) is UpsertAction.ROTATED_EXPIRED

        old = make_record(age=timedelta(hours=2), expiry=str(HOUR_MS))
        assert decide(old, 3 * HOUR_MS, now) is UpsertAction.REFRESHED_ACTIVE

    def test_batch_tags(self):
        assert UpsertAction.CREATED.batch_tag == "created"
        assert UpsertAction.REFRESHED_ACTIVE.batch_tag == "updated"
        assert UpsertAction.ROTATED_EXPIRED.batch_tag == "updated"


class TestActivity:
    """Test the activity predicate used by reports."""

    def test_expires_at(self, now):
        assert expires_at(now, 1500) == now + timedelta(milliseconds=1500)

    def test_is_expired(self, now):
        assert not is_expired(now - timedelta(minutes=59), HOUR_MS, now)
        assert not is_expired(now - timedelta(hours=1), HOUR_MS, now)
        assert is_expired(now - timedelta(hours=1, milliseconds=1), HOUR_MS, now)

    def test_window_past_datetime_max_never_expires(self, now):
        assert expires_at(now, 10 ** 16) is None
        assert not is_expired(now - timedelta(days=365), 10 ** 16, now)

    def test_huge_stored_expiry(self, now, make_record):
        """Huge stored TTLs neither crash the predicate nor the decision."""
        record = make_record(age=timedelta(days=30), expiry=str(10 ** 16))

        assert is_active(record, now, HOUR_MS)
        assert decide(record, 10 ** 16, now) is UpsertAction.REFRESHED_ACTIVE

        beyond_timedelta = make_record(age=timedelta(minutes=30), expiry="99999999999999999999")
        assert is_active(beyond_timedelta, now, HOUR_MS)

    def test_uses_stored_expiry(self, now, make_record):
        short_lived = make_record(age=timedelta(minutes=10), expiry="60000")
        long_lived = make_record(age=timedelta(hours=2), expiry=str(3 * HOUR_MS))

        assert not is_active(short_lived, now, HOUR_MS)
        assert is_active(long_lived, now, HOUR_MS)

    def test_unusable_expiry_uses_default(self, now, make_record):
        for expiry in (None, "", "abc", "0", "-10"):
            assert is_active(make_record(age=timedelta(minutes=30), expiry=expiry), now, HOUR_MS)
            assert not is_active(make_record(age=timedelta(minutes=90), expiry=expiry), now, HOUR_MS)


class TestCanonicalRecord:
    """Test which record stands for a URL with several stored."""

    def test_empty(self):
        assert select_canonical([]) is None
        assert canonical_by_url([]) == {}

    def test_newest_wins(self, make_record):
        older = make_record(age=timedelta(hours=3))
        newer = make_record(age=timedelta(minutes=5))

        assert select_canonical([newer, older]) is newer
        assert select_canonical([older, newer]) is newer

    def test_tie_keeps_first(self, make_record):
        first = make_record(age=timedelta(minutes=5))
        second = make_record(age=timedelta(minutes=5))

        assert select_canonical([first, second]) is first
        assert select_canonical([second, first]) is second

    def test_by_url(self, make_record):
        a_old = make_record(original_url="https://a.example", age=timedelta(hours=3))
        a_new = make_record(original_url="https://a.example", age=timedelta(minutes=1))
        b_first = make_record(original_url="https://b.example", age=timedelta(minutes=7))
        b_second = make_record(original_url="https://b.example", age=timedelta(minutes=7))

        mapping = canonical_by_url([a_new, b_first, a_old, b_second])

        assert mapping == {"https://a.example": a_new, "https://b.example": b_first}
