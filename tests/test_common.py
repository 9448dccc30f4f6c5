"""Tests for common utilities."""

import pytest
from ttl_shortener.common.validators import (
    MAX_EXPIRY_MS,
    parse_expiry_ms,
    require_link,
    require_links,
)
from ttl_shortener.exceptions import ValidationError

DEFAULT = 3_600_000


class TestParseExpiry:
    """TTL parsing never fails, it falls back to the default."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (600000, 600000),
            ("600000", 600000),
            (" 1500 ", 1500),
            ("1500ms", 1500),
            (90.9, 90),
            ("90.9", 90),
        ],
    )
    def test_usable_values(self, value, expected):
        assert parse_expiry_ms(value, DEFAULT) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "abc", "-5", -5, 0, "0", True, False, float("nan"), float("inf"), [], {}],
    )
    def test_unusable_values_fall_back(self, value):
        assert parse_expiry_ms(value, DEFAULT) == DEFAULT


class TestRequireLink:

    def test_valid_link(self):
        assert require_link("https://example.com") == "https://example.com"

    @pytest.mark.parametrize("value", [None, "", 42])
    def test_missing_link(self, value):
        with pytest.raises(ValidationError, match="Link is required"):
            require_link(value)


class TestRequireLinks:

    def test_valid_links(self):
        assert require_links(("https://a.example", "https://b.example")) == [
            "https://a.example",
            "https://b.example",
        ]

    def test_empty_array(self):
        assert require_links([]) == []

    @pytest.mark.parametrize("value", [None, "https://a.example", {"a": 1}, 3])
    def test_not_an_array(self, value):
        with pytest.raises(ValidationError, match="array"):
            require_links(value)

    def test_bad_element(self):
        with pytest.raises(ValidationError, match="non-empty string"):
            require_links(["https://a.example", ""])


class TestExpiryUpperBound:
    """TTLs past what a timedelta can hold fall back to the default."""

    def test_largest_accepted(self):
        assert parse_expiry_ms(MAX_EXPIRY_MS, DEFAULT) == MAX_EXPIRY_MS
        assert parse_expiry_ms(10 ** 16, DEFAULT) == 10 ** 16

    @pytest.mark.parametrize("value", [MAX_EXPIRY_MS + 1, "99999999999999999999", 1e300, str(10 ** 40)])
    def test_oversized_values_fall_back(self, value):
        assert parse_expiry_ms(value, DEFAULT) == DEFAULT
