"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ttl_shortener.database.models import UrlRecord


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(BaseModel):
    """Request to shorten a URL.

    ``expiry`` is accepted in any shape and interpreted leniently by the
    service; an unusable value falls back to the default TTL.
    """

    link: Optional[str] = Field(None, description="The URL to shorten")
    expiry: Optional[Any] = Field(None, description="Optional TTL in milliseconds")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"link": "https://example.com/very/long/path/to/resource"},
                {"link": "https://github.com/user/repo", "expiry": 600000},
            ]
        }
    }


class BatchRequest(BaseModel):
    """Request to shorten several URLs at once."""

    links: Optional[Any] = Field(None, description="Array of URLs to shorten")
    expiry: Optional[Any] = Field(None, description="Optional TTL in milliseconds, for every link")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"links": ["https://example.com/a", "https://example.com/b"], "expiry": 600000},
            ]
        }
    }


class ShortenResponse(CamelModel):
    """Response after shortening a URL."""

    short_code: str = Field(..., description="The short code")
    message: str = Field(..., description="What happened to the record")


class BatchItemResponse(CamelModel):
    """One entry of a batch response."""

    link: str
    short_code: str
    action: str = Field(..., description="created or updated")


class UrlRecordResponse(CamelModel):
    """A stored URL record."""

    id: str
    original_url: str
    short_code: str
    created: datetime
    expiry: Optional[str] = None

    @classmethod
    def from_record(cls, record: UrlRecord) -> "UrlRecordResponse":
        return cls(
            id=record.id,
            original_url=record.original_url,
            short_code=record.short_code,
            created=record.created,
            expiry=record.expiry,
        )


class DateGroup(BaseModel):
    date: str = Field(..., description="UTC creation date (YYYY-MM-DD)")
    count: int


class ActiveStatsResponse(CamelModel):
    """Active records grouped by creation date."""

    total: int
    groups: List[DateGroup]
    active_records: List[UrlRecordResponse]


class RecentUrlResponse(CamelModel):
    short_code: str
    original_url: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    store: str = Field(..., description="Record store status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
