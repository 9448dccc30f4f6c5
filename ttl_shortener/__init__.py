"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .policy import UpsertAction
from .service import UrlShortenerService, UpsertResult, BatchResult

__all__ = [
    "ShortCodeGenerator",
    "UpsertAction",
    "UrlShortenerService",
    "UpsertResult",
    "BatchResult",
]
