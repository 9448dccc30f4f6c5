"""Common utilities for URL shortener."""

from .validators import parse_expiry_ms, require_link, require_links
from .logging_config import setup_logging, get_logger

__all__ = [
    "parse_expiry_ms",
    "require_link",
    "require_links",
    "setup_logging",
    "get_logger",
]
