"""Validation and defensive parsing utilities for URL shortener."""

import math
import re
from datetime import timedelta
from typing import Any, List, Optional

from ..exceptions import ValidationError

# Leading integer part, the way a lenient integer parser reads "1500ms" or "90.5"
_LEADING_INT = re.compile(r"^\s*\+?(\d+)")

# Largest TTL a timedelta can hold
MAX_EXPIRY_MS = timedelta.max // timedelta(milliseconds=1)


def parse_expiry_ms(value: Any, default: int) -> int:
    """Interpret a TTL value (milliseconds) with fallback.
    
    Accepts ints, floats and numeric text. Anything missing, non-numeric,
    negative, zero, non-finite, boolean or larger than ``MAX_EXPIRY_MS``
    yields ``default``. Never raises.
    
    Args:
        value: Caller supplied or stored TTL
        default: Process-wide default TTL in milliseconds
        
    Returns:
        TTL in milliseconds
    """
    if value is None or isinstance(value, bool):
        return default
    
    if isinstance(value, int):
        parsed: Optional[int] = value
    elif isinstance(value, float):
        parsed = int(value) if math.isfinite(value) else None
    elif isinstance(value, (str, bytes)):
        text = value.decode("utf-8", "replace") if isinstance(value, bytes) else value
        match = _LEADING_INT.match(text)
        parsed = int(match.group(1)) if match else None
    else:
        parsed = None
    
    if not parsed or parsed < 0 or parsed > MAX_EXPIRY_MS:
        return default
    return parsed


def require_link(link: Any) -> str:
    """Validate the ``link`` of a single shorten request.
    
    Raises:
        ValidationError: If the link is missing or empty
    """
    if not link or not isinstance(link, str):
        raise ValidationError("Link is required.")
    return link


def require_links(links: Any) -> List[str]:
    """Validate the ``links`` of a batch request.
    
    Raises:
        ValidationError: If links is not an array of non-empty strings
    """
    if links is None or not isinstance(links, (list, tuple)):
        raise ValidationError("Links must be provided as an array.")
    for link in links:
        if not link or not isinstance(link, str):
            raise ValidationError("Each link must be a non-empty string.")
    return list(links)
