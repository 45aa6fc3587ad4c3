"""
Utility functions and helpers
"""

import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime (TIMESTAMPTZ-safe)"""
    return datetime.now(timezone.utc)

def isoformat_utc(value: datetime) -> str:
    """Render a timestamp as ISO-8601, treating naive values as UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
