"""
Standardized Date/Time Handling Utilities

CRITICAL RULES:
- All timestamps produced by the engine are timezone-aware UTC (use now_utc())
- Never mix naive and aware datetimes
"""

import logging
from datetime import datetime, timezone
logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC. Naive datetimes are assumed to already be UTC.

    Args:
        dt: Datetime to convert

    Returns:
        Timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        logger.debug(f"Naive datetime {dt} assumed UTC")
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

