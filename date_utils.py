"""
Centralized date and time utilities for location ping ingestion.

Every timestamp that enters the trip analysis core passes through
``parse_timestamp``, which accepts the three shapes callers hand us:

-   **datetime objects**: naive values are assumed to be UTC.
-   **Epoch milliseconds**: ``int`` or ``float`` values, as produced by most
    GPS trackers and JavaScript clients.
-   **ISO 8601 strings**: parsed with ``dateutil`` and normalized to UTC.

Anything else (including unparsable strings) yields ``None`` and a warning.
Whether a ``None`` timestamp is tolerated or rejected is decided by the
ingestion layer, not here.
"""

import logging
import math
from datetime import UTC, datetime, timedelta

from dateutil import parser

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return the datetime as an explicit UTC-aware value."""

    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def datetime_from_epoch_ms(epoch_ms: float) -> datetime | None:
    """Convert Unix epoch milliseconds to a UTC datetime, or None if out of range."""
    if not math.isfinite(epoch_ms):
        logger.warning("Non-finite epoch timestamp '%s'", epoch_ms)
        return None
    try:
        return EPOCH + timedelta(milliseconds=epoch_ms)
    except OverflowError:
        logger.warning("Epoch timestamp '%s' is out of range", epoch_ms)
        return None


def epoch_ms_from_datetime(dt: datetime) -> int:
    """Convert a datetime to Unix epoch milliseconds (naive values are UTC)."""
    aware = ensure_utc(dt)
    return (aware - EPOCH) // timedelta(milliseconds=1)


def parse_timestamp(ts: str | int | float | datetime | None) -> datetime | None:
    """
    Parse a ping timestamp and return it as a UTC-aware datetime.

    Args:
        ts: A datetime, epoch milliseconds, or an ISO 8601 string.

    Returns:
        A timezone-aware UTC datetime, or None if the value is empty or
        cannot be interpreted.
    """
    if ts is None or ts == "":
        logger.debug("Received empty timestamp; returning None.")
        return None

    if isinstance(ts, datetime):
        return ensure_utc(ts)

    # bool is an int subclass but never a meaningful instant.
    if isinstance(ts, bool):
        logger.warning("Refusing boolean timestamp '%s'", ts)
        return None

    if isinstance(ts, int | float):
        return datetime_from_epoch_ms(ts)

    if not isinstance(ts, str):
        logger.warning("Unsupported timestamp type '%s'", type(ts).__name__)
        return None

    try:
        parsed_time = parser.isoparse(ts.strip())
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning("Failed to parse timestamp '%s': %s", ts, e)
        return None
    return ensure_utc(parsed_time)


def minutes_between(start: datetime | None, end: datetime | None) -> float:
    """
    Return ``end - start`` in minutes.

    A missing endpoint yields NaN, which compares false against any
    threshold, so gap checks treat it as "no gap".
    """
    if start is None or end is None:
        return math.nan
    return (end - start).total_seconds() / 60.0
