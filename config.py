"""Centralized configuration for trip segmentation and route simplification.

This module is the single source of truth for tunable defaults. Import the
accessors from here rather than calling os.getenv directly in multiple
places. Accessors read the environment at call time so tests (and
long-running callers) can change settings without re-importing.

Units:
    - stop threshold: minutes of inactivity that end a trip
    - simplify tolerance: degrees, in the planar lat/lng approximation
      (0.0001 degrees is roughly 11 meters at the equator)
"""

from __future__ import annotations

import logging
import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)


DEFAULT_STOP_THRESHOLD_MINUTES: Final[float] = 30.0
DEFAULT_SIMPLIFY_TOLERANCE: Final[float] = 0.0001
DEFAULT_LOG_LEVEL: Final[str] = "INFO"

STOP_THRESHOLD_ENV: Final[str] = "TRIP_ANALYSIS_STOP_THRESHOLD_MINUTES"
SIMPLIFY_TOLERANCE_ENV: Final[str] = "TRIP_ANALYSIS_SIMPLIFY_TOLERANCE"
STRICT_TIMESTAMPS_ENV: Final[str] = "TRIP_ANALYSIS_STRICT_TIMESTAMPS"
LOG_LEVEL_ENV: Final[str] = "TRIP_ANALYSIS_LOG_LEVEL"

LOG_FORMAT: Final[str] = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r; using %s", name, raw, default)
        return default


def get_stop_threshold_minutes() -> float:
    """Idle gap, in minutes, above which a new trip begins."""
    return _env_float(STOP_THRESHOLD_ENV, DEFAULT_STOP_THRESHOLD_MINUTES)


def get_simplify_tolerance() -> float:
    """Douglas-Peucker tolerance in degrees."""
    return _env_float(SIMPLIFY_TOLERANCE_ENV, DEFAULT_SIMPLIFY_TOLERANCE)


def strict_timestamps_enabled() -> bool:
    """Whether ingestion rejects unparsable timestamps instead of tolerating them."""
    return os.getenv(STRICT_TIMESTAMPS_ENV, "").strip().lower() in _TRUTHY


def configure_logging(level: str | int | None = None) -> None:
    """Install the basic log handler used by scripts and services."""
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = [
    "DEFAULT_SIMPLIFY_TOLERANCE",
    "DEFAULT_STOP_THRESHOLD_MINUTES",
    "LOG_FORMAT",
    "configure_logging",
    "get_simplify_tolerance",
    "get_stop_threshold_minutes",
    "strict_timestamps_enabled",
]
