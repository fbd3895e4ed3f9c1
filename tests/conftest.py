import sys
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from trip_analysis.models import LocationPoint  # noqa: E402

BASE_TIME = datetime(2024, 1, 1, 8, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TRIP_ANALYSIS_STOP_THRESHOLD_MINUTES",
        "TRIP_ANALYSIS_SIMPLIFY_TOLERANCE",
        "TRIP_ANALYSIS_STRICT_TIMESTAMPS",
        "TRIP_ANALYSIS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def points_at_minutes() -> Callable[..., list[LocationPoint]]:
    """Build pings moving north-east at the given minute offsets from BASE_TIME."""

    def _build(*offsets: float) -> list[LocationPoint]:
        return [
            LocationPoint(
                lat=9.0 + i * 0.001,
                lng=38.75 + i * 0.001,
                timestamp=BASE_TIME + timedelta(minutes=offset),
            )
            for i, offset in enumerate(offsets)
        ]

    return _build
