"""Pydantic models for location pings, trips and analysis settings."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic import ValidationError as PydanticValidationError

from config import (
    DEFAULT_SIMPLIFY_TOLERANCE,
    DEFAULT_STOP_THRESHOLD_MINUTES,
    strict_timestamps_enabled,
)
from core.casting import safe_float
from core.exceptions import (
    ConfigurationError,
    InvalidCoordinateError,
    InvalidTimestampError,
)
from date_utils import parse_timestamp
from geometry_service import GeometryService

logger = logging.getLogger(__name__)


class LocationPoint(BaseModel):
    """A single vehicle location ping.

    Points are immutable; the analysis functions return the caller's own
    instances and never copy or modify them.
    """

    lat: float
    lng: float
    timestamp: datetime | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp_field(cls, v: Any) -> datetime | None:
        """Accept datetimes, epoch milliseconds and ISO 8601 strings."""
        if v is None:
            return None
        return parse_timestamp(v)


class Trip(BaseModel):
    """A contiguous run of points between two idle gaps."""

    startIndex: int
    endIndex: int
    points: list[LocationPoint]
    startTime: datetime | None = None
    endTime: datetime | None = None
    durationMinutes: float
    distanceKm: float

    model_config = ConfigDict(frozen=True)

    @field_serializer("durationMinutes", "distanceKm", when_used="json")
    def _finite_or_null(self, value: float) -> float | None:
        # NaN is not valid JSON; unknown durations serialize as null.
        return value if math.isfinite(value) else None

    @property
    def point_count(self) -> int:
        return len(self.points)

    @property
    def average_speed_kmh(self) -> float:
        """Mean speed over the trip, 0.0 when the duration is zero or unknown."""
        hours = self.durationMinutes / 60.0
        if not math.isfinite(hours) or hours <= 0:
            return 0.0
        return self.distanceKm / hours


class SegmentationConfig(BaseModel):
    """Settings for splitting a ping stream into trips."""

    stop_threshold_minutes: float = Field(
        default=DEFAULT_STOP_THRESHOLD_MINUTES,
        gt=0,
        description="Idle gap in minutes; a larger gap ends the current trip",
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(cls, **settings: Any) -> SegmentationConfig:
        """Validate settings, raising ConfigurationError when rejected."""
        return _build_config(cls, settings)


class SimplificationConfig(BaseModel):
    """Settings for Douglas-Peucker route simplification."""

    tolerance: float = Field(
        default=DEFAULT_SIMPLIFY_TOLERANCE,
        gt=0,
        description="Maximum perpendicular deviation in degrees (planar lat/lng)",
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(cls, **settings: Any) -> SimplificationConfig:
        """Validate settings, raising ConfigurationError when rejected."""
        return _build_config(cls, settings)


def _build_config(model: type[BaseModel], settings: dict[str, Any]) -> Any:
    try:
        return model(**settings)
    except PydanticValidationError as e:
        msg = f"Invalid {model.__name__}: {e.error_count()} error(s)"
        raise ConfigurationError(
            msg,
            details={"errors": e.errors(include_url=False)},
        ) from e


def coerce_point(
    raw: LocationPoint | Mapping[str, Any],
    *,
    strict: bool = False,
    index: int | None = None,
) -> LocationPoint:
    """Turn a raw ping into a LocationPoint.

    Lenient mode never raises: a missing or non-numeric coordinate becomes
    NaN and an unparsable timestamp becomes None. Strict mode rejects both.
    Longitude may be spelled ``lng`` or ``lon``.
    """
    if isinstance(raw, LocationPoint):
        point = raw
        raw_timestamp: Any = raw.timestamp
    else:
        lng = raw.get("lng")
        if lng is None:
            lng = raw.get("lon")
        raw_timestamp = raw.get("timestamp")
        point = LocationPoint(
            lat=safe_float(raw.get("lat")),
            lng=safe_float(lng),
            timestamp=raw_timestamp,
        )

    if strict:
        if point.timestamp is None:
            msg = f"Unparsable timestamp {raw_timestamp!r}"
            raise InvalidTimestampError(
                msg, details={"index": index, "timestamp": raw_timestamp}
            )
        if not GeometryService.validate_coordinate_pair(point.lat, point.lng):
            msg = f"Invalid coordinates lat={point.lat!r} lng={point.lng!r}"
            raise InvalidCoordinateError(
                msg, details={"index": index, "lat": point.lat, "lng": point.lng}
            )
    return point


def coerce_points(
    raw_points: Iterable[LocationPoint | Mapping[str, Any]] | None,
    *,
    strict: bool | None = None,
) -> list[LocationPoint]:
    """Coerce raw pings at the ingestion boundary.

    Args:
        raw_points: LocationPoint instances or mappings with lat/lng/timestamp.
        strict: Reject bad timestamps/coordinates. Defaults to the
            TRIP_ANALYSIS_STRICT_TIMESTAMPS setting.

    Returns:
        The points in input order.
    """
    if raw_points is None:
        return []
    if strict is None:
        strict = strict_timestamps_enabled()

    points = [
        coerce_point(raw, strict=strict, index=i) for i, raw in enumerate(raw_points)
    ]
    missing = sum(1 for point in points if point.timestamp is None)
    if missing:
        logger.warning(
            "%d of %d points have no usable timestamp; they never split a trip",
            missing,
            len(points),
        )
    return points
