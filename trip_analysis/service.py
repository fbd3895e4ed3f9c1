"""
Route analysis service.

Entry point for callers that hold raw pings (dicts from a database or an
HTTP payload): coerces them at the ingestion boundary, segments them into
trips, simplifies the route and renders GeoJSON for map display.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from config import (
    get_simplify_tolerance,
    get_stop_threshold_minutes,
    strict_timestamps_enabled,
)
from geometry_service import GeometryService
from trip_analysis.models import (
    LocationPoint,
    SegmentationConfig,
    SimplificationConfig,
    Trip,
    coerce_points,
)
from trip_analysis.segmentation import TripSegmenter
from trip_analysis.simplification import RouteSimplifier

logger = logging.getLogger(__name__)


class RouteSummary(BaseModel):
    """Trips and a simplified route derived from one ping stream."""

    trips: list[Trip]
    simplified: list[LocationPoint]
    total_distance_km: float
    point_count: int
    simplified_point_count: int

    model_config = ConfigDict(frozen=True)


def route_to_geojson(points: Iterable[LocationPoint] | None) -> dict[str, Any] | None:
    """Render points as a GeoJSON LineString (or Point for a single ping)."""
    if points is None:
        return None
    return GeometryService.geometry_from_points(list(points))


class RouteAnalysisService:
    """Combines ingestion, segmentation and simplification for one vehicle stream.

    Settings not passed explicitly are read from ``config`` when the service
    is constructed.
    """

    def __init__(
        self,
        segmentation: SegmentationConfig | None = None,
        simplification: SimplificationConfig | None = None,
        *,
        strict_timestamps: bool | None = None,
    ) -> None:
        if segmentation is None:
            segmentation = SegmentationConfig.build(
                stop_threshold_minutes=get_stop_threshold_minutes()
            )
        if simplification is None:
            simplification = SimplificationConfig.build(
                tolerance=get_simplify_tolerance()
            )
        if strict_timestamps is None:
            strict_timestamps = strict_timestamps_enabled()

        self.segmenter = TripSegmenter(segmentation)
        self.simplifier = RouteSimplifier(simplification)
        self.strict_timestamps = strict_timestamps

    def summarize(
        self,
        raw_points: Iterable[LocationPoint | Mapping[str, Any]] | None,
    ) -> RouteSummary:
        """
        Analyze a ping stream.

        Args:
            raw_points: Pings ordered by timestamp.

        Returns:
            RouteSummary with trips, simplified route and totals.

        Raises:
            InvalidTimestampError: Strict mode only.
            InvalidCoordinateError: Strict mode only.
        """
        points = coerce_points(raw_points, strict=self.strict_timestamps)
        trips = self.segmenter.segment(points)
        simplified = list(self.simplifier.simplify(points) or [])

        summary = RouteSummary(
            trips=trips,
            simplified=simplified,
            total_distance_km=GeometryService.route_distance(points),
            point_count=len(points),
            simplified_point_count=len(simplified),
        )
        logger.info(
            "Analyzed %d points: %d trips, %.3f km, %d points after simplification",
            summary.point_count,
            len(summary.trips),
            summary.total_distance_km,
            summary.simplified_point_count,
        )
        return summary

    def trip_feature_collection(self, trips: Iterable[Trip]) -> dict[str, Any]:
        """GeoJSON FeatureCollection with one simplified LineString per trip."""
        features = []
        for trip in trips:
            geometry = route_to_geojson(self.simplifier.simplify(trip.points))
            properties = trip.model_dump(mode="json", exclude={"points"})
            properties["pointCount"] = trip.point_count
            properties["averageSpeedKmh"] = trip.average_speed_kmh
            features.append(GeometryService.feature_from_geometry(geometry, properties))
        return GeometryService.feature_collection(features)
