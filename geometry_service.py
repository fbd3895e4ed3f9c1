"""Centralized geometry helpers: great-circle distance, route length, GeoJSON."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from trip_analysis.models import LocationPoint


class GeometryService:
    """Authoritative geometry operations for the trip analysis core."""

    EARTH_RADIUS_KM = 6371.0

    @staticmethod
    def validate_coordinate_pair(lat: float, lng: float) -> bool:
        """Return True if lat/lng are finite and inside the WGS84 range."""
        try:
            lat_f = float(lat)
            lng_f = float(lng)
        except (TypeError, ValueError):
            return False
        return -90 <= lat_f <= 90 and -180 <= lng_f <= 180

    @staticmethod
    def haversine_distance(
        lat1: float,
        lng1: float,
        lat2: float,
        lng2: float,
        unit: str = "km",
    ) -> float:
        """Calculate the great-circle distance using the Haversine formula.

        Coordinates are not range-checked. NaN inputs produce NaN.
        """
        phi1 = math.radians(lat1)
        phi2 = math.radians(lat2)
        dphi = math.radians(lat2 - lat1)
        dlmb = math.radians(lng2 - lng1)
        a = (
            math.sin(dphi / 2) ** 2
            + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
        )
        # Out-of-range latitudes can push `a` outside [0, 1]; NaN passes through.
        if a > 1.0:
            a = 1.0
        elif a < 0.0:
            a = 0.0
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        distance_km = GeometryService.EARTH_RADIUS_KM * c
        if unit == "km":
            return distance_km
        if unit == "meters":
            return distance_km * 1000.0
        if unit == "miles":
            return distance_km / 1.609344
        msg = "Invalid unit. Use 'km', 'meters', or 'miles'."
        raise ValueError(msg)

    @staticmethod
    def route_distance(points: Sequence[LocationPoint] | None) -> float:
        """Sum the leg distances (km) along an ordered point sequence.

        Points need ``lat`` and ``lng`` attributes. Convert raw mappings with
        ``trip_analysis.models.coerce_points`` first.
        """
        if not points or len(points) < 2:
            return 0.0

        total = 0.0
        for prev, curr in zip(points, points[1:]):
            total += GeometryService.haversine_distance(
                prev.lat, prev.lng, curr.lat, curr.lng
            )
        return total

    @staticmethod
    def geometry_from_points(
        points: Sequence[LocationPoint] | None,
    ) -> dict[str, Any] | None:
        """Build a GeoJSON Point/LineString ([lng, lat] order) from points."""
        if not points:
            return None
        coords = [[point.lng, point.lat] for point in points]
        if len(coords) == 1:
            return {"type": "Point", "coordinates": coords[0]}
        return {"type": "LineString", "coordinates": coords}

    @staticmethod
    def feature_from_geometry(
        geometry: dict[str, Any] | None,
        properties: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build a GeoJSON Feature from geometry and properties."""
        return {
            "type": "Feature",
            "geometry": geometry,
            "properties": properties or {},
        }

    @staticmethod
    def feature_collection(features: list[dict[str, Any]]) -> dict[str, Any]:
        """Build a GeoJSON FeatureCollection."""
        return {"type": "FeatureCollection", "features": features}


def distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometers between two points."""
    return GeometryService.haversine_distance(lat1, lng1, lat2, lng2)


def route_distance(points: Sequence[LocationPoint] | None) -> float:
    """Total length in kilometers of an ordered point sequence.

    Expects ``LocationPoint`` objects, as produced by ``coerce_points``.
    """
    return GeometryService.route_distance(points)
