"""
Trip Analysis Package.

Pure functions over chronologically ordered vehicle location pings:

- great-circle distance between two points and along a route
- segmentation of a ping stream into trips separated by idle gaps
- Douglas-Peucker simplification for storage and rendering

Usage:
    from trip_analysis import coerce_points, segment_trips, simplify

    points = coerce_points(raw_pings)
    trips = segment_trips(points, stop_threshold_minutes=30)
    route = simplify(points, tolerance=0.0001)
"""

from geometry_service import distance, route_distance
from trip_analysis.models import (
    LocationPoint,
    SegmentationConfig,
    SimplificationConfig,
    Trip,
    coerce_point,
    coerce_points,
)
from trip_analysis.segmentation import TripSegmenter, segment_trips
from trip_analysis.service import RouteAnalysisService, RouteSummary, route_to_geojson
from trip_analysis.simplification import (
    RouteSimplifier,
    perpendicular_distance,
    simplify,
)

__all__ = [
    "LocationPoint",
    "RouteAnalysisService",
    "RouteSimplifier",
    "RouteSummary",
    "SegmentationConfig",
    "SimplificationConfig",
    "Trip",
    "TripSegmenter",
    "coerce_point",
    "coerce_points",
    "distance",
    "perpendicular_distance",
    "route_distance",
    "route_to_geojson",
    "segment_trips",
    "simplify",
]
