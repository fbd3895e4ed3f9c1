"""
Route Simplification Module.

Douglas-Peucker reduction of a point sequence for storage and rendering.

Distances are measured in a planar approximation that treats ``lng`` as x
and ``lat`` as y, both in degrees. This is only accurate for small extents
and small tolerances; the distortion grows with the tolerance and with
distance from the equator. It is kept deliberately so that a given
tolerance always yields the same shape as existing stored routes.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from config import DEFAULT_SIMPLIFY_TOLERANCE
from trip_analysis.models import LocationPoint, SimplificationConfig

logger = logging.getLogger(__name__)


def perpendicular_distance(
    point: LocationPoint,
    line_start: LocationPoint,
    line_end: LocationPoint,
) -> float:
    """Planar distance from point to the infinite line through line_start/line_end.

    Falls back to the distance from line_start when the line has zero length.
    """
    dx = line_end.lng - line_start.lng
    dy = line_end.lat - line_start.lat

    mag = math.sqrt(dx * dx + dy * dy)
    if mag > 0:
        u = (
            (point.lng - line_start.lng) * dx + (point.lat - line_start.lat) * dy
        ) / (mag * mag)
        dist_lng = point.lng - (line_start.lng + u * dx)
        dist_lat = point.lat - (line_start.lat + u * dy)
        return math.sqrt(dist_lng * dist_lng + dist_lat * dist_lat)

    dist_lng = point.lng - line_start.lng
    dist_lat = point.lat - line_start.lat
    return math.sqrt(dist_lng * dist_lng + dist_lat * dist_lat)


def farthest_point(
    points: Sequence[LocationPoint],
    start: int,
    end: int,
) -> tuple[int, float]:
    """Index and distance of the interior point farthest from the start-end chord.

    Ties go to the lowest index. Returns ``(start, 0.0)`` when no interior
    point is farther than zero.
    """
    max_distance = 0.0
    index = start
    for i in range(start + 1, end):
        d = perpendicular_distance(points[i], points[start], points[end])
        if d > max_distance:
            max_distance = d
            index = i
    return index, max_distance


def simplify_indices(points: Sequence[LocationPoint], tolerance: float) -> list[int]:
    """Indices kept by Douglas-Peucker, in ascending order.

    Works over ``(start, end)`` index ranges on an explicit stack, so the
    input is never sliced and deep splits cannot hit the recursion limit.
    """
    last = len(points) - 1
    keep = [False] * len(points)
    keep[0] = keep[last] = True

    stack = [(0, last)]
    while stack:
        start, end = stack.pop()
        if end - start < 2:
            continue
        index, max_distance = farthest_point(points, start, end)
        if max_distance > tolerance:
            keep[index] = True
            stack.append((index, end))
            stack.append((start, index))

    return [i for i, kept in enumerate(keep) if kept]


class RouteSimplifier:
    """Shape-preserving point reduction with a fixed tolerance."""

    def __init__(self, config: SimplificationConfig | None = None) -> None:
        self.config = config or SimplificationConfig()

    @property
    def tolerance(self) -> float:
        return self.config.tolerance

    def simplify(
        self, points: Sequence[LocationPoint] | None
    ) -> Sequence[LocationPoint] | None:
        """
        Simplify a route.

        Args:
            points: Ordered points. Not modified.

        Returns:
            A list holding a subsequence of the caller's own point objects,
            always including the first and last. Inputs with fewer than
            three points are returned unchanged.
        """
        if not points or len(points) < 3:
            return points

        kept = simplify_indices(points, self.tolerance)
        logger.debug(
            "Simplified route from %d to %d points (tolerance %g)",
            len(points),
            len(kept),
            self.tolerance,
        )
        return [points[i] for i in kept]


def simplify(
    points: Sequence[LocationPoint] | None,
    tolerance: float = DEFAULT_SIMPLIFY_TOLERANCE,
) -> Sequence[LocationPoint] | None:
    """Douglas-Peucker simplification of points.

    Raises:
        ConfigurationError: If tolerance is not positive.
    """
    config = SimplificationConfig.build(tolerance=tolerance)
    return RouteSimplifier(config).simplify(points)
