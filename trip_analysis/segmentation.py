"""
Trip Segmentation Module.

Splits a chronologically ordered ping stream into trips. The segmenter is a
two-state machine: it accumulates points into an open trip until the gap
between consecutive pings exceeds the stop threshold, then emits the open
trip and starts a new one at the current ping.

Gap semantics:
    - a gap equal to the threshold does not split
    - zero or negative gaps (duplicate or out-of-order pings) never split
    - a gap involving a missing timestamp is NaN and never splits
    - a trailing trip holding a single ping is dropped
"""

import logging
from collections.abc import Sequence

from config import DEFAULT_STOP_THRESHOLD_MINUTES
from date_utils import minutes_between
from geometry_service import GeometryService
from trip_analysis.models import LocationPoint, SegmentationConfig, Trip

logger = logging.getLogger(__name__)


class TripSegmenter:
    """Partitions ordered location pings into trips separated by idle gaps."""

    def __init__(self, config: SegmentationConfig | None = None) -> None:
        self.config = config or SegmentationConfig()

    @property
    def stop_threshold_minutes(self) -> float:
        return self.config.stop_threshold_minutes

    def segment(self, points: Sequence[LocationPoint] | None) -> list[Trip]:
        """
        Segment points into trips.

        Args:
            points: Pings ordered by timestamp. Not modified. Raw
                ``{lat, lng, timestamp}`` mappings must go through
                ``coerce_points`` first.

        Returns:
            Trips in stream order; empty if fewer than two points.
        """
        if not points or len(points) < 2:
            return []

        threshold = self.stop_threshold_minutes
        trips: list[Trip] = []
        start_index = 0
        buffer = [points[0]]

        for i in range(1, len(points)):
            prev = points[i - 1]
            curr = points[i]
            gap_minutes = minutes_between(prev.timestamp, curr.timestamp)

            if gap_minutes > threshold:
                trips.append(self._close_trip(buffer, start_index, i - 1))
                start_index = i
                buffer = [curr]
            else:
                buffer.append(curr)

        if len(buffer) > 1:
            trips.append(self._close_trip(buffer, start_index, len(points) - 1))
        else:
            logger.warning(
                "Dropping trailing single-point trip at index %d", start_index
            )

        logger.debug(
            "Segmented %d points into %d trips (threshold %.1f min)",
            len(points),
            len(trips),
            threshold,
        )
        return trips

    @staticmethod
    def _close_trip(
        buffer: list[LocationPoint],
        start_index: int,
        end_index: int,
    ) -> Trip:
        start_time = buffer[0].timestamp
        end_time = buffer[-1].timestamp
        trip = Trip(
            startIndex=start_index,
            endIndex=end_index,
            points=buffer,
            startTime=start_time,
            endTime=end_time,
            durationMinutes=minutes_between(start_time, end_time),
            distanceKm=GeometryService.route_distance(buffer),
        )
        logger.debug(
            "Trip %d-%d: %d points, %.3f km, %.1f min",
            start_index,
            end_index,
            len(buffer),
            trip.distanceKm,
            trip.durationMinutes,
        )
        return trip


def segment_trips(
    points: Sequence[LocationPoint] | None,
    stop_threshold_minutes: float = DEFAULT_STOP_THRESHOLD_MINUTES,
) -> list[Trip]:
    """Split points into trips wherever the idle gap exceeds the threshold.

    Only ``LocationPoint`` instances are accepted. Run raw records through
    ``trip_analysis.models.coerce_points`` before calling this.

    Raises:
        ConfigurationError: If stop_threshold_minutes is not positive.
    """
    config = SegmentationConfig.build(stop_threshold_minutes=stop_threshold_minutes)
    return TripSegmenter(config).segment(points)
