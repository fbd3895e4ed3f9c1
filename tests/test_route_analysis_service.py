import json
from datetime import UTC, datetime, timedelta

import pytest

from core.exceptions import ConfigurationError, InvalidTimestampError
from date_utils import epoch_ms_from_datetime
from trip_analysis import (
    RouteAnalysisService,
    SegmentationConfig,
    SimplificationConfig,
    route_distance,
    route_to_geojson,
)

START = datetime(2024, 3, 4, 7, 30, tzinfo=UTC)


def _raw_pings(*offsets: float) -> list[dict]:
    return [
        {
            "lat": 9.0192 + i * 0.002,
            "lng": 38.7525 + i * 0.001,
            "timestamp": epoch_ms_from_datetime(START + timedelta(minutes=offset)),
        }
        for i, offset in enumerate(offsets)
    ]


def test_summarize_segments_and_simplifies() -> None:
    service = RouteAnalysisService(
        SegmentationConfig(stop_threshold_minutes=30),
        SimplificationConfig(tolerance=0.0001),
    )

    summary = service.summarize(_raw_pings(0, 10, 20, 100, 110))

    assert summary.point_count == 5
    assert len(summary.trips) == 2
    assert [trip.point_count for trip in summary.trips] == [3, 2]
    # The pings lie on a straight line in lat/lng space.
    assert summary.simplified_point_count == 2
    assert summary.simplified[0].lat == pytest.approx(9.0192)
    assert summary.total_distance_km == pytest.approx(
        route_distance(summary.trips[0].points)
        + route_distance(summary.trips[1].points)
        + route_distance([summary.trips[0].points[-1], summary.trips[1].points[0]])
    )


def test_summarize_empty_stream() -> None:
    summary = RouteAnalysisService().summarize([])

    assert summary.trips == []
    assert summary.simplified == []
    assert summary.total_distance_km == 0.0


def test_service_reads_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TRIP_ANALYSIS_STOP_THRESHOLD_MINUTES", "90")
    monkeypatch.setenv("TRIP_ANALYSIS_SIMPLIFY_TOLERANCE", "0.5")

    service = RouteAnalysisService()

    assert service.segmenter.stop_threshold_minutes == 90.0
    assert service.simplifier.tolerance == 0.5
    assert not service.strict_timestamps
    assert len(service.summarize(_raw_pings(0, 10, 20, 100, 110)).trips) == 1


def test_service_rejects_invalid_environment_settings(monkeypatch) -> None:
    monkeypatch.setenv("TRIP_ANALYSIS_STOP_THRESHOLD_MINUTES", "-5")

    with pytest.raises(ConfigurationError):
        RouteAnalysisService()


def test_strict_service_rejects_unparsable_timestamps() -> None:
    raw = _raw_pings(0, 10)
    raw[1]["timestamp"] = "sometime"

    with pytest.raises(InvalidTimestampError):
        RouteAnalysisService(strict_timestamps=True).summarize(raw)

    lenient = RouteAnalysisService(strict_timestamps=False).summarize(raw)
    assert len(lenient.trips) == 1
    assert lenient.trips[0].endTime is None


def test_trip_feature_collection() -> None:
    service = RouteAnalysisService(
        SegmentationConfig(stop_threshold_minutes=30),
        SimplificationConfig(tolerance=0.0001),
    )
    summary = service.summarize(_raw_pings(0, 10, 20, 100, 110))

    collection = service.trip_feature_collection(summary.trips)

    assert collection["type"] == "FeatureCollection"
    assert len(collection["features"]) == 2
    first = collection["features"][0]
    assert first["geometry"]["type"] == "LineString"
    assert first["geometry"]["coordinates"][0] == [38.7525, 9.0192]
    assert len(first["geometry"]["coordinates"]) == 2
    assert first["properties"]["startIndex"] == 0
    assert first["properties"]["endIndex"] == 2
    assert first["properties"]["pointCount"] == 3
    assert first["properties"]["durationMinutes"] == 20.0
    assert "points" not in first["properties"]


def test_route_to_geojson() -> None:
    assert route_to_geojson(None) is None
    assert route_to_geojson([]) is None


def test_trip_feature_collection_is_strict_json_without_end_time() -> None:
    raw = _raw_pings(0, 10)
    raw[1]["timestamp"] = "sometime"
    service = RouteAnalysisService(strict_timestamps=False)
    summary = service.summarize(raw)

    collection = service.trip_feature_collection(summary.trips)

    properties = collection["features"][0]["properties"]
    assert properties["endTime"] is None
    assert properties["durationMinutes"] is None
    assert properties["averageSpeedKmh"] == 0.0
    encoded = json.dumps(collection, allow_nan=False)
    assert json.loads(encoded)["features"][0]["properties"]["durationMinutes"] is None
