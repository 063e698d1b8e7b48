#!/usr/bin/env python3
"""
Tests for the Lap model and its CSV/GPX loaders.
"""

import io

import pytest
from gpxpy import gpx

from lapcompare.errors import EmptyTrackError, InvalidCoordinateError, LengthMismatchError
from lapcompare.geometry import Position, UtmZone
from lapcompare.lap import Lap


POSITIONS = [
    Position(latitude=47.12322, longitude=-122.85051),
    Position(latitude=47.12308, longitude=-122.85048),
    Position(latitude=47.12299, longitude=-122.85039),
]

GPX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <trkseg>
{points}
    </trkseg>
  </trk>
</gpx>
"""


def make_gpx(with_time: bool = True) -> str:
    points = []
    for i in range(4):
        time = f"<time>2024-05-01T10:00:0{i}Z</time>" if with_time else ""
        points.append(
            f'      <trkpt lat="{47.0 + i * 0.0001:.4f}" lon="-122.0">'
            f"<ele>{10 + i}</ele>{time}</trkpt>"
        )
    return GPX_TEMPLATE.format(points="\n".join(points))


class TestLap:
    """Test Lap construction and basic properties."""

    def test_lap_creation_and_basic_properties(self):
        lap = Lap(POSITIONS, [10.0, 11.0, 12.0], name="lap A")

        assert len(lap) == 3
        assert lap[0] == POSITIONS[0]
        assert lap[-1] == POSITIONS[-1]
        assert list(lap) == POSITIONS
        assert lap.values == (10.0, 11.0, 12.0)
        assert lap.metric == "speed"
        assert lap.zone == UtmZone(10, "north")
        assert len(lap.planar_points) == 3
        assert "lap A" in repr(lap)

    def test_lap_does_not_share_input_lists(self):
        positions = list(POSITIONS)
        values = [1.0, 2.0, 3.0]
        lap = Lap(positions, values)
        positions.clear()
        values.append(4.0)
        assert len(lap) == 3
        assert lap.values == (1.0, 2.0, 3.0)

    def test_cumulative_distance_and_length(self):
        lap = Lap(POSITIONS, [0.0, 0.0, 0.0])
        distances = lap.cumulative_distance
        assert distances[0] == 0.0
        assert distances[1] < distances[2]
        # Roughly 16 m + 12 m between the three samples
        assert lap.length == pytest.approx(28.0, abs=2.0)

    def test_project_into_other_zone(self):
        lap = Lap(POSITIONS, [0.0, 0.0, 0.0])
        assert lap.project() == lap.planar_points
        assert lap.project(lap.zone) == lap.planar_points
        other_zone = lap.project(UtmZone(11, "north"))
        assert len(other_zone) == 3
        assert other_zone != lap.planar_points

    def test_get_bbox(self):
        lap = Lap(POSITIONS, [0.0, 0.0, 0.0])
        south, west, north, east = lap.get_bbox()
        assert (south, west, north, east) == (47.12299, -122.85051, 47.12322, -122.85039)

        b_south, b_west, b_north, b_east = lap.get_bbox(111.0)
        assert b_south == pytest.approx(south - 0.001)
        assert b_north == pytest.approx(north + 0.001)
        assert b_west < west
        assert b_east > east

    def test_empty_lap(self):
        with pytest.raises(EmptyTrackError):
            Lap([], [])

    def test_length_mismatch(self):
        with pytest.raises(LengthMismatchError):
            Lap(POSITIONS, [1.0, 2.0])

    def test_invalid_coordinate(self):
        with pytest.raises(InvalidCoordinateError):
            Lap([Position(47.0, -122.0), Position(47.0, -222.0)], [1.0, 2.0])


class TestCsvLoading:
    """Test Lap.from_csv."""

    def test_named_columns(self):
        data = "lat,lon,speed\n47.0,-122.0,10.5\n47.0001,-122.0,11.5\n"
        lap = Lap.from_csv(io.StringIO(data), name="csv lap")
        assert lap.positions == (Position(47.0, -122.0), Position(47.0001, -122.0))
        assert lap.values == (10.5, 11.5)
        assert lap.name == "csv lap"

    def test_column_aliases_and_order(self):
        data = "Speed, Longitude ,LATITUDE\n10.5,-122.0,47.0\n"
        lap = Lap.from_csv(io.StringIO(data))
        assert lap.positions == (Position(47.0, -122.0),)
        assert lap.values == (10.5,)

    def test_other_metric_column(self):
        data = "lat,lng,speed,rpm\n47.0,-122.0,10.5,6000\n"
        lap = Lap.from_csv(io.StringIO(data), metric="rpm")
        assert lap.values == (6000.0,)
        assert lap.metric == "rpm"

    def test_header_with_byte_order_mark(self):
        data = "\ufefflat,lon,speed\n47.0,-122.0,10.5\n"
        lap = Lap.from_csv(io.StringIO(data))
        assert lap.positions == (Position(47.0, -122.0),)
        assert lap.values == (10.5,)

    def test_unnamed_header_reads_columns_by_position(self):
        data = "a,b,c\n47.0,-122.0,10.5\n\n47.0001,-122.0,11.5\n"
        lap = Lap.from_csv(io.StringIO(data))
        assert len(lap) == 2
        assert lap.values == (10.5, 11.5)

    def test_missing_metric_column(self):
        data = "lat,lon,speed\n47.0,-122.0,10.5\n"
        with pytest.raises(ValueError, match="'rpm'"):
            Lap.from_csv(io.StringIO(data), metric="rpm")

    def test_bad_number_reports_line(self):
        data = "lat,lon,speed\n47.0,-122.0,10.5\n47.0,-122.0,fast\n"
        with pytest.raises(ValueError, match="Line 3"):
            Lap.from_csv(io.StringIO(data))

    def test_short_row_reports_line(self):
        data = "lat,lon,speed\n47.0,-122.0\n"
        with pytest.raises(ValueError, match="Line 2"):
            Lap.from_csv(io.StringIO(data))

    def test_header_only(self):
        with pytest.raises(EmptyTrackError):
            Lap.from_csv(io.StringIO("lat,lon,speed\n"))

    def test_empty_file(self):
        with pytest.raises(EmptyTrackError):
            Lap.from_csv(io.StringIO(""))

    def test_out_of_range_latitude(self):
        data = "lat,lon,speed\n147.0,-122.0,10.5\n"
        with pytest.raises(InvalidCoordinateError):
            Lap.from_csv(io.StringIO(data))


class TestGpxLoading:
    """Test Lap.from_gpx."""

    def test_speed_from_timestamps(self):
        lap = Lap.from_gpx(io.StringIO(make_gpx()), name="gpx lap")
        assert len(lap) == 4
        assert lap.positions[0] == Position(47.0, -122.0)
        # 0.0001 degrees of latitude (~11.1 m) per second
        for value in lap.values:
            assert value == pytest.approx(11.1, abs=0.3)

    def test_elevation_metric(self):
        lap = Lap.from_gpx(io.StringIO(make_gpx(with_time=False)), metric="elevation")
        assert lap.values == (10.0, 11.0, 12.0, 13.0)
        assert lap.metric == "elevation"

    def test_speed_without_timestamps(self):
        with pytest.raises(ValueError, match="has no speed"):
            Lap.from_gpx(io.StringIO(make_gpx(with_time=False)))

    def test_unsupported_metric(self):
        with pytest.raises(ValueError, match="GPX laps support"):
            Lap.from_gpx(io.StringIO(make_gpx()), metric="rpm")

    def test_malformed_gpx(self):
        with pytest.raises(gpx.GPXException):
            Lap.from_gpx(io.StringIO("<gpx><trk><trkseg><trkpt"))


class TestFileLoading:
    """Test Lap.from_file dispatch."""

    def test_from_csv_file(self, tmp_path):
        path = tmp_path / "1m34.344s.csv"
        path.write_text("lat,lon,speed\n47.0,-122.0,10.5\n", encoding="utf-8")
        lap = Lap.from_file(str(path))
        assert lap.name == "1m34.344s"
        assert lap.values == (10.5,)

    def test_from_csv_file_with_byte_order_mark(self, tmp_path):
        path = tmp_path / "excel.csv"
        path.write_text("lat,lon,speed\n47.0,-122.0,10.5\n", encoding="utf-8-sig")
        lap = Lap.from_file(str(path))
        assert lap.positions == (Position(47.0, -122.0),)
        assert lap.values == (10.5,)

    def test_from_gpx_file(self, tmp_path):
        path = tmp_path / "evening.GPX"
        path.write_text(make_gpx(), encoding="utf-8")
        lap = Lap.from_file(str(path))
        assert lap.name == "evening"
        assert len(lap) == 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Lap.from_file(str(tmp_path / "missing.csv"))
