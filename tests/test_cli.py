#!/usr/bin/env python3
"""
Tests for the lapcompare command-line interface.
"""

import os
from unittest.mock import patch

import pytest

from lapcompare import cli

REFERENCE_CSV = """lat,lon,speed
47.00000,-122.00000,20.0
47.00010,-122.00000,21.0
47.00020,-122.00000,22.0
47.00030,-122.00000,23.0
"""

OTHER_CSV = """lat,lon,speed
47.00000,-122.00001,18.0
47.00010,-122.00001,19.0
47.00020,-122.00001,26.0
47.00030,-122.00001,20.0
"""


@pytest.fixture
def lap_files(tmp_path):
    reference = tmp_path / "fast.csv"
    other = tmp_path / "slow.csv"
    reference.write_text(REFERENCE_CSV, encoding="utf-8")
    other.write_text(OTHER_CSV, encoding="utf-8")
    return str(reference), str(other)


def test_main_writes_chart_and_map(lap_files, tmp_path, capsys):
    reference, other = lap_files

    with patch("lapcompare.cli.webbrowser.open") as mock_open:
        cli.main([reference, other])

    chart = tmp_path / "fast vs slow comparison.png"
    html = tmp_path / "fast vs slow comparison.html"
    assert chart.stat().st_size > 0
    assert html.stat().st_size > 0
    mock_open.assert_called_once_with(f"file://{os.path.abspath(str(html))}")

    out = capsys.readouterr().out
    assert "UTM zone 10N (EPSG:32610)" in out
    assert "Mean speed difference: -0.75" in out
    assert "largest 4.00 at sample 2" in out


def test_main_explicit_outputs_without_map(lap_files, tmp_path):
    reference, other = lap_files
    chart = tmp_path / "custom.png"

    with patch("lapcompare.cli.webbrowser.open") as mock_open:
        cli.main([reference, other, "--chart", str(chart), "--no-map", "--matcher", "strtree"])

    assert chart.exists()
    assert not (tmp_path / "fast vs slow comparison.html").exists()
    mock_open.assert_not_called()


def test_main_no_open(lap_files, tmp_path):
    reference, other = lap_files
    with patch("lapcompare.cli.webbrowser.open") as mock_open:
        cli.main([reference, other, "--no-open", "--map", str(tmp_path / "m.html")])
    assert (tmp_path / "m.html").exists()
    mock_open.assert_not_called()


def test_main_requires_two_laps(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 1
    assert "usage" in capsys.readouterr().out


def test_main_missing_file(lap_files, tmp_path):
    reference, _ = lap_files
    with pytest.raises(SystemExit) as excinfo:
        cli.main([reference, str(tmp_path / "missing.csv"), "--no-open"])
    assert excinfo.value.code == 1


def test_main_invalid_lap(lap_files, tmp_path):
    reference, _ = lap_files
    bad = tmp_path / "bad.csv"
    bad.write_text("lat,lon,speed\n47.0,-122.0,20.0\n147.0,-122.0,21.0\n", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        cli.main([reference, str(bad), "--no-open"])
    assert excinfo.value.code == 1


def test_config_from_args():
    parser = cli.create_argument_parser()
    args = parser.parse_args(
        ["a.csv", "b.csv", "--metric", "rpm", "--bbox-buffer", "5", "--metrics"]
    )
    config = cli.config_from_args(args)
    assert config.metric == "rpm"
    assert config.matcher == "scan"
    assert config.bbox_buffer == 5.0
    assert config.metrics is True
    assert config.log_level == "WARNING"


def test_unknown_matcher_rejected():
    parser = cli.create_argument_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["a.csv", "b.csv", "--matcher", "kdtree"])


def test_failed_map_name_releases_reserved_chart(lap_files, tmp_path):
    reference, other = lap_files
    chart = tmp_path / "fast vs slow comparison.png"

    def reserve(reference_filename, other_filename, extension):
        if extension == ".png":
            chart.touch()
            return str(chart)
        raise RuntimeError("no free filename")

    with patch("lapcompare.cli.generate_output_filename", side_effect=reserve):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([reference, other, "--no-open"])

    assert excinfo.value.code == 1
    assert not chart.exists()
