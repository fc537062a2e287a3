"""Tests for the hydroeda command-line interface."""

import logging
from unittest.mock import patch

import pandas as pd
import requests
from click.testing import CliRunner

from hydroeda.cli import cli
from hydroeda.snapshot import save_snapshot
from hydroeda.usgs import NoDataError


class TestDownload:
    def test_writes_snapshot(self, tmp_path, short_daily):
        out = tmp_path / "snap.csv"
        with patch("hydroeda.usgs.USGSgage.download_daily_flow", return_value=short_daily) as dl:
            result = CliRunner().invoke(
                cli, ["download", "--site", "1049500", "--start", "2010-01-01",
                      "--end", "2012-12-31", "--output", str(out)]
            )
        assert result.exit_code == 0, result.output
        assert out.is_file()
        assert list(pd.read_csv(out).columns) == ["Date", "Discharge"]
        assert dl.call_args.kwargs["start_date"] == "2010-01-01"
        assert "01049500" in result.output

    def test_default_location_uses_data_dir(self, tmp_path, short_daily):
        with patch("hydroeda.usgs.USGSgage.download_daily_flow", return_value=short_daily):
            result = CliRunner().invoke(cli, ["download", "--data-dir", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "discharge_01049500.csv").is_file()

    def test_no_data(self, tmp_path):
        with patch("hydroeda.usgs.USGSgage.download_daily_flow", side_effect=NoDataError("No daily data")):
            result = CliRunner().invoke(cli, ["download", "--data-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "No daily data" in result.output

    def test_http_error(self, tmp_path):
        with patch(
            "hydroeda.usgs.USGSgage.download_daily_flow",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            result = CliRunner().invoke(cli, ["download", "--data-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "Download from USGS failed" in result.output
        assert "connection refused" in result.output
        assert not (tmp_path / "discharge_01049500.csv").exists()

    def test_reversed_dates(self, tmp_path):
        result = CliRunner().invoke(
            cli, ["download", "--start", "2020-01-01", "--end", "2010-01-01", "--data-dir", str(tmp_path)]
        )
        assert result.exit_code != 0


class TestReport:
    def test_missing_snapshot(self, tmp_path):
        result = CliRunner().invoke(cli, ["report", "--snapshot", str(tmp_path / "missing.csv")])
        assert result.exit_code == 1
        assert "Snapshot not found" in result.output

    def test_unreadable_snapshot(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        result = CliRunner().invoke(cli, ["report", "--snapshot", str(path)])
        assert result.exit_code == 1
        assert "could not be read" in result.output

    def test_full_report(self, tmp_path, snapshot_file):
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(
            cli,
            ["report", "--snapshot", str(snapshot_file), "--output-dir", str(out_dir),
             "--site-name", "Test River"],
        )
        assert result.exit_code == 0, result.output
        assert "Robust slope" in result.output
        assert (out_dir / "exploration_report.md").is_file()
        assert (out_dir / "fig05_trend.png").is_file()

    def test_auto_power_with_zero_flow_days(self, tmp_path, zero_flow_daily):
        snap = save_snapshot(zero_flow_daily, tmp_path / "zeros.csv")
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(
            cli,
            ["report", "--snapshot", str(snap), "--output-dir", str(out_dir),
             "--power", "auto", "--site-name", "Test River"],
        )
        assert result.exit_code == 0, result.output
        assert "Re-expression power used" in result.output
        assert (out_dir / "exploration_report.md").is_file()

    def test_bad_power(self, snapshot_file):
        result = CliRunner().invoke(cli, ["report", "--snapshot", str(snapshot_file), "--power", "fifth"])
        assert result.exit_code == 2
        assert "fraction" in result.output

    def test_bad_span(self, snapshot_file):
        result = CliRunner().invoke(
            cli, ["report", "--snapshot", str(snapshot_file), "--trend-span", "2", "--site-name", "x"]
        )
        assert result.exit_code == 2


class TestLadder:
    def test_prints_table(self, snapshot_file):
        result = CliRunner().invoke(cli, ["ladder", "--snapshot", str(snapshot_file)])
        assert result.exit_code == 0, result.output
        assert "bowley" in result.output
        assert "Most symmetric power" in result.output


class TestVerbose:
    def test_verbose_sets_debug_level(self, snapshot_file):
        with patch("hydroeda.cli.logging.basicConfig") as basic_config:
            result = CliRunner().invoke(cli, ["--verbose", "ladder", "--snapshot", str(snapshot_file)])
        assert result.exit_code == 0, result.output
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG

    def test_default_level_is_info(self, snapshot_file):
        with patch("hydroeda.cli.logging.basicConfig") as basic_config:
            result = CliRunner().invoke(cli, ["ladder", "--snapshot", str(snapshot_file)])
        assert result.exit_code == 0, result.output
        assert basic_config.call_args.kwargs["level"] == logging.INFO
