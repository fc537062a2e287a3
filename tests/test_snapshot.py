"""Tests for hydroeda.snapshot."""

from unittest.mock import patch

import pandas as pd
import pytest

from hydroeda.snapshot import (
    SnapshotFormatError,
    SnapshotNotFoundError,
    default_snapshot_path,
    fetch_snapshot,
    load_snapshot,
    save_snapshot,
)


class TestSaveLoad:
    def test_file_has_two_columns(self, snapshot_file):
        raw = pd.read_csv(snapshot_file)
        assert list(raw.columns) == ["Date", "Discharge"]
        assert raw["Date"].iloc[0] == "2010-01-01"

    def test_load_restores_series(self, snapshot_file, short_daily):
        df = load_snapshot(snapshot_file)
        assert df.index.name == "date"
        assert list(df.columns) == ["discharge"]
        assert len(df) == len(short_daily)
        assert df["discharge"].iloc[10] == pytest.approx(short_daily["discharge"].iloc[10])

    def test_load_sorts_and_deduplicates(self, tmp_path):
        path = tmp_path / "snap.csv"
        path.write_text("Date,Discharge\n2000-01-03,3\n2000-01-01,1\n2000-01-01,1\n2000-01-02,\n")
        df = load_snapshot(path)
        assert list(df.index) == [pd.Timestamp("2000-01-01"), pd.Timestamp("2000-01-03")]

    def test_save_creates_parent_dirs(self, tmp_path, short_daily):
        path = save_snapshot(short_daily, tmp_path / "nested" / "dir" / "snap.csv")
        assert path.is_file()

    def test_save_requires_discharge_column(self, tmp_path):
        with pytest.raises(SnapshotFormatError):
            save_snapshot(pd.DataFrame({"flow": [1.0]}), tmp_path / "x.csv")


class TestErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotNotFoundError) as exc:
            load_snapshot(tmp_path / "nope.csv")
        assert "hydroeda download" in str(exc.value)
        assert isinstance(exc.value, FileNotFoundError)

    def test_wrong_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("date,flow\n2000-01-01,1\n")
        with pytest.raises(SnapshotFormatError, match="Discharge"):
            load_snapshot(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(SnapshotFormatError, match="could not be read"):
            load_snapshot(path)

    def test_unparseable_date(self, tmp_path):
        path = tmp_path / "bad_date.csv"
        path.write_text("Date,Discharge\n2000-01-01,1\nnot-a-date,2\n")
        with pytest.raises(SnapshotFormatError, match="unparseable dates"):
            load_snapshot(path)


class TestDefaultPath:
    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HYDROEDA_DATA_DIR", str(tmp_path))
        assert default_snapshot_path("1049500") == tmp_path / "discharge_01049500.csv"

    def test_explicit_dir(self, tmp_path):
        assert default_snapshot_path("01049500", tmp_path).parent == tmp_path


class TestFetchSnapshot:
    def test_uses_cache(self, snapshot_file):
        with patch("hydroeda.snapshot.USGSgage.download_daily_flow") as download:
            df = fetch_snapshot("01049500", path=snapshot_file)
        download.assert_not_called()
        assert not df.empty

    def test_downloads_when_missing(self, tmp_path, short_daily):
        path = tmp_path / "snap.csv"
        with patch(
            "hydroeda.snapshot.USGSgage.download_daily_flow", return_value=short_daily
        ) as download:
            df = fetch_snapshot("01049500", "2010-01-01", "2012-12-31", path=path)
        download.assert_called_once_with(start_date="2010-01-01", end_date="2012-12-31")
        assert path.is_file()
        assert len(df) == len(short_daily)

    def test_refresh_downloads_again(self, snapshot_file, short_daily):
        with patch(
            "hydroeda.snapshot.USGSgage.download_daily_flow", return_value=short_daily.iloc[:30]
        ) as download:
            df = fetch_snapshot("01049500", path=snapshot_file, refresh=True)
        download.assert_called_once()
        assert len(df) == 30
