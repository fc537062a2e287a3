"""
hydroeda.snapshot - Cached snapshot of the downloaded daily series.

The snapshot is a two-column CSV (``Date``, ``Discharge``) written once by
the download step and read by every analysis run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .config import DATA_DIR_ENV, default_data_dir
from .usgs import USGSgage

logger = logging.getLogger(__name__)

SNAPSHOT_COLUMNS = ("Date", "Discharge")

PathLike = Union[str, Path]


class SnapshotNotFoundError(FileNotFoundError):
    """Raised when the cached snapshot has not been downloaded yet."""

    def __init__(self, path: Path) -> None:
        msg = (
            f"Snapshot not found: {path}\n"
            "To fix this, do one of the following:\n"
            "  1. Run `hydroeda download` for the site\n"
            f"  2. Set the {DATA_DIR_ENV} environment variable to the snapshot directory\n"
            "  3. Pass the snapshot path explicitly"
        )
        super().__init__(msg)
        self.path = path


class SnapshotFormatError(ValueError):
    """Raised when a snapshot file does not have the Date/Discharge columns."""


def default_snapshot_path(site_no: str, data_dir: Optional[PathLike] = None) -> Path:
    """Location of the snapshot for ``site_no``."""
    base = Path(data_dir) if data_dir is not None else default_data_dir()
    return base / f"discharge_{str(site_no).zfill(8)}.csv"


def save_snapshot(daily_data: pd.DataFrame, path: PathLike) -> Path:
    """Write the daily series as a ``Date``/``Discharge`` CSV.

    Parameters
    ----------
    daily_data : pd.DataFrame
        Indexed by date with a ``discharge`` column.
    path : str or Path
        Destination file. Parent directories are created.

    Returns
    -------
    Path
        The written path.
    """
    if "discharge" not in daily_data.columns:
        raise SnapshotFormatError("daily_data must have a 'discharge' column")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    out = pd.DataFrame(
        {
            "Date": pd.DatetimeIndex(daily_data.index).strftime("%Y-%m-%d"),
            "Discharge": daily_data["discharge"].to_numpy(),
        }
    )
    out.to_csv(path, index=False)
    logger.info("Saved %d rows to %s", len(out), path)
    return path


def load_snapshot(path: PathLike) -> pd.DataFrame:
    """Read a snapshot back into a date-indexed ``discharge`` frame.

    Raises
    ------
    SnapshotNotFoundError
        If ``path`` does not exist.
    SnapshotFormatError
        If the file is empty or unparseable, or lacks the ``Date`` and
        ``Discharge`` columns.
    """
    path = Path(path)
    if not path.is_file():
        raise SnapshotNotFoundError(path)

    try:
        df = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise SnapshotFormatError(f"Snapshot {path} could not be read: {e}") from e
    missing = [c for c in SNAPSHOT_COLUMNS if c not in df.columns]
    if missing:
        raise SnapshotFormatError(
            f"Snapshot {path} is missing column(s): {', '.join(missing)}"
        )

    try:
        dates = pd.to_datetime(df["Date"])
    except (ValueError, TypeError) as e:
        raise SnapshotFormatError(f"Snapshot {path} has unparseable dates: {e}") from e

    df = pd.DataFrame(
        {
            "date": dates,
            "discharge": pd.to_numeric(df["Discharge"], errors="coerce"),
        }
    )
    df = df.dropna().drop_duplicates(subset="date").set_index("date").sort_index()
    if df.empty:
        raise SnapshotFormatError(f"Snapshot {path} contains no discharge values")

    logger.debug("Loaded %d rows from %s", len(df), path)
    return df


def fetch_snapshot(
    site_no: str,
    start_date: str = None,
    end_date: str = None,
    path: Optional[PathLike] = None,
    refresh: bool = False,
    timeout: int = 60,
) -> pd.DataFrame:
    """Return the daily series, downloading only when no snapshot exists.

    Parameters
    ----------
    site_no : str
        USGS site number.
    start_date, end_date : str, optional
        Date range passed to the data service on download.
    path : str or Path, optional
        Snapshot file. Defaults to :func:`default_snapshot_path`.
    refresh : bool
        Download again even when the snapshot exists.
    timeout : int
        HTTP timeout in seconds.
    """
    path = Path(path) if path is not None else default_snapshot_path(site_no)

    if path.is_file() and not refresh:
        logger.info("Using cached snapshot %s", path)
        return load_snapshot(path)

    gage = USGSgage(site_no, timeout=timeout)
    daily = gage.download_daily_flow(start_date=start_date, end_date=end_date)
    save_snapshot(daily, path)
    return load_snapshot(path)
