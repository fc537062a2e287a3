"""
Download and analysis configuration.

Holds the site, date range and snapshot location for the acquisition step
and the parameter choices (re-expression power, smoothing spans, surface
grid) for the analysis step.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "HYDROEDA_DATA_DIR"

# Gardiner, ME
DEFAULT_SITE_NO = "01049500"
DEFAULT_START_DATE = "1976-01-01"
DEFAULT_END_DATE = "2024-12-31"

DISCHARGE_PARAMETER_CD = "00060"
MEAN_STAT_CD = "00003"

DEFAULT_LADDER: Tuple[float, ...] = (-1.0, -0.5, 0.0, 0.2, 0.25, 1 / 3, 0.5, 1.0)
ROBUST_NORMS = ("huber", "bisquare")


def default_data_dir() -> Path:
    """Directory holding cached snapshots.

    Uses the ``HYDROEDA_DATA_DIR`` environment variable when set, otherwise
    ``./data`` relative to the working directory.
    """
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        logger.debug("Using snapshot directory from %s: %s", DATA_DIR_ENV, env_dir)
        return Path(env_dir)
    return Path.cwd() / "data"


@dataclass
class DownloadConfig:
    """Configuration for the one-time data download.

    Parameters
    ----------
    site_no : str
        USGS site number. Padded to 8 digits.
    start_date, end_date : str
        Inclusive date range, ``YYYY-MM-DD``.
    parameter_cd : str
        NWIS parameter code (``00060`` = discharge, cfs).
    stat_cd : str
        NWIS statistic code (``00003`` = daily mean).
    data_dir : Path or None
        Snapshot directory. ``None`` resolves via :func:`default_data_dir`.
    timeout_seconds : int
        HTTP timeout for the data service.
    """

    site_no: str = DEFAULT_SITE_NO
    start_date: str = DEFAULT_START_DATE
    end_date: str = DEFAULT_END_DATE
    parameter_cd: str = DISCHARGE_PARAMETER_CD
    stat_cd: str = MEAN_STAT_CD
    data_dir: Optional[Path] = None
    timeout_seconds: int = 60

    def __post_init__(self) -> None:
        self.site_no = str(self.site_no).zfill(8)
        if self.data_dir is None:
            self.data_dir = default_data_dir()
        else:
            self.data_dir = Path(self.data_dir)
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(
                f"start_date {self.start_date} is after end_date {self.end_date}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / f"discharge_{self.site_no}.csv"


@dataclass
class AnalysisConfig:
    """Parameter choices for the analysis pipeline.

    Parameters
    ----------
    power : float or None
        Re-expression power. ``None`` picks the ladder rung with the least
        quartile skew.
    ladder : tuple of float
        Powers examined during skew assessment.
    trend_span : float
        Loess span for the long-term trend.
    robust_norm : str
        ``'huber'`` or ``'bisquare'`` weighting for the robust line.
    seasonal_span : float
        Loess span for residual vs. day of year.
    surface_span : float
        Neighbourhood fraction for the day-of-year x year surface.
    surface_degree : int
        Local polynomial degree for the surface (1 or 2).
    surface_n_doy : int
        Grid points along the day-of-year axis.
    """

    power: Optional[float] = 0.2
    ladder: Tuple[float, ...] = field(default_factory=lambda: DEFAULT_LADDER)
    trend_span: float = 0.25
    robust_norm: str = "huber"
    seasonal_span: float = 0.3
    surface_span: float = 0.2
    surface_degree: int = 2
    surface_n_doy: int = 73

    def __post_init__(self) -> None:
        self.ladder = tuple(float(p) for p in self.ladder)
        for name in ("trend_span", "seasonal_span", "surface_span"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if self.robust_norm not in ROBUST_NORMS:
            raise ValueError(
                f"robust_norm must be one of {ROBUST_NORMS}, got {self.robust_norm!r}"
            )
        if self.surface_degree not in (1, 2):
            raise ValueError("surface_degree must be 1 or 2")
        if self.surface_n_doy < 2:
            raise ValueError("surface_n_doy must be at least 2")
