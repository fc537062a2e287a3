"""
hydroeda.core - Result records passed between analysis stages
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd


class TrendMethod(Enum):
    """How a trend line was fitted."""
    LOESS = "loess"
    OLS = "ols"
    RLM = "rlm"


@dataclass
class SkewSummary:
    """Skew of the raw series and of each rung of the power ladder."""
    n: int
    skewness: float
    bowley: float
    ladder: pd.DataFrame
    suggested_power: float


@dataclass
class LinearTrend:
    """A straight-line fit of re-expressed discharge against decimal year."""
    method: TrendMethod
    intercept: float
    slope: float
    fitted: pd.Series
    residuals: pd.Series
    scale: float
    norm: Optional[str] = None

    def change_per_decade(self) -> float:
        return 10.0 * self.slope

    def predict(self, decimal_years) -> np.ndarray:
        return self.intercept + self.slope * np.asarray(decimal_years, dtype=float)


@dataclass
class TrendResults:
    """Loess curve plus ordinary and robust lines for one series."""
    loess: pd.Series
    span: float
    ols: LinearTrend
    rlm: LinearTrend

    @property
    def slope_difference(self) -> float:
        """Robust minus ordinary slope; large values flag influential points."""
        return self.rlm.slope - self.ols.slope


@dataclass
class SeasonalResults:
    """Seasonal cycle of the residuals and what is left after removing it."""
    seasonal: pd.Series
    profile: pd.Series
    remainder: pd.Series
    span: float

    @property
    def amplitude(self) -> float:
        return float(self.profile.max() - self.profile.min())

    @property
    def peak_doy(self) -> int:
        return int(self.profile.idxmax())

    @property
    def trough_doy(self) -> int:
        return int(self.profile.idxmin())


@dataclass
class ResidualSurface:
    """Smoothed residuals on a regular day-of-year x year grid.

    ``z`` has shape ``(len(years), len(doy))``.
    """
    doy: np.ndarray
    years: np.ndarray
    z: np.ndarray
    span: float
    degree: int

    @property
    def z_min(self) -> float:
        return float(np.nanmin(self.z))

    @property
    def z_max(self) -> float:
        return float(np.nanmax(self.z))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.z, index=self.years, columns=self.doy)


@dataclass
class AnalysisResults:
    """Everything produced by a full pipeline run, in stage order."""
    skew: SkewSummary
    power: float
    reexpressed: pd.Series
    trends: TrendResults
    residuals: pd.Series
    monthly_summary: pd.DataFrame
    monthly_means: pd.Series
    seasonal: SeasonalResults
    surface: ResidualSurface
    reexpressed_skew: Optional[float] = None
