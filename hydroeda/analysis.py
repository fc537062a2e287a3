"""
hydroeda.analysis - Ordered exploratory analysis of a daily discharge series

Stages run in a fixed order, each consuming the previous one's output:

1. skew assessment of the raw series
2. power re-expression
3. loess, ordinary and robust linear trends
4. residuals from the robust line
5. monthly aggregation of the residuals
6. seasonal cycle (residual vs. day of year)
7. day-of-year x year residual surface
"""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from .config import AnalysisConfig
from .core import AnalysisResults, ResidualSurface, SeasonalResults, SkewSummary, TrendResults
from .reexpress import best_power, bowley_skewness, power_ladder, skewness, tukey_power
from .seasonal import monthly_means, monthly_summary, residual_surface, seasonal_cycle
from .trend import fit_trends, residuals as trend_residuals

logger = logging.getLogger(__name__)


class AnalysisStageError(RuntimeError):
    """Raised when a stage is requested before the stage it depends on."""

    def __init__(self, stage: str, requires: str) -> None:
        super().__init__(f"Stage '{stage}' requires '{requires}' to run first")
        self.stage = stage
        self.requires = requires


class DischargeAnalysis:
    """
    Exploratory analysis of one site's daily discharge.

    Parameters
    ----------
    data : pd.DataFrame
        Date-indexed frame with a ``discharge`` column, as returned by
        :func:`hydroeda.snapshot.load_snapshot`.
    config : AnalysisConfig, optional
        Parameter choices. Defaults to a power of 1/5 and loess spans of
        0.25 (trend), 0.3 (seasonal) and 0.2 (surface).

    Examples
    --------
    >>> from hydroeda import DischargeAnalysis, load_snapshot
    >>> analysis = DischargeAnalysis(load_snapshot("data/discharge_01049500.csv"))
    >>> results = analysis.run()
    >>> results.trends.rlm.change_per_decade()
    """

    def __init__(self, data: pd.DataFrame, config: Optional[AnalysisConfig] = None):
        if "discharge" not in data.columns:
            raise ValueError("data must have a 'discharge' column")
        discharge = data["discharge"].dropna()
        if len(discharge) < 10:
            raise ValueError("At least 10 daily values are required")

        self._discharge = discharge.sort_index().rename("discharge")
        self._config = config or AnalysisConfig()

        self._skew: Optional[SkewSummary] = None
        self._power: Optional[float] = None
        self._reexpressed: Optional[pd.Series] = None
        self._trends: Optional[TrendResults] = None
        self._residuals: Optional[pd.Series] = None
        self._monthly_summary: Optional[pd.DataFrame] = None
        self._monthly_means: Optional[pd.Series] = None
        self._seasonal: Optional[SeasonalResults] = None
        self._surface: Optional[ResidualSurface] = None
        self._results: Optional[AnalysisResults] = None

    @property
    def discharge(self) -> pd.Series:
        return self._discharge

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    @property
    def power(self) -> Optional[float]:
        return self._power

    @property
    def reexpressed(self) -> Optional[pd.Series]:
        return self._reexpressed

    @property
    def results(self) -> Optional[AnalysisResults]:
        return self._results

    def _require(self, stage: str, requires: str, value) -> None:
        if value is None:
            raise AnalysisStageError(stage, requires)

    def assess_skew(self) -> SkewSummary:
        """Skew of the raw series and across the ladder of powers."""
        values = self._discharge.to_numpy()
        ladder = power_ladder(values, self._config.ladder)
        self._skew = SkewSummary(
            n=len(values),
            skewness=skewness(values),
            bowley=bowley_skewness(values),
            ladder=ladder,
            suggested_power=best_power(values, self._config.ladder),
        )
        logger.info(
            "Raw skewness %.3f (Bowley %.3f); most symmetric power %s",
            self._skew.skewness,
            self._skew.bowley,
            self._skew.suggested_power,
        )
        return self._skew

    def reexpress(self, power: Optional[float] = None) -> pd.Series:
        """Apply the power re-expression.

        ``power`` overrides the configured power. When neither is set the
        ladder rung suggested by :meth:`assess_skew` is used.
        """
        self._require("reexpress", "assess_skew", self._skew)
        if power is None:
            power = self._config.power
        if power is None:
            power = self._skew.suggested_power

        self._power = float(power)
        self._reexpressed = tukey_power(self._discharge, self._power).rename("reexpressed")
        logger.info(
            "Re-expressed with power %s; skewness now %.3f",
            self._power,
            skewness(self._reexpressed),
        )
        return self._reexpressed

    def fit_trends(self) -> TrendResults:
        """Loess plus ordinary and robust lines on the re-expressed series."""
        self._require("fit_trends", "reexpress", self._reexpressed)
        self._trends = fit_trends(
            self._reexpressed,
            span=self._config.trend_span,
            robust_norm=self._config.robust_norm,
        )
        return self._trends

    def extract_residuals(self) -> pd.Series:
        """Residuals of the re-expressed series from the robust line."""
        self._require("extract_residuals", "fit_trends", self._trends)
        self._residuals = trend_residuals(self._reexpressed, self._trends.rlm.fitted)
        return self._residuals

    def aggregate_monthly(self) -> pd.DataFrame:
        """Per-month residual distribution and month-by-year means."""
        self._require("aggregate_monthly", "extract_residuals", self._residuals)
        self._monthly_summary = monthly_summary(self._residuals)
        self._monthly_means = monthly_means(self._residuals)
        return self._monthly_summary

    def fit_seasonal(self) -> SeasonalResults:
        """Seasonal cycle of the residuals against day of year."""
        self._require("fit_seasonal", "aggregate_monthly", self._monthly_summary)
        self._seasonal = seasonal_cycle(self._residuals, span=self._config.seasonal_span)
        return self._seasonal

    def fit_surface(self) -> ResidualSurface:
        """Smoothed residual surface over day of year and year."""
        self._require("fit_surface", "fit_seasonal", self._seasonal)
        self._surface = residual_surface(
            self._residuals,
            span=self._config.surface_span,
            degree=self._config.surface_degree,
            n_doy=self._config.surface_n_doy,
        )
        return self._surface

    def run(self) -> AnalysisResults:
        """Run every stage in order and collect the results."""
        self.assess_skew()
        self.reexpress()
        self.fit_trends()
        self.extract_residuals()
        self.aggregate_monthly()
        self.fit_seasonal()
        self.fit_surface()

        self._results = AnalysisResults(
            skew=self._skew,
            power=self._power,
            reexpressed=self._reexpressed,
            trends=self._trends,
            residuals=self._residuals,
            monthly_summary=self._monthly_summary,
            monthly_means=self._monthly_means,
            seasonal=self._seasonal,
            surface=self._surface,
            reexpressed_skew=skewness(self._reexpressed),
        )
        return self._results
