"""
hydroeda.trend - Loess and linear trend fits

All fits take decimal year as the abscissa. Loess is the statsmodels
LOWESS smoother; the ordinary and robust lines come from statsmodels
``OLS`` and ``RLM``.
"""

from __future__ import annotations

import logging
from typing import Dict

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.nonparametric.smoothers_lowess import lowess

from .core import LinearTrend, TrendMethod, TrendResults

logger = logging.getLogger(__name__)

_ROBUST_NORMS: Dict[str, type] = {
    "huber": sm.robust.norms.HuberT,
    "bisquare": sm.robust.norms.TukeyBiweight,
}


def decimal_year(index) -> np.ndarray:
    """Convert dates to fractional years (e.g. 2000-07-02 -> ~2000.5)."""
    dates = pd.DatetimeIndex(index)
    year_start = pd.to_datetime(dates.year.astype(str) + "-01-01")
    days_in_year = np.where(dates.is_leap_year, 366.0, 365.0)
    elapsed = (dates - year_start).days.to_numpy(dtype=float)
    return dates.year.to_numpy(dtype=float) + elapsed / days_in_year


def _check_span(span: float) -> None:
    if not 0 < span <= 1:
        raise ValueError(f"span must be in (0, 1], got {span}")


def loess_fit(x, y, span: float = 0.25, iterations: int = 0) -> np.ndarray:
    """Locally weighted regression of ``y`` on ``x``.

    Parameters
    ----------
    x, y : array-like
        Predictor and response of equal length.
    span : float
        Fraction of points in each local neighbourhood.
    iterations : int
        Robustifying passes. ``0`` is a plain least-squares loess.

    Returns
    -------
    np.ndarray
        Fitted values in the same order as the input.
    """
    _check_span(span)
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError("x and y must have the same length")
    if x.size < 3:
        raise ValueError("At least 3 points are required for loess")

    # Interpolate between fits closer than 1% of the range; daily series are long.
    delta = 0.01 * float(np.ptp(x))
    return lowess(y, x, frac=span, it=iterations, delta=delta, return_sorted=False)


def linear_fit(x, y, robust: bool = False, norm: str = "huber", index=None) -> LinearTrend:
    """Straight-line fit of ``y`` on ``x``.

    Parameters
    ----------
    x, y : array-like
        Predictor and response.
    robust : bool
        Use iteratively reweighted M-estimation instead of least squares.
    norm : str
        ``'huber'`` or ``'bisquare'`` when ``robust`` is set.
    index : array-like, optional
        Index for the returned fitted and residual Series.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size < 2:
        raise ValueError("At least 2 points are required for a linear fit")

    X = sm.add_constant(x, has_constant="add")

    if robust:
        if norm not in _ROBUST_NORMS:
            raise ValueError(f"Unknown robust norm {norm!r}")
        result = sm.RLM(y, X, M=_ROBUST_NORMS[norm]()).fit()
        method = TrendMethod.RLM
        scale = float(result.scale)
    else:
        result = sm.OLS(y, X).fit()
        method = TrendMethod.OLS
        scale = float(np.sqrt(result.scale))
        norm = None

    intercept, slope = (float(v) for v in result.params)
    fitted = intercept + slope * x
    idx = index if index is not None else pd.RangeIndex(len(x))

    logger.debug("%s fit: intercept=%.5f slope=%.6f scale=%.5f", method.value, intercept, slope, scale)

    return LinearTrend(
        method=method,
        intercept=intercept,
        slope=slope,
        fitted=pd.Series(fitted, index=idx, name="fitted"),
        residuals=pd.Series(y - fitted, index=idx, name="residual"),
        scale=scale,
        norm=norm,
    )


def residuals(series: pd.Series, fitted: pd.Series) -> pd.Series:
    """Observed minus fitted, aligned on the index."""
    aligned_obs, aligned_fit = series.align(fitted, join="inner")
    return (aligned_obs - aligned_fit).rename("residual")


def fit_trends(series: pd.Series, span: float = 0.25, robust_norm: str = "huber") -> TrendResults:
    """Loess curve plus ordinary and robust lines for a date-indexed series."""
    series = series.dropna()
    t = decimal_year(series.index)

    smooth = pd.Series(loess_fit(t, series.to_numpy(), span=span), index=series.index, name="loess")
    ols = linear_fit(t, series.to_numpy(), robust=False, index=series.index)
    rlm = linear_fit(t, series.to_numpy(), robust=True, norm=robust_norm, index=series.index)

    logger.info(
        "Trend slopes per decade: OLS %.4f, robust %.4f", ols.change_per_decade(), rlm.change_per_decade()
    )
    return TrendResults(loess=smooth, span=span, ols=ols, rlm=rlm)
