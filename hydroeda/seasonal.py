"""
hydroeda.seasonal - Monthly aggregation and seasonal structure of residuals
"""

from __future__ import annotations

import calendar
import logging
from typing import Optional

import numpy as np
import pandas as pd
from scipy.spatial import cKDTree

from .core import ResidualSurface, SeasonalResults
from .trend import loess_fit

logger = logging.getLogger(__name__)

MONTH_LABELS = [calendar.month_abbr[m] for m in range(1, 13)]


def monthly_summary(series: pd.Series) -> pd.DataFrame:
    """Distribution of ``series`` within each calendar month.

    Returns
    -------
    pd.DataFrame
        Indexed by month number (1-12) with columns ``month``, ``count``,
        ``mean``, ``median``, ``q25``, ``q75``, ``min``, ``max``, ``iqr``.
        Months with no data are omitted.
    """
    series = series.dropna()
    grouped = series.groupby(series.index.month)

    stats_df = grouped.agg(
        [
            "count",
            "mean",
            "median",
            lambda x: np.percentile(x, 25),
            lambda x: np.percentile(x, 75),
            "min",
            "max",
        ]
    )
    stats_df.columns = ["count", "mean", "median", "q25", "q75", "min", "max"]
    stats_df["iqr"] = stats_df["q75"] - stats_df["q25"]
    stats_df.index.name = "month_no"
    stats_df.insert(0, "month", [MONTH_LABELS[m - 1] for m in stats_df.index])
    return stats_df


def monthly_means(series: pd.Series) -> pd.Series:
    """Mean of ``series`` for every month of every year."""
    return series.dropna().resample("MS").mean().rename("monthly_mean")


def seasonal_cycle(residuals: pd.Series, span: float = 0.3) -> SeasonalResults:
    """Smooth residuals against day of year.

    Parameters
    ----------
    residuals : pd.Series
        Date-indexed residuals from the long-term trend.
    span : float
        Loess span over the pooled day-of-year axis.

    Returns
    -------
    SeasonalResults
        ``seasonal`` on the residual index, ``profile`` indexed by day of
        year, and the ``remainder`` after removing the cycle.
    """
    residuals = residuals.dropna()
    doy = residuals.index.dayofyear.to_numpy(dtype=float)

    fitted = loess_fit(doy, residuals.to_numpy(), span=span)
    seasonal = pd.Series(fitted, index=residuals.index, name="seasonal")
    profile = seasonal.groupby(residuals.index.dayofyear).mean()
    profile.index.name = "doy"

    logger.info(
        "Seasonal cycle amplitude %.4f (peak day %d, trough day %d)",
        float(profile.max() - profile.min()),
        int(profile.idxmax()),
        int(profile.idxmin()),
    )
    return SeasonalResults(
        seasonal=seasonal,
        profile=profile,
        remainder=remove_seasonal(residuals, seasonal),
        span=span,
    )


def remove_seasonal(residuals: pd.Series, seasonal: pd.Series) -> pd.Series:
    """Residuals minus their seasonal component."""
    obs, fit = residuals.align(seasonal, join="inner")
    return (obs - fit).rename("remainder")


def _trimmed_sd(x: np.ndarray) -> float:
    """10% trimmed standard deviation; 1 if degenerate.

    ``ceil(0.1 * n)`` values are dropped from each tail and the sample
    (n - 1) variance is taken of the rest.
    """
    x = np.sort(np.asarray(x, dtype=float))
    trim = int(np.ceil(0.1 * x.size))
    kept = x[trim:x.size - trim]
    sd = float(np.std(kept, ddof=1)) if kept.size > 1 else 0.0
    return sd if sd > 0 else 1.0


def _design(dx: np.ndarray, dy: np.ndarray, degree: int) -> np.ndarray:
    cols = [np.ones_like(dx), dx, dy]
    if degree == 2:
        cols += [dx * dx, dx * dy, dy * dy]
    return np.column_stack(cols)


def loess_surface(
    doy,
    year,
    values,
    span: float = 0.2,
    degree: int = 2,
    n_doy: int = 73,
    n_year: Optional[int] = None,
) -> ResidualSurface:
    """Two-dimensional loess of ``values`` over (day of year, year).

    Each grid node is fitted by weighted least squares on its nearest
    ``span * n`` observations with tricube weights on scaled distance.
    Both predictors are divided by their 10% trimmed standard deviation
    before distances are taken.

    Parameters
    ----------
    doy, year, values : array-like
        Observations, equal length.
    span : float
        Neighbourhood fraction in (0, 1].
    degree : int
        1 for local planes, 2 for local quadratics.
    n_doy : int
        Grid points from day 1 to day 366.
    n_year : int, optional
        Grid points across the year range. Defaults to one per year.
    """
    if not 0 < span <= 1:
        raise ValueError(f"span must be in (0, 1], got {span}")
    if degree not in (1, 2):
        raise ValueError("degree must be 1 or 2")

    doy = np.asarray(doy, dtype=float)
    year = np.asarray(year, dtype=float)
    values = np.asarray(values, dtype=float)
    ok = np.isfinite(doy) & np.isfinite(year) & np.isfinite(values)
    doy, year, values = doy[ok], year[ok], values[ok]

    n = values.size
    n_coef = 3 if degree == 1 else 6
    if n <= n_coef:
        raise ValueError(f"At least {n_coef + 1} observations are required")

    sx, sy = _trimmed_sd(doy), _trimmed_sd(year)
    points = np.column_stack([doy / sx, year / sy])
    tree = cKDTree(points)
    q = int(min(n, max(np.floor(n * span), n_coef + 1)))

    doy_grid = np.linspace(1.0, 366.0, n_doy)
    if n_year is None:
        year_grid = np.arange(np.floor(year.min()), np.floor(year.max()) + 1.0)
    else:
        year_grid = np.linspace(year.min(), year.max(), n_year)

    logger.info(
        "Fitting residual surface on %d x %d grid (%d neighbours per node)",
        len(year_grid), len(doy_grid), q,
    )

    z = np.full((len(year_grid), len(doy_grid)), np.nan)
    for i, yr in enumerate(year_grid):
        for j, d in enumerate(doy_grid):
            center = np.array([d / sx, yr / sy])
            dist, idx = tree.query(center, k=q)
            dist = np.atleast_1d(dist)
            idx = np.atleast_1d(idx)

            dmax = dist.max()
            if dmax > 0:
                u = np.clip(dist / (dmax * 1.0001), 0.0, 1.0)
                w = (1.0 - u**3) ** 3
            else:
                w = np.ones_like(dist)

            A = _design(points[idx, 0] - center[0], points[idx, 1] - center[1], degree)
            sw = np.sqrt(w)
            beta, *_ = np.linalg.lstsq(A * sw[:, None], values[idx] * sw, rcond=None)
            z[i, j] = beta[0]

    return ResidualSurface(doy=doy_grid, years=year_grid, z=z, span=span, degree=degree)


def residual_surface(residuals: pd.Series, **kwargs) -> ResidualSurface:
    """:func:`loess_surface` of date-indexed residuals."""
    residuals = residuals.dropna()
    return loess_surface(
        residuals.index.dayofyear.to_numpy(),
        residuals.index.year.to_numpy(),
        residuals.to_numpy(),
        **kwargs,
    )
