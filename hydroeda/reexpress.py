"""
hydroeda.reexpress - Skew assessment and power re-expression

Tukey's ladder of powers: for p > 0 values are raised to p, p = 0 stands
for the base-10 logarithm and p < 0 is negated so every rung keeps the
original ordering of the data.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import pandas as pd
from scipy import stats

from .config import DEFAULT_LADDER

logger = logging.getLogger(__name__)


def _as_array(x) -> np.ndarray:
    values = np.asarray(x, dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        raise ValueError("At least one finite value is required")
    return values


def skewness(x) -> float:
    """Adjusted Fisher-Pearson sample skewness.

    Returns 0 for a constant series.
    """
    values = _as_array(x)
    if values.size < 3 or np.ptp(values) == 0:
        return 0.0
    return float(stats.skew(values, bias=False))


def bowley_skewness(x) -> float:
    """Quartile (Bowley) skewness, ``(Q3 + Q1 - 2 Q2) / (Q3 - Q1)``.

    Bounded in [-1, 1] and insensitive to the tails. Returns 0 when the
    interquartile range is zero.
    """
    values = _as_array(x)
    q1, q2, q3 = np.percentile(values, [25, 50, 75])
    iqr = q3 - q1
    if iqr == 0:
        return 0.0
    return float((q3 + q1 - 2 * q2) / iqr)


def tukey_power(x, p: float):
    """Order-preserving power re-expression.

    Parameters
    ----------
    x : array-like or pd.Series
        Values to re-express. A Series keeps its index.
    p : float
        Power. ``0`` means ``log10``.

    Raises
    ------
    ValueError
        If a non-positive value meets a log or negative power, or a
        negative value meets a fractional power.
    """
    values = np.asarray(x, dtype=float)
    finite = values[np.isfinite(values)]

    if p <= 0 and np.any(finite <= 0):
        raise ValueError(f"Power {p} requires strictly positive values")
    if p > 0 and not float(p).is_integer() and np.any(finite < 0):
        raise ValueError(f"Fractional power {p} requires non-negative values")

    if p == 0:
        out = np.log10(values)
    elif p > 0:
        out = np.power(values, p)
    else:
        out = -np.power(values, p)

    if isinstance(x, pd.Series):
        return pd.Series(out, index=x.index, name=x.name)
    return out


def inverse_power(y, p: float):
    """Back-transform values produced by :func:`tukey_power`."""
    values = np.asarray(y, dtype=float)
    if p == 0:
        out = np.power(10.0, values)
    elif p > 0:
        out = np.power(np.clip(values, 0, None), 1.0 / p)
    else:
        out = np.power(-values, 1.0 / p)

    if isinstance(y, pd.Series):
        return pd.Series(out, index=y.index, name=y.name)
    return out


def box_cox(x, p: float):
    """Box-Cox transform ``(x**p - 1) / p``, natural log at ``p = 0``."""
    values = np.asarray(x, dtype=float)
    if np.any(values[np.isfinite(values)] <= 0):
        raise ValueError("Box-Cox requires strictly positive values")

    out = np.log(values) if p == 0 else (np.power(values, p) - 1.0) / p

    if isinstance(x, pd.Series):
        return pd.Series(out, index=x.index, name=x.name)
    return out


def power_ladder(x, powers: Sequence[float] = DEFAULT_LADDER) -> pd.DataFrame:
    """Skewness of ``x`` at each rung of the ladder.

    Rungs at or below zero are evaluated on the strictly positive values
    only; the ``n`` column records how many values each rung saw.

    Returns
    -------
    pd.DataFrame
        Columns ``power``, ``n``, ``skewness``, ``bowley``.
    """
    values = _as_array(x)
    positive = values[values > 0]

    rows = []
    for p in powers:
        subset = positive if p <= 0 else values
        if subset.size == 0:
            logger.debug("Skipping power %s: no positive values", p)
            continue
        transformed = tukey_power(subset, p)
        rows.append({
            "power": float(p),
            "n": int(subset.size),
            "skewness": skewness(transformed),
            "bowley": bowley_skewness(transformed),
        })

    return pd.DataFrame(rows, columns=["power", "n", "skewness", "bowley"])


def best_power(x, powers: Sequence[float] = DEFAULT_LADDER) -> float:
    """Ladder rung whose re-expression is most symmetric (least |Bowley|).

    When ``x`` holds zero or negative values only rungs with ``p > 0`` are
    candidates, since the log and negative powers cannot be applied to the
    whole series.
    """
    values = _as_array(x)
    if np.any(values <= 0):
        powers = [p for p in powers if p > 0]
    ladder = power_ladder(values, powers)
    if ladder.empty:
        raise ValueError("No ladder rung could be evaluated")
    idx = ladder["bowley"].abs().idxmin()
    return float(ladder.loc[idx, "power"])
