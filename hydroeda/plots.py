"""
hydroeda.plots - Diagnostic plots for the exploratory analysis
"""

from __future__ import annotations

from typing import Optional, Sequence, TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy import stats

from .reexpress import bowley_skewness, power_ladder, skewness, tukey_power

if TYPE_CHECKING:
    from .core import ResidualSurface, TrendResults


def apply_eda_style():
    """Apply the standard plotting style."""
    plt.rcParams.update({
        "figure.dpi": 140,
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.grid": True,
        "grid.alpha": 0.3,
        "font.size": 10,
    })


def _power_label(p: float) -> str:
    if p == 0:
        return "log10"
    if p == 1:
        return "raw"
    inv = 1.0 / p
    if abs(inv) > 1 and float(inv).is_integer():
        return f"1/{int(inv)}" if p > 0 else f"-1/{int(-inv)}"
    return f"{p:g}"


def plot_distribution(
    values,
    label: str = "Discharge (cfs)",
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    figsize: tuple = (11, 4.5),
) -> plt.Figure:
    """
    Histogram with kernel density and a normal Q-Q plot.

    Parameters
    ----------
    values : array-like
        Observations to describe.
    label : str
        Axis label for the observations.
    title : str, optional
        Figure title
    save_path : str, optional
        Path to save figure
    figsize : tuple
        Figure size

    Returns
    -------
    plt.Figure
        Matplotlib figure
    """
    apply_eda_style()

    x = np.asarray(values, dtype=float)
    x = x[np.isfinite(x)]

    fig, (ax_hist, ax_qq) = plt.subplots(1, 2, figsize=figsize)

    ax_hist.hist(x, bins=50, density=True, color="steelblue", alpha=0.6, edgecolor="white")
    if np.ptp(x) > 0:
        grid = np.linspace(x.min(), x.max(), 256)
        ax_hist.plot(grid, stats.gaussian_kde(x)(grid), "k-", linewidth=1.5)
    ax_hist.set_xlabel(label, fontsize=11)
    ax_hist.set_ylabel("Density", fontsize=11)

    ax_hist.annotate(
        f"n = {x.size}\nSkewness = {skewness(x):.3f}\nBowley = {bowley_skewness(x):.3f}",
        xy=(0.98, 0.98),
        xycoords="axes fraction",
        fontsize=9,
        ha="right",
        va="top",
        family="monospace",
        bbox=dict(boxstyle="round", facecolor="white", alpha=0.9),
    )

    (osm, osr), (slope, intercept, _) = stats.probplot(x, dist="norm")
    ax_qq.plot(osm, osr, ".", markersize=2, color="steelblue", alpha=0.5)
    ax_qq.plot(osm, intercept + slope * osm, "r-", linewidth=1.2)
    ax_qq.set_xlabel("Normal quantile", fontsize=11)
    ax_qq.set_ylabel(label, fontsize=11)

    fig.suptitle(title or "Distribution", fontsize=12, fontweight="bold")
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches="tight")

    return fig


def plot_power_ladder(
    values,
    powers: Sequence[float],
    chosen: Optional[float] = None,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Histogram of the data re-expressed at each rung of the ladder.

    The rung matching ``chosen`` is highlighted.
    """
    apply_eda_style()

    x = np.asarray(values, dtype=float)
    x = x[np.isfinite(x)]
    ladder = power_ladder(x, powers)

    n = len(ladder)
    ncols = min(4, n)
    nrows = int(np.ceil(n / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(3.2 * ncols, 2.8 * nrows), squeeze=False)

    for ax, (_, row) in zip(axes.flat, ladder.iterrows()):
        p = row["power"]
        subset = x[x > 0] if p <= 0 else x
        highlight = chosen is not None and np.isclose(p, chosen)
        ax.hist(
            tukey_power(subset, p),
            bins=40,
            color="darkorange" if highlight else "steelblue",
            alpha=0.7,
            edgecolor="white",
        )
        ax.set_title(
            f"p = {_power_label(p)}  (Bowley {row['bowley']:.2f})",
            fontsize=9,
            fontweight="bold" if highlight else "normal",
        )
        ax.set_yticks([])

    for ax in list(axes.flat)[n:]:
        ax.set_visible(False)

    fig.suptitle(title or "Ladder of Powers", fontsize=12, fontweight="bold")
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches="tight")

    return fig


def plot_trend(
    series: pd.Series,
    trends: "TrendResults",
    ylabel: str = "Re-expressed discharge",
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    figsize: tuple = (12, 5),
) -> plt.Figure:
    """
    Re-expressed series with the loess curve and both straight lines.

    Parameters
    ----------
    series : pd.Series
        Date-indexed re-expressed values.
    trends : TrendResults
        Fitted loess, OLS and robust lines.
    ylabel : str
        Y-axis label
    title : str, optional
        Plot title
    save_path : str, optional
        Path to save figure
    figsize : tuple
        Figure size

    Returns
    -------
    plt.Figure
        Matplotlib figure
    """
    apply_eda_style()

    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(series.index, series.to_numpy(), ".", markersize=1.5, color="grey", alpha=0.4,
            label="Daily values")
    ax.plot(trends.loess.index, trends.loess.to_numpy(), "b-", linewidth=2,
            label=f"Loess (span = {trends.span:g})")
    ax.plot(trends.ols.fitted.index, trends.ols.fitted.to_numpy(), "k--", linewidth=1.5,
            label="Least squares")
    ax.plot(trends.rlm.fitted.index, trends.rlm.fitted.to_numpy(), "r-", linewidth=1.5,
            label=f"Robust ({trends.rlm.norm})")

    ax.set_xlabel("Date", fontsize=11)
    ax.set_ylabel(ylabel, fontsize=11)
    ax.set_title(title or "Long-Term Trend", fontsize=12, fontweight="bold")

    stats_text = (
        f"OLS slope    = {trends.ols.slope:+.5f}/yr\n"
        f"Robust slope = {trends.rlm.slope:+.5f}/yr"
    )
    ax.annotate(
        stats_text,
        xy=(0.02, 0.98),
        xycoords="axes fraction",
        fontsize=9,
        ha="left",
        va="top",
        family="monospace",
        bbox=dict(boxstyle="round", facecolor="white", alpha=0.9),
    )

    ax.legend(loc="lower right", fontsize=9)
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches="tight")

    return fig


def plot_residuals(
    residuals: pd.Series,
    smooth: Optional[pd.Series] = None,
    ylabel: str = "Residual",
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    figsize: tuple = (12, 4.5),
) -> plt.Figure:
    """Residual series over time, optionally with a smooth through it."""
    apply_eda_style()

    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(residuals.index, residuals.to_numpy(), ".", markersize=1.5, color="steelblue", alpha=0.4)
    if smooth is not None:
        ax.plot(smooth.index, smooth.to_numpy(), "r-", linewidth=1.5, label="Loess")
        ax.legend(loc="upper right", fontsize=9)
    ax.axhline(0, color="black", linewidth=0.8, linestyle="--")

    ax.set_xlabel("Date", fontsize=11)
    ax.set_ylabel(ylabel, fontsize=11)
    ax.set_title(title or "Residuals", fontsize=12, fontweight="bold")
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches="tight")

    return fig


def plot_residual_surface(
    surface: "ResidualSurface",
    levels: int = 15,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    figsize: tuple = (10, 7),
) -> plt.Figure:
    """
    Filled contours of the smoothed residual surface.

    Day of year runs along x and year along y. The colour scale is
    centred on zero.
    """
    apply_eda_style()

    fig, ax = plt.subplots(figsize=figsize)

    limit = max(abs(surface.z_min), abs(surface.z_max)) or 1.0
    contour_levels = np.linspace(-limit, limit, levels)

    filled = ax.contourf(surface.doy, surface.years, surface.z, levels=contour_levels, cmap="RdBu")
    lines = ax.contour(surface.doy, surface.years, surface.z, levels=contour_levels,
                       colors="k", linewidths=0.4)
    ax.clabel(lines, inline=True, fontsize=7, fmt="%.2f")
    fig.colorbar(filled, ax=ax, label="Smoothed residual")

    month_starts = [1, 32, 60, 91, 121, 152, 182, 213, 244, 274, 305, 335]
    ax.set_xticks(month_starts)
    ax.set_xticklabels(["J", "F", "M", "A", "M", "J", "J", "A", "S", "O", "N", "D"])
    ax.set_xlabel("Day of Year", fontsize=11)
    ax.set_ylabel("Year", fontsize=11)
    ax.grid(False)
    ax.set_title(
        title or f"Residual Surface (loess span = {surface.span:g}, degree {surface.degree})",
        fontsize=12,
        fontweight="bold",
    )
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches="tight")

    return fig
