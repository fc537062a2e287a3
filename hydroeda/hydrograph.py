"""
hydroeda.hydrograph - Calendar views of a daily series
"""

from __future__ import annotations

from typing import ClassVar, List, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.dates import DateFormatter

from .seasonal import MONTH_LABELS


class Hydrograph:
    """Time-series and month/day-of-year plots for daily discharge."""

    MONTH_STARTS: ClassVar[List[int]] = [1, 32, 60, 91, 121, 152, 182, 213, 244, 274, 305, 335]
    MONTH_LABELS: ClassVar[List[str]] = MONTH_LABELS

    @classmethod
    def _title(cls, label: str, site_name: str = None, site_no: str = None) -> str:
        if site_name and site_no:
            return f"{label}\nUSGS {site_no} - {site_name}"
        if site_no:
            return f"{label} - USGS {site_no}"
        return label

    @classmethod
    def plot_daily_timeseries(
        cls,
        daily_data: pd.DataFrame,
        site_name: str = None,
        site_no: str = None,
        save_path: str = None,
        figsize: Tuple[int, int] = (12, 5),
        color: str = "steelblue",
    ) -> plt.Figure:
        """Plot the raw daily discharge on a log axis."""
        fig, ax = plt.subplots(figsize=figsize)

        ax.plot(daily_data.index, daily_data["discharge"], color=color, linewidth=0.5, alpha=0.8)
        if (daily_data["discharge"] > 0).all():
            ax.set_yscale("log")
        ax.set_ylabel("Discharge (cfs)", fontsize=11)
        ax.set_xlabel("Date", fontsize=11)
        ax.set_title(cls._title("Mean Daily Streamflow", site_name, site_no), fontsize=12, fontweight="bold")

        ax.grid(True, which="both", alpha=0.3)
        ax.xaxis.set_major_formatter(DateFormatter("%Y"))

        start_yr = daily_data.index.min().year
        end_yr = daily_data.index.max().year
        ax.annotate(
            f"Period of Record: {start_yr}-{end_yr}",
            xy=(0.02, 0.98),
            xycoords="axes fraction",
            fontsize=9,
            ha="left",
            va="top",
            bbox=dict(boxstyle="round", facecolor="white", alpha=0.8),
        )

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches="tight")

        return fig

    @classmethod
    def plot_monthly_boxplot(
        cls,
        series: pd.Series,
        ylabel: str = "Residual",
        site_name: str = None,
        site_no: str = None,
        save_path: str = None,
        figsize: Tuple[int, int] = (10, 5),
    ) -> plt.Figure:
        """Box plot of ``series`` grouped by calendar month."""
        series = series.dropna()
        groups = [series[series.index.month == m].to_numpy() for m in range(1, 13)]
        present = [i for i, g in enumerate(groups) if g.size > 0]

        fig, ax = plt.subplots(figsize=figsize)
        ax.boxplot(
            [groups[i] for i in present],
            positions=[i + 1 for i in present],
            widths=0.6,
            showfliers=True,
            flierprops=dict(marker=".", markersize=2, alpha=0.4),
            medianprops=dict(color="darkblue", linewidth=1.5),
        )
        ax.axhline(0, color="grey", linewidth=0.8, linestyle="--")
        ax.set_xticks(range(1, 13))
        ax.set_xticklabels(cls.MONTH_LABELS)
        ax.set_xlim(0.5, 12.5)
        ax.set_ylabel(ylabel, fontsize=11)
        ax.set_xlabel("Month", fontsize=11)
        ax.set_title(cls._title("Residuals by Month", site_name, site_no), fontsize=12, fontweight="bold")
        ax.grid(True, axis="y", alpha=0.3)

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches="tight")

        return fig

    @classmethod
    def plot_seasonal_cycle(
        cls,
        residuals: pd.Series,
        profile: pd.Series,
        site_name: str = None,
        site_no: str = None,
        save_path: str = None,
        figsize: Tuple[int, int] = (10, 6),
    ) -> plt.Figure:
        """Residuals against day of year with the fitted seasonal cycle."""
        residuals = residuals.dropna()

        fig, ax = plt.subplots(figsize=figsize)
        ax.scatter(
            residuals.index.dayofyear,
            residuals.to_numpy(),
            s=2,
            alpha=0.15,
            color="steelblue",
            label="Daily residuals",
        )
        ax.plot(profile.index, profile.to_numpy(), "r-", linewidth=2, label="Loess seasonal cycle")
        ax.axhline(0, color="grey", linewidth=0.8, linestyle="--")

        ax.set_xticks(cls.MONTH_STARTS)
        ax.set_xticklabels(cls.MONTH_LABELS)
        ax.set_xlim(1, 366)
        ax.set_ylabel("Residual", fontsize=11)
        ax.set_xlabel("Day of Year", fontsize=11)
        ax.set_title(cls._title("Seasonal Cycle of Residuals", site_name, site_no), fontsize=12, fontweight="bold")
        ax.legend(loc="upper right", fontsize=9)
        ax.grid(True, alpha=0.3)

        amplitude = float(np.nanmax(profile) - np.nanmin(profile))
        ax.annotate(
            f"Amplitude: {amplitude:.3f}",
            xy=(0.02, 0.02),
            xycoords="axes fraction",
            fontsize=9,
            ha="left",
            va="bottom",
            bbox=dict(boxstyle="round", facecolor="white", alpha=0.8),
        )

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches="tight")

        return fig
