"""
hydroeda.report - Narrative report of the exploratory analysis
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Dict, List, Optional

import matplotlib.pyplot as plt

from .analysis import DischargeAnalysis
from .core import AnalysisResults
from .hydrograph import Hydrograph
from .plots import (
    plot_distribution,
    plot_power_ladder,
    plot_residual_surface,
    plot_residuals,
    plot_trend,
)
from .reexpress import inverse_power

logger = logging.getLogger(__name__)

FIGURE_CAPTIONS = {
    "daily_timeseries": "Mean daily streamflow",
    "raw_distribution": "Distribution of raw discharge",
    "power_ladder": "Ladder of powers",
    "reexpressed_distribution": "Distribution of re-expressed discharge",
    "trend": "Long-term trend: loess, least squares and robust lines",
    "residuals": "Residuals from the robust line",
    "monthly_residuals": "Residuals by month",
    "seasonal_cycle": "Seasonal cycle of residuals",
    "remainder": "Remainder after removing the seasonal cycle",
    "residual_surface": "Smoothed residual surface (day of year x year)",
}


class ExplorationReport:
    """Generate figures and a Markdown narrative for a discharge analysis."""

    def __init__(
        self,
        analysis: DischargeAnalysis,
        site_no: Optional[str] = None,
        site_name: Optional[str] = None,
    ):
        self._analysis = analysis
        self._site_no = site_no
        self._site_name = site_name
        self._figures: Dict[str, str] = {}

    @property
    def figures(self) -> Dict[str, str]:
        return self._figures.copy()

    @property
    def results(self) -> AnalysisResults:
        if self._analysis.results is None:
            logger.info("Running analysis before reporting")
            self._analysis.run()
        return self._analysis.results

    def _power_label(self) -> str:
        p = self.results.power
        if p == 0:
            return "log10"
        inv = 1.0 / p
        if p > 0 and abs(inv) > 1 and float(inv).is_integer():
            return f"1/{int(inv)}"
        return f"{p:g}"

    def generate_all_figures(self, output_dir: str = ".") -> Dict[str, str]:
        """Generate one figure per analysis stage."""
        os.makedirs(output_dir, exist_ok=True)

        r = self.results
        site_name = self._site_name
        site_no = self._site_no
        power_label = self._power_label()

        def _path(n: int, key: str) -> str:
            return os.path.join(output_dir, f"fig{n:02d}_{key}.png")

        raw = self._analysis.discharge

        path = _path(1, "daily_timeseries")
        Hydrograph.plot_daily_timeseries(raw.to_frame("discharge"), site_name, site_no, save_path=path)
        self._figures["daily_timeseries"] = path

        path = _path(2, "raw_distribution")
        plot_distribution(raw, title="Raw Discharge", save_path=path)
        self._figures["raw_distribution"] = path

        path = _path(3, "power_ladder")
        plot_power_ladder(raw, self._analysis.config.ladder, chosen=r.power, save_path=path)
        self._figures["power_ladder"] = path

        path = _path(4, "reexpressed_distribution")
        plot_distribution(
            r.reexpressed,
            label=f"Discharge^({power_label})",
            title=f"Re-expressed Discharge (p = {power_label})",
            save_path=path,
        )
        self._figures["reexpressed_distribution"] = path

        path = _path(5, "trend")
        plot_trend(r.reexpressed, r.trends, ylabel=f"Discharge^({power_label})", save_path=path)
        self._figures["trend"] = path

        path = _path(6, "residuals")
        departure = (r.trends.loess - r.trends.rlm.fitted).rename("loess_departure")
        plot_residuals(r.residuals, smooth=departure, title="Residuals from Robust Line", save_path=path)
        self._figures["residuals"] = path

        path = _path(7, "monthly_residuals")
        Hydrograph.plot_monthly_boxplot(r.residuals, site_name=site_name, site_no=site_no, save_path=path)
        self._figures["monthly_residuals"] = path

        path = _path(8, "seasonal_cycle")
        Hydrograph.plot_seasonal_cycle(
            r.residuals, r.seasonal.profile, site_name=site_name, site_no=site_no, save_path=path
        )
        self._figures["seasonal_cycle"] = path

        path = _path(9, "remainder")
        plot_residuals(r.seasonal.remainder, title="Remainder after Seasonal Cycle", save_path=path)
        self._figures["remainder"] = path

        path = _path(10, "residual_surface")
        plot_residual_surface(r.surface, save_path=path)
        self._figures["residual_surface"] = path

        plt.close("all")
        logger.info("Wrote %d figures to %s", len(self._figures), output_dir)
        return self._figures

    def summary_lines(self) -> List[str]:
        """Key statistics, one per line, for printing at the console."""
        r = self.results
        raw = self._analysis.discharge
        rlm, ols = r.trends.rlm, r.trends.ols
        return [
            f"Observations: {len(raw):,} days ({raw.index.min():%Y-%m-%d} to {raw.index.max():%Y-%m-%d})",
            f"Raw skewness: {r.skew.skewness:.3f} (Bowley {r.skew.bowley:.3f})",
            f"Most symmetric ladder power: {r.skew.suggested_power:g}",
            f"Re-expression power used: {self._power_label()}",
            f"Re-expressed skewness: {r.reexpressed_skew:.3f}",
            f"OLS slope: {ols.slope:+.6f} per year ({ols.change_per_decade():+.4f} per decade)",
            f"Robust slope: {rlm.slope:+.6f} per year ({rlm.change_per_decade():+.4f} per decade)",
            f"Seasonal amplitude: {r.seasonal.amplitude:.4f} "
            f"(peak day {r.seasonal.peak_doy}, trough day {r.seasonal.trough_doy})",
            f"Residual surface range: {r.surface.z_min:.4f} to {r.surface.z_max:.4f}",
        ]

    def generate_report_text(self) -> str:
        """Generate the narrative report in Markdown."""
        r = self.results
        raw = self._analysis.discharge
        cfg = self._analysis.config
        rlm, ols = r.trends.rlm, r.trends.ols
        power_label = self._power_label()

        heading = "Exploratory Analysis of Daily Discharge"
        if self._site_no:
            site = f"USGS {self._site_no}"
            if self._site_name:
                site += f" - {self._site_name}"
        else:
            site = "Unnamed site"

        start_year, end_year = raw.index.min().year, raw.index.max().year
        t_start, t_end = float(start_year), float(end_year) + 1.0
        rlm_start = float(inverse_power(rlm.predict([t_start]), r.power)[0])
        rlm_end = float(inverse_power(rlm.predict([t_end]), r.power)[0])

        report = f"""# {heading}

## {site}

**Report Date:** {datetime.now().strftime('%B %d, %Y')}

---

## 1. Data

| Parameter | Value |
|-----------|-------|
| Period | {raw.index.min():%Y-%m-%d} to {raw.index.max():%Y-%m-%d} |
| Daily values | {len(raw):,} |
| Minimum (cfs) | {raw.min():,.1f} |
| Median (cfs) | {raw.median():,.1f} |
| Maximum (cfs) | {raw.max():,.1f} |

## 2. Skew and Re-expression

The raw daily discharge has a skewness of {r.skew.skewness:.3f} and a quartile (Bowley)
skewness of {r.skew.bowley:.3f}. Each rung of the ladder of powers was examined:

| Power | n | Skewness | Bowley |
|-------|---|----------|--------|
"""
        for _, row in r.skew.ladder.iterrows():
            report += f"| {row['power']:g} | {int(row['n']):,} | {row['skewness']:.3f} | {row['bowley']:.3f} |\n"

        report += f"""
The most symmetric rung is p = {r.skew.suggested_power:g}. The series was re-expressed with
p = {power_label}, giving a skewness of {r.reexpressed_skew:.3f}.

## 3. Long-Term Trend

| Fit | Intercept | Slope (per yr) | Change per decade | Scale |
|-----|-----------|----------------|-------------------|-------|
| Least squares | {ols.intercept:.4f} | {ols.slope:+.6f} | {ols.change_per_decade():+.4f} | {ols.scale:.4f} |
| Robust ({rlm.norm}) | {rlm.intercept:.4f} | {rlm.slope:+.6f} | {rlm.change_per_decade():+.4f} | {rlm.scale:.4f} |

A loess curve with span {r.trends.span:g} traces departures from the straight lines.
On the original scale, the robust line moves from about {rlm_start:,.0f} cfs at the start of
{start_year} to about {rlm_end:,.0f} cfs at the end of {end_year}.

## 4. Residuals by Month

Residuals are taken from the robust line.

| Month | n | Median | Q25 | Q75 | IQR |
|-------|---|--------|-----|-----|-----|
"""
        for _, row in r.monthly_summary.iterrows():
            report += (
                f"| {row['month']} | {int(row['count']):,} | {row['median']:+.4f} | "
                f"{row['q25']:+.4f} | {row['q75']:+.4f} | {row['iqr']:.4f} |\n"
            )

        report += f"""
## 5. Seasonal Cycle

A loess of residual on day of year (span {r.seasonal.span:g}) has an amplitude of
{r.seasonal.amplitude:.4f}, peaking on day {r.seasonal.peak_doy} and bottoming out on day
{r.seasonal.trough_doy}. The remainder after removing this cycle has a standard deviation of
{r.seasonal.remainder.std():.4f}, against {r.residuals.std():.4f} for the residuals.

## 6. Residual Surface

Residuals were smoothed over day of year and year with a degree-{r.surface.degree} loess
(span {r.surface.span:g}) on a {len(r.surface.years)} x {len(r.surface.doy)} grid. Smoothed values
range from {r.surface.z_min:.4f} to {r.surface.z_max:.4f}.

---

## Appendix: Parameters

| Parameter | Value |
|-----------|-------|
| Re-expression power | {power_label} |
| Trend loess span | {cfg.trend_span:g} |
| Robust norm | {cfg.robust_norm} |
| Seasonal loess span | {cfg.seasonal_span:g} |
| Surface loess span | {cfg.surface_span:g} |
| Surface degree | {cfg.surface_degree} |
"""

        if self._figures:
            report += "\n## Figures\n\n"
            for i, (key, path) in enumerate(self._figures.items(), start=1):
                caption = FIGURE_CAPTIONS.get(key, key)
                report += f"**Figure {i}.** {caption}\n\n![{caption}]({os.path.basename(path)})\n\n"

        return report

    def save_report(self, output_path: str):
        """Save report to markdown file."""
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(self.generate_report_text())
        logger.info("Report saved to %s", output_path)
