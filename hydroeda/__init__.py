"""
hydroeda - Exploratory time-series analysis of daily river discharge

Includes:
- USGS daily discharge download and a cached CSV snapshot
- Skew assessment and ladder-of-powers re-expression
- Loess, least-squares and robust linear trends
- Residual extraction, monthly aggregation and seasonal cycle
- Day-of-year x year loess surface of residuals
- Narrative report generation
"""

from .analysis import AnalysisStageError, DischargeAnalysis
from .config import AnalysisConfig, DownloadConfig
from .core import (
    AnalysisResults,
    LinearTrend,
    ResidualSurface,
    SeasonalResults,
    SkewSummary,
    TrendMethod,
    TrendResults,
)
from .hydrograph import Hydrograph
from .reexpress import (
    best_power,
    bowley_skewness,
    box_cox,
    inverse_power,
    power_ladder,
    skewness,
    tukey_power,
)
from .report import ExplorationReport
from .seasonal import (
    loess_surface,
    monthly_means,
    monthly_summary,
    remove_seasonal,
    residual_surface,
    seasonal_cycle,
)
from .snapshot import (
    SnapshotFormatError,
    SnapshotNotFoundError,
    default_snapshot_path,
    fetch_snapshot,
    load_snapshot,
    save_snapshot,
)
from .trend import decimal_year, fit_trends, linear_fit, loess_fit, residuals
from .usgs import NoDataError, USGSgage


def explore_gage(
    site_no: str,
    start_date: str = None,
    end_date: str = None,
    config: AnalysisConfig = None,
    snapshot_path: str = None,
    output_dir: str = "./output",
    refresh: bool = False,
) -> dict:
    """
    Download (once), analyse and report on a USGS gage.

    Parameters
    ----------
    site_no : str
        USGS site number
    start_date, end_date : str, optional
        Date range for the download, ``YYYY-MM-DD``
    config : AnalysisConfig, optional
        Analysis parameters
    snapshot_path : str, optional
        Cached snapshot location
    output_dir : str
        Output directory for figures and the report
    refresh : bool
        Download again even if the snapshot exists
    """
    import os

    os.makedirs(output_dir, exist_ok=True)

    daily = fetch_snapshot(site_no, start_date, end_date, path=snapshot_path, refresh=refresh)

    gage = USGSgage(site_no)
    gage.fetch_site_info()

    analysis = DischargeAnalysis(daily, config)
    results = analysis.run()

    report = ExplorationReport(analysis, site_no=gage.site_no, site_name=gage.site_name)
    figures = report.generate_all_figures(output_dir)

    report_path = os.path.join(output_dir, "exploration_report.md")
    report.save_report(report_path)

    return {
        "gage": gage,
        "analysis": analysis,
        "results": results,
        "figures": figures,
        "report_path": report_path,
    }


__version__ = "0.1.0"
__author__ = "hydroeda"

__all__ = [
    # Configuration
    "AnalysisConfig",
    "DownloadConfig",
    # Data retrieval and snapshot
    "USGSgage",
    "NoDataError",
    "default_snapshot_path",
    "fetch_snapshot",
    "load_snapshot",
    "save_snapshot",
    "SnapshotFormatError",
    "SnapshotNotFoundError",
    # Re-expression
    "skewness",
    "bowley_skewness",
    "tukey_power",
    "inverse_power",
    "box_cox",
    "power_ladder",
    "best_power",
    # Trend
    "decimal_year",
    "loess_fit",
    "linear_fit",
    "fit_trends",
    "residuals",
    # Seasonal
    "monthly_summary",
    "monthly_means",
    "seasonal_cycle",
    "remove_seasonal",
    "loess_surface",
    "residual_surface",
    # Results
    "TrendMethod",
    "SkewSummary",
    "LinearTrend",
    "TrendResults",
    "SeasonalResults",
    "ResidualSurface",
    "AnalysisResults",
    # Pipeline and report
    "DischargeAnalysis",
    "AnalysisStageError",
    "Hydrograph",
    "ExplorationReport",
    # Convenience
    "explore_gage",
]
