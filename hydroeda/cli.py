"""
hydroeda command-line interface.

``hydroeda download`` fetches and caches the daily series once;
``hydroeda report`` runs the analysis on the cached snapshot.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from hydroeda.config import (
    DEFAULT_END_DATE,
    DEFAULT_SITE_NO,
    DEFAULT_START_DATE,
    ROBUST_NORMS,
    AnalysisConfig,
    DownloadConfig,
)
from hydroeda.snapshot import SnapshotFormatError, SnapshotNotFoundError, load_snapshot
from hydroeda.usgs import NoDataError

logger = logging.getLogger(__name__)


def _snapshot_for(site: str, snapshot: str, data_dir: str) -> Path:
    if snapshot:
        return Path(snapshot)
    return DownloadConfig(site_no=site, data_dir=data_dir).snapshot_path


def _load(path: Path):
    try:
        return load_snapshot(path)
    except (SnapshotNotFoundError, SnapshotFormatError) as e:
        raise click.ClickException(str(e))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages.")
def cli(verbose: bool) -> None:
    """hydroeda - Exploratory analysis of daily streamflow."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--site", default=DEFAULT_SITE_NO, show_default=True, help="USGS site number.")
@click.option("--start", "start_date", default=DEFAULT_START_DATE, show_default=True)
@click.option("--end", "end_date", default=DEFAULT_END_DATE, show_default=True)
@click.option("--data-dir", type=click.Path(file_okay=False), default=None,
              help="Snapshot directory (default: $HYDROEDA_DATA_DIR or ./data).")
@click.option("--output", "snapshot", type=click.Path(dir_okay=False), default=None,
              help="Explicit snapshot file.")
@click.option("--timeout", default=60, show_default=True, help="HTTP timeout in seconds.")
def download(site: str, start_date: str, end_date: str, data_dir: str, snapshot: str, timeout: int) -> None:
    """Download daily discharge and write the cached snapshot."""
    import requests

    from hydroeda.snapshot import save_snapshot
    from hydroeda.usgs import USGSgage

    try:
        cfg = DownloadConfig(
            site_no=site,
            start_date=start_date,
            end_date=end_date,
            data_dir=data_dir,
            timeout_seconds=timeout,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    gage = USGSgage(cfg.site_no, timeout=cfg.timeout_seconds)
    try:
        daily = gage.download_daily_flow(
            start_date=cfg.start_date,
            end_date=cfg.end_date,
            parameter_cd=cfg.parameter_cd,
            stat_cd=cfg.stat_cd,
        )
    except NoDataError as e:
        raise click.ClickException(str(e))
    except requests.RequestException as e:
        logger.debug("Download failed", exc_info=True)
        raise click.ClickException(f"Download from USGS failed: {e}")

    path = save_snapshot(daily, Path(snapshot) if snapshot else cfg.snapshot_path)
    click.echo(f"Saved {len(daily):,} daily values for USGS {cfg.site_no} to {path}")
    if gage.site_name:
        click.echo(f"Site name: {gage.site_name}")


def _parse_power(ctx, param, value):
    if value is None or value.lower() == "auto":
        return None
    try:
        if "/" in value:
            num, den = value.split("/", 1)
            return float(num) / float(den)
        return float(value)
    except (ValueError, ZeroDivisionError):
        raise click.BadParameter(f"expected a number, a fraction like 1/5, or 'auto', got {value!r}")


@cli.command()
@click.option("--site", default=DEFAULT_SITE_NO, show_default=True, help="USGS site number.")
@click.option("--snapshot", type=click.Path(dir_okay=False), default=None, help="Snapshot file.")
@click.option("--data-dir", type=click.Path(file_okay=False), default=None)
@click.option("--output-dir", type=click.Path(file_okay=False), default="./output", show_default=True)
@click.option("--power", callback=_parse_power, default="1/5", show_default=True,
              help="Re-expression power, e.g. 1/5, 0, or 'auto'.")
@click.option("--trend-span", default=0.25, show_default=True)
@click.option("--seasonal-span", default=0.3, show_default=True)
@click.option("--surface-span", default=0.2, show_default=True)
@click.option("--surface-degree", type=click.IntRange(1, 2), default=2, show_default=True)
@click.option("--robust-norm", type=click.Choice(ROBUST_NORMS), default="huber", show_default=True)
@click.option("--site-name", default=None, help="Station name for titles (looked up when omitted).")
def report(
    site: str,
    snapshot: str,
    data_dir: str,
    output_dir: str,
    power,
    trend_span: float,
    seasonal_span: float,
    surface_span: float,
    surface_degree: int,
    robust_norm: str,
    site_name: str,
) -> None:
    """Run the analysis on the cached snapshot and write the report."""
    from hydroeda.analysis import DischargeAnalysis
    from hydroeda.report import ExplorationReport
    from hydroeda.usgs import USGSgage

    try:
        cfg = AnalysisConfig(
            power=power,
            trend_span=trend_span,
            robust_norm=robust_norm,
            seasonal_span=seasonal_span,
            surface_span=surface_span,
            surface_degree=surface_degree,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    daily = _load(_snapshot_for(site, snapshot, data_dir))

    site_no = str(site).zfill(8)
    if site_name is None:
        gage = USGSgage(site_no)
        gage.fetch_site_info()
        site_name = gage.site_name

    try:
        analysis = DischargeAnalysis(daily, cfg)
        analysis.run()
    except ValueError as e:
        raise click.ClickException(str(e))

    exploration = ExplorationReport(analysis, site_no=site_no, site_name=site_name)
    exploration.generate_all_figures(output_dir)
    for line in exploration.summary_lines():
        click.echo(line)

    report_path = os.path.join(output_dir, "exploration_report.md")
    exploration.save_report(report_path)
    click.echo(f"Report saved to: {report_path}")


@cli.command()
@click.option("--site", default=DEFAULT_SITE_NO, show_default=True, help="USGS site number.")
@click.option("--snapshot", type=click.Path(dir_okay=False), default=None, help="Snapshot file.")
@click.option("--data-dir", type=click.Path(file_okay=False), default=None)
def ladder(site: str, snapshot: str, data_dir: str) -> None:
    """Print skewness at each rung of the ladder of powers."""
    from hydroeda.reexpress import best_power, power_ladder

    daily = _load(_snapshot_for(site, snapshot, data_dir))
    values = daily["discharge"].to_numpy()
    table = power_ladder(values, AnalysisConfig().ladder)

    click.echo(f"{'power':>8} {'n':>8} {'skewness':>10} {'bowley':>8}")
    for _, row in table.iterrows():
        click.echo(f"{row['power']:>8.3f} {int(row['n']):>8d} {row['skewness']:>10.3f} {row['bowley']:>8.3f}")
    click.echo(f"Most symmetric power: {best_power(values, AnalysisConfig().ladder):g}")


if __name__ == "__main__":
    cli()
