"""
Script to run the exploratory analysis on a cached snapshot.

Loads the snapshot written by download_daily_flow.py, runs every stage
and writes the figures and narrative report.
"""

import os

import matplotlib

from hydroeda import AnalysisConfig, DischargeAnalysis, ExplorationReport
from hydroeda.config import DownloadConfig
from hydroeda.snapshot import load_snapshot

matplotlib.use("Agg")  # Use non-interactive backend for saving plots

output_dir = os.path.join("output", "sta_01049500")
os.makedirs(output_dir, exist_ok=True)

site_no = "01049500"
daily_data = load_snapshot(DownloadConfig(site_no=site_no).snapshot_path)

config = AnalysisConfig(power=1 / 5, trend_span=0.25, seasonal_span=0.3, surface_span=0.2)
analysis = DischargeAnalysis(daily_data, config)

print("Running analysis...")
analysis.run()

report = ExplorationReport(analysis, site_no=site_no)
figures = report.generate_all_figures(output_dir)
for line in report.summary_lines():
    print(f"  {line}")

report_path = os.path.join(output_dir, "exploration_report.md")
report.save_report(report_path)

print("\nFiles saved to:", output_dir)
for path in figures.values():
    print(f"- {os.path.basename(path)}")
print("- exploration_report.md")
