"""
Script to download daily discharge for one USGS site and cache it.

Run once; the analysis script reads the snapshot written here.
"""

import os

from hydroeda.config import DownloadConfig
from hydroeda.snapshot import save_snapshot
from hydroeda.usgs import USGSgage

# Gardiner, ME, 1976-2024
cfg = DownloadConfig(site_no="01049500", start_date="1976-01-01", end_date="2024-12-31")

gage = USGSgage(cfg.site_no)

print(f"Downloading daily flow data for USGS {cfg.site_no}...")
daily_data = gage.download_daily_flow(start_date=cfg.start_date, end_date=cfg.end_date)

print(f"Downloaded {len(daily_data)} days of data")
print(f"Site name: {gage.site_name}")

path = save_snapshot(daily_data, cfg.snapshot_path)
print(f"Saved snapshot to: {os.path.abspath(path)}")
