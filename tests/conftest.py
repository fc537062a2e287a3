"""Shared fixtures: synthetic daily discharge with a known trend and season."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

# Fifth-root scale parameters of the synthetic series
ROOT_BASE = 4.0
ROOT_SLOPE = 0.05  # per year
ROOT_AMPLITUDE = 0.6
ROOT_NOISE = 0.15
PEAK_DOY = 171


def make_daily(start="2000-01-01", end="2005-12-31", seed=42) -> pd.DataFrame:
    """Daily discharge whose fifth root is linear trend + sinusoid + noise."""
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start, end, freq="D", name="date")
    t = (dates - dates[0]).days.to_numpy() / 365.25
    doy = dates.dayofyear.to_numpy()
    root = (
        ROOT_BASE
        + ROOT_SLOPE * t
        + ROOT_AMPLITUDE * np.sin(2 * np.pi * (doy - (PEAK_DOY - 91.3)) / 365.25)
        + rng.normal(0, ROOT_NOISE, len(dates))
    )
    discharge = np.clip(root, 0.5, None) ** 5
    return pd.DataFrame({"discharge": discharge}, index=dates)


@pytest.fixture
def synthetic_daily():
    return make_daily()


@pytest.fixture
def short_daily():
    """Three years, enough for every stage and quick to plot."""
    return make_daily("2010-01-01", "2012-12-31", seed=7)


@pytest.fixture
def zero_flow_daily():
    """Three years with every 50th day at zero flow."""
    df = make_daily("2010-01-01", "2012-12-31", seed=7)
    df.iloc[::50, 0] = 0.0
    return df


@pytest.fixture
def snapshot_file(tmp_path, short_daily):
    from hydroeda.snapshot import save_snapshot

    return save_snapshot(short_daily, tmp_path / "discharge_01049500.csv")


SAMPLE_RDB = """\
# ---------------------------------- WARNING ----------------------------------------
# Some of the data that you have obtained from this U.S. Geological Survey database
# may not have received Director's approval.
#
# Data for the following 1 site(s) are contained in this file
#    USGS 01049500 COBBOSSEECONTEE STREAM AT GARDINER, MAINE
# -----------------------------------------------------------------------------------
#
# Data provided for site 01049500
#            TS   parameter     statistic     Description
#        155045       00060     00003     Discharge, cubic feet per second (Mean)
#
agency_cd\tsite_no\tdatetime\t155045_00060_00003\t155045_00060_00003_cd
5s\t15s\t20d\t14n\t10s
USGS\t01049500\t1976-01-01\t450\tA
USGS\t01049500\t1976-01-02\t430\tA
USGS\t01049500\t1976-01-03\tIce\tA:e
USGS\t01049500\t1976-01-04\t410\tA
"""

EMPTY_RDB = """\
# No sites found matching all criteria
"""


@pytest.fixture
def sample_rdb():
    return SAMPLE_RDB


@pytest.fixture
def empty_rdb():
    return EMPTY_RDB
