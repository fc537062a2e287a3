"""
hydroeda.usgs - USGS daily discharge retrieval
"""

from __future__ import annotations

import logging
from io import StringIO
from typing import ClassVar, List, Optional

import pandas as pd
import requests

from .config import DISCHARGE_PARAMETER_CD, MEAN_STAT_CD

logger = logging.getLogger(__name__)


class NoDataError(ValueError):
    """Raised when the data service returns no usable rows for a site."""


def _rdb_data_lines(text: str) -> List[str]:
    """Drop comment and blank lines from an RDB response."""
    return [l for l in text.split("\n") if not l.startswith("#") and l.strip()]


class USGSgage:
    """Class to handle USGS gage data retrieval and storage."""

    BASE_URL_DAILY: ClassVar[str] = "https://waterservices.usgs.gov/nwis/dv/"
    BASE_URL_SITE: ClassVar[str] = "https://waterservices.usgs.gov/nwis/site/"

    def __init__(self, site_no: str, timeout: int = 60):
        self._site_no = str(site_no).zfill(8)
        self._timeout = timeout
        self._site_name: Optional[str] = None
        self._drainage_area: Optional[float] = None
        self._daily_data: Optional[pd.DataFrame] = None

    @property
    def site_no(self) -> str:
        return self._site_no

    @property
    def site_name(self) -> Optional[str]:
        return self._site_name

    @site_name.setter
    def site_name(self, value: str):
        self._site_name = value

    @property
    def drainage_area(self) -> Optional[float]:
        return self._drainage_area

    @property
    def daily_data(self) -> Optional[pd.DataFrame]:
        return self._daily_data

    @daily_data.setter
    def daily_data(self, value: pd.DataFrame):
        self._daily_data = value

    def fetch_site_info(self) -> None:
        """Fetch site name and drainage area from the USGS site service.

        Metadata only decorates plot titles, so a failed lookup is logged
        and otherwise ignored.
        """
        params = {
            "format": "rdb",
            "sites": self._site_no,
            "siteOutput": "expanded",
        }

        try:
            response = requests.get(self.BASE_URL_SITE, params=params, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.debug("Site service lookup failed for %s: %s", self._site_no, e)
            return

        data_lines = _rdb_data_lines(response.text)
        if len(data_lines) < 2:
            logger.debug("Site service returned no rows for %s", self._site_no)
            return

        df = pd.read_csv(StringIO("\n".join(data_lines)), sep="\t", skiprows=[1], dtype=str)
        if df.empty:
            return

        if self._site_name is None and "station_nm" in df.columns:
            self._site_name = df["station_nm"].iloc[0]

        if "drain_area_va" in df.columns:
            area = pd.to_numeric(df["drain_area_va"].iloc[0], errors="coerce")
            if pd.notna(area):
                self._drainage_area = float(area)

    def download_daily_flow(
        self,
        start_date: str = None,
        end_date: str = None,
        parameter_cd: str = DISCHARGE_PARAMETER_CD,
        stat_cd: str = MEAN_STAT_CD,
    ) -> pd.DataFrame:
        """Download mean daily discharge from the NWIS daily-values service.

        Parameters
        ----------
        start_date, end_date : str, optional
            Inclusive range, ``YYYY-MM-DD``. Omitted bounds request the full
            period of record.
        parameter_cd : str
            NWIS parameter code.
        stat_cd : str
            NWIS statistic code.

        Returns
        -------
        pd.DataFrame
            Indexed by ``date`` with a single ``discharge`` column (cfs).

        Raises
        ------
        NoDataError
            If the service returns no daily values for the site.
        requests.HTTPError
            On a non-2xx response.
        """
        params = {
            "format": "rdb",
            "sites": self._site_no,
            "parameterCd": parameter_cd,
            "statCd": stat_cd,
        }
        if start_date:
            params["startDT"] = start_date
        if end_date:
            params["endDT"] = end_date

        logger.info(
            "Requesting daily values for USGS %s (%s to %s)",
            self._site_no,
            start_date or "start of record",
            end_date or "end of record",
        )
        response = requests.get(self.BASE_URL_DAILY, params=params, timeout=self._timeout)
        response.raise_for_status()

        lines = response.text.split("\n")
        data_lines = _rdb_data_lines(response.text)

        if len(data_lines) < 2:
            raise NoDataError(f"No daily data found for site {self._site_no}")

        header_idx = 0
        for i, line in enumerate(data_lines):
            if "datetime" in line.lower():
                header_idx = i
                break

        df = pd.read_csv(StringIO("\n".join(data_lines[header_idx:])), sep="\t", skiprows=[1])

        for line in lines:
            # "#    USGS 01049500 STATION NAME"
            if line.startswith("#") and f"USGS {self._site_no}" in line:
                name_start = line.find(self._site_no) + len(self._site_no)
                name = line[name_start:].strip()
                if name:
                    self._site_name = name
                break

        date_cols = [c for c in df.columns if "datetime" in c.lower()]
        flow_cols = [
            c for c in df.columns if parameter_cd in c and not c.lower().endswith("_cd")
        ]

        if not date_cols or not flow_cols:
            raise NoDataError(
                f"Discharge column for parameter {parameter_cd} not found for site {self._site_no}"
            )

        df["date"] = pd.to_datetime(df[date_cols[0]])
        df["discharge"] = pd.to_numeric(df[flow_cols[0]], errors="coerce")
        n_rows = len(df)
        df = df[["date", "discharge"]].dropna()
        if len(df) < n_rows:
            logger.info("Dropped %d days without a numeric discharge value", n_rows - len(df))
        if df.empty:
            raise NoDataError(f"No numeric discharge values for site {self._site_no}")

        df = df.set_index("date").sort_index()

        self._daily_data = df
        logger.info("Downloaded %d daily values for USGS %s", len(df), self._site_no)
        return df

    def __repr__(self) -> str:
        return f"USGSgage(site_no='{self._site_no}', name='{self._site_name}')"
