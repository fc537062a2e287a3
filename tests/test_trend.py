"""Tests for loess and linear trend fitting."""

import numpy as np
import pandas as pd
import pytest

from hydroeda.core import TrendMethod
from hydroeda.reexpress import tukey_power
from hydroeda.trend import decimal_year, fit_trends, linear_fit, loess_fit, residuals


class TestDecimalYear:
    def test_year_start(self):
        assert decimal_year(pd.to_datetime(["2001-01-01"]))[0] == pytest.approx(2001.0)

    def test_mid_year_leap(self):
        # day 184 of a leap year is 183 days in
        assert decimal_year(pd.to_datetime(["2000-07-02"]))[0] == pytest.approx(2000 + 183 / 366)

    def test_monotonic(self):
        t = decimal_year(pd.date_range("1999-12-25", "2000-01-10"))
        assert np.all(np.diff(t) > 0)


class TestLoess:
    def test_recovers_smooth_signal(self):
        rng = np.random.default_rng(1)
        x = np.linspace(0, 2 * np.pi, 800)
        y = np.sin(x) + rng.normal(0, 0.1, x.size)
        fit = loess_fit(x, y, span=0.2)
        assert fit.shape == x.shape
        interior = slice(50, -50)
        assert np.max(np.abs(fit[interior] - np.sin(x[interior]))) < 0.12

    def test_preserves_input_order(self):
        x = np.array([3.0, 1.0, 2.0, 5.0, 4.0, 6.0, 0.0, 7.0])
        fit = loess_fit(x, 2 * x, span=1.0)
        assert fit == pytest.approx(2 * x, abs=1e-8)

    @pytest.mark.parametrize("span", [0.0, -0.1, 1.5])
    def test_invalid_span(self, span):
        with pytest.raises(ValueError):
            loess_fit(np.arange(10.0), np.arange(10.0), span=span)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            loess_fit(np.arange(10.0), np.arange(9.0))


class TestLinearFit:
    def test_ols_exact_line(self):
        x = np.arange(20.0)
        trend = linear_fit(x, 1.5 + 0.25 * x)
        assert trend.method is TrendMethod.OLS
        assert trend.intercept == pytest.approx(1.5)
        assert trend.slope == pytest.approx(0.25)
        assert np.allclose(trend.residuals, 0.0)

    def test_robust_resists_outliers(self):
        rng = np.random.default_rng(3)
        x = np.linspace(0, 10, 200)
        y = 1.0 + 0.5 * x + rng.normal(0, 0.2, x.size)
        y[-15:] += 25.0
        ols = linear_fit(x, y)
        rlm = linear_fit(x, y, robust=True)
        assert rlm.method is TrendMethod.RLM
        assert abs(rlm.slope - 0.5) < abs(ols.slope - 0.5)
        assert rlm.slope == pytest.approx(0.5, abs=0.1)

    def test_bisquare_norm(self):
        rng = np.random.default_rng(5)
        x = np.linspace(0, 10, 100)
        y = 2.0 - 0.3 * x + rng.normal(0, 0.1, x.size)
        y[::10] += 5.0
        rlm = linear_fit(x, y, robust=True, norm="bisquare")
        assert rlm.norm == "bisquare"
        assert rlm.slope == pytest.approx(-0.3, abs=0.05)

    def test_unknown_norm(self):
        with pytest.raises(ValueError):
            linear_fit(np.arange(5.0), np.arange(5.0), robust=True, norm="cauchy")

    def test_change_per_decade_and_predict(self):
        x = np.arange(10.0)
        trend = linear_fit(x, 3.0 + 0.1 * x)
        assert trend.change_per_decade() == pytest.approx(1.0)
        assert trend.predict([20.0])[0] == pytest.approx(5.0)


class TestFitTrends:
    def test_recovers_synthetic_slope(self, synthetic_daily):
        root = tukey_power(synthetic_daily["discharge"], 0.2)
        trends = fit_trends(root, span=0.25)
        assert trends.ols.slope == pytest.approx(0.05, abs=0.02)
        assert trends.rlm.slope == pytest.approx(0.05, abs=0.02)
        assert trends.loess.index.equals(root.index)
        assert trends.span == 0.25

    def test_residuals_align(self, synthetic_daily):
        root = tukey_power(synthetic_daily["discharge"], 0.2)
        trends = fit_trends(root)
        resid = residuals(root, trends.rlm.fitted)
        assert len(resid) == len(root)
        assert resid.name == "residual"
        assert resid.median() == pytest.approx(0.0, abs=0.05)
