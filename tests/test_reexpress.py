"""Tests for skew assessment and power re-expression."""

import numpy as np
import pandas as pd
import pytest

from hydroeda.reexpress import (
    best_power,
    bowley_skewness,
    box_cox,
    inverse_power,
    power_ladder,
    skewness,
    tukey_power,
)


@pytest.fixture
def lognormal():
    rng = np.random.default_rng(0)
    return np.exp(rng.normal(3.0, 1.0, 20000))


class TestSkewness:
    def test_symmetric_near_zero(self):
        x = np.arange(-50, 51, dtype=float)
        assert skewness(x) == pytest.approx(0.0, abs=1e-12)
        assert bowley_skewness(x) == pytest.approx(0.0, abs=1e-12)

    def test_right_skewed_positive(self, lognormal):
        assert skewness(lognormal) > 1
        assert bowley_skewness(lognormal) > 0

    def test_constant_series(self):
        assert skewness(np.full(20, 5.0)) == 0.0
        assert bowley_skewness(np.full(20, 5.0)) == 0.0

    def test_ignores_nan(self):
        assert skewness([1.0, 2.0, 3.0, np.nan]) == pytest.approx(0.0)

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            skewness([])

    def test_bowley_bounded(self, lognormal):
        assert -1 <= bowley_skewness(lognormal ** 3) <= 1


class TestTukeyPower:
    def test_fifth_root(self):
        assert tukey_power(np.array([32.0, 1.0]), 0.2) == pytest.approx([2.0, 1.0])

    def test_log_rung(self):
        assert tukey_power(np.array([100.0]), 0) == pytest.approx([2.0])

    def test_negative_power_preserves_order(self):
        x = np.array([1.0, 2.0, 4.0])
        y = tukey_power(x, -1)
        assert np.all(np.diff(y) > 0)

    def test_series_keeps_index(self):
        s = pd.Series([1.0, 32.0], index=pd.date_range("2000-01-01", periods=2), name="q")
        out = tukey_power(s, 0.2)
        assert isinstance(out, pd.Series)
        assert out.index.equals(s.index)

    def test_zero_with_log_raises(self):
        with pytest.raises(ValueError):
            tukey_power(np.array([0.0, 1.0]), 0)

    def test_zero_allowed_for_positive_power(self):
        assert tukey_power(np.array([0.0]), 0.2)[0] == 0.0

    def test_negative_with_fraction_raises(self):
        with pytest.raises(ValueError):
            tukey_power(np.array([-1.0, 1.0]), 0.5)

    @pytest.mark.parametrize("p", [-1.0, 0.0, 0.2, 0.5])
    def test_inverse(self, p):
        x = np.array([3.0, 150.0, 4200.0])
        assert inverse_power(tukey_power(x, p), p) == pytest.approx(x)


class TestBoxCox:
    def test_log_at_zero(self):
        assert box_cox(np.array([np.e]), 0) == pytest.approx([1.0])

    def test_power(self):
        assert box_cox(np.array([4.0]), 0.5) == pytest.approx([2.0])

    def test_requires_positive(self):
        with pytest.raises(ValueError):
            box_cox(np.array([0.0, 1.0]), 0.5)


class TestLadder:
    def test_columns_and_rungs(self, lognormal):
        ladder = power_ladder(lognormal, (-1, 0, 0.5, 1))
        assert list(ladder.columns) == ["power", "n", "skewness", "bowley"]
        assert list(ladder["power"]) == [-1.0, 0.0, 0.5, 1.0]

    def test_skew_decreases_down_the_ladder(self, lognormal):
        ladder = power_ladder(lognormal, (0.5, 1)).set_index("power")
        assert ladder.loc[0.5, "skewness"] < ladder.loc[1.0, "skewness"]

    def test_log_is_most_symmetric_for_lognormal(self, lognormal):
        assert best_power(lognormal, (-1, -0.5, 0, 0.5, 1)) == 0.0

    def test_non_positive_excluded_for_log(self):
        x = np.array([0.0, 1.0, 2.0, 3.0, 5.0, 8.0])
        ladder = power_ladder(x, (0, 1)).set_index("power")
        assert ladder.loc[0.0, "n"] == 5
        assert ladder.loc[1.0, "n"] == 6

    def test_best_power_positive_when_zeros_present(self, lognormal):
        x = np.concatenate([[0.0, 0.0, 0.0], lognormal])
        assert best_power(x, (-1, -0.5, 0, 0.5, 1)) == 0.5
        # the ladder table still reports the log rung on the positive values
        assert 0.0 in set(power_ladder(x, (-1, -0.5, 0, 0.5, 1))["power"])

    def test_best_power_no_positive_rung(self):
        with pytest.raises(ValueError):
            best_power(np.array([0.0, 1.0, 2.0, 4.0]), (-1, 0))
