"""Unit tests for the differencing module."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from envcast.arima.differencing.differencing import (
    DifferenceState,
    apply_differences,
    difference,
    invert_differences,
    undifference,
)


@pytest.fixture
def levels() -> np.ndarray:
    """Seasonal series with trend and noise."""
    rng = np.random.default_rng(42)
    t = np.arange(200)
    return 10 + 0.05 * t + np.sin(2 * np.pi * t / 52) + rng.normal(0, 0.2, t.size)


class TestDifference:
    """Tests for single-lag difference/undifference."""

    def test_difference_values_and_length(self) -> None:
        """x_t - x_{t-lag} with the length reduced by lag."""
        x = np.array([1.0, 4.0, 9.0, 16.0, 25.0])
        np.testing.assert_allclose(difference(x, 1), [3.0, 5.0, 7.0, 9.0])
        np.testing.assert_allclose(difference(x, 2), [8.0, 12.0, 16.0])

    def test_series_keeps_trailing_index(self) -> None:
        """A Series loses its first lag labels."""
        s = pd.Series([1.0, 2.0, 4.0], index=pd.date_range("2020-01-05", periods=3, freq="W"))
        out = difference(s, 1)
        assert out.index.equals(s.index[1:])

    @pytest.mark.parametrize("lag", [1, 52])
    def test_round_trip_with_correct_window(self, levels: np.ndarray, lag: int) -> None:
        """undifference(difference(x)) rebuilds x exactly from its first lag values."""
        rebuilt = undifference(difference(levels, lag), levels[:lag], lag)
        np.testing.assert_allclose(rebuilt, levels[lag:], rtol=0, atol=1e-10)

    def test_misordered_window_breaks_reconstruction(self, levels: np.ndarray) -> None:
        """Reversing the trailing window gives a different series."""
        lag = 52
        rebuilt = undifference(difference(levels, lag), levels[:lag][::-1], lag)
        assert not np.allclose(rebuilt, levels[lag:])

    def test_window_length_must_match_lag(self, levels: np.ndarray) -> None:
        """A window of the wrong size is rejected."""
        with pytest.raises(ValueError, match="trailing values"):
            undifference(difference(levels, 4), levels[:3], 4)

    def test_invalid_lag_and_short_series(self) -> None:
        """Zero lag and too-short input are rejected."""
        with pytest.raises(ValueError):
            difference(np.arange(5.0), 0)
        with pytest.raises(ValueError, match="too short"):
            difference(np.arange(3.0), 3)


class TestDifferenceChain:
    """Tests for apply_differences/invert_differences."""

    def test_state_windows_are_captured_before_each_step(self, levels: np.ndarray) -> None:
        """windows[0] is the raw tail, windows[1] the seasonally differenced tail."""
        stationary, state = apply_differences(levels, (52, 1))

        seasonal = difference(levels, 52)
        assert state.lags == (52, 1)
        assert state.windows[0] == tuple(levels[-52:])
        assert state.windows[1] == (seasonal[-1],)
        assert stationary.size == levels.size - 53
        assert state.total_lag == 53

    def test_continuation_is_rebuilt_past_one_season(self, levels: np.ndarray) -> None:
        """Undoing the chain on later differences reproduces later levels.

        The state comes from the first 130 points only, and 70 steps are
        rebuilt, which is longer than one season.
        """
        head = levels[:130]
        full_diffed, _ = apply_differences(levels, (52, 1))
        _, head_state = apply_differences(head, (52, 1))

        continuation = full_diffed[130 - 53 :]
        rebuilt = invert_differences(continuation, head_state)

        np.testing.assert_allclose(rebuilt, levels[130:], atol=1e-9)

    def test_reversed_order_is_not_equivalent_for_state(self, levels: np.ndarray) -> None:
        """Applying (1, 52) captures different windows than (52, 1)."""
        _, state_a = apply_differences(levels, (52, 1))
        _, state_b = apply_differences(levels, (1, 52))
        assert state_a.windows != state_b.windows

    def test_series_too_short_for_chain(self) -> None:
        """The series must survive every differencing step."""
        with pytest.raises(ValueError, match="too short"):
            apply_differences(np.arange(53.0), (52, 1))

    def test_state_validation(self) -> None:
        """Each lag needs a window of matching length."""
        with pytest.raises(ValueError):
            DifferenceState(lags=(2,), windows=((1.0,),))
        with pytest.raises(ValueError):
            DifferenceState(lags=(1, 1), windows=((1.0,),))
