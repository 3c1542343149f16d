"""Tests for validation utilities."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from envcast.utils.validation import (
    validate_confidence_level,
    validate_dataframe_not_empty,
    validate_file_exists,
    validate_gap_free_series,
    validate_lags,
    validate_required_columns,
    validate_series,
    validate_train_size,
)


class TestValidateSeries:
    """Tests for validate_series."""

    def test_list_converted_to_float_series(self) -> None:
        """Array-like input becomes a float Series."""
        result = validate_series([1, 2, 3])
        assert result.dtype == np.float64
        assert list(result) == [1.0, 2.0, 3.0]

    @pytest.mark.parametrize("bad", [None, [], [1.0, np.nan], [1.0, np.inf]])
    def test_invalid_input_rejected(self, bad) -> None:
        """None, empty and non-finite inputs are errors."""
        with pytest.raises(ValueError):
            validate_series(bad, "pm25")


class TestValidateGapFreeSeries:
    """Tests for validate_gap_free_series."""

    def test_regular_weekly_index(self) -> None:
        """Equally spaced weeks pass."""
        idx = pd.date_range("2020-01-05", periods=5, freq="W-SUN")
        result = validate_gap_free_series(pd.Series(np.arange(1.0, 6.0), index=idx))
        assert len(result) == 5

    def test_missing_week_detected(self) -> None:
        """A dropped week is reported as irregular spacing."""
        idx = pd.date_range("2020-01-05", periods=6, freq="W-SUN").delete(3)
        with pytest.raises(ValueError, match="irregular"):
            validate_gap_free_series(pd.Series(np.arange(5.0), index=idx))

    def test_unsorted_index_detected(self) -> None:
        """Dates must increase."""
        idx = pd.date_range("2020-01-05", periods=4, freq="W-SUN")[::-1]
        with pytest.raises(ValueError, match="sorted"):
            validate_gap_free_series(pd.Series(np.arange(4.0), index=idx))


class TestParameterValidation:
    """Tests for scalar parameter validators."""

    def test_train_size_bounds(self) -> None:
        """train_size must lie within [min_train, n_total]."""
        validate_train_size(10, 10)
        with pytest.raises(ValueError):
            validate_train_size(0, 10)
        with pytest.raises(ValueError):
            validate_train_size(11, 10)

    @pytest.mark.parametrize("level", [0.0, 1.0, -0.5, 1.2])
    def test_confidence_level_bounds(self, level: float) -> None:
        """Levels outside (0, 1) are rejected."""
        with pytest.raises(ValueError):
            validate_confidence_level(level)

    def test_lags(self) -> None:
        """Lags become a tuple of positive ints."""
        assert validate_lags([52, 1]) == (52, 1)
        with pytest.raises(ValueError):
            validate_lags([52, 0])


class TestFrameValidation:
    """Tests for file and DataFrame validators."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing files raise FileNotFoundError with the given name."""
        with pytest.raises(FileNotFoundError, match="Data file"):
            validate_file_exists(tmp_path / "absent.csv", "Data file")

    def test_empty_dataframe(self) -> None:
        """Empty frames are rejected."""
        with pytest.raises(ValueError, match="empty"):
            validate_dataframe_not_empty(pd.DataFrame())

    def test_missing_columns(self) -> None:
        """Missing columns raise KeyError listing them."""
        df = pd.DataFrame({"date": []})
        with pytest.raises(KeyError, match="pm25"):
            validate_required_columns(df, ["date", "pm25"])
