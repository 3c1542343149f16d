"""Tests for weekly series loading, regularisation and splitting."""

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

from envcast.data_preparation.data_preparation import (
    load_weekly_series,
    regularize_weekly,
    split_train_test,
)


def _daily_frame(n_days: int = 70) -> pd.DataFrame:
    dates = pd.date_range("2020-01-01", periods=n_days, freq="D")
    return pd.DataFrame({"date": dates, "pm25": np.linspace(10.0, 30.0, n_days)})


class TestRegularizeWeekly:
    """Tests for regularize_weekly."""

    def test_daily_to_weekly_means(self) -> None:
        """Daily observations are averaged per week."""
        df = _daily_frame()
        weekly = regularize_weekly(df.set_index("date")["pm25"])

        assert isinstance(weekly.index, pd.DatetimeIndex)
        assert weekly.isna().sum() == 0
        steps = np.diff(weekly.index.asi8)
        assert np.all(steps == steps[0])
        assert weekly.iloc[1] == pytest.approx(
            df.set_index("date")["pm25"].loc["2020-01-06":"2020-01-12"].mean()
        )

    def test_missing_weeks_interpolated(self) -> None:
        """A week without observations is filled in time."""
        df = _daily_frame()
        mask = (df["date"] >= "2020-01-20") & (df["date"] <= "2020-01-26")
        weekly = regularize_weekly(df.loc[~mask].set_index("date")["pm25"])

        gap = pd.Timestamp("2020-01-26")
        assert gap in weekly.index
        before = weekly.loc[gap - pd.Timedelta(weeks=1)]
        after = weekly.loc[gap + pd.Timedelta(weeks=1)]
        assert weekly.loc[gap] == pytest.approx((before + after) / 2)

    def test_requires_datetime_index(self) -> None:
        """A RangeIndex cannot be resampled."""
        with pytest.raises(TypeError):
            regularize_weekly(pd.Series([1.0, 2.0]))


class TestLoadWeeklySeries:
    """Tests for load_weekly_series."""

    def test_load_csv(self, tmp_path: Path) -> None:
        """Unsorted daily CSV rows become a named weekly series."""
        path = tmp_path / "pm25.csv"
        _daily_frame().sample(frac=1.0, random_state=0).to_csv(path, index=False)

        series = load_weekly_series(path)

        assert series.name == "pm25"
        assert len(series) == 11
        assert series.index.is_monotonic_increasing

    def test_custom_columns(self, tmp_path: Path) -> None:
        """Column names are configurable."""
        path = tmp_path / "obs.csv"
        _daily_frame().rename(columns={"date": "ts", "pm25": "value"}).to_csv(path, index=False)

        series = load_weekly_series(path, date_column="ts", value_column="value")
        assert series.name == "value"

    def test_missing_column(self, tmp_path: Path) -> None:
        """A file without the value column is rejected."""
        path = tmp_path / "pm25.csv"
        _daily_frame().drop(columns="pm25").to_csv(path, index=False)
        with pytest.raises(KeyError):
            load_weekly_series(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing input files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_weekly_series(tmp_path / "absent.csv")


class TestSplitTrainTest:
    """Tests for split_train_test."""

    def test_chronological_split(self, weekly_series: pd.Series) -> None:
        """The first train_size weeks train, the rest test."""
        train, test = split_train_test(weekly_series, 191)

        assert len(train) == 191
        assert len(test) == 64
        assert train.index[-1] < test.index[0]

    def test_full_series_leaves_empty_test(self, weekly_series: pd.Series) -> None:
        """Training on everything leaves no holdout."""
        _, test = split_train_test(weekly_series, len(weekly_series))
        assert test.empty

    def test_invalid_size(self, weekly_series: pd.Series) -> None:
        """train_size beyond the series is rejected."""
        with pytest.raises(ValueError):
            split_train_test(weekly_series, len(weekly_series) + 1)
