"""Weekly series preparation: loading, regularising and chronological split."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from envcast.constants import DEFAULT_DATE_COLUMN, DEFAULT_RESAMPLE_FREQ, DEFAULT_VALUE_COLUMN
from envcast.utils import (
    get_logger,
    load_dataframe,
    log_series_summary,
    validate_gap_free_series,
    validate_train_size,
)

logger = get_logger(__name__)


def regularize_weekly(
    series: pd.Series,
    *,
    freq: str = DEFAULT_RESAMPLE_FREQ,
) -> pd.Series:
    """Resample a datetime-indexed series to weekly means and fill gaps.

    Gaps left by resampling are filled by linear interpolation in time, and
    the number of filled weeks is logged.

    Args:
        series: Observations with a DatetimeIndex (any sub-weekly frequency).
        freq: Pandas offset alias of the target frequency.

    Returns:
        Gap-free weekly series.

    Raises:
        TypeError: If the index is not a DatetimeIndex.
        ValueError: If nothing is left after resampling.
    """
    if not isinstance(series.index, pd.DatetimeIndex):
        raise TypeError("regularize_weekly needs a series with a DatetimeIndex")

    weekly = series.sort_index().astype(float).resample(freq).mean()
    n_missing = int(weekly.isna().sum())
    if n_missing:
        logger.warning(f"Interpolating {n_missing} missing week(s)")
        weekly = weekly.interpolate(method="time", limit_direction="both")
    weekly = weekly.dropna()
    if weekly.empty:
        raise ValueError("no observations left after weekly resampling")
    return weekly


def load_weekly_series(
    path: Path | str,
    *,
    date_column: str = DEFAULT_DATE_COLUMN,
    value_column: str = DEFAULT_VALUE_COLUMN,
    freq: str = DEFAULT_RESAMPLE_FREQ,
) -> pd.Series:
    """Load a measurement file and return a gap-free weekly series.

    Args:
        path: CSV or Parquet file.
        date_column: Name of the timestamp column.
        value_column: Name of the measurement column.
        freq: Target frequency alias (default weekly).

    Returns:
        Weekly series named after ``value_column``.

    Raises:
        FileNotFoundError: If the file does not exist.
        KeyError: If a required column is missing.
    """
    df = load_dataframe(
        path,
        date_columns=[date_column],
        required_columns=[date_column, value_column],
        sort_by=[date_column],
    )
    series = df.set_index(date_column)[value_column]
    weekly = regularize_weekly(series, freq=freq)
    weekly.name = value_column
    logger.info(
        f"Loaded {len(weekly)} weekly observations of '{value_column}' "
        f"({weekly.index.min().date()} → {weekly.index.max().date()})"
    )
    return validate_gap_free_series(weekly, value_column)


def split_train_test(series: pd.Series, train_size: int) -> tuple[pd.Series, pd.Series]:
    """Split a series chronologically into leading train and trailing test parts.

    Args:
        series: Full series.
        train_size: Number of leading observations used for fitting.

    Returns:
        Tuple ``(train, test)``; ``test`` may be empty.

    Raises:
        ValueError: If train_size is out of range.
    """
    validate_train_size(train_size, len(series))
    train = series.iloc[:train_size]
    test = series.iloc[train_size:]
    log_series_summary(train, test, logger_instance=logger)
    return train, test
