"""Validation utilities for series, files, and pipeline parameters.

This module provides validation functions for:
- DataFrame validation (non-empty, required columns)
- File existence validation
- Series validation (clean floats, gap-free weekly spacing)
- Parameter validation (train size, confidence level, lags)
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

__all__ = [
    "validate_dataframe_not_empty",
    "validate_required_columns",
    "validate_file_exists",
    "validate_series",
    "validate_gap_free_series",
    "validate_train_size",
    "validate_confidence_level",
    "validate_lags",
]


def validate_file_exists(file_path: Path, file_name: str | None = None) -> None:
    """Validate that a file exists.

    Args:
        file_path: Path to the file to check.
        file_name: Optional name of the file for error message.
            If None, uses the file path.

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path.exists():
        if file_name is None:
            file_name = str(file_path)
        msg = f"{file_name} not found: {file_path}"
        raise FileNotFoundError(msg)


def validate_dataframe_not_empty(df: pd.DataFrame, name: str = "DataFrame") -> None:
    """Validate that DataFrame is not empty.

    Args:
        df: DataFrame to validate.
        name: Name of the DataFrame for error messages. Default is 'DataFrame'.

    Raises:
        ValueError: If DataFrame is empty.
    """
    if df.empty:
        msg = f"{name} DataFrame is empty"
        raise ValueError(msg)


def validate_required_columns(
    df: pd.DataFrame,
    required_columns: set[str] | list[str],
    df_name: str = "DataFrame",
) -> None:
    """Validate that DataFrame contains required columns.

    Args:
        df: DataFrame to validate.
        required_columns: Set or list of required column names.
        df_name: Name of the DataFrame for error messages. Default is 'DataFrame'.

    Raises:
        KeyError: If any required column is missing.
    """
    required_set = set(required_columns)
    missing_columns = required_set - set(df.columns)
    if missing_columns:
        msg = f"Missing required columns in {df_name}: {sorted(missing_columns)}"
        raise KeyError(msg)


def validate_series(
    series: pd.Series | np.ndarray | list[float], name: str = "series"
) -> pd.Series:
    """Return a float Series, rejecting missing and non-finite values.

    Unlike a plain ``dropna``, gaps are not silently removed: the pipeline
    relies on equal spacing, so a NaN is an input error.

    Args:
        series: Input time series (Series, array or list).
        name: Label used in error messages.

    Returns:
        Series converted to float. Array-like input gets a RangeIndex.

    Raises:
        ValueError: If series is None, empty, or contains NaN/inf values.

    Examples:
        >>> validate_series([1.0, 2.0, 3.0]).dtype
        dtype('float64')
        >>> validate_series(pd.Series([1.0, np.nan]))  # Raises ValueError
    """
    if series is None:
        raise ValueError(f"{name} is None")
    s = pd.Series(series).astype(float)
    if s.empty:
        raise ValueError(f"{name} is empty")
    if not np.all(np.isfinite(s.to_numpy())):
        n_bad = int((~np.isfinite(s.to_numpy())).sum())
        raise ValueError(f"{name} contains {n_bad} missing or non-finite values")
    return s


def validate_gap_free_series(series: pd.Series, name: str = "series") -> pd.Series:
    """Validate a series and, for datetime indexes, check equal spacing.

    Args:
        series: Input time series.
        name: Label used in error messages.

    Returns:
        Validated float Series.

    Raises:
        ValueError: If values are invalid, the index is not increasing, or the
            datetime spacing is irregular.
    """
    s = validate_series(series, name)
    if isinstance(s.index, pd.DatetimeIndex) and len(s) > 2:
        if not s.index.is_monotonic_increasing:
            raise ValueError(f"{name} index must be sorted in increasing order")
        steps = np.diff(s.index.asi8)
        if not np.all(steps == steps[0]):
            raise ValueError(f"{name} has irregular spacing (gaps in the datetime index)")
    return s


def validate_train_size(train_size: int, n_total: int, min_train: int = 1) -> None:
    """Validate a chronological train size against the full series length.

    Args:
        train_size: Number of leading observations used for fitting.
        n_total: Length of the full series.
        min_train: Minimum acceptable training length.

    Raises:
        ValueError: If train_size is outside [min_train, n_total].
    """
    if train_size < min_train or train_size > n_total:
        raise ValueError(
            f"train_size must be between {min_train} and {n_total}, got {train_size}"
        )


def validate_confidence_level(level: float) -> None:
    """Validate that a confidence level lies strictly between 0 and 1.

    Raises:
        ValueError: If level is not in (0, 1).
    """
    if not 0.0 < level < 1.0:
        raise ValueError(f"confidence level must be in (0, 1), got {level}")


def validate_lags(lags: tuple[int, ...] | list[int]) -> tuple[int, ...]:
    """Validate a sequence of differencing lags.

    Returns:
        Lags as a tuple of ints.

    Raises:
        ValueError: If any lag is not a positive integer.
    """
    lags_tuple = tuple(int(lag) for lag in lags)
    if any(lag < 1 for lag in lags_tuple):
        raise ValueError(f"differencing lags must be positive integers, got {lags_tuple}")
    return lags_tuple
