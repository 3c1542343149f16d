"""Reading measurement tables and writing pipeline reports.

Tables are CSV or Parquet (chosen from the file suffix unless forced);
reports are indented JSON in which numpy scalars, arrays and timestamps are
converted to plain JSON values.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import numpy as np
import pandas as pd

from envcast.config_logging import get_logger
from envcast.utils.validation import (
    validate_dataframe_not_empty,
    validate_file_exists,
    validate_required_columns,
)

__all__ = [
    "ensure_output_dir",
    "load_dataframe",
    "save_json_pretty",
    "save_dataframe_csv",
]

logger = get_logger(__name__)

_READERS = {
    "csv": pd.read_csv,
    "parquet": pd.read_parquet,
}


def ensure_output_dir(path: Path) -> None:
    """Create the parent directory of ``path`` if it is missing."""
    path.parent.mkdir(parents=True, exist_ok=True)


def _table_format(path: Path, forced: str | None) -> str:
    fmt = (forced or path.suffix.lstrip(".")).lower()
    if fmt not in _READERS:
        raise ValueError(
            f"Unsupported file format '{fmt}' for {path.name} (expected one of {sorted(_READERS)})"
        )
    return fmt


def _parse_dates(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    for column in columns:
        if column in df.columns:
            df[column] = pd.to_datetime(df[column])
    return df


def load_dataframe(
    path: Path | str,
    *,
    date_columns: list[str] | None = None,
    required_columns: list[str] | set[str] | None = None,
    validate_not_empty: bool = True,
    sort_by: list[str] | None = None,
    file_format: str | None = None,
) -> pd.DataFrame:
    """Read a measurement table and check its shape.

    Args:
        path: CSV or Parquet file.
        date_columns: Columns parsed with ``pd.to_datetime``.
        required_columns: Columns the table must contain.
        validate_not_empty: Reject tables without rows.
        sort_by: Columns to sort rows by (index is reset afterwards).
        file_format: ``"csv"`` or ``"parquet"``; inferred from the suffix when None.

    Returns:
        The loaded table.

    Raises:
        FileNotFoundError: If the file does not exist.
        KeyError: If a required column is missing.
        ValueError: If the format is unsupported or the table is empty.

    Examples:
        >>> df = load_dataframe(
        ...     "data/pm25_weekly.csv",
        ...     date_columns=["date"],
        ...     required_columns=["date", "pm25"],
        ...     sort_by=["date"],
        ... )
    """
    path_obj = Path(path)
    validate_file_exists(path_obj, "Data file")
    fmt = _table_format(path_obj, file_format)

    logger.info(f"Reading {fmt} table {path_obj}")
    df = _parse_dates(_READERS[fmt](path_obj), date_columns or [])

    if required_columns is not None:
        validate_required_columns(df, required_columns, path_obj.name)
    if validate_not_empty:
        validate_dataframe_not_empty(df, path_obj.name)
    if sort_by:
        df = df.sort_values(sort_by).reset_index(drop=True)
    return df


def _json_default(obj: Any) -> Any:
    """Convert numpy and pandas values that json cannot encode natively."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def save_json_pretty(
    data: dict | list,
    output_path: Path | str,
    *,
    indent: int = 2,
    sort_keys: bool = False,
) -> None:
    """Write ``data`` as indented JSON, creating the directory if needed.

    Examples:
        >>> save_json_pretty({"rmse": 4.2, "coverage": 0.93}, "results/forecast/holdout.json")
    """
    path_obj = Path(output_path)
    ensure_output_dir(path_obj)
    path_obj.write_text(
        json.dumps(data, indent=indent, sort_keys=sort_keys, default=_json_default),
        encoding="utf-8",
    )


def save_dataframe_csv(df: pd.DataFrame, output_path: Path | str, *, index: bool = False) -> None:
    """Save a DataFrame to CSV, creating the parent directory first."""
    path_obj = Path(output_path)
    ensure_output_dir(path_obj)
    df.to_csv(path_obj, index=index)
    logger.info(f"Saved to CSV: {path_obj}")
