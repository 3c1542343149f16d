"""Utility functions for validation, I/O, logging and metrics.

This package provides modular utilities organized by functionality:
- validation: series, DataFrame, file, and parameter validation
- io: File I/O operations (CSV, Parquet, JSON)
- metrics: Forecast accuracy and interval metrics
- logging_utils: Series summaries for logs
- statsmodels_utils: Warning hygiene around statsmodels fits
"""

from __future__ import annotations

from envcast.config_logging import get_logger

# I/O utilities
from envcast.utils.io import (
    ensure_output_dir,
    load_dataframe,
    save_dataframe_csv,
    save_json_pretty,
)

# Logging utilities
from envcast.utils.logging_utils import log_series_summary

# Metrics utilities
from envcast.utils.metrics import (
    calculate_metrics,
    compute_residuals,
    interval_coverage,
    mean_interval_width,
)

# Statsmodels utilities
from envcast.utils.statsmodels_utils import suppress_statsmodels_warnings

# Validation utilities
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

__all__ = [
    # get_logger from config_logging
    "get_logger",
    # Validation
    "validate_confidence_level",
    "validate_dataframe_not_empty",
    "validate_file_exists",
    "validate_gap_free_series",
    "validate_lags",
    "validate_required_columns",
    "validate_series",
    "validate_train_size",
    # I/O
    "ensure_output_dir",
    "load_dataframe",
    "save_dataframe_csv",
    "save_json_pretty",
    # Metrics
    "calculate_metrics",
    "compute_residuals",
    "interval_coverage",
    "mean_interval_width",
    # Logging
    "log_series_summary",
    # Statsmodels
    "suppress_statsmodels_warnings",
]
