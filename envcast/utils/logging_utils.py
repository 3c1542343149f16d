"""Log summaries of the training and holdout windows."""

from __future__ import annotations

import logging

import pandas as pd

from envcast.config_logging import get_logger

__all__ = [
    "log_series_summary",
]


def _describe_window(series: pd.Series, label: str) -> str:
    """One-line description: size and, for dated series, first and last week."""
    text = f"{label}: {len(series)} observations"
    if not series.empty and isinstance(series.index, pd.DatetimeIndex):
        text += f" ({series.index.min().date()} → {series.index.max().date()})"
    return text


def log_series_summary(
    train_series: pd.Series,
    test_series: pd.Series,
    *,
    logger_instance: logging.Logger | None = None,
) -> None:
    """Log the size, period and level of the train and holdout windows.

    Args:
        train_series: Training window.
        test_series: Held-out window (may be empty).
        logger_instance: Logger to use; defaults to this module's logger.
    """
    log = logger_instance or get_logger(__name__)
    log.info(_describe_window(train_series, "Train"))
    log.info(_describe_window(test_series, "Holdout"))
    if not train_series.empty:
        log.info(
            f"Train level - mean {train_series.mean():.3f}, std {train_series.std():.3f}, "
            f"range [{train_series.min():.3f}, {train_series.max():.3f}]"
        )
