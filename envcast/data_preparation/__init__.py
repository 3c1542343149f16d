"""Data preparation for weekly measurement series."""

from __future__ import annotations

from .data_preparation import load_weekly_series, regularize_weekly, split_train_test

__all__ = [
    "load_weekly_series",
    "regularize_weekly",
    "split_train_test",
]
