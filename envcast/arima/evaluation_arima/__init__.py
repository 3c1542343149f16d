"""Evaluation module for ARMA forecasts."""

from __future__ import annotations

from .evaluation_arima import HoldoutMetrics, evaluate_holdout

__all__ = [
    "HoldoutMetrics",
    "evaluate_holdout",
]
