"""Forecast accuracy and interval metrics.

Point metrics use scikit-learn; interval metrics are plain numpy.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error

__all__ = [
    "calculate_metrics",
    "compute_residuals",
    "interval_coverage",
    "mean_interval_width",
]


def _as_array(values: Iterable[float]) -> np.ndarray:
    return np.asarray(list(values), dtype=float)


def compute_residuals(actual: Iterable[float], predicted: Iterable[float]) -> np.ndarray:
    """Return ``actual - predicted`` as a float array.

    Raises:
        ValueError: If the two inputs have different lengths.
    """
    y_true = _as_array(actual)
    y_pred = _as_array(predicted)
    if y_true.shape != y_pred.shape:
        raise ValueError(
            f"actual and predicted must have the same length, got {y_true.size} and {y_pred.size}"
        )
    return y_true - y_pred


def calculate_metrics(y_true: Iterable[float], y_pred: Iterable[float]) -> dict[str, float]:
    """Compute standard regression metrics (MSE, RMSE, MAE) on finite pairs."""
    y_true_s = pd.Series(_as_array(y_true))
    y_pred_s = pd.Series(_as_array(y_pred))
    if len(y_true_s) != len(y_pred_s):
        raise ValueError("y_true and y_pred must have the same length")

    mask = np.isfinite(y_true_s) & np.isfinite(y_pred_s)
    if not mask.any():
        raise RuntimeError("No finite prediction/actual pairs to score")

    mse = mean_squared_error(y_true_s[mask], y_pred_s[mask])
    rmse = float(np.sqrt(mse))
    mae = mean_absolute_error(y_true_s[mask], y_pred_s[mask])
    return {"MSE": float(mse), "RMSE": rmse, "MAE": float(mae)}


def interval_coverage(
    actual: Iterable[float], lower: Iterable[float], upper: Iterable[float]
) -> float:
    """Fraction of actual values falling inside ``[lower, upper]``."""
    y = _as_array(actual)
    lo = _as_array(lower)
    hi = _as_array(upper)
    if not (y.size == lo.size == hi.size):
        raise ValueError("actual, lower and upper must have the same length")
    if y.size == 0:
        return float("nan")
    return float(np.mean((y >= lo) & (y <= hi)))


def mean_interval_width(lower: Iterable[float], upper: Iterable[float]) -> float:
    """Average width ``upper - lower`` of a set of intervals."""
    lo = _as_array(lower)
    hi = _as_array(upper)
    if lo.size == 0:
        return float("nan")
    return float(np.mean(hi - lo))
