"""Holdout evaluation of original-scale forecasts."""

from __future__ import annotations

from typing import Iterable, TypedDict

import numpy as np

from envcast.arima.inversion.inversion import OriginalScaleForecast
from envcast.utils import (
    calculate_metrics,
    compute_residuals,
    get_logger,
    interval_coverage,
    mean_interval_width,
)

logger = get_logger(__name__)


class HoldoutMetrics(TypedDict):
    """Typed structure for holdout accuracy metrics."""

    n: int
    MSE: float
    RMSE: float
    MAE: float
    mean_error: float
    coverage: float
    mean_interval_width: float
    confidence_level: float


def evaluate_holdout(
    forecast: OriginalScaleForecast,
    actual: Iterable[float],
) -> HoldoutMetrics:
    """Score a forecast against held-out observations.

    Only the overlapping horizon is scored: if fewer actual values than
    forecast steps are available, the extra steps are ignored.

    Args:
        forecast: Original-scale forecast with bounds.
        actual: Observed values following the training window.

    Returns:
        HoldoutMetrics with MSE/RMSE/MAE, the mean error (actual minus
        forecast, positive when the forecast is too low) and the empirical
        interval coverage.

    Raises:
        ValueError: If no actual values overlap the forecast horizon.
    """
    y = np.asarray(list(actual), dtype=float)
    n = min(y.size, forecast.horizon)
    if n == 0:
        raise ValueError("no held-out observations overlap the forecast horizon")

    y = y[:n]
    point = np.asarray(forecast.point_forecasts[:n])
    lower = np.asarray(forecast.lower[:n])
    upper = np.asarray(forecast.upper[:n])

    metrics = calculate_metrics(y, point)
    errors = compute_residuals(y, point)
    result: HoldoutMetrics = {
        "n": int(n),
        "MSE": metrics["MSE"],
        "RMSE": metrics["RMSE"],
        "MAE": metrics["MAE"],
        "mean_error": float(np.nanmean(errors)),
        "coverage": interval_coverage(y, lower, upper),
        "mean_interval_width": mean_interval_width(lower, upper),
        "confidence_level": forecast.confidence_level,
    }
    logger.info(
        f"Holdout ({n} steps) - RMSE: {result['RMSE']:.4f}, MAE: {result['MAE']:.4f}, "
        f"coverage: {result['coverage']:.0%} at {forecast.confidence_level:.0%}"
    )
    return result
