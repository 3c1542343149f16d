"""Stationary-scale ARMA forecasting."""

from __future__ import annotations

from .forecasting import ForecastResult, forecast_stationary, integrated_standard_errors

__all__ = [
    "ForecastResult",
    "forecast_stationary",
    "integrated_standard_errors",
]
