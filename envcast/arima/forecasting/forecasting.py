"""Multi-step ARMA forecasts with standard errors on the stationary scale."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
import warnings

import numpy as np
from numpy.polynomial import polynomial as P
from statsmodels.tsa.arima_process import arma2ma

from envcast.arima.models.arma_model import CandidateModel
from envcast.utils import get_logger, suppress_statsmodels_warnings, validate_lags

logger = get_logger(__name__)


@dataclass(frozen=True)
class ForecastResult:
    """Stationary-scale forecasts for horizons 1..h."""

    point_forecasts: tuple[float, ...]
    standard_errors: tuple[float, ...]
    horizon: int
    model_label: str = ""
    integrated_standard_errors: tuple[float, ...] | None = None
    difference_lags: tuple[int, ...] | None = None

    @property
    def points(self) -> np.ndarray:
        return np.asarray(self.point_forecasts, dtype=float)

    @property
    def se(self) -> np.ndarray:
        return np.asarray(self.standard_errors, dtype=float)


def _difference_polynomial(lags: Sequence[int]) -> np.ndarray:
    """Coefficients (lowest degree first) of the product of (1 - B^lag)."""
    poly = np.array([1.0])
    for lag in lags:
        factor = np.zeros(lag + 1)
        factor[0], factor[lag] = 1.0, -1.0
        poly = P.polymul(poly, factor)
    return poly


def integrated_standard_errors(
    candidate: CandidateModel,
    horizon: int,
    difference_lags: Sequence[int],
) -> np.ndarray:
    """Forecast standard errors of the undifferenced series.

    The ARMA AR polynomial is multiplied by every differencing factor and the
    resulting psi-weights give ``Var(e_h) = sigma2 * sum_{j<h} psi_j^2``.

    Args:
        candidate: Fitted ARMA candidate (coefficients and sigma2 are used).
        horizon: Number of steps ahead.
        difference_lags: Lags that were applied before fitting.

    Returns:
        Array of ``horizon`` standard errors.
    """
    lags = validate_lags(difference_lags)
    ar = np.r_[1.0, -np.asarray(candidate.ar_params, dtype=float)]
    ma = np.r_[1.0, np.asarray(candidate.ma_params, dtype=float)]
    full_ar = P.polymul(ar, _difference_polynomial(lags))
    psi = arma2ma(full_ar, ma, lags=horizon)
    return np.sqrt(candidate.sigma2 * np.cumsum(psi**2))


def forecast_stationary(
    candidate: CandidateModel,
    horizon: int,
    *,
    difference_lags: Sequence[int] | None = None,
) -> ForecastResult:
    """Forecast ``horizon`` steps past the end of the fit window.

    Args:
        candidate: Fitted candidate carrying its statsmodels results.
        horizon: Number of steps ahead (any positive integer, e.g. 52+).
        difference_lags: When given, integrated standard errors for the
            undifferenced scale are computed as well.

    Returns:
        ForecastResult on the stationary scale.

    Raises:
        ValueError: If horizon < 1 or the candidate has no fitted results.
    """
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")
    if candidate.results is None:
        raise ValueError(f"{candidate.label} has no fitted results to forecast from")

    with warnings.catch_warnings():
        suppress_statsmodels_warnings()
        prediction = candidate.results.get_forecast(steps=horizon)
    points = np.asarray(prediction.predicted_mean, dtype=float)
    se = np.asarray(prediction.se_mean, dtype=float)

    integrated = None
    lags = None
    if difference_lags:
        lags = validate_lags(difference_lags)
        integrated = tuple(float(v) for v in integrated_standard_errors(candidate, horizon, lags))

    logger.info(f"Forecast {horizon} step(s) with {candidate.label}")
    return ForecastResult(
        point_forecasts=tuple(float(v) for v in points),
        standard_errors=tuple(float(v) for v in se),
        horizon=horizon,
        model_label=candidate.label,
        integrated_standard_errors=integrated,
        difference_lags=lags,
    )
