"""Box-Cox variance-stabilizing transform with profile-likelihood lambda.

This module provides small, focused helpers to:
- estimate lambda by maximizing the Box-Cox profile log-likelihood on a grid
- apply the transform with a recorded lambda
- invert the transform, clamping the inverse base to a positive floor

The variance model behind the likelihood is a linear regression of the
transformed series on its time index, so a trending series is not penalised
for its trend.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy.special import boxcox

from envcast.constants import (
    BOXCOX_INVERSE_FLOOR,
    BOXCOX_LAMBDA_MAX,
    BOXCOX_LAMBDA_MIN,
    BOXCOX_LAMBDA_STEP,
    BOXCOX_LAMBDA_ZERO_TOL,
)
from envcast.exceptions import DomainError
from envcast.utils import get_logger

logger = get_logger(__name__)

ArrayOrSeries = TypeVar("ArrayOrSeries", np.ndarray, pd.Series)


@dataclass(frozen=True)
class TransformParams:
    """Box-Cox parameters chosen once on the training data."""

    lambda_: float
    profile_loglik: float = float("nan")
    grid_min: float = BOXCOX_LAMBDA_MIN
    grid_max: float = BOXCOX_LAMBDA_MAX
    grid_step: float = BOXCOX_LAMBDA_STEP
    n_obs: int = 0

    @property
    def is_log(self) -> bool:
        return abs(self.lambda_) < BOXCOX_LAMBDA_ZERO_TOL


def make_lambda_grid(
    lambda_min: float = BOXCOX_LAMBDA_MIN,
    lambda_max: float = BOXCOX_LAMBDA_MAX,
    step: float = BOXCOX_LAMBDA_STEP,
) -> np.ndarray:
    """Build an inclusive, evenly spaced lambda grid.

    Raises:
        ValueError: If the bounds are inverted or the step is not positive.
    """
    if step <= 0:
        raise ValueError(f"lambda grid step must be positive, got {step}")
    if lambda_max < lambda_min:
        raise ValueError(f"lambda_max ({lambda_max}) must be >= lambda_min ({lambda_min})")
    n_points = int(round((lambda_max - lambda_min) / step)) + 1
    return np.round(np.linspace(lambda_min, lambda_max, n_points), 10)


def _check_positive(values: np.ndarray, context: str) -> None:
    """Raise DomainError if any value is not strictly positive."""
    bad = ~(values > 0)
    if bad.any():
        first_bad = int(np.flatnonzero(bad)[0])
        raise DomainError(
            f"{context}: Box-Cox requires strictly positive values, found {int(bad.sum())} "
            f"non-positive value(s) (first at position {first_bad}: {values[first_bad]!r})"
        )


def _boxcox_values(x: np.ndarray, lambda_: float) -> np.ndarray:
    if abs(lambda_) < BOXCOX_LAMBDA_ZERO_TOL:
        return np.log(x)
    return boxcox(x, lambda_)


def _profile_loglik(x: np.ndarray, lambda_: float, design: np.ndarray, sum_log_x: float) -> float:
    """Profile log-likelihood of lambda with a linear-trend mean model."""
    n = x.size
    y = _boxcox_values(x, lambda_)
    rss = float(sm.OLS(y, design).fit().ssr)
    rss = max(rss, np.finfo(float).tiny)
    return -0.5 * n * np.log(rss / n) + (lambda_ - 1.0) * sum_log_x


def estimate_boxcox_lambda(
    series: pd.Series | np.ndarray,
    *,
    grid: np.ndarray | None = None,
) -> tuple[float, float]:
    """Estimate lambda by maximizing the Box-Cox profile log-likelihood.

    For each candidate lambda the transformed series is regressed on
    ``[1, t]`` and the likelihood is
    ``-n/2 * log(RSS/n) + (lambda - 1) * sum(log x)``.

    Args:
        series: Strictly positive training values.
        grid: Candidate lambdas. Defaults to ``[-2, 2]`` in steps of 0.01.

    Returns:
        Tuple ``(lambda, profile_loglik)`` at the grid maximum. Ties resolve
        to the smallest lambda.

    Raises:
        DomainError: If any value is <= 0.
        ValueError: If fewer than 3 observations are supplied.
    """
    x = np.asarray(series, dtype=float)
    _check_positive(x, "estimate_boxcox_lambda")
    if x.size < 3:
        raise ValueError(f"at least 3 observations are needed to estimate lambda, got {x.size}")

    lambdas = make_lambda_grid() if grid is None else np.asarray(grid, dtype=float)
    design = sm.add_constant(np.arange(x.size, dtype=float))
    sum_log_x = float(np.log(x).sum())

    logliks = np.array([_profile_loglik(x, lam, design, sum_log_x) for lam in lambdas])
    best = int(np.nanargmax(logliks))
    return float(lambdas[best]), float(logliks[best])


def apply_transform(series: ArrayOrSeries, params: TransformParams) -> ArrayOrSeries:
    """Apply the Box-Cox transform with a previously chosen lambda.

    Args:
        series: Strictly positive values (Series keeps its index).
        params: Recorded transform parameters.

    Returns:
        Transformed values, same container type as the input.

    Raises:
        DomainError: If any value is <= 0.
    """
    x = np.asarray(series, dtype=float)
    _check_positive(x, "apply_transform")
    y = _boxcox_values(x, params.lambda_)
    if isinstance(series, pd.Series):
        return pd.Series(y, index=series.index, name=series.name)
    return y


def fit_transform(
    series: pd.Series | np.ndarray,
    *,
    grid: np.ndarray | None = None,
) -> tuple[pd.Series, TransformParams]:
    """Choose lambda on ``series`` and return the transformed series.

    Args:
        series: Strictly positive training values.
        grid: Optional lambda grid (defaults to ``[-2, 2]`` step 0.01).

    Returns:
        Tuple ``(transformed_series, params)``.

    Raises:
        DomainError: If any value is <= 0.
    """
    s = series if isinstance(series, pd.Series) else pd.Series(np.asarray(series, dtype=float))
    lambdas = make_lambda_grid() if grid is None else np.asarray(grid, dtype=float)
    lambda_, loglik = estimate_boxcox_lambda(s, grid=lambdas)

    params = TransformParams(
        lambda_=lambda_,
        profile_loglik=loglik,
        grid_min=float(lambdas.min()),
        grid_max=float(lambdas.max()),
        grid_step=float(np.diff(lambdas).min()) if lambdas.size > 1 else 0.0,
        n_obs=int(s.size),
    )
    if lambda_ in (params.grid_min, params.grid_max):
        logger.warning(f"Box-Cox lambda {lambda_:.2f} sits on the grid boundary")
    logger.info(f"Box-Cox lambda = {lambda_:.2f} (profile log-likelihood {loglik:.3f})")
    return apply_transform(s.astype(float), params), params


def _inverse_base(values: np.ndarray, params: TransformParams) -> np.ndarray:
    return params.lambda_ * values + 1.0


def count_domain_floor_hits(
    values: pd.Series | np.ndarray | float,
    params: TransformParams,
    *,
    floor: float = BOXCOX_INVERSE_FLOOR,
) -> int:
    """Count values whose inverse base ``lambda*y + 1`` falls below ``floor``.

    Non-finite inputs count as hits. For the log transform only those do.
    """
    y = np.atleast_1d(np.asarray(values, dtype=float))
    if params.is_log:
        return int((~np.isfinite(y)).sum())
    base = _inverse_base(y, params)
    return int((~np.isfinite(base) | (base < floor)).sum())


def invert_transform(
    values: float | np.ndarray | pd.Series,
    params: TransformParams,
    *,
    floor: float = BOXCOX_INVERSE_FLOOR,
) -> float | np.ndarray | pd.Series:
    """Map transformed values back to the original scale.

    ``x = (lambda*y + 1) ** (1/lambda)`` (or ``exp(y)`` for lambda = 0). A
    base at or below zero has no real inverse, so it is replaced by ``floor``.
    This is lossy: the number of replacements is logged as a warning and can
    be obtained with :func:`count_domain_floor_hits`.

    Args:
        values: Scalar, array or Series on the transformed scale.
        params: Recorded transform parameters.
        floor: Positive replacement for an invalid inverse base.

    Returns:
        Values on the original scale, same container type as the input.

    Raises:
        ValueError: If floor is not positive.
    """
    if floor <= 0:
        raise ValueError(f"inverse floor must be positive, got {floor}")

    y = np.asarray(values, dtype=float)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        if params.is_log:
            x = np.exp(y)
        else:
            base = _inverse_base(y, params)
            hits = int(np.count_nonzero(base < floor))
            if hits:
                logger.warning(
                    f"Inverse Box-Cox base fell below {floor:g} for {hits} value(s); "
                    "floor applied"
                )
            x = np.power(np.where(base < floor, floor, base), 1.0 / params.lambda_)

    if isinstance(values, pd.Series):
        return pd.Series(x, index=values.index, name=values.name)
    if np.ndim(values) == 0:
        return float(x)
    return x
