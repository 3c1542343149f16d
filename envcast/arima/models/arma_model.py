"""ARMA(p, q) model fitting with an intercept.

The stationary series is fitted by maximum likelihood through statsmodels'
SARIMAX with ``order=(p, 0, q)`` and ``trend="c"``; differencing has already
been applied upstream, so the state-space model only plays the role of an
ARMA likelihood.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import warnings

import numpy as np
import pandas as pd
from statsmodels.tsa.statespace.sarimax import SARIMAX

from envcast.arima.diagnostics.information_criteria import compute_aic, compute_aicc
from envcast.constants import (
    ARMA_ENFORCE_INVERTIBILITY,
    ARMA_ENFORCE_STATIONARITY,
    ARMA_FIT_MAXITER,
    ARMA_FIT_METHOD,
    ARMA_FIT_TOLERANCE,
)
from envcast.exceptions import NonConvergenceError, UndefinedCriterionError
from envcast.utils import get_logger, suppress_statsmodels_warnings

logger = get_logger(__name__)

# Type alias for fitted state-space results (SARIMAXResults)
FittedARMAResults = Any

# Name of the convergence-tolerance keyword for each statsmodels optimizer
_TOLERANCE_KEYWORDS = {
    "lbfgs": "pgtol",
    "bfgs": "gtol",
    "cg": "gtol",
    "newton": "tol",
}


@dataclass(frozen=True)
class CandidateModel:
    """A fitted ARMA(p, q) candidate with its likelihood summary."""

    p: int
    q: int
    coefficients: tuple[float, ...]
    intercept: float
    residuals: np.ndarray = field(repr=False, compare=False)
    loglikelihood: float
    n_params: int
    n_obs: int
    ar_params: tuple[float, ...] = ()
    ma_params: tuple[float, ...] = ()
    sigma2: float = float("nan")
    aic: float = float("nan")
    aicc: float | None = None
    converged: bool = True
    iterations: int | None = None
    results: FittedARMAResults = field(default=None, repr=False, compare=False)

    @property
    def order(self) -> tuple[int, int]:
        return (self.p, self.q)

    @property
    def label(self) -> str:
        return f"ARMA({self.p},{self.q})"

    @property
    def k(self) -> int:
        """Parameter count used by the information criteria (variance included)."""
        return self.n_params + 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "p": self.p,
            "q": self.q,
            "intercept": self.intercept,
            "ar_params": list(self.ar_params),
            "ma_params": list(self.ma_params),
            "sigma2": self.sigma2,
            "loglikelihood": self.loglikelihood,
            "n_params": self.n_params,
            "n_obs": self.n_obs,
            "aic": self.aic,
            "aicc": self.aicc,
            "converged": self.converged,
            "iterations": self.iterations,
        }


def _validate_order(p: int, q: int) -> None:
    """Validate ARMA orders.

    Raises:
        ValueError: If p or q is negative.
    """
    if p < 0 or q < 0:
        raise ValueError(f"ARMA orders must be non-negative, got p={p}, q={q}")


def _optimizer_kwargs(method: str, maxiter: int, tolerance: float | None) -> dict[str, Any]:
    """Keyword arguments limiting the optimizer for ``SARIMAX.fit``.

    Raises:
        ValueError: If a tolerance is requested for an optimizer without one.
    """
    kwargs: dict[str, Any] = {"method": method, "maxiter": maxiter}
    if tolerance is None:
        return kwargs
    if tolerance <= 0:
        raise ValueError(f"tolerance must be positive, got {tolerance}")
    if method not in _TOLERANCE_KEYWORDS:
        raise ValueError(
            f"no tolerance setting for optimizer {method!r} "
            f"(supported: {sorted(_TOLERANCE_KEYWORDS)})"
        )
    kwargs[_TOLERANCE_KEYWORDS[method]] = tolerance
    return kwargs


def _create_and_fit_model(
    values: np.ndarray,
    p: int,
    q: int,
    fit_kwargs: dict[str, Any],
) -> FittedARMAResults:
    """Create and fit the SARIMAX(p, 0, q) model with an intercept.

    Raises:
        RuntimeError: If statsmodels fails while fitting.
    """
    with warnings.catch_warnings():
        suppress_statsmodels_warnings()
        try:
            model = SARIMAX(
                values,
                order=(p, 0, q),
                trend="c",
                enforce_stationarity=ARMA_ENFORCE_STATIONARITY,
                enforce_invertibility=ARMA_ENFORCE_INVERTIBILITY,
            )
            return model.fit(disp=False, **fit_kwargs)
        except (ValueError, np.linalg.LinAlgError) as e:
            msg = f"Failed to fit ARMA({p},{q}) model: {e}"
            logger.error(msg)
            raise RuntimeError(msg) from e


def _check_convergence(results: FittedARMAResults, p: int, q: int, maxiter: int) -> int | None:
    """Raise NonConvergenceError when the optimizer reports failure.

    Returns:
        Number of optimizer iterations when statsmodels reports it.
    """
    retvals = getattr(results, "mle_retvals", None) or {}
    iterations = retvals.get("iterations")
    if retvals.get("converged") is False:
        msg = (
            f"ARMA({p},{q}) did not converge within {maxiter} iterations "
            f"(warnflag={retvals.get('warnflag')})"
        )
        logger.warning(msg)
        raise NonConvergenceError(msg)
    return int(iterations) if iterations is not None else None


def _split_params(results: FittedARMAResults, p: int, q: int) -> dict[str, Any]:
    """Map statsmodels parameter names onto intercept/AR/MA/variance."""
    names = list(results.model.param_names)
    values = np.asarray(results.params, dtype=float)
    by_name = dict(zip(names, values))
    ar = tuple(float(by_name[f"ar.L{i}"]) for i in range(1, p + 1))
    ma = tuple(float(by_name[f"ma.L{i}"]) for i in range(1, q + 1))
    return {
        "intercept": float(by_name["intercept"]),
        "ar": ar,
        "ma": ma,
        "sigma2": float(by_name["sigma2"]),
    }


def fit_arma(
    stationary_series: pd.Series | np.ndarray,
    p: int,
    q: int,
    *,
    method: str = ARMA_FIT_METHOD,
    maxiter: int = ARMA_FIT_MAXITER,
    tolerance: float | None = ARMA_FIT_TOLERANCE,
) -> CandidateModel:
    """Fit ARMA(p, q) with an intercept by maximum likelihood.

    Args:
        stationary_series: Differenced, transformed training values.
        p: AR order.
        q: MA order.
        method: statsmodels optimizer name.
        maxiter: Maximum optimizer iterations.
        tolerance: Convergence tolerance passed to the optimizer (``pgtol`` for
            lbfgs); None keeps the statsmodels default.

    Returns:
        CandidateModel. ``aicc`` is None when AICc is undefined for the
        sample size; the candidate is then excluded at selection time.

    Raises:
        ValueError: If orders are negative, the series has non-finite values, or
            the tolerance cannot be applied to ``method``.
        NonConvergenceError: If the optimizer does not converge.
        RuntimeError: If statsmodels fails while fitting.
    """
    _validate_order(p, q)
    values = np.asarray(stationary_series, dtype=float)
    if values.size == 0 or not np.all(np.isfinite(values)):
        raise ValueError("stationary_series must be non-empty and finite")

    logger.debug(f"Fitting ARMA({p},{q}) on {values.size} observations")
    fit_kwargs = _optimizer_kwargs(method, maxiter, tolerance)
    results = _create_and_fit_model(values, p, q, fit_kwargs)
    iterations = _check_convergence(results, p, q, maxiter)

    parts = _split_params(results, p, q)
    n_params = p + q + 1
    n_obs = int(results.nobs)
    llf = float(results.llf)
    aic = compute_aic(llf, n_params + 1)
    try:
        aicc: float | None = compute_aicc(llf, n_params + 1, n_obs)
    except UndefinedCriterionError as e:
        logger.warning(str(e))
        aicc = None

    candidate = CandidateModel(
        p=p,
        q=q,
        coefficients=parts["ar"] + parts["ma"],
        intercept=parts["intercept"],
        residuals=np.asarray(results.resid, dtype=float),
        loglikelihood=llf,
        n_params=n_params,
        n_obs=n_obs,
        ar_params=parts["ar"],
        ma_params=parts["ma"],
        sigma2=parts["sigma2"],
        aic=aic,
        aicc=aicc,
        converged=True,
        iterations=iterations,
        results=results,
    )
    aicc_text = f"{aicc:.2f}" if aicc is not None else "undefined"
    logger.info(f"Fitted {candidate.label} - AIC: {aic:.2f}, AICc: {aicc_text}")
    return candidate
