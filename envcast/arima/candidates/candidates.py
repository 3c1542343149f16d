"""Candidate ARMA orders and their isolated fitting.

Orders come either from the caller or from a small ACF/PACF heuristic. Each
candidate is fitted and diagnosed on its own; a failure is logged and
recorded instead of aborting the whole batch.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from multiprocessing import cpu_count
from typing import Any, Sequence

import numpy as np
import pandas as pd
from statsmodels.tsa.stattools import acf, pacf

from envcast.arima.diagnostics.residual_diagnostics import DiagnosticReport, diagnose_residuals
from envcast.arima.models.arma_model import CandidateModel, fit_arma
from envcast.constants import (
    ARMA_FIT_MAXITER,
    ARMA_FIT_METHOD,
    ARMA_FIT_TOLERANCE,
    CANDIDATE_MAX_P,
    CANDIDATE_MAX_Q,
    CANDIDATE_SIGNIFICANCE_ALPHA,
    DEFAULT_N_JOBS,
    DIAGNOSTIC_ALPHA,
)
from envcast.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CandidateFailure:
    """A candidate that could not be fitted or scored."""

    p: int
    q: int
    error_type: str
    message: str

    @property
    def label(self) -> str:
        return f"ARMA({self.p},{self.q})"

    def to_dict(self) -> dict[str, Any]:
        return {"p": self.p, "q": self.q, "error_type": self.error_type, "message": self.message}


@dataclass(frozen=True)
class CandidateFitSummary:
    """Fitted candidates, their diagnostics (aligned), and the failures."""

    candidates: tuple[CandidateModel, ...]
    diagnostics: tuple[DiagnosticReport, ...]
    failures: tuple[CandidateFailure, ...]


def _last_significant_lag(values: np.ndarray, confint: np.ndarray, max_lag: int) -> int:
    """Highest lag in 1..max_lag whose confidence band excludes zero."""
    significant = 0
    for lag in range(1, min(max_lag, len(values) - 1) + 1):
        lower, upper = confint[lag]
        if lower > 0 or upper < 0:
            significant = lag
    return significant


def propose_candidate_orders(
    stationary_series: pd.Series | np.ndarray,
    *,
    max_p: int = CANDIDATE_MAX_P,
    max_q: int = CANDIDATE_MAX_Q,
    alpha: float = CANDIDATE_SIGNIFICANCE_ALPHA,
) -> list[tuple[int, int]]:
    """Propose a small set of ARMA orders from ACF/PACF significance.

    ``p_hat`` is the highest significant PACF lag (capped at ``max_p``) and
    ``q_hat`` the highest significant ACF lag (capped at ``max_q``). The
    proposals are ``(p_hat, 0)``, ``(0, q_hat)``, ``(p_hat, q_hat)``,
    ``(p_hat, 1)``, ``(1, q_hat)`` and ``(1, 1)``, deduplicated and clipped
    to the caps, without ``(0, 0)``.

    Args:
        stationary_series: Differenced, transformed series.
        max_p: Largest AR order considered.
        max_q: Largest MA order considered.
        alpha: Significance level of the ACF/PACF bands.

    Returns:
        Sorted list of ``(p, q)`` orders.

    Raises:
        ValueError: If the series is too short to estimate the correlograms.
    """
    y = np.asarray(stationary_series, dtype=float)
    nlags = min(max(max_p, max_q), y.size // 2 - 1)
    if nlags < 1:
        raise ValueError(f"series of length {y.size} is too short to propose ARMA orders")

    acf_vals, acf_ci = acf(y, nlags=nlags, alpha=alpha, fft=True)
    pacf_vals, pacf_ci = pacf(y, nlags=nlags, alpha=alpha)
    p_hat = _last_significant_lag(pacf_vals, pacf_ci, max_p)
    q_hat = _last_significant_lag(acf_vals, acf_ci, max_q)

    raw = [(p_hat, 0), (0, q_hat), (p_hat, q_hat), (p_hat, 1), (1, q_hat), (1, 1)]
    orders = sorted(
        {(min(p, max_p), min(q, max_q)) for p, q in raw if (p, q) != (0, 0)}
    )
    logger.info(f"ACF/PACF suggest p<={p_hat}, q<={q_hat}; candidate orders: {orders}")
    return orders


def _fit_and_diagnose(
    values: np.ndarray,
    p: int,
    q: int,
    method: str,
    maxiter: int,
    tolerance: float | None,
    alpha: float,
) -> tuple[CandidateModel, DiagnosticReport]:
    """Fit one candidate and run its residual diagnostics."""
    candidate = fit_arma(values, p, q, method=method, maxiter=maxiter, tolerance=tolerance)
    return candidate, diagnose_residuals(candidate, alpha=alpha)


def _record_failure(p: int, q: int, error: Exception) -> CandidateFailure:
    logger.warning(f"ARMA({p},{q}) excluded: {type(error).__name__}: {error}")
    return CandidateFailure(p=p, q=q, error_type=type(error).__name__, message=str(error))


def _fit_sequential(
    values: np.ndarray,
    orders: Sequence[tuple[int, int]],
    method: str,
    maxiter: int,
    tolerance: float | None,
    alpha: float,
) -> dict[tuple[int, int], tuple[CandidateModel, DiagnosticReport] | CandidateFailure]:
    """Fit candidates one after another."""
    outcomes: dict[tuple[int, int], Any] = {}
    for p, q in orders:
        try:
            outcomes[(p, q)] = _fit_and_diagnose(values, p, q, method, maxiter, tolerance, alpha)
        except Exception as e:
            outcomes[(p, q)] = _record_failure(p, q, e)
    return outcomes


def _fit_parallel(
    values: np.ndarray,
    orders: Sequence[tuple[int, int]],
    method: str,
    maxiter: int,
    tolerance: float | None,
    alpha: float,
    n_jobs: int,
) -> dict[tuple[int, int], tuple[CandidateModel, DiagnosticReport] | CandidateFailure]:
    """Fit candidates in worker processes and collect results as they finish."""
    outcomes: dict[tuple[int, int], Any] = {}
    with ProcessPoolExecutor(max_workers=n_jobs) as executor:
        future_to_order = {
            executor.submit(
                _fit_and_diagnose, values, p, q, method, maxiter, tolerance, alpha
            ): (p, q)
            for p, q in orders
        }
        for completed, future in enumerate(as_completed(future_to_order), start=1):
            p, q = future_to_order[future]
            try:
                outcomes[(p, q)] = future.result()
            except Exception as e:
                outcomes[(p, q)] = _record_failure(p, q, e)
            logger.debug(f"Progress: {completed}/{len(orders)} candidates fitted")
    return outcomes


def fit_candidates(
    stationary_series: pd.Series | np.ndarray,
    orders: Sequence[tuple[int, int]],
    *,
    n_jobs: int | None = DEFAULT_N_JOBS,
    method: str = ARMA_FIT_METHOD,
    maxiter: int = ARMA_FIT_MAXITER,
    tolerance: float | None = ARMA_FIT_TOLERANCE,
    alpha: float = DIAGNOSTIC_ALPHA,
) -> CandidateFitSummary:
    """Fit and diagnose every candidate order, isolating failures.

    Args:
        stationary_series: Differenced, transformed training series.
        orders: ``(p, q)`` orders to fit. Duplicates are ignored.
        n_jobs: Worker processes. 1 runs sequentially; None uses cpu_count() - 1.
        method: statsmodels optimizer name.
        maxiter: Maximum optimizer iterations per candidate.
        tolerance: Optimizer convergence tolerance per candidate.
        alpha: Significance level for the residual diagnostics.

    Returns:
        CandidateFitSummary with results in the order the orders were given.

    Raises:
        ValueError: If no orders are supplied.
    """
    unique_orders = list(dict.fromkeys((int(p), int(q)) for p, q in orders))
    if not unique_orders:
        raise ValueError("at least one candidate order is required")

    values = np.asarray(stationary_series, dtype=float)
    effective_n_jobs = n_jobs if n_jobs is not None else max(1, cpu_count() - 1)
    logger.info(
        f"Fitting {len(unique_orders)} ARMA candidates on {values.size} observations "
        f"({effective_n_jobs} worker(s))"
    )

    if effective_n_jobs == 1 or len(unique_orders) == 1:
        outcomes = _fit_sequential(values, unique_orders, method, maxiter, tolerance, alpha)
    else:
        outcomes = _fit_parallel(
            values, unique_orders, method, maxiter, tolerance, alpha, effective_n_jobs
        )

    candidates: list[CandidateModel] = []
    reports: list[DiagnosticReport] = []
    failures: list[CandidateFailure] = []
    for order in unique_orders:
        outcome = outcomes[order]
        if isinstance(outcome, CandidateFailure):
            failures.append(outcome)
        else:
            candidates.append(outcome[0])
            reports.append(outcome[1])

    logger.info(f"{len(candidates)} candidate(s) fitted, {len(failures)} excluded")
    return CandidateFitSummary(
        candidates=tuple(candidates), diagnostics=tuple(reports), failures=tuple(failures)
    )
