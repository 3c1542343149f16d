"""Information criteria for fitted ARMA candidates."""

from __future__ import annotations

from envcast.exceptions import UndefinedCriterionError

__all__ = ["compute_aic", "compute_aicc"]


def compute_aic(loglikelihood: float, k: int) -> float:
    """Akaike Information Criterion ``-2*llf + 2k``.

    Args:
        loglikelihood: Maximized log-likelihood.
        k: Number of estimated parameters, residual variance included.
    """
    return -2.0 * float(loglikelihood) + 2.0 * k


def compute_aicc(loglikelihood: float, k: int, n: int) -> float:
    """Small-sample corrected AIC ``AIC + 2k(k+1)/(n-k-1)``.

    Args:
        loglikelihood: Maximized log-likelihood.
        k: Number of estimated parameters, residual variance included.
        n: Number of observations the likelihood was computed on.

    Returns:
        AICc value (always >= AIC when defined).

    Raises:
        UndefinedCriterionError: If ``n - k - 1 <= 0``.
    """
    denominator = n - k - 1
    if denominator <= 0:
        raise UndefinedCriterionError(
            f"AICc undefined for k={k} parameters on n={n} observations (n - k - 1 = {denominator})"
        )
    return compute_aic(loglikelihood, k) + 2.0 * k * (k + 1) / denominator
