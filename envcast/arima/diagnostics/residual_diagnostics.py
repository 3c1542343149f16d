"""Residual diagnostics for fitted ARMA candidates.

This module provides:
- Shapiro-Wilk and Jarque-Bera normality tests
- a single-lag Ljung-Box test with degrees of freedom adjusted for p + q
- a DiagnosticReport combining both verdicts for model selection
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import math
from typing import TYPE_CHECKING, Any, Iterable, TypedDict

import numpy as np
from scipy import stats
from statsmodels.stats.diagnostic import acorr_ljungbox

from envcast.constants import DIAGNOSTIC_ALPHA
from envcast.utils import get_logger

if TYPE_CHECKING:
    from envcast.arima.models.arma_model import CandidateModel

logger = get_logger(__name__)


class NormalityTestResult(TypedDict):
    """Typed structure for a normality test result."""

    statistic: float
    p_value: float
    n: int


class LjungBoxResult(TypedDict):
    """Typed structure for a single-lag Ljung-Box result."""

    lag: int
    model_df: int
    q_stat: float
    p_value: float
    n: int


@dataclass(frozen=True)
class DiagnosticReport:
    """Normality and autocorrelation verdicts for one candidate."""

    p: int
    q: int
    n_residuals: int
    alpha: float
    shapiro_statistic: float
    shapiro_pvalue: float
    ljung_box_statistic: float
    ljung_box_pvalue: float
    ljung_box_lag: int
    ljung_box_df: int
    jarque_bera_statistic: float
    jarque_bera_pvalue: float
    normality_pass: bool
    autocorrelation_pass: bool

    @property
    def passed(self) -> bool:
        """True when residuals look both normal and uncorrelated."""
        return self.normality_pass and self.autocorrelation_pass

    @property
    def score(self) -> int:
        """Number of diagnostics passed (0, 1 or 2)."""
        return int(self.normality_pass) + int(self.autocorrelation_pass)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["passed"] = self.passed
        out["score"] = self.score
        return out


def _clean_residuals(residuals: Iterable[float]) -> np.ndarray:
    res = np.asarray(list(residuals), dtype=float)
    return res[np.isfinite(res)]


def shapiro_wilk_test(residuals: Iterable[float]) -> NormalityTestResult:
    """Shapiro-Wilk test for normality of residuals.

    H0: Residuals are normally distributed

    Args:
        residuals: Residual series from an ARMA fit.

    Returns:
        Dict with statistic, p_value, n. NaN statistics when n < 3.
    """
    res = _clean_residuals(residuals)
    if res.size < 3:
        return {"statistic": float("nan"), "p_value": float("nan"), "n": int(res.size)}
    result = stats.shapiro(res)
    return {
        "statistic": float(result.statistic),
        "p_value": float(result.pvalue),
        "n": int(res.size),
    }


def jarque_bera_test(residuals: Iterable[float]) -> NormalityTestResult:
    """Jarque-Bera test for normality of residuals (skewness and kurtosis)."""
    res = _clean_residuals(residuals)
    if res.size < 3:
        return {"statistic": float("nan"), "p_value": float("nan"), "n": int(res.size)}
    result = stats.jarque_bera(res)
    return {
        "statistic": float(result.statistic),
        "p_value": float(result.pvalue),
        "n": int(res.size),
    }


def ljung_box_lag(n: int, model_df: int = 0) -> int:
    """Lag used for the Ljung-Box test: ``sqrt(n)`` rounded half up.

    The lag is raised to ``model_df + 1`` when needed so that the adjusted
    chi-square has at least one degree of freedom.
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    lag = int(math.floor(math.sqrt(n) + 0.5))
    return max(lag, model_df + 1, 1)


def ljung_box_test(residuals: Iterable[float], lag: int, model_df: int = 0) -> LjungBoxResult:
    """Run a Ljung-Box test at a single lag.

    Args:
        residuals: Residual series.
        lag: Lag at which the Q statistic is evaluated.
        model_df: Degrees of freedom consumed by the model (p + q).

    Returns:
        Dict with lag, model_df, q_stat, p_value, n.

    Raises:
        ValueError: If there are not more residuals than the requested lag.
    """
    res = _clean_residuals(residuals)
    if res.size <= lag:
        raise ValueError(f"Ljung-Box at lag {lag} needs more than {lag} residuals, got {res.size}")
    lb = acorr_ljungbox(res, lags=[lag], model_df=model_df, return_df=True)
    return {
        "lag": int(lag),
        "model_df": int(model_df),
        "q_stat": float(lb["lb_stat"].iloc[0]),
        "p_value": float(lb["lb_pvalue"].iloc[0]),
        "n": int(res.size),
    }


def _passes(p_value: float, alpha: float) -> bool:
    return bool(np.isfinite(p_value) and p_value > alpha)


def diagnose_residuals(
    candidate: CandidateModel,
    *,
    alpha: float = DIAGNOSTIC_ALPHA,
) -> DiagnosticReport:
    """Run the residual diagnostics used for model selection.

    Shapiro-Wilk checks normality; Ljung-Box at lag ``round(sqrt(n))`` with
    ``model_df = p + q`` checks remaining autocorrelation. A test passes when
    its p-value exceeds ``alpha``.

    Args:
        candidate: Fitted ARMA candidate.
        alpha: Significance level for both tests.

    Returns:
        DiagnosticReport for the candidate.
    """
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")

    residuals = _clean_residuals(candidate.residuals)
    model_df = candidate.p + candidate.q
    lag = ljung_box_lag(residuals.size, model_df)

    sw = shapiro_wilk_test(residuals)
    jb = jarque_bera_test(residuals)
    lb = ljung_box_test(residuals, lag, model_df)

    report = DiagnosticReport(
        p=candidate.p,
        q=candidate.q,
        n_residuals=int(residuals.size),
        alpha=alpha,
        shapiro_statistic=sw["statistic"],
        shapiro_pvalue=sw["p_value"],
        ljung_box_statistic=lb["q_stat"],
        ljung_box_pvalue=lb["p_value"],
        ljung_box_lag=lag,
        ljung_box_df=lag - model_df,
        jarque_bera_statistic=jb["statistic"],
        jarque_bera_pvalue=jb["p_value"],
        normality_pass=_passes(sw["p_value"], alpha),
        autocorrelation_pass=_passes(lb["p_value"], alpha),
    )
    logger.info(
        f"ARMA({candidate.p},{candidate.q}) diagnostics - "
        f"Shapiro p={report.shapiro_pvalue:.4f}, "
        f"Ljung-Box(lag={lag}, df={report.ljung_box_df}) p={report.ljung_box_pvalue:.4f}"
    )
    return report
