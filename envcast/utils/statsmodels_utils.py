"""Statsmodels utilities for ARMA fitting.

Keeps repeated statsmodels index/frequency warnings out of the pipeline logs.
Convergence problems are not filtered here: they are inspected explicitly on
the fitted results and raised as ``NonConvergenceError``.
"""

from __future__ import annotations

import warnings

__all__ = ["suppress_statsmodels_warnings"]


def suppress_statsmodels_warnings() -> None:
    """Suppress common, non-actionable statsmodels warnings.

    Warning categories suppressed:
        - UserWarning from statsmodels module
        - No supported index available warnings
        - Date index has been provided warnings
        - Frequency information warnings

    Call inside a ``warnings.catch_warnings()`` block to keep the filter
    change local to a single fit.

    Examples:
        >>> with warnings.catch_warnings():
        ...     suppress_statsmodels_warnings()
        ...     results = SARIMAX(y, order=(1, 0, 1), trend="c").fit(disp=False)
    """
    warnings.filterwarnings("ignore", category=UserWarning, module="statsmodels")
    warnings.filterwarnings("ignore", message=".*No supported index is available.*")
    warnings.filterwarnings("ignore", message=".*date index has been provided.*")
    warnings.filterwarnings("ignore", message=".*frequency information.*")
