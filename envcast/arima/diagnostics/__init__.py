"""Residual diagnostics and information criteria."""

from __future__ import annotations

from .information_criteria import compute_aic, compute_aicc
from .residual_diagnostics import (
    DiagnosticReport,
    diagnose_residuals,
    jarque_bera_test,
    ljung_box_lag,
    ljung_box_test,
    shapiro_wilk_test,
)

__all__ = [
    "DiagnosticReport",
    "compute_aic",
    "compute_aicc",
    "diagnose_residuals",
    "jarque_bera_test",
    "ljung_box_lag",
    "ljung_box_test",
    "shapiro_wilk_test",
]
