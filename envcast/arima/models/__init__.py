"""ARMA model fitting module."""

from __future__ import annotations

from .arma_model import CandidateModel, fit_arma

__all__ = [
    "CandidateModel",
    "fit_arma",
]
