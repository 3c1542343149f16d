"""Candidate ARMA orders and isolated fitting."""

from __future__ import annotations

from .candidates import (
    CandidateFailure,
    CandidateFitSummary,
    fit_candidates,
    propose_candidate_orders,
)

__all__ = [
    "CandidateFailure",
    "CandidateFitSummary",
    "fit_candidates",
    "propose_candidate_orders",
]
