"""Model selection by AICc with a diagnostics override."""

from __future__ import annotations

from .selection import RankedCandidate, SelectionPolicy, SelectionResult, select_model

__all__ = [
    "RankedCandidate",
    "SelectionPolicy",
    "SelectionResult",
    "select_model",
]
