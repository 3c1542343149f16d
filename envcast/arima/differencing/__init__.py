"""Seasonal and trend differencing with exact inversion."""

from __future__ import annotations

from .differencing import (
    DifferenceState,
    apply_differences,
    difference,
    invert_differences,
    undifference,
)

__all__ = [
    "DifferenceState",
    "apply_differences",
    "difference",
    "invert_differences",
    "undifference",
]
