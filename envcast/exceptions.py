"""Error taxonomy for the forecasting pipeline.

Each class also derives from the builtin exception that callers of the
corresponding stage would naturally catch (``ValueError`` for bad inputs,
``RuntimeError`` for numerical failures).
"""

from __future__ import annotations

__all__ = [
    "EnvcastError",
    "DomainError",
    "NonConvergenceError",
    "UndefinedCriterionError",
    "DegenerateIntervalError",
    "ModelSelectionError",
]


class EnvcastError(Exception):
    """Base class for all pipeline errors."""


class DomainError(EnvcastError, ValueError):
    """Raised when a value outside the power transform domain (x <= 0) is supplied."""


class NonConvergenceError(EnvcastError, RuntimeError):
    """Raised when the likelihood optimizer does not converge within its iteration limit."""


class UndefinedCriterionError(EnvcastError, ValueError):
    """Raised when AICc cannot be computed because n - k - 1 <= 0."""


class DegenerateIntervalError(EnvcastError, RuntimeError):
    """Raised when forecast bounds stay unusable after the stability clamp."""


class ModelSelectionError(EnvcastError, RuntimeError):
    """Raised when no candidate model survives fitting."""
