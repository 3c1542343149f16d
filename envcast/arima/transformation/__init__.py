"""Box-Cox variance-stabilizing transform."""

from __future__ import annotations

from .transformation import (
    TransformParams,
    apply_transform,
    count_domain_floor_hits,
    estimate_boxcox_lambda,
    fit_transform,
    invert_transform,
    make_lambda_grid,
)

__all__ = [
    "TransformParams",
    "apply_transform",
    "count_domain_floor_hits",
    "estimate_boxcox_lambda",
    "fit_transform",
    "invert_transform",
    "make_lambda_grid",
]
