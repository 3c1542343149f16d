"""Inversion of forecasts to the original measurement scale."""

from __future__ import annotations

from .inversion import (
    ClampReport,
    InversionConfig,
    OriginalScaleForecast,
    apply_stability_clamp,
    invert_forecast,
    z_multiplier,
)

__all__ = [
    "ClampReport",
    "InversionConfig",
    "OriginalScaleForecast",
    "apply_stability_clamp",
    "invert_forecast",
    "z_multiplier",
]
