"""Map stationary-scale forecasts back to the original measurement scale.

Steps, in order:
  1) undo the differencing chain (trend cumulative sum, then seasonal add-back)
  2) build confidence bounds from z-multipliers
  3) invert the Box-Cox transform (point and each bound independently)
  4) apply the stability clamp and report every value it touched

If the bounds at the requested level hit the inverse-transform floor or are
non-finite, lower confidence levels are tried and the level actually used is
reported.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Sequence

import numpy as np
import pandas as pd
from scipy.stats import norm

from envcast.arima.differencing.differencing import DifferenceState, invert_differences
from envcast.arima.forecasting.forecasting import ForecastResult
from envcast.arima.transformation.transformation import (
    TransformParams,
    count_domain_floor_hits,
    invert_transform,
)
from envcast.constants import (
    BOXCOX_INVERSE_FLOOR,
    CLAMP_LOWER_FLOOR,
    CLAMP_UPPER_MULTIPLE,
    CONFIDENCE_FALLBACK_LEVELS,
    DEFAULT_INTERVAL_METHOD,
    INTERVAL_METHODS,
)
from envcast.exceptions import DegenerateIntervalError
from envcast.utils import get_logger, validate_confidence_level

logger = get_logger(__name__)


@dataclass(frozen=True)
class InversionConfig:
    """Safeguards applied while inverting forecasts."""

    clamp_multiple: float = CLAMP_UPPER_MULTIPLE
    lower_floor: float = CLAMP_LOWER_FLOOR
    inverse_floor: float = BOXCOX_INVERSE_FLOOR
    fallback_levels: tuple[float, ...] = CONFIDENCE_FALLBACK_LEVELS
    allow_level_fallback: bool = True
    interval_method: str = DEFAULT_INTERVAL_METHOD

    def __post_init__(self) -> None:
        if self.clamp_multiple <= 0:
            raise ValueError(f"clamp_multiple must be positive, got {self.clamp_multiple}")
        if self.inverse_floor <= 0:
            raise ValueError(f"inverse_floor must be positive, got {self.inverse_floor}")
        if self.interval_method not in INTERVAL_METHODS:
            raise ValueError(
                f"interval_method must be one of {INTERVAL_METHODS}, got {self.interval_method!r}"
            )
        for level in self.fallback_levels:
            validate_confidence_level(level)


@dataclass(frozen=True)
class ClampReport:
    """What the stability clamp changed."""

    upper_capped: int
    floored_to_zero: int
    nonfinite_replaced: int
    upper_cap: float
    lower_floor: float

    @property
    def total(self) -> int:
        return self.upper_capped + self.floored_to_zero + self.nonfinite_replaced


@dataclass(frozen=True)
class OriginalScaleForecast:
    """Forecasts and bounds on the original measurement scale."""

    point_forecasts: tuple[float, ...]
    lower: tuple[float, ...]
    upper: tuple[float, ...]
    confidence_level: float
    requested_confidence_level: float
    z_multiplier: float
    interval_method: str
    clamp: ClampReport
    domain_floor_hits: int
    point_floor_hits: int
    levels_tried: tuple[float, ...]
    index: tuple[str, ...] | None = field(default=None)

    @property
    def horizon(self) -> int:
        return len(self.point_forecasts)

    @property
    def fallback_used(self) -> bool:
        return self.confidence_level != self.requested_confidence_level

    def to_frame(self) -> pd.DataFrame:
        """Forecast table with point, lower and upper columns."""
        frame = pd.DataFrame(
            {"point": self.point_forecasts, "lower": self.lower, "upper": self.upper}
        )
        if self.index is not None:
            frame.index = pd.Index(pd.to_datetime(list(self.index)), name="date")
        else:
            frame.index = pd.RangeIndex(1, self.horizon + 1, name="step")
        return frame

    def to_dict(self) -> dict[str, Any]:
        return {
            "horizon": self.horizon,
            "dates": list(self.index) if self.index is not None else None,
            "point_forecasts": list(self.point_forecasts),
            "lower": list(self.lower),
            "upper": list(self.upper),
            "confidence_level": self.confidence_level,
            "requested_confidence_level": self.requested_confidence_level,
            "fallback_used": self.fallback_used,
            "levels_tried": list(self.levels_tried),
            "z_multiplier": self.z_multiplier,
            "interval_method": self.interval_method,
            "clamp": asdict(self.clamp),
            "domain_floor_hits": self.domain_floor_hits,
            "point_floor_hits": self.point_floor_hits,
        }


def z_multiplier(confidence_level: float) -> float:
    """Two-sided normal quantile, e.g. 1.645 for 0.90 and 1.960 for 0.95."""
    validate_confidence_level(confidence_level)
    return float(norm.ppf(0.5 + confidence_level / 2.0))


def apply_stability_clamp(
    lower: Sequence[float] | np.ndarray,
    upper: Sequence[float] | np.ndarray,
    *,
    upper_cap: float,
    lower_floor: float = CLAMP_LOWER_FLOOR,
) -> tuple[np.ndarray, np.ndarray, ClampReport]:
    """Clamp bounds to ``[lower_floor, upper_cap]`` and count every change.

    Non-finite lower values become ``lower_floor`` and non-finite upper values
    become ``upper_cap``. Applying the clamp twice changes nothing more.

    Returns:
        Tuple ``(lower, upper, report)``.
    """
    lo = np.asarray(lower, dtype=float).copy()
    hi = np.asarray(upper, dtype=float).copy()

    lo_nonfinite = ~np.isfinite(lo)
    hi_nonfinite = ~np.isfinite(hi)
    lo_below = np.isfinite(lo) & (lo < lower_floor)
    hi_above = np.isfinite(hi) & (hi > upper_cap)

    lo[lo_nonfinite | lo_below] = lower_floor
    hi[hi_nonfinite | hi_above] = upper_cap

    report = ClampReport(
        upper_capped=int(hi_above.sum()),
        floored_to_zero=int(lo_below.sum()),
        nonfinite_replaced=int(lo_nonfinite.sum() + hi_nonfinite.sum()),
        upper_cap=float(upper_cap),
        lower_floor=float(lower_floor),
    )
    return lo, hi, report


def _levels_to_try(requested: float, config: InversionConfig) -> list[float]:
    if not config.allow_level_fallback:
        return [requested]
    lower_levels = sorted({lvl for lvl in config.fallback_levels if lvl < requested}, reverse=True)
    return [requested, *lower_levels]


def _level_bounds(
    forecast: ForecastResult,
    state: DifferenceState,
    point_level: np.ndarray,
    z: float,
    method: str,
) -> tuple[np.ndarray, np.ndarray]:
    """Bounds on the transformed (undifferenced) scale."""
    if method == "integrated":
        if forecast.integrated_standard_errors is None:
            raise ValueError(
                "integrated interval method needs a forecast computed with difference_lags"
            )
        ise = np.asarray(forecast.integrated_standard_errors, dtype=float)
        return point_level - z * ise, point_level + z * ise

    points = forecast.points
    half_width = z * forecast.se
    lower = np.asarray(invert_differences(points - half_width, state), dtype=float)
    upper = np.asarray(invert_differences(points + half_width, state), dtype=float)
    return lower, upper


def invert_forecast(
    forecast: ForecastResult,
    difference_state: DifferenceState,
    transform_params: TransformParams,
    confidence_level: float,
    *,
    reference_max: float,
    config: InversionConfig | None = None,
    index: Sequence[Any] | None = None,
) -> OriginalScaleForecast:
    """Produce original-scale forecasts and clamped confidence bounds.

    Args:
        forecast: Stationary-scale forecast.
        difference_state: Windows captured when the training series was differenced.
        transform_params: Box-Cox parameters chosen on the training series.
        confidence_level: Requested two-sided level (e.g. 0.90).
        reference_max: Maximum of the full original series; the upper cap is
            ``clamp_multiple * reference_max``.
        config: Inversion safeguards; defaults to ``InversionConfig()``.
        index: Optional labels (e.g. forecast dates) for each horizon.

    Returns:
        OriginalScaleForecast with the level used and the clamp report.

    Raises:
        ValueError: If the level, reference_max or index length is invalid.
        DegenerateIntervalError: If the forecast is unusable even after clamping.
    """
    config = config or InversionConfig()
    validate_confidence_level(confidence_level)
    if not np.isfinite(reference_max) or reference_max <= 0:
        raise ValueError(f"reference_max must be positive and finite, got {reference_max}")
    if index is not None and len(index) != forecast.horizon:
        raise ValueError(f"index has {len(index)} labels for horizon {forecast.horizon}")

    point_level = np.asarray(invert_differences(forecast.points, difference_state), dtype=float)
    point = np.asarray(
        invert_transform(point_level, transform_params, floor=config.inverse_floor), dtype=float
    )
    point_hits = count_domain_floor_hits(point_level, transform_params, floor=config.inverse_floor)

    tried: list[float] = []
    for level in _levels_to_try(confidence_level, config):
        tried.append(level)
        z = z_multiplier(level)
        lower_level, upper_level = _level_bounds(
            forecast, difference_state, point_level, z, config.interval_method
        )
        bound_hits = count_domain_floor_hits(
            lower_level, transform_params, floor=config.inverse_floor
        ) + count_domain_floor_hits(upper_level, transform_params, floor=config.inverse_floor)
        lower = np.asarray(
            invert_transform(lower_level, transform_params, floor=config.inverse_floor),
            dtype=float,
        )
        upper = np.asarray(
            invert_transform(upper_level, transform_params, floor=config.inverse_floor),
            dtype=float,
        )
        finite = bool(np.all(np.isfinite(lower)) and np.all(np.isfinite(upper)))
        if bound_hits == 0 and finite:
            break
        logger.warning(
            f"Bounds at {level:.0%} confidence are degenerate "
            f"({bound_hits} inverse-floor hit(s)); trying a lower level"
        )

    upper_cap = config.clamp_multiple * float(reference_max)
    lower, upper, clamp = apply_stability_clamp(
        lower, upper, upper_cap=upper_cap, lower_floor=config.lower_floor
    )

    if not np.all(np.isfinite(point)):
        raise DegenerateIntervalError("point forecasts are non-finite on the original scale")
    if np.any(point > upper) or np.any(point < lower):
        n_bad = int(np.sum((point > upper) | (point < lower)))
        raise DegenerateIntervalError(
            f"{n_bad} point forecast(s) fall outside the clamped bounds "
            f"[{config.lower_floor:g}, {upper_cap:g}]"
        )

    if level != confidence_level:
        logger.warning(f"Confidence level lowered from {confidence_level:.0%} to {level:.0%}")
    if clamp.total:
        logger.warning(
            f"Stability clamp applied: {clamp.upper_capped} upper capped at {upper_cap:.3f}, "
            f"{clamp.floored_to_zero} lower floored, {clamp.nonfinite_replaced} non-finite replaced"
        )
    logger.info(f"Inverted {forecast.horizon}-step forecast at {level:.0%} confidence")

    return OriginalScaleForecast(
        point_forecasts=tuple(float(v) for v in point),
        lower=tuple(float(v) for v in lower),
        upper=tuple(float(v) for v in upper),
        confidence_level=level,
        requested_confidence_level=confidence_level,
        z_multiplier=z,
        interval_method=config.interval_method,
        clamp=clamp,
        domain_floor_hits=bound_hits,
        point_floor_hits=point_hits,
        levels_tried=tuple(tried),
        index=tuple(str(v) for v in index) if index is not None else None,
    )
