"""Lagged differencing and its exact inverse.

Differencing steps are applied in the order given (seasonal first, then
trend by default) and undone in reverse order. Each step's inverse is seeded
with the trailing window captured just before that step was applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TypeVar

import numpy as np
import pandas as pd

from envcast.constants import DEFAULT_DIFFERENCE_LAGS
from envcast.utils import get_logger, validate_lags

logger = get_logger(__name__)

ArrayOrSeries = TypeVar("ArrayOrSeries", np.ndarray, pd.Series)


@dataclass(frozen=True)
class DifferenceState:
    """Trailing windows needed to undo a differencing chain.

    ``windows[i]`` holds the last ``lags[i]`` values of the series as it was
    before step ``i`` was applied, oldest first.
    """

    lags: tuple[int, ...]
    windows: tuple[tuple[float, ...], ...]

    def __post_init__(self) -> None:
        if len(self.lags) != len(self.windows):
            raise ValueError(
                f"DifferenceState needs one window per lag, got {len(self.lags)} lags "
                f"and {len(self.windows)} windows"
            )
        for lag, window in zip(self.lags, self.windows):
            if len(window) != lag:
                raise ValueError(f"window for lag {lag} has {len(window)} values")

    @property
    def total_lag(self) -> int:
        return int(sum(self.lags))


def difference(series: ArrayOrSeries, lag: int) -> ArrayOrSeries:
    """Return ``x_t - x_{t-lag}`` for every t with a lagged partner.

    Args:
        series: Input values (Series keeps the trailing part of its index).
        lag: Positive differencing lag.

    Returns:
        Differenced values, ``lag`` shorter than the input.

    Raises:
        ValueError: If lag is not positive or the series is not longer than lag.
    """
    (lag,) = validate_lags([lag])
    values = np.asarray(series, dtype=float)
    if values.size <= lag:
        raise ValueError(f"series of length {values.size} is too short for lag {lag}")

    diffed = values[lag:] - values[:-lag]
    if isinstance(series, pd.Series):
        return pd.Series(diffed, index=series.index[lag:], name=series.name)
    return diffed


def undifference(
    diffed: ArrayOrSeries, trailing_values: Sequence[float] | np.ndarray, lag: int
) -> ArrayOrSeries:
    """Rebuild levels from lag-differences: ``x_t = d_t + x_{t-lag}``.

    The reconstruction is cumulative, so a horizon longer than ``lag`` reuses
    values it has already rebuilt.

    Args:
        diffed: Differenced values.
        trailing_values: The ``lag`` level values that immediately precede the
            first differenced value, in chronological order.
        lag: Positive differencing lag.

    Returns:
        Reconstructed levels aligned with ``diffed``.

    Raises:
        ValueError: If ``trailing_values`` does not hold exactly ``lag`` values.

    Examples:
        >>> x = np.array([1.0, 4.0, 9.0, 16.0])
        >>> undifference(difference(x, 1), x[:1], 1)
        array([ 4.,  9., 16.])
    """
    (lag,) = validate_lags([lag])
    seed = np.asarray(trailing_values, dtype=float)
    if seed.size != lag:
        raise ValueError(
            f"undifference with lag {lag} needs {lag} trailing values, got {seed.size}"
        )

    d = np.asarray(diffed, dtype=float)
    levels = np.concatenate([seed, np.empty(d.size)])
    for i in range(d.size):
        levels[lag + i] = d[i] + levels[i]
    rebuilt = levels[lag:]

    if isinstance(diffed, pd.Series):
        return pd.Series(rebuilt, index=diffed.index, name=diffed.name)
    return rebuilt


def apply_differences(
    series: ArrayOrSeries,
    lags: Sequence[int] = DEFAULT_DIFFERENCE_LAGS,
) -> tuple[ArrayOrSeries, DifferenceState]:
    """Apply a chain of differences and capture the state to undo it.

    Args:
        series: Transformed training values.
        lags: Lags applied in order, e.g. ``(52, 1)``.

    Returns:
        Tuple ``(stationary_series, state)``.

    Raises:
        ValueError: If the series is too short to survive every step.
    """
    lags_tuple = validate_lags(lags)
    n_total = len(series)
    if n_total <= sum(lags_tuple):
        raise ValueError(
            f"series of length {n_total} is too short for differencing lags {lags_tuple}"
        )

    current = series
    windows: list[tuple[float, ...]] = []
    for lag in lags_tuple:
        tail = np.asarray(current, dtype=float)[-lag:]
        windows.append(tuple(float(v) for v in tail))
        current = difference(current, lag)

    state = DifferenceState(lags=lags_tuple, windows=tuple(windows))
    logger.info(
        f"Differenced with lags {lags_tuple}: {n_total} -> {len(current)} observations"
    )
    return current, state


def invert_differences(values: ArrayOrSeries, state: DifferenceState) -> ArrayOrSeries:
    """Undo every differencing step in reverse order.

    ``values`` must continue the differenced series right after the data the
    state was captured from (typically forecasts past the training window).

    Args:
        values: Values on the fully differenced scale.
        state: State returned by :func:`apply_differences`.

    Returns:
        Values on the pre-differencing scale.
    """
    current = values
    for lag, window in zip(reversed(state.lags), reversed(state.windows)):
        current = undifference(current, window, lag)
    return current
