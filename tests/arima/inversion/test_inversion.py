"""Unit tests for mapping forecasts back to the original scale."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from envcast.arima.differencing.differencing import DifferenceState
from envcast.arima.forecasting.forecasting import ForecastResult
from envcast.arima.inversion.inversion import (
    InversionConfig,
    OriginalScaleForecast,
    apply_stability_clamp,
    invert_forecast,
    z_multiplier,
)
from envcast.arima.transformation.transformation import TransformParams
from envcast.exceptions import DegenerateIntervalError

LOG_PARAMS = TransformParams(lambda_=0.0)


def _forecast(points, se, integrated=None) -> ForecastResult:
    return ForecastResult(
        point_forecasts=tuple(points),
        standard_errors=tuple(se),
        horizon=len(points),
        model_label="ARMA(1,0)",
        integrated_standard_errors=tuple(integrated) if integrated is not None else None,
    )


def _state(last_value: float) -> DifferenceState:
    return DifferenceState(lags=(1,), windows=((last_value,),))


class TestZMultiplier:
    """Tests for z_multiplier."""

    @pytest.mark.parametrize(("level", "z"), [(0.80, 1.2816), (0.90, 1.6449), (0.95, 1.9600)])
    def test_normal_quantiles(self, level: float, z: float) -> None:
        """Two-sided standard normal quantiles."""
        assert z_multiplier(level) == pytest.approx(z, abs=1e-4)

    def test_invalid_level(self) -> None:
        """Levels outside (0, 1) are rejected."""
        with pytest.raises(ValueError):
            z_multiplier(1.0)


class TestStabilityClamp:
    """Tests for apply_stability_clamp."""

    def test_counts_each_change(self) -> None:
        """Every capped, floored or replaced value is counted."""
        lo, hi, report = apply_stability_clamp(
            [-1.0, 2.0, np.nan], [3.0, 30.0, np.inf], upper_cap=25.0
        )

        np.testing.assert_allclose(lo, [0.0, 2.0, 0.0])
        np.testing.assert_allclose(hi, [3.0, 25.0, 25.0])
        assert report.upper_capped == 1
        assert report.floored_to_zero == 1
        assert report.nonfinite_replaced == 2
        assert report.total == 4

    def test_idempotent(self) -> None:
        """A second pass changes nothing."""
        lo, hi, _ = apply_stability_clamp([-5.0, 1.0], [100.0, 2.0], upper_cap=10.0)
        lo2, hi2, report = apply_stability_clamp(lo, hi, upper_cap=10.0)

        np.testing.assert_array_equal(lo, lo2)
        np.testing.assert_array_equal(hi, hi2)
        assert report.total == 0


class TestInvertForecast:
    """Tests for invert_forecast."""

    def test_log_transform_bounds(self) -> None:
        """With lambda = 0 bounds are exp of the level bounds."""
        z = z_multiplier(0.90)
        result = invert_forecast(
            _forecast([0.1], [0.2]),
            _state(np.log(20.0)),
            LOG_PARAMS,
            0.90,
            reference_max=100.0,
        )

        assert isinstance(result, OriginalScaleForecast)
        assert result.point_forecasts[0] == pytest.approx(20.0 * np.exp(0.1))
        assert result.lower[0] == pytest.approx(20.0 * np.exp(0.1 - z * 0.2))
        assert result.upper[0] == pytest.approx(20.0 * np.exp(0.1 + z * 0.2))
        assert result.confidence_level == 0.90
        assert not result.fallback_used
        assert result.clamp.total == 0

    def test_integrated_method_matches_at_first_step(self) -> None:
        """Both interval methods agree one step ahead of a single lag-1 difference."""
        stationary = invert_forecast(
            _forecast([0.1], [0.2], integrated=[0.2]),
            _state(np.log(20.0)),
            LOG_PARAMS,
            0.90,
            reference_max=100.0,
        )
        integrated = invert_forecast(
            _forecast([0.1], [0.2], integrated=[0.2]),
            _state(np.log(20.0)),
            LOG_PARAMS,
            0.90,
            reference_max=100.0,
            config=InversionConfig(interval_method="integrated"),
        )

        assert integrated.interval_method == "integrated"
        np.testing.assert_allclose(integrated.lower, stationary.lower)
        np.testing.assert_allclose(integrated.upper, stationary.upper)

    def test_upper_bound_capped(self) -> None:
        """Wide bounds are capped at clamp_multiple * reference_max."""
        result = invert_forecast(
            _forecast([0.0], [1.0]),
            _state(np.log(4.0)),
            LOG_PARAMS,
            0.95,
            reference_max=5.0,
        )

        assert result.upper[0] == pytest.approx(12.5)
        assert result.clamp.upper_capped == 1
        assert result.lower[0] <= result.point_forecasts[0] <= result.upper[0]

    def test_falls_back_to_lower_level(self) -> None:
        """Bounds hitting the inverse floor trigger the next lower level."""
        params = TransformParams(lambda_=-0.5)
        result = invert_forecast(
            _forecast([0.0], [0.6]),
            _state(1.0),
            params,
            0.95,
            reference_max=10.0,
        )

        assert result.point_forecasts[0] == pytest.approx(4.0)
        assert result.requested_confidence_level == 0.95
        assert result.confidence_level == 0.90
        assert result.levels_tried == (0.95, 0.90)
        assert result.fallback_used
        assert result.domain_floor_hits == 0
        assert result.upper[0] == pytest.approx(25.0)
        assert result.clamp.upper_capped == 1

    def test_fallback_disabled_keeps_requested_level(self) -> None:
        """Without fallback the floored bound is capped and the hit reported."""
        params = TransformParams(lambda_=-0.5)
        result = invert_forecast(
            _forecast([0.0], [0.6]),
            _state(1.0),
            params,
            0.95,
            reference_max=10.0,
            config=InversionConfig(allow_level_fallback=False),
        )

        assert result.confidence_level == 0.95
        assert result.levels_tried == (0.95,)
        assert result.domain_floor_hits == 1
        assert result.upper[0] == pytest.approx(25.0)

    def test_point_above_cap_is_degenerate(self) -> None:
        """A point forecast beyond the clamp raises DegenerateIntervalError."""
        with pytest.raises(DegenerateIntervalError, match="outside the clamped bounds"):
            invert_forecast(
                _forecast([0.0], [0.1]),
                _state(np.log(100.0)),
                LOG_PARAMS,
                0.90,
                reference_max=10.0,
            )

    def test_integrated_method_needs_errors(self) -> None:
        """The integrated method requires integrated standard errors."""
        with pytest.raises(ValueError, match="integrated"):
            invert_forecast(
                _forecast([0.0], [0.1]),
                _state(1.0),
                LOG_PARAMS,
                0.90,
                reference_max=10.0,
                config=InversionConfig(interval_method="integrated"),
            )

    def test_index_length_checked(self) -> None:
        """Forecast labels must match the horizon."""
        with pytest.raises(ValueError, match="index"):
            invert_forecast(
                _forecast([0.0, 0.0], [0.1, 0.1]),
                _state(1.0),
                LOG_PARAMS,
                0.90,
                reference_max=10.0,
                index=["2020-01-05"],
            )

    def test_invalid_reference_max(self) -> None:
        """reference_max must be positive."""
        with pytest.raises(ValueError, match="reference_max"):
            invert_forecast(
                _forecast([0.0], [0.1]), _state(1.0), LOG_PARAMS, 0.90, reference_max=0.0
            )

    def test_to_frame_uses_dates(self) -> None:
        """Forecast table is indexed by the supplied dates."""
        dates = pd.date_range("2020-01-05", periods=2, freq="W-SUN")
        result = invert_forecast(
            _forecast([0.0, 0.0], [0.1, 0.1]),
            _state(np.log(10.0)),
            LOG_PARAMS,
            0.90,
            reference_max=20.0,
            index=list(dates),
        )
        frame = result.to_frame()

        assert list(frame.columns) == ["point", "lower", "upper"]
        assert frame.index.name == "date"
        assert frame.index[0] == dates[0]
        assert result.to_dict()["dates"][1] == str(dates[1])


class TestInversionConfig:
    """Tests for InversionConfig validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"clamp_multiple": 0.0},
            {"inverse_floor": 0.0},
            {"interval_method": "bootstrap"},
            {"fallback_levels": (0.9, 1.5)},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        """Invalid safeguards are rejected at construction."""
        with pytest.raises(ValueError):
            InversionConfig(**kwargs)
