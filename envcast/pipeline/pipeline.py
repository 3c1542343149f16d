"""End-to-end forecasting pipeline.

Transform -> difference -> fit candidates -> select -> forecast -> invert,
with an optional holdout evaluation when the series extends past the
training window. Each stage returns a new frozen object; nothing is shared
between stages except what is passed explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from envcast.arima.candidates.candidates import (
    CandidateFitSummary,
    fit_candidates,
    propose_candidate_orders,
)
from envcast.arima.differencing.differencing import DifferenceState, apply_differences
from envcast.arima.evaluation_arima.evaluation_arima import HoldoutMetrics, evaluate_holdout
from envcast.arima.forecasting.forecasting import ForecastResult, forecast_stationary
from envcast.arima.inversion.inversion import (
    InversionConfig,
    OriginalScaleForecast,
    invert_forecast,
)
from envcast.arima.selection.selection import SelectionPolicy, SelectionResult, select_model
from envcast.arima.transformation.transformation import (
    TransformParams,
    fit_transform,
    make_lambda_grid,
)
from envcast.constants import (
    ARMA_FIT_MAXITER,
    ARMA_FIT_METHOD,
    ARMA_FIT_TOLERANCE,
    BOXCOX_LAMBDA_MAX,
    BOXCOX_LAMBDA_MIN,
    BOXCOX_LAMBDA_STEP,
    CANDIDATE_MAX_P,
    CANDIDATE_MAX_Q,
    CANDIDATE_SIGNIFICANCE_ALPHA,
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_HORIZON,
    DEFAULT_N_JOBS,
    DEFAULT_SEASONAL_PERIOD,
    DIAGNOSTIC_ALPHA,
)
from envcast.data_preparation.data_preparation import split_train_test
from envcast.exceptions import DegenerateIntervalError
from envcast.utils import (
    get_logger,
    validate_confidence_level,
    validate_gap_free_series,
    validate_lags,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Run configuration for :func:`run_pipeline`."""

    seasonal_period: int = DEFAULT_SEASONAL_PERIOD
    difference_lags: tuple[int, ...] | None = None
    train_size: int | None = None
    horizon: int = DEFAULT_HORIZON
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    candidate_orders: tuple[tuple[int, int], ...] | None = None
    max_p: int = CANDIDATE_MAX_P
    max_q: int = CANDIDATE_MAX_Q
    order_alpha: float = CANDIDATE_SIGNIFICANCE_ALPHA
    lambda_min: float = BOXCOX_LAMBDA_MIN
    lambda_max: float = BOXCOX_LAMBDA_MAX
    lambda_step: float = BOXCOX_LAMBDA_STEP
    fit_method: str = ARMA_FIT_METHOD
    maxiter: int = ARMA_FIT_MAXITER
    fit_tolerance: float | None = ARMA_FIT_TOLERANCE
    n_jobs: int | None = DEFAULT_N_JOBS
    diagnostic_alpha: float = DIAGNOSTIC_ALPHA
    selection: SelectionPolicy = field(default_factory=SelectionPolicy)
    inversion: InversionConfig = field(default_factory=InversionConfig)

    def __post_init__(self) -> None:
        if self.seasonal_period < 2:
            raise ValueError(f"seasonal_period must be >= 2, got {self.seasonal_period}")
        if self.difference_lags is None:
            lags = (self.seasonal_period, 1)
        else:
            lags = validate_lags(self.difference_lags)
            if self.seasonal_period not in lags:
                raise ValueError(
                    f"differencing lags {lags} do not include the seasonal period "
                    f"{self.seasonal_period}"
                )
        object.__setattr__(self, "difference_lags", lags)
        validate_confidence_level(self.confidence_level)
        if self.horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {self.horizon}")
        if self.fit_tolerance is not None and self.fit_tolerance <= 0:
            raise ValueError(f"fit_tolerance must be positive, got {self.fit_tolerance}")


@dataclass(frozen=True)
class ForecastFailure:
    """Structured outcome when forecasts could not be mapped back safely."""

    error_type: str
    message: str
    requested_confidence_level: float
    horizon: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.error_type,
            "message": self.message,
            "requested_confidence_level": self.requested_confidence_level,
            "horizon": self.horizon,
        }


@dataclass(frozen=True)
class PipelineResult:
    """Everything produced by one pipeline run."""

    config: PipelineConfig
    train_size: int
    reference_max: float
    transform_params: TransformParams
    difference_state: DifferenceState
    fit_summary: CandidateFitSummary
    selection: SelectionResult
    stationary_forecast: ForecastResult | None
    forecast: OriginalScaleForecast | None
    failure: ForecastFailure | None
    holdout: HoldoutMetrics | None

    @property
    def succeeded(self) -> bool:
        return self.forecast is not None


def _future_index(train: pd.Series, horizon: int) -> list[pd.Timestamp] | None:
    """Dates following the training window, when the index allows it."""
    if not isinstance(train.index, pd.DatetimeIndex) or len(train) < 3:
        return None
    freq = train.index.freq or pd.infer_freq(train.index)
    if freq is None:
        return None
    return list(pd.date_range(start=train.index[-1], periods=horizon + 1, freq=freq)[1:])


def _build_forecast(
    selection: SelectionResult,
    difference_state: DifferenceState,
    transform_params: TransformParams,
    train: pd.Series,
    reference_max: float,
    config: PipelineConfig,
) -> tuple[ForecastResult | None, OriginalScaleForecast | None, ForecastFailure | None]:
    """Forecast with the selected model; a degenerate interval becomes a ForecastFailure."""
    stationary_forecast = forecast_stationary(
        selection.selected, config.horizon, difference_lags=config.difference_lags
    )
    try:
        forecast = invert_forecast(
            stationary_forecast,
            difference_state,
            transform_params,
            config.confidence_level,
            reference_max=reference_max,
            config=config.inversion,
            index=_future_index(train, config.horizon),
        )
    except DegenerateIntervalError as e:
        logger.error(f"Forecast inversion failed: {type(e).__name__}: {e}")
        failure = ForecastFailure(
            error_type=type(e).__name__,
            message=str(e),
            requested_confidence_level=config.confidence_level,
            horizon=config.horizon,
        )
        return stationary_forecast, None, failure
    return stationary_forecast, forecast, None


def run_pipeline(series: pd.Series, config: PipelineConfig | None = None) -> PipelineResult:
    """Run the full seasonal ARMA pipeline on one series.

    Args:
        series: Full gap-free series of positive measurements. Only the first
            ``config.train_size`` values are used for fitting; the rest, if
            any, are used for the holdout evaluation.
        config: Run configuration; defaults to ``PipelineConfig()``.

    Returns:
        PipelineResult. When the forecast cannot be inverted safely,
        ``forecast`` is None and ``failure`` explains why.

    Raises:
        ValueError: If the series or configuration is invalid.
        DomainError: If the training data contains non-positive values.
        ModelSelectionError: If no candidate model survives fitting.
    """
    config = config or PipelineConfig()
    full = validate_gap_free_series(series)
    train_size = config.train_size if config.train_size is not None else len(full)
    train, test = split_train_test(full, train_size)
    reference_max = float(full.max())

    logger.info("=" * 60)
    logger.info(
        f"Seasonal ARMA pipeline: {len(train)} training weeks, horizon {config.horizon}, "
        f"lags {config.difference_lags}"
    )
    logger.info("=" * 60)

    grid = make_lambda_grid(config.lambda_min, config.lambda_max, config.lambda_step)
    transformed, transform_params = fit_transform(train, grid=grid)
    stationary, difference_state = apply_differences(transformed, config.difference_lags)

    if config.candidate_orders is not None:
        orders = [tuple(order) for order in config.candidate_orders]
    else:
        orders = propose_candidate_orders(
            stationary, max_p=config.max_p, max_q=config.max_q, alpha=config.order_alpha
        )
    fit_summary = fit_candidates(
        stationary,
        orders,
        n_jobs=config.n_jobs,
        method=config.fit_method,
        maxiter=config.maxiter,
        tolerance=config.fit_tolerance,
        alpha=config.diagnostic_alpha,
    )
    selection = select_model(
        fit_summary.candidates,
        fit_summary.diagnostics,
        policy=config.selection,
        failures=fit_summary.failures,
    )

    stationary_forecast, forecast, failure = _build_forecast(
        selection, difference_state, transform_params, train, reference_max, config
    )

    holdout = None
    if forecast is not None and not test.empty:
        holdout = evaluate_holdout(forecast, test.to_numpy())

    logger.info(
        f"Pipeline complete: {selection.selected.label} "
        f"({'forecast ready' if forecast is not None else 'forecast failed'})"
    )
    return PipelineResult(
        config=config,
        train_size=train_size,
        reference_max=reference_max,
        transform_params=transform_params,
        difference_state=difference_state,
        fit_summary=fit_summary,
        selection=selection,
        stationary_forecast=stationary_forecast,
        forecast=forecast,
        failure=failure,
        holdout=holdout,
    )
