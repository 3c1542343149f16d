"""CLI entry point for the weekly forecasting pipeline."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from envcast.arima.inversion.inversion import InversionConfig
from envcast.arima.selection.selection import SelectionPolicy
from envcast.config_logging import setup_logging
from envcast.constants import (
    ARMA_FIT_MAXITER,
    ARMA_FIT_TOLERANCE,
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_DATE_COLUMN,
    DEFAULT_HORIZON,
    DEFAULT_INTERVAL_METHOD,
    DEFAULT_N_JOBS,
    DEFAULT_SEASONAL_PERIOD,
    DEFAULT_VALUE_COLUMN,
    FORECAST_RESULTS_DIR,
    INTERVAL_METHODS,
    PM25_WEEKLY_FILE,
    SELECTION_ABSOLUTE_MARGIN,
    SELECTION_RELATIVE_MARGIN,
)
from envcast.data_preparation.data_preparation import load_weekly_series
from envcast.pipeline.pipeline import PipelineConfig, run_pipeline
from envcast.pipeline.reports import save_pipeline_reports
from envcast.utils import get_logger

setup_logging()
logger = get_logger(__name__)


def _parse_order(text: str) -> tuple[int, int]:
    """Parse ``"p,q"`` into an order tuple."""
    try:
        p_text, q_text = text.split(",")
        return int(p_text), int(q_text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"order must look like 'p,q', got {text!r}") from e


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Seasonal ARMA forecasting pipeline for weekly measurements",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--input", type=Path, default=PM25_WEEKLY_FILE, help="CSV or Parquet file")
    parser.add_argument("--date-column", default=DEFAULT_DATE_COLUMN)
    parser.add_argument("--value-column", default=DEFAULT_VALUE_COLUMN)
    parser.add_argument(
        "--seasonal-period",
        type=int,
        default=DEFAULT_SEASONAL_PERIOD,
        help="Observations per seasonal cycle (52 for weekly data)",
    )
    parser.add_argument(
        "--lags",
        type=int,
        nargs="+",
        default=None,
        help="Differencing lags in application order (default: seasonal period, then 1)",
    )
    parser.add_argument(
        "--train-size", type=int, default=None, help="Leading observations used for fitting"
    )
    parser.add_argument("--horizon", type=int, default=DEFAULT_HORIZON)
    parser.add_argument("--confidence", type=float, default=DEFAULT_CONFIDENCE_LEVEL)
    parser.add_argument(
        "--orders",
        type=_parse_order,
        nargs="+",
        default=None,
        help="Candidate orders as p,q (default: proposed from ACF/PACF)",
    )
    parser.add_argument("--n-jobs", type=int, default=DEFAULT_N_JOBS)
    parser.add_argument("--maxiter", type=int, default=ARMA_FIT_MAXITER)
    parser.add_argument(
        "--tolerance",
        type=float,
        default=ARMA_FIT_TOLERANCE,
        help="Optimizer convergence tolerance",
    )
    parser.add_argument(
        "--interval-method", choices=INTERVAL_METHODS, default=DEFAULT_INTERVAL_METHOD
    )
    parser.add_argument("--relative-margin", type=float, default=SELECTION_RELATIVE_MARGIN)
    parser.add_argument("--absolute-margin", type=float, default=SELECTION_ABSOLUTE_MARGIN)
    parser.add_argument(
        "--no-override", action="store_true", help="Always keep the lowest-AICc candidate"
    )
    parser.add_argument("--output-dir", type=Path, default=FORECAST_RESULTS_DIR)
    parser.add_argument(
        "--log-level", default=None, help="Logging level name (default: ENVCAST_LOG_LEVEL or INFO)"
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    return parser


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Translate parsed CLI arguments into a PipelineConfig."""
    return PipelineConfig(
        seasonal_period=args.seasonal_period,
        difference_lags=tuple(args.lags) if args.lags else None,
        train_size=args.train_size,
        horizon=args.horizon,
        confidence_level=args.confidence,
        candidate_orders=tuple(args.orders) if args.orders else None,
        n_jobs=args.n_jobs,
        maxiter=args.maxiter,
        fit_tolerance=args.tolerance,
        selection=SelectionPolicy(
            relative_margin=args.relative_margin,
            absolute_margin=args.absolute_margin,
            allow_override=not args.no_override,
        ),
        inversion=InversionConfig(interval_method=args.interval_method),
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the forecasting pipeline.

    Returns:
        Process exit code: 0 on success, 2 when the forecast could not be
        mapped back to the original scale.
    """
    args = create_parser().parse_args(argv)
    if args.log_level is not None or args.log_file is not None:
        setup_logging(args.log_level, log_file=args.log_file, force=True)
    config = build_config(args)

    try:
        series = load_weekly_series(
            args.input, date_column=args.date_column, value_column=args.value_column
        )
    except (FileNotFoundError, KeyError, ValueError) as ex:
        logger.error(f"Failed to load input series: {ex}")
        raise

    result = run_pipeline(series, config)
    save_pipeline_reports(result, args.output_dir)

    if result.failure is not None:
        logger.error(f"Forecast failed: {result.failure.message}")
        return 2
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Pipeline failed: {e}")
        sys.exit(1)
