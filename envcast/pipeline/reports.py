"""Forecast and model reports for a pipeline run."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any

from envcast.path import (
    FORECAST_REPORT_FILE,
    FORECAST_RESULTS_DIR,
    FORECAST_TABLE_FILE,
    MODEL_REPORT_FILE,
)
from envcast.pipeline.pipeline import PipelineResult
from envcast.utils import get_logger, save_dataframe_csv, save_json_pretty

logger = get_logger(__name__)


def build_forecast_report(result: PipelineResult) -> dict[str, Any]:
    """Forecast report: points, bounds, level used, clamps, or the failure."""
    report: dict[str, Any] = {
        "model": result.selection.selected.label,
        "horizon": result.config.horizon,
        "requested_confidence_level": result.config.confidence_level,
        "reference_max": result.reference_max,
        "succeeded": result.succeeded,
    }
    if result.forecast is not None:
        report["forecast"] = result.forecast.to_dict()
    if result.failure is not None:
        report["failure"] = result.failure.to_dict()
    if result.holdout is not None:
        report["holdout"] = dict(result.holdout)
    return report


def build_model_report(result: PipelineResult) -> dict[str, Any]:
    """Model report: transform, differencing, every candidate's AICc, diagnostics, override."""
    selection = result.selection
    return {
        "train_size": result.train_size,
        "transform": asdict(result.transform_params),
        "differencing": {
            "lags": list(result.difference_state.lags),
            "windows": [list(w) for w in result.difference_state.windows],
        },
        "selected_order": list(selection.order),
        "coefficients": {
            "intercept": selection.selected.intercept,
            "ar": list(selection.selected.ar_params),
            "ma": list(selection.selected.ma_params),
            "sigma2": selection.selected.sigma2,
        },
        "candidates_aicc": {
            **{row.label: row.aicc for row in selection.ranking},
            **{failure.label: None for failure in selection.failures},
        },
        "diagnostic_comparison": selection.diagnostic_comparison(),
        "selection": selection.to_dict(),
    }


def save_pipeline_reports(
    result: PipelineResult,
    output_dir: Path | str = FORECAST_RESULTS_DIR,
) -> dict[str, Path]:
    """Write the forecast report, model report and forecast table.

    Args:
        result: Pipeline result.
        output_dir: Target directory (created if missing).

    Returns:
        Mapping of report name to written path.
    """
    out = Path(output_dir)
    paths = {
        "forecast_report": out / FORECAST_REPORT_FILE.name,
        "model_report": out / MODEL_REPORT_FILE.name,
    }
    save_json_pretty(build_forecast_report(result), paths["forecast_report"])
    save_json_pretty(build_model_report(result), paths["model_report"])

    if result.forecast is not None:
        paths["forecast_table"] = out / FORECAST_TABLE_FILE.name
        save_dataframe_csv(result.forecast.to_frame(), paths["forecast_table"], index=True)

    for name, path in paths.items():
        logger.info(f"Saved {name}: {path}")
    return paths
