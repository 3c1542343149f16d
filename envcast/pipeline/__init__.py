"""Pipeline orchestration and reports."""

from __future__ import annotations

from .pipeline import ForecastFailure, PipelineConfig, PipelineResult, run_pipeline
from .reports import build_forecast_report, build_model_report, save_pipeline_reports

__all__ = [
    "ForecastFailure",
    "PipelineConfig",
    "PipelineResult",
    "build_forecast_report",
    "build_model_report",
    "run_pipeline",
    "save_pipeline_reports",
]
