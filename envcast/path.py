"""File and directory paths for the envcast pipeline."""

from __future__ import annotations

from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# ============================================================================
# BASE DIRECTORIES
# ============================================================================

DATA_DIR = PROJECT_ROOT / "data"
RESULTS_DIR = PROJECT_ROOT / "results"

# ============================================================================
# INPUT DATA
# ============================================================================

PM25_WEEKLY_FILE = DATA_DIR / "pm25_weekly.csv"

# ============================================================================
# PIPELINE OUTPUTS
# ============================================================================

FORECAST_RESULTS_DIR = RESULTS_DIR / "forecast"
FORECAST_REPORT_FILE = FORECAST_RESULTS_DIR / "forecast_report.json"
MODEL_REPORT_FILE = FORECAST_RESULTS_DIR / "model_report.json"
FORECAST_TABLE_FILE = FORECAST_RESULTS_DIR / "forecast.csv"
