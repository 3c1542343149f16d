"""Default parameters for the envcast forecasting pipeline."""

from __future__ import annotations

# Re-export paths for convenience
from envcast.path import (  # noqa: F401
    DATA_DIR,
    FORECAST_REPORT_FILE,
    FORECAST_RESULTS_DIR,
    FORECAST_TABLE_FILE,
    MODEL_REPORT_FILE,
    PM25_WEEKLY_FILE,
    PROJECT_ROOT,
    RESULTS_DIR,
)

# ============================================================================
# SERIES
# ============================================================================

DEFAULT_SEASONAL_PERIOD: int = 52
DEFAULT_DIFFERENCE_LAGS: tuple[int, ...] = (52, 1)
DEFAULT_DATE_COLUMN: str = "date"
DEFAULT_VALUE_COLUMN: str = "pm25"
DEFAULT_RESAMPLE_FREQ: str = "W"

# ============================================================================
# BOX-COX TRANSFORM
# ============================================================================

BOXCOX_LAMBDA_MIN: float = -2.0
BOXCOX_LAMBDA_MAX: float = 2.0
BOXCOX_LAMBDA_STEP: float = 0.01
# Lambdas closer to zero than this use the log branch
BOXCOX_LAMBDA_ZERO_TOL: float = 1e-8
BOXCOX_INVERSE_FLOOR: float = 1e-6

# ============================================================================
# ARMA FITTING
# ============================================================================

ARMA_FIT_METHOD: str = "lbfgs"
ARMA_FIT_MAXITER: int = 500
ARMA_FIT_TOLERANCE: float = 1e-5
ARMA_ENFORCE_STATIONARITY: bool = True
ARMA_ENFORCE_INVERTIBILITY: bool = True
DEFAULT_N_JOBS: int = 1

# ============================================================================
# CANDIDATE ORDERS
# ============================================================================

CANDIDATE_MAX_P: int = 5
CANDIDATE_MAX_Q: int = 5
CANDIDATE_SIGNIFICANCE_ALPHA: float = 0.05

# ============================================================================
# DIAGNOSTICS AND SELECTION
# ============================================================================

DIAGNOSTIC_ALPHA: float = 0.05
SELECTION_RELATIVE_MARGIN: float = 0.10
SELECTION_ABSOLUTE_MARGIN: float = 2.0

# ============================================================================
# FORECAST AND INVERSION
# ============================================================================

DEFAULT_HORIZON: int = 14
DEFAULT_CONFIDENCE_LEVEL: float = 0.90
CONFIDENCE_FALLBACK_LEVELS: tuple[float, ...] = (0.95, 0.90, 0.80)
CLAMP_UPPER_MULTIPLE: float = 2.5
CLAMP_LOWER_FLOOR: float = 0.0
INTERVAL_METHODS: tuple[str, ...] = ("stationary", "integrated")
DEFAULT_INTERVAL_METHOD: str = "stationary"
