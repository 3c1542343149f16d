"""Unit tests for ARMA model fitting."""

from __future__ import annotations

from pathlib import Path
import sys
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

# Add project root to Python path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from envcast.arima.diagnostics.information_criteria import compute_aic, compute_aicc
from envcast.arima.models.arma_model import CandidateModel, _optimizer_kwargs, fit_arma
from envcast.exceptions import NonConvergenceError, UndefinedCriterionError


def _fake_results(p: int, q: int, nobs: int, converged: bool = True) -> MagicMock:
    """Stand-in for SARIMAXResults with the attributes fit_arma reads."""
    names = ["intercept"] + [f"ar.L{i}" for i in range(1, p + 1)]
    names += [f"ma.L{i}" for i in range(1, q + 1)] + ["sigma2"]
    results = MagicMock()
    results.model.param_names = names
    results.params = np.linspace(0.1, 0.5, len(names))
    results.llf = -12.0
    results.nobs = nobs
    results.resid = np.zeros(nobs)
    results.mle_retvals = {
        "converged": converged,
        "iterations": 17,
        "warnflag": 0 if converged else 1,
    }
    return results


class TestInformationCriteria:
    """Tests for AIC/AICc helpers."""

    def test_known_values(self) -> None:
        """AIC = -2llf + 2k and AICc adds 2k(k+1)/(n-k-1)."""
        assert compute_aic(-10.0, 3) == pytest.approx(26.0)
        assert compute_aicc(-10.0, 3, 20) == pytest.approx(27.5)

    @pytest.mark.parametrize("n", [8, 30, 200])
    def test_aicc_not_below_aic(self, n: int) -> None:
        """The correction term is non-negative whenever AICc is defined."""
        assert compute_aicc(-40.0, 6, n) >= compute_aic(-40.0, 6)

    @pytest.mark.parametrize("n", [4, 5])
    def test_undefined_when_denominator_not_positive(self, n: int) -> None:
        """n - k - 1 <= 0 raises UndefinedCriterionError."""
        with pytest.raises(UndefinedCriterionError):
            compute_aicc(-5.0, 4, n)


class TestFitArma:
    """Tests for fit_arma."""

    def test_fit_arma11_on_simulated_data(self, arma11_series: np.ndarray) -> None:
        """A real ARMA(1,1) fit exposes consistent likelihood summaries."""
        candidate = fit_arma(arma11_series, 1, 1)

        assert isinstance(candidate, CandidateModel)
        assert candidate.order == (1, 1)
        assert candidate.n_params == 3
        assert candidate.k == 4
        assert len(candidate.coefficients) == 2
        assert candidate.n_obs == arma11_series.size
        assert candidate.residuals.size == arma11_series.size
        assert candidate.aic == pytest.approx(candidate.results.aic)
        assert candidate.aicc is not None
        assert candidate.aicc > candidate.aic
        assert 0.2 < candidate.ar_params[0] < 0.9
        assert np.isfinite(candidate.intercept)

    def test_non_convergence_raises(self) -> None:
        """An optimizer that reports failure raises NonConvergenceError."""
        with patch(
            "envcast.arima.models.arma_model._create_and_fit_model",
            return_value=_fake_results(1, 0, 50, converged=False),
        ):
            with pytest.raises(NonConvergenceError, match="did not converge"):
                fit_arma(np.ones(50) + np.arange(50) * 0.01, 1, 0, maxiter=5)

    def test_undefined_aicc_is_recorded_as_none(self) -> None:
        """Too few observations leave aicc empty instead of failing the fit."""
        with patch(
            "envcast.arima.models.arma_model._create_and_fit_model",
            return_value=_fake_results(2, 2, 5),
        ):
            candidate = fit_arma(np.arange(5.0), 2, 2)

        assert candidate.aicc is None
        assert candidate.aic == pytest.approx(24.0 + 2 * 6)
        assert candidate.intercept == pytest.approx(0.1)
        assert candidate.iterations == 17

    @patch("envcast.arima.models.arma_model.SARIMAX")
    def test_statsmodels_failure_becomes_runtime_error(self, mock_sarimax: MagicMock) -> None:
        """Errors raised by statsmodels are wrapped with the order in the message."""
        mock_sarimax.return_value.fit.side_effect = np.linalg.LinAlgError("singular")
        with pytest.raises(RuntimeError, match=r"ARMA\(1,1\)"):
            fit_arma(np.arange(30.0), 1, 1)

    def test_negative_order_rejected(self) -> None:
        """Orders must be non-negative."""
        with pytest.raises(ValueError, match="non-negative"):
            fit_arma(np.arange(30.0), -1, 0)

    def test_non_finite_series_rejected(self) -> None:
        """NaN input is rejected before fitting."""
        with pytest.raises(ValueError, match="finite"):
            fit_arma(np.array([1.0, np.nan, 2.0]), 1, 0)

    @patch("envcast.arima.models.arma_model.SARIMAX")
    def test_tolerance_passed_to_optimizer(self, mock_sarimax: MagicMock) -> None:
        """The convergence tolerance reaches statsmodels' fit under lbfgs' name."""
        mock_sarimax.return_value.fit.return_value = _fake_results(1, 0, 50)
        fit_arma(np.arange(50.0), 1, 0, maxiter=300, tolerance=1e-7)

        kwargs = mock_sarimax.return_value.fit.call_args.kwargs
        assert kwargs["method"] == "lbfgs"
        assert kwargs["maxiter"] == 300
        assert kwargs["pgtol"] == pytest.approx(1e-7)


class TestOptimizerKwargs:
    """Tests for the optimizer keyword mapping."""

    def test_tolerance_keyword_per_method(self) -> None:
        """Each optimizer receives the tolerance under its own keyword."""
        assert _optimizer_kwargs("lbfgs", 500, 1e-6) == {
            "method": "lbfgs",
            "maxiter": 500,
            "pgtol": 1e-6,
        }
        assert _optimizer_kwargs("bfgs", 50, 1e-4)["gtol"] == 1e-4
        assert _optimizer_kwargs("newton", 50, 1e-4)["tol"] == 1e-4

    def test_no_tolerance_keeps_library_default(self) -> None:
        """None leaves the optimizer's own default in place."""
        assert _optimizer_kwargs("nm", 500, None) == {"method": "nm", "maxiter": 500}

    @pytest.mark.parametrize("tolerance", [0.0, -1e-6])
    def test_non_positive_tolerance_rejected(self, tolerance: float) -> None:
        """Tolerances must be positive."""
        with pytest.raises(ValueError, match="positive"):
            _optimizer_kwargs("lbfgs", 500, tolerance)

    def test_unsupported_method_with_tolerance(self) -> None:
        """A tolerance for an optimizer without a known keyword is an error."""
        with pytest.raises(ValueError, match="nm"):
            _optimizer_kwargs("nm", 500, 1e-6)
