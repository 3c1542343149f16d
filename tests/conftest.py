"""Pytest configuration and shared synthetic series for envcast tests."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


def make_weekly_series(n: int = 255, seed: int = 42) -> pd.Series:
    """Positive weekly series with yearly seasonality, mild trend and AR(1) noise."""
    rng = np.random.default_rng(seed)
    t = np.arange(n)
    noise = np.zeros(n)
    shocks = rng.normal(0.0, 0.12, n)
    for i in range(1, n):
        noise[i] = 0.5 * noise[i - 1] + shocks[i]
    log_level = 3.2 + 0.35 * np.sin(2 * np.pi * t / 52) + 0.0015 * t + noise
    index = pd.date_range("2014-01-05", periods=n, freq="W-SUN")
    return pd.Series(np.exp(log_level), index=index, name="pm25")


def make_arma11_series(n: int = 300, seed: int = 7) -> np.ndarray:
    """Stationary ARMA(1,1) sample with a non-zero mean."""
    rng = np.random.default_rng(seed)
    eps = rng.normal(0.0, 1.0, n + 100)
    y = np.zeros(n + 100)
    for i in range(1, n + 100):
        y[i] = 0.5 + 0.6 * y[i - 1] + eps[i] + 0.3 * eps[i - 1]
    return y[100:]


@pytest.fixture
def weekly_series() -> pd.Series:
    """255 weekly PM2.5-like observations."""
    return make_weekly_series()


@pytest.fixture
def arma11_series() -> np.ndarray:
    """Stationary ARMA(1,1) sample."""
    return make_arma11_series()
