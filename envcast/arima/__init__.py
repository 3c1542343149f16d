"""Seasonal ARMA pipeline package.

This package exposes submodules under `envcast.arima.*`. Import from specific
subpackages, e.g.:

    from envcast.arima.transformation import fit_transform
    from envcast.arima.selection import select_model

"""

from __future__ import annotations

__all__: list[str] = []
