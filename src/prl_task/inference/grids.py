"""Fixed parameter grids for the grid-search estimators.

Every grid is a ``numpy.linspace`` rounded to six decimals.
"""

from __future__ import annotations

import numpy as np


def grid_linspace(start: float, stop: float, num: int) -> tuple[float, ...]:
    """Return ``num`` evenly spaced values in ``[start, stop]`` rounded to 6 decimals."""

    if num <= 0:
        raise ValueError("num must be > 0")
    return tuple(float(value) for value in np.round(np.linspace(start, stop, num), 6))


ALPHA_GRID = grid_linspace(0.01, 0.99, 25)
BETA_GRID = grid_linspace(0.3, 4.0, 16) + grid_linspace(5.0, 15.0, 6)
TAU_GRID = grid_linspace(0.0, 5.0, 21)
PHI_GRID = grid_linspace(0.05, 0.95, 15)
EWA_RHO_GRID = grid_linspace(0.10, 0.95, 12)
SENSITIVITY_RHO_GRID = grid_linspace(0.01, 0.99, 25)
DUAL_SENSITIVITY_RHO_GRID = grid_linspace(0.01, 0.99, 21)


__all__ = [
    "ALPHA_GRID",
    "BETA_GRID",
    "DUAL_SENSITIVITY_RHO_GRID",
    "EWA_RHO_GRID",
    "PHI_GRID",
    "SENSITIVITY_RHO_GRID",
    "TAU_GRID",
    "grid_linspace",
]
