"""
Data Generating Process for the Residualization Simulations.

This module implements the linear data generating process used to study how
residualizing one regressor on another (the Frisch–Waugh–Lovell step) affects
OLS and Bayesian regression in the same way.

DGP Specification
-----------------
Covariates:   x1 ~ N(0, 1),  x3 ~ N(0, 1)
Collinearity: x2 = ρ·x1 + ν,  ν ~ N(0, σ²_ν),  σ_ν = 0.1
Outcome:      y  = 1 + 1.0·x1 − 1.0·x2 + 0.5·x3 + ε,  ε ~ N(0, 1)

The opposing signs on x1 and x2 make the collinearity visible: when ρ is
large the two regressors nearly cancel and their individual coefficients are
poorly identified.

Theoretical correlation between x1 and x2:
    corr(x1, x2) = ρ / √(ρ² + σ²_ν)

Reproducibility
---------------
All draws come from a single ``numpy.random.Generator`` that is seeded once
per run and consumed in grid order. Draw order inside a cell is fixed:
x1, ν, x3, ε.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple, TYPE_CHECKING

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from fwl_sim.simulation import ExperimentGrid


# =============================================================================
# CONSTANTS
# =============================================================================

INTERCEPT: float = 1.0       # Outcome intercept
BETA: Dict[str, float] = {   # Outcome coefficients
    "x1": 1.0,
    "x2": -1.0,
    "x3": 0.5,
}
SIGMA_X2: float = 0.1        # Noise std of x2 around ρ·x1
SIGMA_EPS: float = 1.0       # Outcome noise std

COLUMNS: Tuple[str, ...] = ("y", "x1", "x2", "x3")


# =============================================================================
# VALIDATION
# =============================================================================

def check_n(n: int) -> int:
    """Return ``n`` as int, raising ValueError unless it is a positive integer."""
    if (
        isinstance(n, bool)
        or not isinstance(n, numbers.Real)
        or not float(n).is_integer()
        or n < 1
    ):
        raise ValueError(f"n must be a positive integer, got {n!r}")
    return int(n)


def check_rho(rho: float) -> float:
    """Return ``rho`` as float, raising ValueError unless it is finite."""
    rho = float(rho)
    if not np.isfinite(rho):
        raise ValueError(f"rho must be a finite real number, got {rho!r}")
    return rho


# =============================================================================
# DATA GENERATION
# =============================================================================

def generate_dataset(
    n: int,
    rho: float,
    rng: np.random.Generator,
    sigma_x2: float = SIGMA_X2,
) -> pd.DataFrame:
    """
    Draw one simulated dataset.

    Parameters
    ----------
    n : int
        Number of observations.
    rho : float
        Collinearity coefficient; x2 = ρ·x1 + N(0, σ²_ν).
    rng : numpy.random.Generator
        Shared random stream. It is advanced by exactly 4n normal draws.
    sigma_x2 : float, default 0.1
        Noise std σ_ν of x2 around ρ·x1.

    Returns
    -------
    data : pd.DataFrame
        Columns ``y, x1, x2, x3`` with ``n`` rows.
    """
    n = check_n(n)
    rho = check_rho(rho)

    x1 = rng.normal(0, 1, size=n)
    x2 = rho * x1 + rng.normal(0, sigma_x2, size=n)
    x3 = rng.normal(0, 1, size=n)

    eps = rng.normal(0, SIGMA_EPS, size=n)
    y = INTERCEPT + BETA["x1"] * x1 + BETA["x2"] * x2 + BETA["x3"] * x3 + eps

    return pd.DataFrame({"y": y, "x1": x1, "x2": x2, "x3": x3}, columns=list(COLUMNS))


@dataclass(frozen=True)
class CollinearDGP:
    """
    Linear DGP with a tunable x1–x2 collinearity.

    Parameters
    ----------
    rho : float
        Collinearity coefficient.
    sigma_x2 : float, default 0.1
        Noise std of x2 around ρ·x1.

    Examples
    --------
    >>> dgp = CollinearDGP(rho=0.9)
    >>> round(dgp.theoretical_correlation(), 3)
    0.994
    """
    rho: float
    sigma_x2: float = SIGMA_X2

    def __post_init__(self) -> None:
        check_rho(self.rho)
        if not self.sigma_x2 > 0:
            raise ValueError(f"sigma_x2 must be positive, got {self.sigma_x2}")

    def generate(self, n: int, rng: np.random.Generator) -> pd.DataFrame:
        return generate_dataset(n, self.rho, rng, sigma_x2=self.sigma_x2)

    def theoretical_correlation(self) -> float:
        """Population corr(x1, x2) = ρ / √(ρ² + σ²_ν)."""
        return self.rho / np.sqrt(self.rho ** 2 + self.sigma_x2 ** 2)

    def theoretical_vif(self) -> float:
        """
        Population VIF of x1 (and x2) in the pre-transform regression.

        x3 is independent of both, so VIF = 1 / (1 − corr(x1, x2)²).
        """
        r2 = self.theoretical_correlation() ** 2
        return 1.0 / (1.0 - r2)


def iter_datasets(
    grid: "ExperimentGrid",
    seed: int,
) -> Iterator[Tuple[int, float, pd.DataFrame]]:
    """
    Yield ``(n, rho, data)`` for every grid cell in run order.

    Uses the same seeding and draw order as the simulation driver, so the
    sequence of datasets matches what ``run_simulation`` fits.
    """
    rng = np.random.default_rng(seed)
    for n, rho in grid.cells():
        yield n, rho, generate_dataset(n, rho, rng)


__all__ = [
    "CollinearDGP",
    "generate_dataset",
    "iter_datasets",
    "check_n",
    "check_rho",
    "INTERCEPT",
    "BETA",
    "SIGMA_X2",
    "SIGMA_EPS",
    "COLUMNS",
]
