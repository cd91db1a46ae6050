"""
Simulation Driver
=================

Runs the residualization experiment over a grid of sample sizes and
collinearity levels.

For each grid cell (n, ρ), in nested order (outer n, inner ρ):

    1. Draw a dataset from the shared random stream.
    2. Fit ``lm`` (OLS) and ``brm`` (Bayesian) on y ~ x1 + x2 + x3.
    3. Residualize x2 on x1.
    4. Fit ``lm_resid`` and ``brm_resid`` on y ~ x1 + x2_resid + x3.
    5. Register the four models.

The random stream is seeded once per run, so the full sequence of datasets
is a pure function of the seed and the grid order. Any error raised while
fitting stops the run; nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from fwl_sim.diagnostics import collinearity_diagnostics, summarize_cells
from fwl_sim.dgp import check_n, check_rho, generate_dataset
from fwl_sim.models import (
    DEFAULT_SAMPLER,
    FORMULA,
    RESID_FORMULA,
    SamplerConfig,
    fit_bayesian,
    fit_ols,
)
from fwl_sim.registry import ModelKey, ModelRegistry
from fwl_sim.residualize import residualize


# =============================================================================
# CONFIGURATION
# =============================================================================

DEFAULT_N_VALUES: Tuple[int, ...] = (200, 1000, 4000)   # Sample sizes
DEFAULT_RHO_VALUES: Tuple[float, ...] = (0.2, 0.5, 0.9)  # Low → high collinearity
BASE_SEED: int = 42

BayesFitter = Callable[[str, pd.DataFrame, SamplerConfig], Any]


@dataclass(frozen=True)
class ExperimentGrid:
    """
    Cartesian grid of (n, ρ) conditions.

    Parameters
    ----------
    n_values : sequence of int
        Sample sizes, in run order.
    rho_values : sequence of float
        Collinearity coefficients, in run order.
    """
    n_values: Tuple[int, ...] = DEFAULT_N_VALUES
    rho_values: Tuple[float, ...] = DEFAULT_RHO_VALUES

    def __post_init__(self) -> None:
        if len(self.n_values) == 0 or len(self.rho_values) == 0:
            raise ValueError("Grid axes must be non-empty")
        # Frozen: normalize through object.__setattr__
        object.__setattr__(self, "n_values", tuple(check_n(n) for n in self.n_values))
        object.__setattr__(self, "rho_values", tuple(check_rho(r) for r in self.rho_values))

        # Every cell must map to distinct model names
        if len(set(self.n_values)) != len(self.n_values):
            raise ValueError(f"Duplicate sample sizes in grid: {self.n_values}")
        labels = [f"{rho:.1f}" for rho in self.rho_values]
        if len(set(labels)) != len(labels):
            raise ValueError(
                f"rho values {self.rho_values} are not distinct at one decimal "
                f"({labels}); model names would collide"
            )

    def cells(self) -> Iterator[Tuple[int, float]]:
        """Yield (n, ρ) with n in the outer loop."""
        for n in self.n_values:
            for rho in self.rho_values:
                yield n, rho

    def __len__(self) -> int:
        return len(self.n_values) * len(self.rho_values)


DEFAULT_GRID = ExperimentGrid()


# =============================================================================
# RESULT CONTAINERS
# =============================================================================

@dataclass
class CellResult:
    """The four fitted models of one grid cell plus its diagnostics row."""
    n: int
    rho: float
    lm: Any
    brm: Any
    lm_resid: Any
    brm_resid: Any
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def models(self) -> Dict[ModelKey, Any]:
        return {
            ModelKey.make("lm", False, self.n, self.rho): self.lm,
            ModelKey.make("brm", False, self.n, self.rho): self.brm,
            ModelKey.make("lm", True, self.n, self.rho): self.lm_resid,
            ModelKey.make("brm", True, self.n, self.rho): self.brm_resid,
        }


@dataclass
class SimulationResult:
    """
    Everything a run produces.

    Attributes
    ----------
    grid : ExperimentGrid
        Conditions that were run.
    seed : int
        Seed of the data-generation stream.
    sampler : SamplerConfig
        Sampling controls of the Bayesian fits.
    registry : ModelRegistry
        All fitted models, four per cell.
    diagnostics : pd.DataFrame
        One row of collinearity diagnostics per cell.
    """
    grid: ExperimentGrid
    seed: int
    sampler: SamplerConfig
    registry: ModelRegistry
    diagnostics: pd.DataFrame

    def get(self, paradigm: str, residualized: bool, n: int, rho: float) -> Any:
        return self.registry.get_model(paradigm, residualized, n, rho)

    def __repr__(self) -> str:
        return (
            f"SimulationResult(cells={len(self.grid)}, models={len(self.registry)}, "
            f"seed={self.seed})"
        )


# =============================================================================
# DRIVER
# =============================================================================

def run_cell(
    n: int,
    rho: float,
    rng: np.random.Generator,
    sampler: SamplerConfig = DEFAULT_SAMPLER,
    bayes_fitter: BayesFitter = fit_bayesian,
) -> CellResult:
    """
    Generate one dataset and fit its four models.

    Parameters
    ----------
    n : int
        Sample size.
    rho : float
        Collinearity coefficient.
    rng : numpy.random.Generator
        Shared random stream (advanced in place).
    sampler : SamplerConfig
        Bayesian sampling controls.
    bayes_fitter : callable, default fit_bayesian
        ``(formula, data, sampler) -> model``.

    Returns
    -------
    CellResult
    """
    data = generate_dataset(n, rho, rng)

    lm = fit_ols(FORMULA, data)
    brm = bayes_fitter(FORMULA, data, sampler)

    resid_data = residualize(data, target="x2", on="x1")

    lm_resid = fit_ols(RESID_FORMULA, resid_data)
    brm_resid = bayes_fitter(RESID_FORMULA, resid_data, sampler)

    return CellResult(
        n=n,
        rho=rho,
        lm=lm,
        brm=brm,
        lm_resid=lm_resid,
        brm_resid=brm_resid,
        diagnostics=collinearity_diagnostics(data, resid_data, n, rho),
    )


def run_simulation(
    grid: ExperimentGrid = DEFAULT_GRID,
    seed: int = BASE_SEED,
    sampler: SamplerConfig = DEFAULT_SAMPLER,
    bayes_fitter: Optional[BayesFitter] = None,
    verbose: bool = True,
) -> SimulationResult:
    """
    Run the full residualization experiment.

    Parameters
    ----------
    grid : ExperimentGrid, default DEFAULT_GRID
        Conditions, processed with n in the outer loop.
    seed : int, default 42
        Seed of the single data-generation stream.
    sampler : SamplerConfig, default DEFAULT_SAMPLER
        Bayesian sampling controls (4 chains, 6000 iter, 1000 warm-up).
    bayes_fitter : callable, optional
        ``(formula, data, sampler) -> model``. Defaults to ``fit_bayesian``.
    verbose : bool, default True
        Print the configuration and show a progress bar.

    Returns
    -------
    SimulationResult
        Registry with four models per cell plus per-cell diagnostics.
    """
    if bayes_fitter is None:
        bayes_fitter = fit_bayesian

    if verbose:
        print("Residualization Simulation Configuration:")
        print(f"  Sample sizes: {list(grid.n_values)}")
        print(f"  Collinearity (ρ): {list(grid.rho_values)}")
        print(f"  Seed: {seed}")
        print(f"  Sampler: {sampler.chains} chains × {sampler.draws} draws "
              f"(warm-up {sampler.warmup})")
        print(f"  Total models: {4 * len(grid)}")

    rng = np.random.default_rng(seed)
    registry = ModelRegistry()
    rows = []

    cells = tqdm(list(grid.cells()), desc="Grid cells", disable=not verbose)
    for n, rho in cells:
        cells.set_postfix_str(f"n={n}, ρ={rho:.1f}")

        cell = run_cell(n, rho, rng, sampler=sampler, bayes_fitter=bayes_fitter)

        for key, model in cell.models().items():
            registry.add(key, model)
        rows.append(cell.diagnostics)

    return SimulationResult(
        grid=grid,
        seed=seed,
        sampler=sampler,
        registry=registry,
        diagnostics=summarize_cells(rows),
    )


__all__ = [
    "ExperimentGrid",
    "DEFAULT_GRID",
    "DEFAULT_N_VALUES",
    "DEFAULT_RHO_VALUES",
    "BASE_SEED",
    "CellResult",
    "SimulationResult",
    "run_cell",
    "run_simulation",
]
