"""Shared fixtures.

The driver tests swap the MCMC fit for an OLS fit so the grid runs in
milliseconds; tests that exercise the real sampler are marked ``slow``.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from fwl_sim.dgp import generate_dataset
from fwl_sim.models import SamplerConfig, fit_ols
from fwl_sim.simulation import ExperimentGrid, run_simulation


def ols_as_bayes(formula, data, sampler):
    """Stand-in Bayesian fitter with the same (formula, data, sampler) signature."""
    return fit_ols(formula, data)


@pytest.fixture
def ols_fitter():
    return ols_as_bayes


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def dataset(rng):
    return generate_dataset(500, 0.9, rng)


@pytest.fixture
def tiny_sampler() -> SamplerConfig:
    return SamplerConfig(chains=2, iter=300, warmup=200, seed=42)


@pytest.fixture(scope="session")
def small_grid() -> ExperimentGrid:
    return ExperimentGrid(n_values=(200, 1000), rho_values=(0.2, 0.5, 0.9))


@pytest.fixture(scope="session")
def stub_result(small_grid):
    return run_simulation(
        grid=small_grid,
        seed=42,
        bayes_fitter=ols_as_bayes,
        verbose=False,
    )
