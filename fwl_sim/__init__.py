"""
fwl_sim: Residualization under Collinearity, Frequentist vs Bayesian
=====================================================================

Simulates linear data over a grid of sample sizes and collinearity levels,
fits paired OLS and Bayesian regressions before and after residualizing
x2 on x1 (the Frisch–Waugh–Lovell step), and returns every fitted model in
an explicit registry for comparison.

Quick Start
-----------
>>> from fwl_sim import run_simulation, summary_table
>>>
>>> result = run_simulation()
>>> result.registry.by_name("lm_resid_n200_rho0.9").summary()
>>> summary_table(result).head()

Design
------
x1, x3 ~ N(0, 1);  x2 = ρ·x1 + N(0, 0.1²)
y = 1 + 1.0·x1 − 1.0·x2 + 0.5·x3 + N(0, 1)

Models per grid cell (n, ρ):
    lm_n{n}_rho{ρ}         OLS on x1, x2, x3
    brm_n{n}_rho{ρ}        Bayesian on x1, x2, x3
    lm_resid_n{n}_rho{ρ}   OLS on x1, x2_resid, x3
    brm_resid_n{n}_rho{ρ}  Bayesian on x1, x2_resid, x3
"""

from fwl_sim.dgp import CollinearDGP, generate_dataset, iter_datasets
from fwl_sim.residualize import residualize, residual_formula
from fwl_sim.models import (
    BayesianFit,
    SamplerConfig,
    DEFAULT_SAMPLER,
    FORMULA,
    RESID_FORMULA,
    fit_ols,
    fit_bayesian,
)
from fwl_sim.registry import ModelKey, ModelRegistry, PARADIGMS
from fwl_sim.simulation import (
    ExperimentGrid,
    DEFAULT_GRID,
    SimulationResult,
    run_cell,
    run_simulation,
)
from fwl_sim.diagnostics import (
    sample_correlation,
    variance_inflation_factors,
    collinearity_diagnostics,
    coefficient_table,
    transform_comparison,
)
from fwl_sim.reporting import (
    summary_table,
    se_ratio_table,
    paradigm_agreement,
    to_latex,
    print_summary,
)

__version__ = "1.0.0"

__all__ = [
    # Data
    "CollinearDGP",
    "generate_dataset",
    "iter_datasets",
    "residualize",
    "residual_formula",
    # Models
    "BayesianFit",
    "SamplerConfig",
    "DEFAULT_SAMPLER",
    "FORMULA",
    "RESID_FORMULA",
    "fit_ols",
    "fit_bayesian",
    # Registry
    "ModelKey",
    "ModelRegistry",
    "PARADIGMS",
    # Driver
    "ExperimentGrid",
    "DEFAULT_GRID",
    "SimulationResult",
    "run_cell",
    "run_simulation",
    # Diagnostics
    "sample_correlation",
    "variance_inflation_factors",
    "collinearity_diagnostics",
    "coefficient_table",
    "transform_comparison",
    # Reporting
    "summary_table",
    "se_ratio_table",
    "paradigm_agreement",
    "to_latex",
    "print_summary",
]
