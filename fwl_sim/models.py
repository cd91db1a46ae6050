"""
Model Fitting
=============

Paired frequentist and Bayesian fits of the same regression formula.

- OLS via ``statsmodels`` (formula API).
- Bayesian Gaussian regression via ``bambi`` (NUTS through PyMC) with its
  default weakly-informative priors.

Both paradigms are treated as black boxes. Failures raised by either library
(singular designs, sampler errors) propagate to the caller unchanged.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any, List

import bambi as bmb
import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from numpy.typing import NDArray

from fwl_sim.residualize import residual_formula


# =============================================================================
# CONSTANTS
# =============================================================================

FORMULA: str = "y ~ x1 + x2 + x3"
RESID_FORMULA: str = residual_formula(FORMULA, "x2")
FAMILY: str = "gaussian"
SIGMA_NAMES = ("sigma", "y_sigma")


# =============================================================================
# OLS
# =============================================================================

def fit_ols(formula: str, data: pd.DataFrame) -> Any:
    """
    Fit an ordinary least squares model.

    Returns
    -------
    statsmodels.regression.linear_model.RegressionResultsWrapper
        Fitted results with ``params``, ``bse`` and ``conf_int()``.
    """
    return smf.ols(formula, data=data).fit()


# =============================================================================
# BAYESIAN
# =============================================================================

@dataclass(frozen=True)
class SamplerConfig:
    """
    Sampling controls for the Bayesian fits.

    ``iter`` counts warm-up iterations, so each chain keeps
    ``iter - warmup`` posterior draws.

    Parameters
    ----------
    chains : int, default 4
        Number of independent chains.
    iter : int, default 6000
        Total iterations per chain (warm-up included).
    warmup : int, default 1000
        Warm-up (tuning) iterations per chain, discarded.
    seed : int, default 42
        Sampler seed, fixed for every fit.
    cores : int, default 1
        Processes used for the chains; 1 samples them one after another.
    progressbar : bool, default False
        Show the sampler progress bar.
    """
    chains: int = 4
    iter: int = 6000
    warmup: int = 1000
    seed: int = 42
    cores: int = 1
    progressbar: bool = False

    def __post_init__(self) -> None:
        if self.chains < 1:
            raise ValueError(f"chains must be >= 1, got {self.chains}")
        if self.warmup < 0:
            raise ValueError(f"warmup must be >= 0, got {self.warmup}")
        if self.iter <= self.warmup:
            raise ValueError(
                f"iter ({self.iter}) must exceed warmup ({self.warmup})"
            )

    @property
    def draws(self) -> int:
        """Posterior draws kept per chain."""
        return self.iter - self.warmup

    @property
    def total_draws(self) -> int:
        return self.draws * self.chains


DEFAULT_SAMPLER = SamplerConfig()


def formula_terms(formula: str) -> List[str]:
    """
    Coefficient names for an additive formula, intercept first.

    >>> formula_terms("y ~ x1 + x2_resid + x3")
    ['Intercept', 'x1', 'x2_resid', 'x3']
    """
    _, sep, rhs = formula.partition("~")
    if not sep:
        raise ValueError(f"Not a regression formula: {formula!r}")
    terms = [t.strip() for t in rhs.split("+") if t.strip() not in ("", "1")]
    return ["Intercept"] + terms


@dataclass
class BayesianFit:
    """
    Container for a fitted Bayesian regression.

    Mirrors the parts of the statsmodels results API used for comparison:
    ``params`` are posterior means, ``bse`` posterior standard deviations and
    ``conf_int`` equal-tailed credible intervals.

    Attributes
    ----------
    formula : str
        Model formula.
    family : str
        Likelihood family.
    sampler : SamplerConfig
        Sampling controls used.
    model : bambi.Model
        The bambi model object.
    idata : arviz.InferenceData
        Posterior draws and sampler statistics.
    """
    formula: str
    family: str
    sampler: SamplerConfig
    model: Any = field(repr=False)
    idata: Any = field(repr=False)

    @property
    def terms(self) -> List[str]:
        return formula_terms(self.formula)

    def draws(self, name: str) -> NDArray:
        """Posterior draws of ``name`` pooled across chains."""
        return np.asarray(self.idata.posterior[name]).reshape(-1)

    @property
    def params(self) -> pd.Series:
        return pd.Series({t: self.draws(t).mean() for t in self.terms})

    @property
    def bse(self) -> pd.Series:
        return pd.Series({t: self.draws(t).std(ddof=1) for t in self.terms})

    def conf_int(self, alpha: float = 0.05) -> pd.DataFrame:
        """Equal-tailed (1 − alpha) credible intervals, columns 0 and 1."""
        q = [alpha / 2, 1 - alpha / 2]
        rows = {t: np.quantile(self.draws(t), q) for t in self.terms}
        return pd.DataFrame.from_dict(rows, orient="index")

    @property
    def sigma_name(self) -> str:
        for name in SIGMA_NAMES:
            if name in self.idata.posterior:
                return name
        raise KeyError("No residual scale parameter in posterior")

    @property
    def n_divergent(self) -> int:
        stats = getattr(self.idata, "sample_stats", None)
        if stats is None or "diverging" not in stats:
            return 0
        return int(np.asarray(stats["diverging"]).sum())

    def summary(self, alpha: float = 0.05) -> pd.DataFrame:
        """Posterior mean, sd and credible bounds for coefficients and σ."""
        rows = []
        for name in self.terms + [self.sigma_name]:
            d = self.draws(name)
            lower, upper = np.quantile(d, [alpha / 2, 1 - alpha / 2])
            rows.append({
                "term": name,
                "mean": d.mean(),
                "sd": d.std(ddof=1),
                "lower": lower,
                "upper": upper,
            })
        return pd.DataFrame(rows).set_index("term")

    def __repr__(self) -> str:
        return (
            f"BayesianFit(formula='{self.formula}', family='{self.family}', "
            f"chains={self.sampler.chains}, draws={self.sampler.draws})"
        )


def fit_bayesian(
    formula: str,
    data: pd.DataFrame,
    sampler: SamplerConfig = DEFAULT_SAMPLER,
    family: str = FAMILY,
) -> BayesianFit:
    """
    Fit a Bayesian regression with bambi's default priors.

    Parameters
    ----------
    formula : str
        Model formula, e.g. ``"y ~ x1 + x2 + x3"``.
    data : pd.DataFrame
        Dataset.
    sampler : SamplerConfig, default DEFAULT_SAMPLER
        Chains, iterations, warm-up and seed.
    family : str, default 'gaussian'
        Likelihood family.

    Returns
    -------
    BayesianFit
    """
    model = bmb.Model(formula, data, family=family)
    idata = model.fit(
        draws=sampler.draws,
        tune=sampler.warmup,
        chains=sampler.chains,
        cores=sampler.cores,
        random_seed=sampler.seed,
        progressbar=sampler.progressbar,
    )

    fit = BayesianFit(
        formula=formula,
        family=family,
        sampler=sampler,
        model=model,
        idata=idata,
    )

    if fit.n_divergent > 0:
        warnings.warn(
            f"{fit.n_divergent} divergent transitions in '{formula}' "
            f"(n={len(data)}). Posterior summaries may be unreliable.",
            RuntimeWarning,
        )

    return fit


__all__ = [
    "FORMULA",
    "RESID_FORMULA",
    "FAMILY",
    "SamplerConfig",
    "DEFAULT_SAMPLER",
    "BayesianFit",
    "fit_ols",
    "fit_bayesian",
    "formula_terms",
]
