"""
Collinearity Diagnostics
========================

Functions for measuring the x1–x2 collinearity and for comparing fitted
coefficients before and after residualization.

Frisch–Waugh–Lovell identities (OLS)
------------------------------------
With x2_resid = x2 − a − b·x1 the regressor spaces of
``y ~ x1 + x2 + x3`` and ``y ~ x1 + x2_resid + x3`` coincide, hence:

- the coefficient on x2_resid equals the coefficient on x2,
- its standard error is unchanged,
- the coefficient on x1 becomes β̂₁ + b·β̂₂ (the total x1 effect),
- x3, independent of both, is essentially unaffected.

The Bayesian fits follow the same pattern up to prior and Monte Carlo error.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from scipy import stats
from statsmodels.stats.outliers_influence import variance_inflation_factor

from fwl_sim.registry import ModelKey
from fwl_sim.residualize import RESID_SUFFIX

if TYPE_CHECKING:
    from fwl_sim.registry import ModelRegistry


def sample_correlation(a: NDArray, b: NDArray) -> float:
    """
    Pearson sample correlation between ``a`` and ``b``.

    Returns 0.0 when either input is numerically constant (e.g. an exact
    residual of zero length), where the correlation is undefined.
    """
    a = np.asarray(a, dtype=float).ravel()
    b = np.asarray(b, dtype=float).ravel()
    if len(a) != len(b):
        raise ValueError("a and b must have the same length")
    if np.std(a) < 1e-12 or np.std(b) < 1e-12:
        return 0.0
    return float(stats.pearsonr(a, b)[0])


def variance_inflation_factors(
    data: pd.DataFrame,
    covariates: Iterable[str],
) -> pd.Series:
    """
    Variance inflation factor VIF_j = 1 / (1 − R²_j) of each covariate.

    R²_j comes from regressing covariate j on the others plus an intercept.

    Parameters
    ----------
    data : pd.DataFrame
        Dataset.
    covariates : iterable of str
        Columns entering the regression.

    Returns
    -------
    pd.Series
        VIF per covariate.
    """
    covariates = list(covariates)
    missing = [c for c in covariates if c not in data.columns]
    if missing:
        raise KeyError(f"Columns not found in data: {missing}")

    exog = data[covariates].to_numpy(dtype=float)
    exog = np.column_stack([np.ones(len(exog)), exog])

    return pd.Series(
        {c: variance_inflation_factor(exog, j + 1) for j, c in enumerate(covariates)},
        name="vif",
    )


def collinearity_diagnostics(
    data: pd.DataFrame,
    resid_data: pd.DataFrame,
    n: int,
    rho: float,
    target: str = "x2",
    on: str = "x1",
) -> Dict[str, Any]:
    """
    Per-cell summary of collinearity before and after residualization.

    Returns
    -------
    dict
        - n, rho: grid cell
        - corr_x1_x2: sample corr(on, target)
        - corr_x1_resid: sample corr(on, target_resid), ≈ 0 by construction
        - vif_x1_pre, vif_x2_pre: VIFs in the raw design
        - vif_x1_post, vif_x2_post: VIFs in the residualized design
    """
    resid = target + RESID_SUFFIX
    covariates = [c for c in data.columns if c != "y"]
    resid_covariates = [c for c in resid_data.columns if c != "y"]

    vif_pre = variance_inflation_factors(data, covariates)
    vif_post = variance_inflation_factors(resid_data, resid_covariates)

    return {
        "n": n,
        "rho": rho,
        "corr_x1_x2": sample_correlation(data[on], data[target]),
        "corr_x1_resid": sample_correlation(resid_data[on], resid_data[resid]),
        "vif_x1_pre": vif_pre[on],
        "vif_x2_pre": vif_pre[target],
        "vif_x1_post": vif_post[on],
        "vif_x2_post": vif_post[resid],
    }


def coefficient_table(model: Any, alpha: float = 0.05) -> pd.DataFrame:
    """
    Tidy coefficient table for either paradigm.

    Works for statsmodels results and ``BayesianFit`` alike, since both
    expose ``params``, ``bse`` and ``conf_int(alpha)``. For the Bayesian fit
    ``estimate`` is the posterior mean, ``se`` the posterior sd and the
    bounds are an equal-tailed credible interval.

    Returns
    -------
    pd.DataFrame
        Columns: term, estimate, se, lower, upper.
    """
    ci = model.conf_int(alpha=alpha)
    params = model.params
    return pd.DataFrame({
        "term": list(params.index),
        "estimate": params.to_numpy(dtype=float),
        "se": model.bse.reindex(params.index).to_numpy(dtype=float),
        "lower": ci.loc[params.index, 0].to_numpy(dtype=float),
        "upper": ci.loc[params.index, 1].to_numpy(dtype=float),
    })


def _canonical_term(term: str) -> str:
    return term[: -len(RESID_SUFFIX)] if term.endswith(RESID_SUFFIX) else term


def transform_comparison(
    registry: "ModelRegistry",
    n: int,
    rho: float,
    paradigm: str = "lm",
    alpha: float = 0.05,
) -> pd.DataFrame:
    """
    Compare pre- and post-transform coefficients of one model pair.

    Rows are matched on the canonical term name, so ``x2_resid`` in the
    post-transform model lines up with ``x2`` in the pre-transform model.

    Returns
    -------
    pd.DataFrame
        Indexed by term, columns: estimate_pre, se_pre, estimate_post,
        se_post, se_ratio (post / pre).
    """
    pre = coefficient_table(registry[ModelKey.make(paradigm, False, n, rho)], alpha)
    post = coefficient_table(registry[ModelKey.make(paradigm, True, n, rho)], alpha)

    pre = pre.set_index("term")[["estimate", "se"]]
    post = post.assign(term=post["term"].map(_canonical_term)).set_index("term")
    post = post[["estimate", "se"]]

    out = pre.join(post, lsuffix="_pre", rsuffix="_post", how="outer")
    out["se_ratio"] = out["se_post"] / out["se_pre"]
    out.index.name = "term"
    return out


def collinearity_interpretation(
    corr: float,
    vif: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Describe the collinearity level of a design in words.

    The wording is descriptive; no hard thresholds are implied.
    """
    r2 = corr ** 2
    if vif is None:
        vif = np.inf if r2 >= 1 else 1.0 / (1.0 - r2)

    if np.isinf(vif):
        interpretation = (
            "The regressors are perfectly collinear; their separate "
            "coefficients are not identified."
        )
    else:
        interpretation = (
            f"corr = {corr:.3f} inflates coefficient variances by a factor "
            f"of about {vif:.1f} (standard errors by {np.sqrt(vif):.1f}×)."
        )

    return {
        "corr": corr,
        "vif": vif,
        "se_inflation": np.sqrt(vif),
        "interpretation": interpretation,
    }


def summarize_cells(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """Stack per-cell diagnostic rows into a DataFrame."""
    cols = ["n", "rho", "corr_x1_x2", "corr_x1_resid",
            "vif_x1_pre", "vif_x2_pre", "vif_x1_post", "vif_x2_post"]
    return pd.DataFrame(rows, columns=cols)


__all__ = [
    "sample_correlation",
    "variance_inflation_factors",
    "collinearity_diagnostics",
    "coefficient_table",
    "transform_comparison",
    "collinearity_interpretation",
    "summarize_cells",
]
