"""
Residualization (Frisch–Waugh–Lovell step).

Replaces a regressor by the part of it that is orthogonal to another
regressor:

    x2_resid = x2 − Ê[x2 | x1]

where Ê[x2 | x1] comes from an auxiliary OLS fit ``x2 ~ x1`` (with
intercept). The residual has zero sample mean and zero sample correlation
with x1, so including it instead of x2 removes the x1–x2 collinearity.
"""

from __future__ import annotations

import re

import pandas as pd
import statsmodels.formula.api as smf


RESID_SUFFIX: str = "_resid"


def residualize(
    data: pd.DataFrame,
    target: str = "x2",
    on: str = "x1",
) -> pd.DataFrame:
    """
    Return a copy of ``data`` with ``target`` replaced by its residual on ``on``.

    The new column ``{target}_resid`` takes the position of ``target``;
    ``data`` itself is left untouched.

    Parameters
    ----------
    data : pd.DataFrame
        Dataset containing both columns.
    target : str, default 'x2'
        Column to residualize.
    on : str, default 'x1'
        Column to residualize against.

    Returns
    -------
    pd.DataFrame
        Residualized dataset.
    """
    for col in (target, on):
        if col not in data.columns:
            raise KeyError(f"Column '{col}' not found in data")
    if target == on:
        raise ValueError("target and on must be different columns")

    aux = smf.ols(f"{target} ~ {on}", data=data).fit()

    out = data.copy()
    out[target] = aux.resid.to_numpy()
    return out.rename(columns={target: target + RESID_SUFFIX})


def auxiliary_slope(
    data: pd.DataFrame,
    target: str = "x2",
    on: str = "x1",
) -> float:
    """Slope b of the auxiliary regression ``target ~ on``."""
    return float(smf.ols(f"{target} ~ {on}", data=data).fit().params[on])


def residual_formula(formula: str, target: str = "x2") -> str:
    """
    Rewrite ``formula`` so that ``target`` refers to its residualized column.

    >>> residual_formula("y ~ x1 + x2 + x3")
    'y ~ x1 + x2_resid + x3'
    """
    pattern = rf"(?<![\w.]){re.escape(target)}(?![\w.])"
    lhs, sep, rhs = formula.partition("~")
    if not sep:
        raise ValueError(f"Not a regression formula: {formula!r}")
    if not re.search(pattern, rhs):
        raise ValueError(f"'{target}' does not appear on the right-hand side of {formula!r}")
    return lhs + sep + re.sub(pattern, target + RESID_SUFFIX, rhs)
