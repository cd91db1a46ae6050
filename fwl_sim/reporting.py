"""
Reporting Functions
===================

Summary tables and LaTeX output for a simulation run.
"""

from typing import List, Optional, TYPE_CHECKING

import pandas as pd

from fwl_sim.diagnostics import coefficient_table, transform_comparison
from fwl_sim.registry import PARADIGMS

if TYPE_CHECKING:
    from fwl_sim.simulation import SimulationResult


PARADIGM_LABELS = {"lm": "OLS", "brm": "Bayesian"}


def summary_table(
    result: "SimulationResult",
    alpha: float = 0.05,
) -> pd.DataFrame:
    """
    Long-format coefficient table for every registered model.

    Parameters
    ----------
    result : SimulationResult
        Output of ``run_simulation``.
    alpha : float, default 0.05
        Interval level (confidence for OLS, credible for Bayesian).

    Returns
    -------
    pd.DataFrame
        One row per model × term with columns: model, paradigm, transform,
        n, rho, term, estimate, se, lower, upper.

    Examples
    --------
    >>> from fwl_sim import run_simulation, summary_table
    >>> result = run_simulation()
    >>> df = summary_table(result)
    >>> df.query("term == 'x1' and paradigm == 'lm'")
    """
    frames = []
    for key, model in result.registry.items():
        table = coefficient_table(model, alpha=alpha)
        table.insert(0, "model", key.name)
        table.insert(1, "paradigm", key.paradigm)
        table.insert(2, "transform", "post" if key.residualized else "pre")
        table.insert(3, "n", key.n)
        table.insert(4, "rho", key.rho)
        frames.append(table)

    if not frames:
        return pd.DataFrame(columns=["model", "paradigm", "transform", "n", "rho",
                                     "term", "estimate", "se", "lower", "upper"])
    return pd.concat(frames, ignore_index=True)


def se_ratio_table(
    result: "SimulationResult",
    terms: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Post/pre standard-error ratios per cell and paradigm.

    A ratio below 1 means residualization shrank the uncertainty of that
    coefficient. The x2 row compares x2_resid (post) with x2 (pre).

    Returns
    -------
    pd.DataFrame
        Columns: n, rho, paradigm, term, se_pre, se_post, se_ratio.
    """
    rows = []
    for n, rho in result.registry.cells():
        for paradigm in PARADIGMS:
            comp = transform_comparison(result.registry, n, rho, paradigm)
            for term, row in comp.iterrows():
                if terms is not None and term not in terms:
                    continue
                rows.append({
                    "n": n,
                    "rho": rho,
                    "paradigm": paradigm,
                    "term": term,
                    "se_pre": row["se_pre"],
                    "se_post": row["se_post"],
                    "se_ratio": row["se_ratio"],
                })
    return pd.DataFrame(rows, columns=["n", "rho", "paradigm", "term",
                                       "se_pre", "se_post", "se_ratio"])


def paradigm_agreement(summary: pd.DataFrame) -> pd.DataFrame:
    """
    Side-by-side OLS and Bayesian estimates for each cell, transform and term.

    Returns
    -------
    pd.DataFrame
        Columns: n, rho, transform, term, estimate_lm, estimate_brm,
        se_lm, se_brm, diff (brm − lm).
    """
    wide = summary.pivot_table(
        index=["n", "rho", "transform", "term"],
        columns="paradigm",
        values=["estimate", "se"],
    )
    wide.columns = [f"{stat}_{paradigm}" for stat, paradigm in wide.columns]
    wide = wide.reset_index()
    if {"estimate_lm", "estimate_brm"} <= set(wide.columns):
        wide["diff"] = wide["estimate_brm"] - wide["estimate_lm"]
    return wide


def to_latex(
    df: pd.DataFrame,
    caption: Optional[str] = None,
    label: Optional[str] = None,
    float_format: str = "%.3f",
) -> str:
    """
    Export a DataFrame to LaTeX table format.

    Parameters
    ----------
    df : pd.DataFrame
        Table to export.
    caption : str, optional
        Table caption.
    label : str, optional
        LaTeX label for referencing.
    float_format : str, default '%.3f'
        Format string for floating point numbers.

    Returns
    -------
    str
        LaTeX table code.
    """
    latex = df.to_latex(
        index=False,
        float_format=float_format,
        escape=False,
    )

    if caption or label:
        lines = latex.split('\n')

        insert_point = len(lines)
        for i, line in enumerate(lines):
            if '\\end{tabular}' in line:
                insert_point = i + 1
                break

        additions = []
        if caption:
            additions.append(f'\\caption{{{caption}}}')
        if label:
            additions.append(f'\\label{{{label}}}')

        for j, add in enumerate(additions):
            lines.insert(insert_point + j, add)

        latex = '\n'.join(lines)

    return latex


def format_estimate(estimate: float, se: float, digits: int = 3) -> str:
    """Format as ``"1.234 (0.045)"``."""
    return f"{estimate:.{digits}f} ({se:.{digits}f})"


def print_summary(result: "SimulationResult", term: str = "x2") -> None:
    """
    Print the pre/post comparison of ``term`` for every cell.

    Parameters
    ----------
    result : SimulationResult
        Output of ``run_simulation``.
    term : str, default 'x2'
        Coefficient to report (x2 is matched with x2_resid post-transform).
    """
    print("\n" + "=" * 70)
    print("RESIDUALIZATION SUMMARY")
    print("=" * 70)

    diag = result.diagnostics.set_index(["n", "rho"])

    for i, (n, rho) in enumerate(result.registry.cells()):
        if i > 0:
            print("-" * 70)

        d = diag.loc[(n, rho)]
        print(f"\nn = {n}, ρ = {rho:.1f}  |  corr(x1, x2) = {d['corr_x1_x2']:.3f}"
              f"  |  VIF(x1) = {d['vif_x1_pre']:.1f} → {d['vif_x1_post']:.1f}")

        for paradigm in PARADIGMS:
            comp = transform_comparison(result.registry, n, rho, paradigm)
            row = comp.loc[term]
            print(f"  {PARADIGM_LABELS[paradigm]:<9} {term}: "
                  f"pre {format_estimate(row['estimate_pre'], row['se_pre'])}  "
                  f"post {format_estimate(row['estimate_post'], row['se_post'])}  "
                  f"SE ratio {row['se_ratio']:.3f}")

    print("\n" + "=" * 70)

    if len(result.diagnostics) > 1:
        corr = result.diagnostics["corr_x1_x2"]
        resid = result.diagnostics["corr_x1_resid"].abs()
        print(f"\ncorr(x1, x2) range: [{corr.min():.3f}, {corr.max():.3f}]")
        print(f"max |corr(x1, x2_resid)|: {resid.max():.2e}")
        print("=" * 70 + "\n")


__all__ = [
    "summary_table",
    "se_ratio_table",
    "paradigm_agreement",
    "to_latex",
    "format_estimate",
    "print_summary",
]
