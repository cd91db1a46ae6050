"""
Plotting Functions
==================

Figures comparing coefficient uncertainty across collinearity levels,
paradigms and the residualization transform.
"""

from pathlib import Path
from typing import Any, Optional, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from fwl_sim.reporting import PARADIGM_LABELS
from fwl_sim.residualize import RESID_SUFFIX


COLORS = {
    "lm": "#2E86AB",
    "brm": "#C73E1D",
}


def set_publication_style() -> None:
    """Apply the serif, print-ready rcParams used for paper figures."""
    plt.rcParams.update({
        'font.family': 'serif',
        'font.serif': ['Times New Roman', 'DejaVu Serif', 'serif'],
        'font.size': 11,
        'mathtext.fontset': 'stix',
        'figure.dpi': 150,
        'figure.facecolor': 'white',
        'axes.labelsize': 12,
        'axes.titlesize': 13,
        'axes.titleweight': 'bold',
        'legend.fontsize': 10,
        'legend.framealpha': 0.9,
        'xtick.direction': 'in',
        'ytick.direction': 'in',
        'grid.alpha': 0.3,
        'grid.linestyle': '--',
        'savefig.dpi': 300,
        'savefig.bbox': 'tight',
        'savefig.facecolor': 'white',
    })


def plot_standard_errors(
    summary: pd.DataFrame,
    term: str = "x2",
    figsize: Optional[Tuple[float, float]] = None,
) -> Any:
    """
    Standard error of ``term`` against ρ, one panel per sample size.

    Colour encodes the paradigm (OLS / Bayesian); solid lines are the raw
    design and dashed lines the residualized one. Post-transform rows of
    ``x2_resid`` are plotted as ``x2``.

    Parameters
    ----------
    summary : pd.DataFrame
        Output of ``summary_table``.
    term : str, default 'x2'
        Coefficient to plot.
    figsize : tuple, optional
        Figure size; defaults to 4 inches per panel.

    Returns
    -------
    matplotlib Figure
    """
    df = summary.copy()
    df["term"] = df["term"].str.replace(f"{RESID_SUFFIX}$", "", regex=True)
    df = df[df["term"] == term]
    if df.empty:
        raise ValueError(f"No rows for term '{term}' in summary")

    df["Paradigm"] = df["paradigm"].map(PARADIGM_LABELS)
    df["Transform"] = df["transform"].map({"pre": "raw", "post": "residualized"})

    n_values = sorted(df["n"].unique())
    if figsize is None:
        figsize = (4 * len(n_values), 4)

    fig, axes = plt.subplots(1, len(n_values), figsize=figsize, sharey=False, squeeze=False)

    palette = {PARADIGM_LABELS[k]: v for k, v in COLORS.items()}
    for ax, n in zip(axes[0], n_values):
        sns.lineplot(
            data=df[df["n"] == n],
            x="rho", y="se",
            hue="Paradigm", style="Transform",
            style_order=["raw", "residualized"],
            palette=palette, markers=True, ax=ax,
        )
        ax.set_title(f"n = {n}")
        ax.set_xlabel("ρ")
        ax.set_ylabel(f"SE({term})")
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)

    # Single legend on the last panel
    for ax in axes[0][:-1]:
        legend = ax.get_legend()
        if legend is not None:
            legend.remove()

    fig.tight_layout()
    return fig


def save_figure(
    fig: Any,
    path: Union[str, Path],
    formats: Tuple[str, ...] = ("pdf",),
) -> None:
    """Save ``fig`` once per format next to ``path`` and close it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    for fmt in formats:
        fig.savefig(path.with_suffix(f".{fmt}"))
    plt.close(fig)


__all__ = [
    "COLORS",
    "set_publication_style",
    "plot_standard_errors",
    "save_figure",
]
