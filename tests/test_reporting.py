"""Tests for summary tables, LaTeX export and figures."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from fwl_sim.diagnostics import (
    coefficient_table,
    collinearity_interpretation,
    sample_correlation,
    transform_comparison,
    variance_inflation_factors,
)
from fwl_sim.plotting import plot_standard_errors, save_figure, set_publication_style
from fwl_sim.reporting import (
    format_estimate,
    paradigm_agreement,
    print_summary,
    se_ratio_table,
    summary_table,
    to_latex,
)


# =============================================================================
# Diagnostics
# =============================================================================

def test_sample_correlation():
    a = np.arange(10.0)
    assert sample_correlation(a, 2 * a + 1) == pytest.approx(1.0)
    assert sample_correlation(a, np.ones(10)) == 0.0
    with pytest.raises(ValueError):
        sample_correlation(a, a[:5])


def test_vif_matches_correlation(dataset):
    vif = variance_inflation_factors(dataset, ["x1", "x2", "x3"])
    r = np.corrcoef(dataset["x1"], dataset["x2"])[0, 1]
    # x3 is nearly orthogonal, so VIF(x1) ≈ 1 / (1 − r²)
    assert vif["x1"] == pytest.approx(1 / (1 - r ** 2), rel=0.05)
    assert vif["x3"] == pytest.approx(1.0, abs=0.05)
    with pytest.raises(KeyError):
        variance_inflation_factors(dataset, ["x1", "z"])


def test_collinearity_interpretation():
    info = collinearity_interpretation(0.9)
    assert info["vif"] == pytest.approx(1 / 0.19)
    assert "inflates" in info["interpretation"]
    assert np.isinf(collinearity_interpretation(1.0)["vif"])


def test_coefficient_table_columns(stub_result):
    table = coefficient_table(stub_result.registry.by_name("lm_n200_rho0.2"))
    assert list(table.columns) == ["term", "estimate", "se", "lower", "upper"]
    assert list(table["term"]) == ["Intercept", "x1", "x2", "x3"]
    assert (table["lower"] < table["estimate"]).all()
    assert (table["estimate"] < table["upper"]).all()


def test_transform_comparison_aligns_resid_term(stub_result):
    comp = transform_comparison(stub_result.registry, 200, 0.9, "lm")
    assert set(comp.index) == {"Intercept", "x1", "x2", "x3"}
    assert comp.loc["x2", "se_ratio"] == pytest.approx(1.0, rel=1e-8)
    assert comp.loc["x1", "se_ratio"] < 1.0


# =============================================================================
# Tables
# =============================================================================

def test_summary_table(stub_result):
    df = summary_table(stub_result)
    assert len(df) == len(stub_result.registry) * 4
    assert set(df["paradigm"]) == {"lm", "brm"}
    assert set(df["transform"]) == {"pre", "post"}
    row = df[(df["model"] == "lm_resid_n1000_rho0.5") & (df["term"] == "x2_resid")]
    assert len(row) == 1
    assert row["n"].iloc[0] == 1000 and row["rho"].iloc[0] == 0.5


def test_se_ratio_table(stub_result):
    df = se_ratio_table(stub_result, terms=["x1", "x2"])
    assert set(df["term"]) == {"x1", "x2"}
    assert len(df) == len(stub_result.grid) * 2 * 2
    x2 = df[df["term"] == "x2"]
    np.testing.assert_allclose(x2["se_ratio"], 1.0, rtol=1e-8)


def test_paradigm_agreement_with_identical_fits(stub_result):
    wide = paradigm_agreement(summary_table(stub_result))
    assert {"estimate_lm", "estimate_brm", "se_lm", "se_brm", "diff"} <= set(wide.columns)
    np.testing.assert_allclose(wide["diff"], 0.0, atol=1e-12)


def test_to_latex_caption_and_label():
    df = pd.DataFrame({"term": ["x1"], "se_ratio": [0.123456]})
    latex = to_latex(df, caption="SE ratios", label="tab:se")
    assert "\\begin{tabular}" in latex
    assert "0.123" in latex
    assert "\\caption{SE ratios}" in latex
    assert "\\label{tab:se}" in latex


def test_format_estimate():
    assert format_estimate(1.23456, 0.04321) == "1.235 (0.043)"


def test_print_summary(stub_result, capsys):
    print_summary(stub_result)
    out = capsys.readouterr().out
    assert "RESIDUALIZATION SUMMARY" in out
    assert "n = 200, ρ = 0.9" in out
    assert "Bayesian" in out and "OLS" in out


# =============================================================================
# Figures
# =============================================================================

def test_plot_standard_errors_smoke(stub_result, tmp_path):
    set_publication_style()
    fig = plot_standard_errors(summary_table(stub_result), term="x2")
    assert len(fig.axes) == len(stub_result.grid.n_values)

    save_figure(fig, tmp_path / "se_x2.pdf", formats=("pdf", "png"))
    assert (tmp_path / "se_x2.pdf").exists()
    assert (tmp_path / "se_x2.png").exists()


def test_plot_unknown_term(stub_result):
    with pytest.raises(ValueError):
        plot_standard_errors(summary_table(stub_result), term="x9")
