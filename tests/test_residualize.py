"""Tests for the x2-on-x1 residualization step."""

from __future__ import annotations

import numpy as np
import pytest

from fwl_sim.residualize import auxiliary_slope, residual_formula, residualize


def test_residual_is_uncorrelated_with_x1(dataset):
    out = residualize(dataset)
    assert abs(np.corrcoef(out["x1"], out["x2_resid"])[0, 1]) < 1e-8
    assert abs(out["x2_resid"].mean()) < 1e-10


def test_column_replaced_in_place(dataset):
    out = residualize(dataset)
    assert list(out.columns) == ["y", "x1", "x2_resid", "x3"]
    np.testing.assert_array_equal(out["y"], dataset["y"])
    np.testing.assert_array_equal(out["x1"], dataset["x1"])
    np.testing.assert_array_equal(out["x3"], dataset["x3"])


def test_input_not_mutated(dataset):
    before = dataset.copy()
    residualize(dataset)
    assert list(dataset.columns) == ["y", "x1", "x2", "x3"]
    np.testing.assert_array_equal(dataset.to_numpy(), before.to_numpy())


def test_residual_matches_manual_projection(dataset):
    out = residualize(dataset)
    X = np.column_stack([np.ones(len(dataset)), dataset["x1"]])
    coef, *_ = np.linalg.lstsq(X, dataset["x2"].to_numpy(), rcond=None)
    manual = dataset["x2"].to_numpy() - X @ coef
    np.testing.assert_allclose(out["x2_resid"], manual, atol=1e-10)


def test_auxiliary_slope_recovers_rho(dataset):
    # dataset is drawn with rho = 0.9
    assert auxiliary_slope(dataset) == pytest.approx(0.9, abs=0.02)


def test_missing_column(dataset):
    with pytest.raises(KeyError):
        residualize(dataset, target="x9")


def test_same_column(dataset):
    with pytest.raises(ValueError):
        residualize(dataset, target="x1", on="x1")


def test_residual_formula():
    assert residual_formula("y ~ x1 + x2 + x3") == "y ~ x1 + x2_resid + x3"
    assert residual_formula("y ~ x2 + x21", "x2") == "y ~ x2_resid + x21"


@pytest.mark.parametrize("formula", ["y + x1 + x2", "y ~ x1 + x3", "x2 ~ x1"])
def test_residual_formula_rejects(formula):
    with pytest.raises(ValueError):
        residual_formula(formula, "x2")
