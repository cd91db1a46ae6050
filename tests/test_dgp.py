"""Tests for the simulated data generating process."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from fwl_sim.dgp import (
    BETA,
    COLUMNS,
    CollinearDGP,
    generate_dataset,
    iter_datasets,
)
from fwl_sim.simulation import ExperimentGrid


def test_dataset_shape_and_columns(rng):
    data = generate_dataset(200, 0.5, rng)
    assert list(data.columns) == list(COLUMNS)
    assert len(data) == 200
    assert np.isfinite(data.to_numpy()).all()


def test_same_seed_gives_identical_data():
    a = generate_dataset(300, 0.9, np.random.default_rng(7))
    b = generate_dataset(300, 0.9, np.random.default_rng(7))
    pd.testing.assert_frame_equal(a, b)


def test_stream_is_shared_across_calls():
    rng = np.random.default_rng(7)
    first = generate_dataset(50, 0.2, rng)
    second = generate_dataset(50, 0.2, rng)
    assert not np.allclose(first["x1"], second["x1"])


def test_draw_order_x1_noise_x3_eps():
    n, rho = 100, 0.5
    data = generate_dataset(n, rho, np.random.default_rng(3))

    rng = np.random.default_rng(3)
    x1 = rng.normal(0, 1, size=n)
    noise = rng.normal(0, 0.1, size=n)
    x3 = rng.normal(0, 1, size=n)
    eps = rng.normal(0, 1, size=n)

    np.testing.assert_array_equal(data["x1"], x1)
    np.testing.assert_allclose(data["x2"], rho * x1 + noise)
    np.testing.assert_array_equal(data["x3"], x3)
    expected_y = 1.0 + x1 - (rho * x1 + noise) + 0.5 * x3 + eps
    np.testing.assert_allclose(data["y"], expected_y)


def test_opposing_signs_on_correlated_covariates():
    assert BETA["x1"] > 0 > BETA["x2"]


@pytest.mark.parametrize("n", [0, -5, 2.5, True, "5", None])
def test_invalid_n_rejected(rng, n):
    with pytest.raises(ValueError):
        generate_dataset(n, 0.5, rng)


@pytest.mark.parametrize("rho", [np.nan, np.inf])
def test_invalid_rho_rejected(rng, rho):
    with pytest.raises(ValueError):
        generate_dataset(10, rho, rng)


def test_correlation_increases_with_rho():
    rng = np.random.default_rng(42)
    corrs = []
    for rho in (0.2, 0.5, 0.9):
        data = generate_dataset(1000, rho, rng)
        corrs.append(np.corrcoef(data["x1"], data["x2"])[0, 1])
    assert corrs[0] < corrs[1] < corrs[2]


def test_high_rho_correlation_exceeds_threshold():
    data = generate_dataset(200, 0.9, np.random.default_rng(42))
    assert np.corrcoef(data["x1"], data["x2"])[0, 1] > 0.85


def test_theoretical_quantities():
    dgp = CollinearDGP(rho=0.9)
    assert dgp.theoretical_correlation() == pytest.approx(0.9 / np.sqrt(0.82))
    assert dgp.theoretical_vif() == pytest.approx(82.0)
    assert CollinearDGP(rho=0.2).theoretical_vif() == pytest.approx(5.0)


def test_dgp_generate_matches_function():
    a = CollinearDGP(rho=0.5).generate(80, np.random.default_rng(1))
    b = generate_dataset(80, 0.5, np.random.default_rng(1))
    pd.testing.assert_frame_equal(a, b)


def test_dgp_rejects_nonpositive_noise():
    with pytest.raises(ValueError):
        CollinearDGP(rho=0.5, sigma_x2=0.0)


def test_iter_datasets_follows_grid_order():
    grid = ExperimentGrid(n_values=(20, 30), rho_values=(0.2, 0.9))
    cells = [(n, rho) for n, rho, _ in iter_datasets(grid, seed=5)]
    assert cells == [(20, 0.2), (20, 0.9), (30, 0.2), (30, 0.9)]

    rng = np.random.default_rng(5)
    for n, rho, data in iter_datasets(grid, seed=5):
        pd.testing.assert_frame_equal(data, generate_dataset(n, rho, rng))


def test_reordering_grid_changes_later_datasets():
    forward = ExperimentGrid(n_values=(50,), rho_values=(0.2, 0.9))
    reverse = ExperimentGrid(n_values=(50,), rho_values=(0.9, 0.2))
    fwd = {rho: d for _, rho, d in iter_datasets(forward, seed=1)}
    rev = {rho: d for _, rho, d in iter_datasets(reverse, seed=1)}
    assert not np.allclose(fwd[0.9]["x1"], rev[0.9]["x1"])
