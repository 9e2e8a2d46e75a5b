"""Test the Arrhenius forward model."""

import time

import numpy as np
import pytest

from pyrofit.core.constants import A_INITIAL, E_INITIAL, NS_INITIAL, R_GAS, SEED, YINF_INITIAL
from pyrofit.core.evaluator import fitness_of
from pyrofit.evolution.initializer import perturb_seed
from pyrofit.kinetics import arrhenius
from pyrofit.kinetics.arrhenius import make_model, rate_constant, simulate
from pyrofit.kinetics.dataset import ExperimentalDataset


@pytest.fixture
def ramp_dataset():
    """10 K/min ramp from 300 K to 900 K."""
    t = np.linspace(0.0, 3600.0, 61)
    temp = 300.0 + t / 6.0
    y = np.ones_like(t)
    return ExperimentalDataset(t, temp, y)


SEED_PARAMS = np.array([A_INITIAL, E_INITIAL, NS_INITIAL, YINF_INITIAL])


def test_rate_constant():
    assert rate_constant(2.0, 0.0, 500.0) == pytest.approx(2.0)
    assert rate_constant(1.0, 1000.0, 400.0) == pytest.approx(np.exp(-1000.0 / (R_GAS * 400.0)))


def test_trajectory_aligned_to_dataset(ramp_dataset):
    traj = simulate(SEED_PARAMS, ramp_dataset)

    assert traj.shape == (len(ramp_dataset),)
    assert traj[0] == pytest.approx(1.0)
    assert np.all(np.isfinite(traj))


def test_trajectory_decays_towards_yinf(ramp_dataset):
    traj = simulate(SEED_PARAMS, ramp_dataset)

    assert np.all(np.diff(traj) <= 1e-6), "mass fraction should not increase"
    assert traj[-1] < 0.5
    assert traj[-1] >= YINF_INITIAL - 1e-4


def test_negligible_rate_keeps_initial_mass(ramp_dataset):
    params = np.array([1.0, 1e7, 1.0, 0.2])
    traj = simulate(params, ramp_dataset)
    np.testing.assert_allclose(traj, 1.0, atol=1e-9)


def test_rk23_matches_lsoda(ramp_dataset):
    params = np.array([1e6, 1.0e5, 1.0, 0.3])
    lsoda = simulate(params, ramp_dataset)
    rk23 = make_model("RK23")(params, ramp_dataset)
    np.testing.assert_allclose(rk23, lsoda, atol=1e-3)


def test_repeated_times_share_values():
    ds = ExperimentalDataset([0.0, 1.0, 1.0, 2.0], [500.0] * 4, [1.0, 0.9, 0.9, 0.8])
    traj = simulate([1.0, 0.0, 1.0, 0.0], ds)
    assert traj[1] == traj[2]
    assert traj[3] == pytest.approx(np.exp(-2.0), rel=1e-3)


def test_single_sample_dataset():
    ds = ExperimentalDataset([0.0], [300.0], [0.9])
    np.testing.assert_array_equal(simulate(SEED_PARAMS, ds), [0.9])


def test_deterministic(ramp_dataset):
    np.testing.assert_array_equal(
        simulate(SEED_PARAMS, ramp_dataset), simulate(SEED_PARAMS, ramp_dataset)
    )


def test_wrong_parameter_count(ramp_dataset):
    with pytest.raises(ValueError, match="Expected 4 parameters"):
        simulate([1.0, 2.0], ramp_dataset)


def test_unknown_method(ramp_dataset):
    with pytest.raises(ValueError, match="Unknown integration method"):
        simulate(SEED_PARAMS, ramp_dataset, method="Euler")


@pytest.mark.parametrize(
    "params",
    [
        [np.inf, 1.0, 1.0, 0.2],
        [1e13, -1e6, 0.5, 0.2],
        [-5.33e11, 87776.0, 7.62, 0.36],
        [np.nan, 1e5, 1.0, 0.2],
    ],
)
def test_unusable_rate_constant_diverges(tiny_dataset, params):
    traj = simulate(params, tiny_dataset)

    assert traj[0] == 1.0
    assert np.all(np.isnan(traj[1:]))


def test_leaving_bounds_diverges(ramp_dataset, monkeypatch):
    # Collapses the admissible band to y == 0.5, which y0 == 1.0 already violates
    monkeypatch.setattr(arrhenius, "BOUND_MARGIN", -0.5)
    traj = simulate(SEED_PARAMS, ramp_dataset)
    assert np.all(np.isnan(traj[1:]))


def test_step_budget_raises(ramp_dataset, monkeypatch):
    monkeypatch.setattr(arrhenius, "MAX_STEPS", 1)
    with pytest.raises(RuntimeError, match="exceeded 1 steps"):
        simulate(SEED_PARAMS, ramp_dataset)


def test_seeded_initial_genomes_evaluate_quickly(tiny_dataset):
    """The first draws of a default run, genome 18 included, must not stall."""
    rng = np.random.default_rng(SEED)
    for i in range(20):
        genes = perturb_seed(SEED_PARAMS, rng)
        start = time.perf_counter()
        f = fitness_of(genes, tiny_dataset, simulate)
        elapsed = time.perf_counter() - start

        assert np.isfinite(f), f"genome {i}: {genes}"
        assert elapsed < 10.0, f"genome {i} took {elapsed:.1f}s: {genes}"
