"""Pytest configuration for pyrofit.

Engine-level tests use a closed-form toy forward model so that runs of a few
generations stay fast; the Arrhenius model itself is covered in
test_arrhenius.py.
"""

from __future__ import annotations

import numpy as np
import pytest

from pyrofit.core.config import FitConfig, merge_config
from pyrofit.core.types import Genome
from pyrofit.kinetics.dataset import ExperimentalDataset


def toy_model(params, dataset: ExperimentalDataset) -> np.ndarray:
    """First-order decay towards yinf with rate |NS| / 100 per unit time."""
    y0 = dataset.mass_fraction[0]
    yinf = params[3]
    return yinf + (y0 - yinf) * np.exp(-abs(params[2]) * (dataset.time - dataset.time[0]) / 100.0)


def nan_model(params, dataset: ExperimentalDataset) -> np.ndarray:
    return np.full(len(dataset), np.nan)


class ScriptedRng:
    """Generator stand-in returning scripted draws for tournament tests."""

    def __init__(self, pairs, coins):
        self._pairs = list(pairs)
        self._coins = list(coins)

    def integers(self, low, high, size=None):
        return np.array(self._pairs.pop(0))

    def random(self):
        return self._coins.pop(0)


@pytest.fixture
def tiny_dataset() -> ExperimentalDataset:
    return ExperimentalDataset.from_records([(0, 300, 1.0), (10, 400, 0.8), (20, 500, 0.5)])


@pytest.fixture
def decay_dataset() -> ExperimentalDataset:
    """Curve produced by toy_model with NS=3.0, yinf=0.25."""
    t = np.linspace(0.0, 200.0, 41)
    temp = 300.0 + 5.0 * t
    y = 0.25 + 0.75 * np.exp(-3.0 * t / 100.0)
    return ExperimentalDataset(t, temp, y)


@pytest.fixture
def small_config(tmp_path) -> FitConfig:
    return merge_config(
        FitConfig(),
        {
            "seed_vector": {"A": 1.0, "E": 1.0, "NS": 1.0, "yinf": 0.5},
            "ga": {"pop_size": 8, "max_gen": 12, "seed": 1337},
            "output": {"outdir": str(tmp_path / "out"), "print_every_sec": 0.0},
        },
    )


@pytest.fixture
def make_genome():
    def _make(fitness: float | None = None, genes=(1.0, 2.0, 3.0, 0.5)) -> Genome:
        g = Genome(genes=np.array(genes, dtype=float))
        if fitness is not None:
            g.set_fitness(fitness)
        return g

    return _make


@pytest.fixture
def toy() -> object:
    return toy_model


@pytest.fixture
def diverging() -> object:
    return nan_model


@pytest.fixture
def scripted_rng():
    return ScriptedRng
