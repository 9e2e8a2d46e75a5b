"""Stochastic tournament selection.

Two genomes are drawn uniformly (with replacement); the better one wins with
probability `tournament_rate`, otherwise the worse one does. Selection
returns copies, so downstream variation never touches the parents.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from ..core.types import Genome


def stoch_tournament(
    population: Sequence[Genome],
    rng: np.random.Generator,
    tournament_rate: float,
) -> Genome:
    """Pick one genome by a two-way stochastic tournament."""
    i, j = rng.integers(0, len(population), size=2)
    a, b = population[i], population[j]
    better, worse = (a, b) if a.fitness >= b.fitness else (b, a)
    return better if rng.random() < tournament_rate else worse


def select(
    population: Sequence[Genome],
    count: int,
    rng: np.random.Generator,
    tournament_rate: float = 0.8,
) -> list[Genome]:
    """Select `count` genomes (duplicates allowed).

    Args:
        population: Evaluated population.
        count: Number of selections.
        rng: Run random generator.
        tournament_rate: Probability that the fitter of two genomes is chosen.

    Returns:
        Copies of the selected genomes, in selection order.
    """
    if not 0.0 <= tournament_rate <= 1.0:
        raise ValueError(f"tournament_rate must be in [0, 1], got {tournament_rate}")
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if count > 0 and not population:
        raise ValueError("Cannot select from an empty population")

    return [stoch_tournament(population, rng, tournament_rate).copy() for _ in range(count)]


def select_fraction(
    population: Sequence[Genome],
    rate: float,
    rng: np.random.Generator,
    tournament_rate: float = 0.8,
) -> list[Genome]:
    """Select floor(rate * len(population)) genomes.

    A rate above 1 over-produces parents so that the variation step yields a
    full offspring batch.
    """
    if rate <= 0.0:
        raise ValueError(f"selection rate must be positive, got {rate}")
    count = int(math.floor(rate * len(population)))
    return select(population, count, rng, tournament_rate)
