"""Initial population around a literal seed vector."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import numpy as np

from ..core.constants import N_GENES
from ..core.types import Genome, Population


def perturb_seed(seed_vector: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Draw one gene vector around the seed.

    Each gene is `seed + N(0, seed * U(0, 2))`: a zero-mean Gaussian whose
    scale is itself a random fraction of the seed value. Per gene the scale
    draw precedes the normal draw. No clamping is applied.
    """
    genes = np.empty(N_GENES, dtype=np.float64)
    for i, s in enumerate(seed_vector):
        scale = abs(s * rng.uniform(0.0, 2.0))
        genes[i] = s + rng.normal(0.0, scale)
    return genes


def initialize(
    pop_size: int,
    seed_vector: Sequence[float] | np.ndarray,
    rng: np.random.Generator,
    evaluate: Callable[[Genome], float],
) -> Population:
    """Build and evaluate the starting generation.

    Args:
        pop_size: Number of genomes (> 0).
        seed_vector: [A, E, NS, yinf] starting guesses.
        rng: Run random generator.
        evaluate: Fitness evaluator; called once per genome right after
            construction.

    Returns:
        Population of `pop_size` evaluated genomes.
    """
    if pop_size <= 0:
        raise ValueError(f"pop_size must be positive, got {pop_size}")
    seed = np.asarray(seed_vector, dtype=np.float64)
    if seed.shape != (N_GENES,):
        raise ValueError(f"Seed vector must have {N_GENES} genes, got shape {seed.shape}")

    population: Population = []
    for _ in range(pop_size):
        genome = Genome(genes=perturb_seed(seed, rng))
        evaluate(genome)
        population.append(genome)
    return population
