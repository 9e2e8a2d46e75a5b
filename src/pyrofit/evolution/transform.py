"""Variation pipeline: probabilistic crossover then mutation."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from ..core.types import Genome
from .operators import (
    DetUniformMutation,
    HypercubeCrossover,
    NormalMutation,
    OperatorBlend,
    SegmentCrossover,
    UniformMutation,
)


class SGATransform:
    """Simple-GA transform applied to a batch of selected genomes.

    Consecutive pairs (0, 1), (2, 3), ... are crossed with probability
    `p_cross`; a trailing odd genome is never crossed. Each genome is then
    mutated with probability `p_mut`. Genomes are changed in place; only the
    changed ones lose their fitness.
    """

    def __init__(
        self,
        crossover: Callable[..., bool],
        p_cross: float,
        mutation: Callable[..., bool],
        p_mut: float,
    ) -> None:
        for name, p in (("p_cross", p_cross), ("p_mut", p_mut)):
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {p}")
        self.crossover = crossover
        self.p_cross = p_cross
        self.mutation = mutation
        self.p_mut = p_mut

    def __call__(self, offspring: list[Genome], rng: np.random.Generator) -> list[Genome]:
        for k in range(len(offspring) // 2):
            if rng.random() < self.p_cross:
                self.crossover(offspring[2 * k], offspring[2 * k + 1], rng=rng)

        for genome in offspring:
            if rng.random() < self.p_mut:
                self.mutation(genome, rng=rng)

        return offspring


def make_crossover(
    alfa: float = 10.0,
    segment_weight: float = 0.5,
    hypercube_weight: float = 0.5,
    policy: str = "proportional",
) -> OperatorBlend:
    """Segment + hypercube crossover blend."""
    return OperatorBlend(
        [(SegmentCrossover(alfa), segment_weight), (HypercubeCrossover(alfa), hypercube_weight)],
        policy=policy,
    )


def make_mutation(
    epsilon: float = 0.1,
    sigma: float = 0.3,
    uniform_weight: float = 0.5,
    det_weight: float = 0.5,
    normal_weight: float = 0.5,
    policy: str = "sequential",
) -> OperatorBlend:
    """Uniform / det-uniform / normal mutation blend, in that order."""
    return OperatorBlend(
        [
            (UniformMutation(epsilon), uniform_weight),
            (DetUniformMutation(epsilon), det_weight),
            (NormalMutation(sigma), normal_weight),
        ],
        policy=policy,
    )
