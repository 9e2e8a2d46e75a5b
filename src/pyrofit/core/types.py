"""Core types for genomes, fitness and run statistics.

This module defines the canonical types shared by the evaluator and the
evolutionary operators. Fitness is carried as an explicit tag so that a
genome whose genes changed can never be ranked on a stale value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Union

import numpy as np

from .constants import GENE_NAMES, N_GENES


@dataclass(frozen=True)
class Unevaluated:
    """Fitness tag for a genome that has not been scored since its last change."""


@dataclass(frozen=True)
class Evaluated:
    """Fitness tag holding a scored value (higher is better)."""

    value: float


Fitness = Union[Unevaluated, Evaluated]

UNEVALUATED = Unevaluated()


def _frozen_genes(genes: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = np.array(genes, dtype=np.float64)
    if arr.shape != (N_GENES,):
        raise ValueError(f"Expected {N_GENES} genes, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


@dataclass(eq=False)
class Genome:
    """Candidate kinetic parameter vector [A, E, NS, yinf].

    Genes are stored in a read-only array; the only way to change them is
    `set_genes`, which also resets the fitness tag to `Unevaluated`.

    Attributes:
        genes: Read-only float64 array of length N_GENES.
        tag: Fitness tag (Unevaluated | Evaluated).
    """

    genes: np.ndarray
    tag: Fitness = field(default=UNEVALUATED)

    def __post_init__(self) -> None:
        self.genes = _frozen_genes(self.genes)

    @property
    def is_evaluated(self) -> bool:
        return isinstance(self.tag, Evaluated)

    @property
    def fitness(self) -> float:
        """Return the scored fitness.

        Raises:
            ValueError: If the genome changed since it was last evaluated.
        """
        if not isinstance(self.tag, Evaluated):
            raise ValueError("Genome fitness read before evaluation")
        return self.tag.value

    def set_fitness(self, value: float) -> None:
        self.tag = Evaluated(float(value))

    def invalidate(self) -> None:
        self.tag = UNEVALUATED

    def set_genes(self, genes: Sequence[float] | np.ndarray) -> None:
        """Replace the genes and clear the fitness tag."""
        self.genes = _frozen_genes(genes)
        self.invalidate()

    def copy(self) -> Genome:
        return Genome(genes=self.genes.copy(), tag=self.tag)

    @property
    def A(self) -> float:
        return float(self.genes[0])

    @property
    def E(self) -> float:
        return float(self.genes[1])

    @property
    def NS(self) -> float:
        return float(self.genes[2])

    @property
    def yinf(self) -> float:
        return float(self.genes[3])

    def as_dict(self) -> dict[str, float]:
        """Map gene names to values."""
        return {name: float(v) for name, v in zip(GENE_NAMES, self.genes)}

    def __repr__(self) -> str:
        genes = " ".join(f"{v:.6g}" for v in self.genes)
        if isinstance(self.tag, Evaluated):
            return f"Genome(fitness={self.tag.value:.6g}, genes=[{genes}])"
        return f"Genome(unevaluated, genes=[{genes}])"


Population = list[Genome]


def sort_population(population: Sequence[Genome]) -> Population:
    """Return a new list sorted by fitness, best first (stable)."""
    return sorted(population, key=lambda g: g.fitness, reverse=True)


@dataclass(frozen=True)
class RunStatistics:
    """Per-generation aggregates of population fitness.

    Attributes:
        generation: Completed generation count.
        best: Best fitness in the population.
        mean: Mean fitness.
        stdev: Population standard deviation of fitness.
    """

    generation: int
    best: float
    mean: float
    stdev: float

    @classmethod
    def from_population(cls, generation: int, population: Sequence[Genome]) -> RunStatistics:
        """Compute statistics for an evaluated population."""
        if not population:
            raise ValueError("Cannot compute statistics of an empty population")
        values = np.array([g.fitness for g in population], dtype=np.float64)
        # Moments of values scaled into [-1, 1] stay finite with sentinels present
        scale = float(np.max(np.abs(values)))
        if scale == 0.0 or not np.isfinite(scale):
            scale = 1.0
        scaled = values / scale
        return cls(
            generation=int(generation),
            best=float(np.max(values)),
            mean=float(np.mean(scaled)) * scale,
            stdev=float(np.std(scaled)) * scale,
        )

    def as_row(self) -> tuple[int, float, float, float]:
        return (self.generation, self.best, self.mean, self.stdev)
