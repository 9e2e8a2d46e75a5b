"""Elitist plus-replacement."""

from __future__ import annotations

from collections.abc import Sequence

from ..core.types import Genome, Population, sort_population


def plus_replace(
    parents: Sequence[Genome],
    offspring: Sequence[Genome],
    pop_size: int,
) -> Population:
    """Keep the best `pop_size` genomes of parents + offspring.

    The sort is stable with parents ahead of offspring, so on ties an
    existing genome survives. The best fitness never decreases.

    Raises:
        ValueError: If the pool holds fewer than `pop_size` genomes, or any
            genome is unevaluated.
    """
    if pop_size <= 0:
        raise ValueError(f"pop_size must be positive, got {pop_size}")
    pool = list(parents) + list(offspring)
    if len(pool) < pop_size:
        raise ValueError(f"Replacement pool has {len(pool)} genomes, need {pop_size}")
    return sort_population(pool)[:pop_size]
