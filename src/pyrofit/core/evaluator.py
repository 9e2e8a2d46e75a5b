"""Genome fitness evaluation, the coupling between search and physics.

Interface:
    evaluate(genome, dataset, model) -> fitness

Flow:
    1. model(genome.genes, dataset) -> simulated trajectory
    2. fitness = -sum((exp[i] - sim[i])**2) over samples i >= 1
       (sample 0 is the fixed initial condition)
    3. Non-finite fitness or a failing model -> SENTINEL_FITNESS; finite
       fitness is clamped to WORST_FINITE_FITNESS, one ulp above it
    4. Store Evaluated(fitness) on the genome
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from ..kinetics.arrhenius import ForwardModel, simulate
from ..kinetics.dataset import ExperimentalDataset
from .constants import SENTINEL_FITNESS
from .logging import get_logger
from .types import Genome

logger = get_logger(__name__)

# Floor for finite fitness, so huge but finite residuals still beat the sentinel
WORST_FINITE_FITNESS = float(np.nextafter(SENTINEL_FITNESS, 0.0))


def sum_squared_residuals(trajectory: np.ndarray, dataset: ExperimentalDataset) -> float:
    """Sum of squared residuals over samples 1..n-1."""
    with np.errstate(over="ignore", invalid="ignore"):
        delta = dataset.mass_fraction[1:] - np.asarray(trajectory, dtype=np.float64)[1:]
        return float(np.sum(delta * delta))


def fitness_of(
    genes: np.ndarray,
    dataset: ExperimentalDataset,
    model: ForwardModel = simulate,
) -> float:
    """Score a parameter vector; always returns a finite float."""
    try:
        trajectory = np.asarray(model(genes, dataset), dtype=np.float64)
    except (ArithmeticError, ValueError, RuntimeError) as e:
        logger.debug("forward model failed", error=str(e), genes=genes)
        return SENTINEL_FITNESS

    if trajectory.shape != (len(dataset),):
        logger.debug(
            "forward model returned misaligned trajectory",
            expected=len(dataset),
            got=list(trajectory.shape),
        )
        return SENTINEL_FITNESS

    fitness = -sum_squared_residuals(trajectory, dataset)
    if not np.isfinite(fitness):
        logger.debug("non-finite fitness replaced by sentinel", genes=genes)
        return SENTINEL_FITNESS
    return max(fitness, WORST_FINITE_FITNESS)


def evaluate(
    genome: Genome,
    dataset: ExperimentalDataset,
    model: ForwardModel = simulate,
) -> float:
    """Evaluate a genome against the experimental data.

    Args:
        genome: Candidate genome; its fitness tag is set to the result.
        dataset: Experimental data (not modified).
        model: Forward model producing a trajectory aligned to `dataset`.

    Returns:
        Fitness (higher is better, finite).
    """
    fitness = fitness_of(genome.genes, dataset, model)
    genome.set_fitness(fitness)
    return fitness


class FitnessEvaluator:
    """Evaluator bound to one dataset and model, counting evaluations."""

    def __init__(self, dataset: ExperimentalDataset, model: ForwardModel = simulate) -> None:
        if len(dataset) == 0:
            raise ValueError("Experimental dataset is empty")
        self.dataset = dataset
        self.model = model
        self._n_evals = 0

    def __call__(self, genome: Genome) -> float:
        self._n_evals += 1
        return evaluate(genome, self.dataset, self.model)

    def evaluate_population(self, population: Iterable[Genome]) -> int:
        """Evaluate every genome whose fitness tag is unevaluated.

        Returns:
            Number of genomes evaluated.
        """
        count = 0
        for genome in population:
            if not genome.is_evaluated:
                self(genome)
                count += 1
        return count

    def simulate(self, genome: Genome) -> np.ndarray:
        """Run the forward model for a genome without scoring it."""
        return np.asarray(self.model(genome.genes, self.dataset), dtype=np.float64)

    @property
    def n_evals(self) -> int:
        """Total number of evaluations performed."""
        return self._n_evals
