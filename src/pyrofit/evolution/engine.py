"""Run driver for the generational loop.

Flow:
    1. Seed one numpy Generator (PCG64) for the whole run
    2. initialize() -> POP_SIZE evaluated genomes
    3. loop until the continuator stops:
         select_fraction -> SGATransform -> evaluate offspring
         -> plus_replace -> checkpoint (statistics, monitors)
    4. Sort the final population; the first genome is the best fit

All randomness flows through the one Generator, so a run is reproducible
for a fixed seed, dataset and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from ..core.config import FitConfig, default_config
from ..core.evaluator import FitnessEvaluator
from ..core.logging import get_logger
from ..core.results_io import save_results
from ..core.types import Genome, Population, RunStatistics, sort_population
from ..kinetics.arrhenius import ForwardModel, make_model
from ..kinetics.dataset import ExperimentalDataset
from .checkpoint import Checkpoint, FileMonitor, GenerationContinue, TimedConsoleMonitor
from .initializer import initialize
from .replacement import plus_replace
from .selection import select_fraction
from .transform import SGATransform, make_crossover, make_mutation

logger = get_logger(__name__)


def population_summary(population: Population) -> list[dict[str, float]]:
    """Fitness and named genes of every genome, in population order."""
    return [{"fitness": g.fitness, **g.as_dict()} for g in population]


@dataclass
class FitResult:
    """Outcome of a fitting run.

    Attributes:
        best: Best genome of the final population.
        population: Final population, sorted best first.
        history: RunStatistics per completed generation.
        n_evals: Number of fitness evaluations performed.
        trajectory: Forward-model curve of the best genome.
        results_path: Results artifact location (None when not written).
    """

    best: Genome
    population: Population
    history: list[RunStatistics] = field(default_factory=list)
    n_evals: int = 0
    trajectory: np.ndarray | None = None
    results_path: Path | None = None

    @property
    def best_fitness_per_generation(self) -> list[float]:
        return [s.best for s in self.history]


class EvolutionEngine:
    """Generational evolutionary search over [A, E, NS, yinf]."""

    def __init__(
        self,
        dataset: ExperimentalDataset,
        config: FitConfig | None = None,
        model: ForwardModel | None = None,
        checkpoint: Checkpoint | None = None,
    ) -> None:
        self.config = config or default_config()
        ga = self.config.ga
        if len(dataset) == 0:
            raise ValueError("Experimental dataset is empty")
        if ga.pop_size <= 0:
            raise ValueError(f"pop_size must be positive, got {ga.pop_size}")

        self.dataset = dataset
        self.evaluator = FitnessEvaluator(dataset, model or make_model(self.config.model.method))
        self.transform = SGATransform(
            make_crossover(
                alfa=ga.alfa,
                segment_weight=ga.segment_weight,
                hypercube_weight=ga.hypercube_weight,
                policy=ga.crossover_policy,
            ),
            ga.p_cross,
            make_mutation(
                epsilon=ga.epsilon,
                sigma=ga.sigma,
                uniform_weight=ga.uniform_mut_weight,
                det_weight=ga.det_mut_weight,
                normal_weight=ga.normal_mut_weight,
                policy=ga.mutation_policy,
            ),
            ga.p_mut,
        )
        self.checkpoint = checkpoint or Checkpoint(GenerationContinue(ga.max_gen))
        self.rng = np.random.default_rng(ga.seed)

    def step(self, population: Population) -> Population:
        """Run one generation and return the next population."""
        ga = self.config.ga
        offspring = select_fraction(population, ga.selection_rate, self.rng, ga.tournament_rate)
        offspring = self.transform(offspring, self.rng)
        self.evaluator.evaluate_population(offspring)
        return plus_replace(population, offspring, ga.pop_size)

    def run(self) -> FitResult:
        """Initialize, evolve until the continuator stops, return the best fit."""
        ga = self.config.ga
        population = initialize(
            ga.pop_size, self.config.seed_vector.to_array(), self.rng, self.evaluator
        )
        population = sort_population(population)
        logger.info(
            "initial population",
            pop_size=len(population),
            best=population[0].fitness,
            worst=population[-1].fitness,
            population=population_summary(population),
        )

        generation = 0
        keep_going = self.checkpoint.continuator(generation)
        while keep_going:
            population = self.step(population)
            generation += 1
            keep_going = self.checkpoint(generation, population)

        population = sort_population(population)
        best = population[0]
        logger.info(
            "final population",
            generations=generation,
            pop_size=len(population),
            population=population_summary(population),
        )
        logger.info(
            "best member",
            generations=generation,
            n_evals=self.evaluator.n_evals,
            fitness=best.fitness,
            **best.as_dict(),
        )
        return FitResult(
            best=best,
            population=population,
            history=list(self.checkpoint.history),
            n_evals=self.evaluator.n_evals,
        )


def run_fit(
    dataset: ExperimentalDataset,
    config: FitConfig | None = None,
    model: ForwardModel | None = None,
) -> FitResult:
    """Run a full fit and persist the statistics log and results artifact.

    The engine validates the dataset and configuration before the statistics
    log is opened, so a rejected run leaves an earlier log intact. The log
    is opened before the search starts, so an unwritable output location
    raises OSError before any generation runs.

    Args:
        dataset: Experimental data.
        config: Run configuration (defaults when None).
        model: Forward model override (the Arrhenius model when None).

    Returns:
        FitResult with the best genome, history and artifact path.
    """
    config = config or default_config()
    out = config.output

    checkpoint = Checkpoint(
        GenerationContinue(config.ga.max_gen),
        [TimedConsoleMonitor(out.print_every_sec)],
    )
    engine = EvolutionEngine(dataset, config, model=model, checkpoint=checkpoint)

    with FileMonitor(out.stats_path) as file_monitor:
        checkpoint.add(file_monitor)
        with logger.timer("ga_run"):
            result = engine.run()

    result.trajectory = engine.evaluator.simulate(result.best)
    result.results_path = save_results(out.results_path, result.best, dataset, result.trajectory)
    logger.info("results saved", results=str(result.results_path), stats=str(out.stats_path))
    return result
