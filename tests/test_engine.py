"""Test the generational loop end to end with the toy forward model."""

import json

import numpy as np
import pytest

from pyrofit.core.config import merge_config
from pyrofit.core.constants import SENTINEL_FITNESS
from pyrofit.core.results_io import load_results
from pyrofit.evolution.engine import EvolutionEngine, run_fit
from pyrofit.evolution.initializer import initialize


def test_monotonic_improvement(decay_dataset, small_config, toy):
    result = EvolutionEngine(decay_dataset, small_config, model=toy).run()

    best = result.best_fitness_per_generation
    assert len(best) == small_config.ga.max_gen
    assert all(b2 >= b1 for b1, b2 in zip(best, best[1:]))
    assert result.best.fitness == best[-1]


def test_population_size_invariant(decay_dataset, small_config, toy):
    engine = EvolutionEngine(decay_dataset, small_config, model=toy)

    pop = initialize(8, small_config.seed_vector.to_array(), engine.rng, engine.evaluator)
    for _ in range(5):
        assert len(pop) == 8
        pop = engine.step(pop)
        assert len(pop) == 8
        assert all(g.is_evaluated for g in pop)


def test_offspring_batch_is_twice_population(decay_dataset, small_config, toy):
    cfg = merge_config(small_config, {"ga": {"max_gen": 3, "p_cross": 1.0, "p_mut": 1.0}})
    result = EvolutionEngine(decay_dataset, cfg, model=toy).run()
    # Every offspring is changed, so each generation evaluates 2 * pop_size genomes
    assert result.n_evals == 8 + 3 * 16


def test_determinism(decay_dataset, small_config, toy):
    r1 = EvolutionEngine(decay_dataset, small_config, model=toy).run()
    r2 = EvolutionEngine(decay_dataset, small_config, model=toy).run()

    assert r1.best_fitness_per_generation == r2.best_fitness_per_generation
    np.testing.assert_array_equal(r1.best.genes, r2.best.genes)


def test_different_seed_differs(decay_dataset, small_config, toy):
    other = merge_config(small_config, {"ga": {"seed": 2024}})
    r1 = EvolutionEngine(decay_dataset, small_config, model=toy).run()
    r2 = EvolutionEngine(decay_dataset, other, model=toy).run()
    assert not np.array_equal(r1.best.genes, r2.best.genes)


def test_search_improves_on_seed(decay_dataset, small_config, toy):
    cfg = merge_config(small_config, {"ga": {"max_gen": 40, "pop_size": 20}})
    result = EvolutionEngine(decay_dataset, cfg, model=toy).run()
    assert result.best.fitness > -0.05


@pytest.mark.parametrize("policy", ["sequential", "independent", "proportional"])
def test_mutation_policies_run(decay_dataset, small_config, toy, policy):
    cfg = merge_config(small_config, {"ga": {"mutation_policy": policy, "max_gen": 4}})
    result = EvolutionEngine(decay_dataset, cfg, model=toy).run()
    assert len(result.population) == 8


def test_diverging_genomes_never_survive(decay_dataset, small_config, toy):
    def half_broken(params, ds):
        # Negative yinf is treated as a divergent region
        if params[3] < 0:
            return np.full(len(ds), np.nan)
        return toy(params, ds)

    result = EvolutionEngine(decay_dataset, small_config, model=half_broken).run()

    finite = [g for g in result.population if g.fitness != SENTINEL_FITNESS]
    sentinels = [g for g in result.population if g.fitness == SENTINEL_FITNESS]
    assert finite, "search should keep finite genomes"
    if sentinels:
        assert min(g.fitness for g in finite) > SENTINEL_FITNESS
        assert result.population.index(sentinels[0]) >= len(finite)
    assert all(np.isfinite(s.best) for s in result.history)


def test_all_diverging_still_completes(tiny_dataset, small_config, diverging):
    cfg = merge_config(small_config, {"ga": {"max_gen": 2}})
    result = EvolutionEngine(tiny_dataset, cfg, model=diverging).run()
    assert result.best.fitness == SENTINEL_FITNESS


def test_zero_generations(decay_dataset, small_config, toy):
    cfg = merge_config(small_config, {"ga": {"max_gen": 0}})
    result = EvolutionEngine(decay_dataset, cfg, model=toy).run()
    assert result.history == []
    assert len(result.population) == 8
    assert result.n_evals == 8


def test_run_fit_writes_artifacts(decay_dataset, small_config, toy):
    result = run_fit(decay_dataset, small_config, model=toy)

    stats_rows = small_config.output.stats_path.read_text().splitlines()
    assert len(stats_rows) == small_config.ga.max_gen
    gen, best, mean, stdev = stats_rows[-1].split(" ")
    assert int(gen) == small_config.ga.max_gen
    assert float(best) == result.best.fitness

    fitness, genes, table = load_results(result.results_path)
    assert fitness == result.best.fitness
    np.testing.assert_array_equal(list(genes.values()), result.best.genes)
    np.testing.assert_array_equal(table[:, 0], decay_dataset.time)
    np.testing.assert_allclose(table[:, 3], toy(result.best.genes, decay_dataset))


def test_run_fit_unwritable_output_fails_before_search(decay_dataset, small_config, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    cfg = merge_config(small_config, {"output": {"outdir": str(blocker / "out")}})

    calls = []

    def counting(params, ds):
        calls.append(1)
        return ds.mass_fraction.copy()

    with pytest.raises(OSError, match="Unable to write"):
        run_fit(decay_dataset, cfg, model=counting)
    assert calls == []


def test_pop_size_validated(decay_dataset, small_config):
    cfg = small_config.model_copy(deep=True)
    cfg.ga.pop_size = 0
    with pytest.raises(ValueError, match="pop_size"):
        EvolutionEngine(decay_dataset, cfg)


def test_initial_and_final_populations_logged(decay_dataset, small_config, toy, capsys):
    result = EvolutionEngine(decay_dataset, small_config, model=toy).run()

    records = {}
    for line in capsys.readouterr().err.splitlines():
        entry = json.loads(line)
        records[entry["message"]] = entry

    for message in ("initial population", "final population"):
        members = records[message]["population"]
        assert len(members) == small_config.ga.pop_size
        fitness = [m["fitness"] for m in members]
        assert fitness == sorted(fitness, reverse=True)
        assert set(members[0]) == {"fitness", "A", "E", "NS", "yinf"}

    final = records["final population"]["population"]
    assert final[0]["fitness"] == result.best.fitness
    assert [m["fitness"] for m in final] == [g.fitness for g in result.population]


def test_rejected_config_keeps_previous_stats(decay_dataset, small_config, toy):
    stats_path = small_config.output.stats_path
    stats_path.parent.mkdir(parents=True)
    stats_path.write_text("1 -0.5 -0.7 0.1\n")

    cfg = small_config.model_copy(deep=True)
    cfg.ga.pop_size = 0
    with pytest.raises(ValueError, match="pop_size"):
        run_fit(decay_dataset, cfg, model=toy)

    assert stats_path.read_text() == "1 -0.5 -0.7 0.1\n"
