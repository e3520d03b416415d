"""
Tests for the SimpleGeneticAlgorithm driver.
"""

import logging
from unittest.mock import MagicMock

import pytest

from ga_monster import (
    AlreadyDoneError,
    ConfigurationError,
    EarlyStopping,
    EmptyPopulationError,
    GAFactory,
    GAConfig,
    GAFlags,
    GAState,
    Population,
    RandomContext,
    SimpleGeneticAlgorithm,
    SortBasis,
    SortOrder,
)
from ga_monster.strategies import NoScaling, RankSelector, SigmaTruncationScaling, TournamentSelector
from conftest import VAL, ScoredFactory, ScoredIndividual


def _config(**overrides):
    values = dict(max_generations=100, flags=GAFlags.DEBUG, seed=1)
    values.update(overrides)
    return GAConfig(**values)


def _validate_single_step(ga):
    ga.initialize()
    assert ga.step() == 1
    assert ga.done() is False
    assert ga.current_generation == 1
    assert ga.population.size() == 1
    assert ga.population.best().raw_score() == VAL


class TestConstruction:

    def test_with_initial_population(self):
        population = Population([ScoredIndividual(VAL)], SortOrder.HIGH_IS_BEST)
        ga = SimpleGeneticAlgorithm(_config(), population=population)
        _validate_single_step(ga)

    def test_with_factory(self):
        factory = ScoredFactory(VAL)
        ga = SimpleGeneticAlgorithm(_config(population_size=1), factory=factory)

        assert factory.calls == [(1, SortOrder.HIGH_IS_BEST)]
        _validate_single_step(ga)

    def test_factory_receives_size_order_and_rng(self):
        factory = MagicMock(spec=GAFactory)
        factory.random_population.return_value = Population(
            [ScoredIndividual(float(i)) for i in range(5)], SortOrder.LOW_IS_BEST)
        rng = RandomContext(seed=3)

        ga = SimpleGeneticAlgorithm(_config(population_size=5, minimize=True), factory=factory, rng=rng)

        factory.random_population.assert_called_once_with(5, SortOrder.LOW_IS_BEST, rng)
        assert ga.population.best().raw_score() == 0.0

    def test_with_plain_list(self):
        ga = SimpleGeneticAlgorithm(_config(), population=[ScoredIndividual(VAL)])
        assert isinstance(ga.population, Population)
        _validate_single_step(ga)

    def test_factory_and_population_together(self):
        with pytest.raises(ConfigurationError):
            SimpleGeneticAlgorithm(_config(population_size=1), factory=ScoredFactory(),
                                   population=[ScoredIndividual(VAL)])

    def test_missing_factory_and_population(self):
        with pytest.raises(EmptyPopulationError):
            SimpleGeneticAlgorithm(_config())

    def test_empty_initial_population(self):
        ga = SimpleGeneticAlgorithm(_config(), population=Population([], SortOrder.HIGH_IS_BEST))
        with pytest.raises(EmptyPopulationError):
            ga.initialize()

    def test_step_on_empty_population(self):
        ga = SimpleGeneticAlgorithm(_config(), population=[])
        with pytest.raises(EmptyPopulationError):
            ga.step()

    def test_minimize_sets_sort_order(self):
        population = Population([ScoredIndividual(1.0), ScoredIndividual(2.0)], SortOrder.HIGH_IS_BEST)
        ga = SimpleGeneticAlgorithm(_config(minimize=True), population=population)

        assert ga.population.sort_order is SortOrder.LOW_IS_BEST
        assert ga.population.best().raw_score() == 1.0


class TestStateMachine:

    def test_already_done(self):
        ga = SimpleGeneticAlgorithm(_config(max_generations=2), population=[ScoredIndividual(VAL)])
        ga.initialize()
        assert ga.step() == 1
        assert ga.step() == 2
        assert ga.done()
        assert ga.state is GAState.DONE

        with pytest.raises(AlreadyDoneError):
            ga.step()
        assert ga.current_generation == 2

    def test_finished_run_cannot_be_reinitialized(self):
        ga = SimpleGeneticAlgorithm(_config(max_generations=1), population=[ScoredIndividual(VAL)])
        ga.step()
        assert ga.state is GAState.DONE

        with pytest.raises(AlreadyDoneError):
            ga.initialize()
        assert ga.current_generation == 1

    def test_reinitialize_before_done_restarts(self):
        ga = SimpleGeneticAlgorithm(_config(max_generations=5), population=[ScoredIndividual(VAL)])
        ga.step()
        ga.initialize()
        assert ga.current_generation == 0
        assert ga.logbook.select('gen') == [0]

    def test_zero_generations(self):
        ga = SimpleGeneticAlgorithm(_config(max_generations=0), population=[ScoredIndividual(VAL)])
        assert ga.done()
        with pytest.raises(AlreadyDoneError):
            ga.step()

    def test_step_initializes_lazily(self):
        ga = SimpleGeneticAlgorithm(_config(), population=[ScoredIndividual(VAL)])
        assert ga.state is GAState.CREATED
        assert ga.step() == 1
        assert ga.state is GAState.INITIALIZED

    def test_population_size_is_preserved(self):
        individuals = [ScoredIndividual(float(i)) for i in range(7)]
        ga = SimpleGeneticAlgorithm(_config(), population=individuals)
        for _ in range(3):
            ga.step()
        assert ga.population.size() == 7


class TestReproduction:

    def test_crossover_always(self):
        individuals = [ScoredIndividual(float(i + 1)) for i in range(6)]
        ga = SimpleGeneticAlgorithm(_config(crossover_probability=1.0, elitism=False),
                                    population=individuals)
        ga.step()
        assert all(ind.origin == 'crossover' for ind in ga.population)

    def test_crossover_never_copies_parents(self):
        individuals = [ScoredIndividual(float(i + 1)) for i in range(6)]
        ga = SimpleGeneticAlgorithm(_config(crossover_probability=0.0, elitism=False),
                                    population=individuals)
        ga.step()

        assert all(ind.origin == 'initial' for ind in ga.population)
        assert not any(ind is original for ind in ga.population for original in individuals)

    def test_mutation_probability_zero_skips_mutate(self):
        ga = SimpleGeneticAlgorithm(_config(mutation_probability=0.0),
                                    population=[ScoredIndividual(1.0), ScoredIndividual(2.0)])
        ga.step()
        assert all(ind.mutations == 0 for ind in ga.population)

    def test_every_child_is_mutated(self):
        ga = SimpleGeneticAlgorithm(_config(mutation_probability=0.5, elitism=False),
                                    population=[ScoredIndividual(1.0), ScoredIndividual(2.0)])
        ga.step()
        assert all(ind.mutations == 1 for ind in ga.population)

    def test_elitism_keeps_best(self):
        individuals = [ScoredIndividual(float(i + 1), child_factor=0.5) for i in range(4)]
        ga = SimpleGeneticAlgorithm(_config(crossover_probability=1.0, elitism=True),
                                    population=individuals, selector=TournamentSelector())
        ga.step()
        assert ga.population.best().raw_score() == 4.0

    def test_minimizing_sigma_truncation_breeds_from_best(self):
        ga = SimpleGeneticAlgorithm(_config(minimize=True, crossover_probability=0.0, elitism=False),
                                    population=[ScoredIndividual(1.0), ScoredIndividual(5.0)],
                                    scaling=SigmaTruncationScaling(),
                                    selector=RankSelector(basis=SortBasis.SCALED))
        ga.step()
        assert ga.population.scores() == [1.0, 1.0]

    def test_without_elitism_best_can_be_lost(self):
        individuals = [ScoredIndividual(float(i + 1), child_factor=0.5) for i in range(4)]
        ga = SimpleGeneticAlgorithm(_config(crossover_probability=1.0, elitism=False),
                                    population=individuals, selector=RankSelector())
        ga.step()
        assert ga.population.best().raw_score() == 2.0
        assert ga.best_individual.raw_score() == 4.0


class TestStatisticsAndEvolve:

    def test_logbook_records_every_generation(self):
        ga = SimpleGeneticAlgorithm(_config(max_generations=3),
                                    population=[ScoredIndividual(1.0), ScoredIndividual(3.0)],
                                    scaling=NoScaling())
        result = ga.evolve()

        assert ga.logbook.select('gen') == [0, 1, 2, 3]
        assert ga.logbook[0]['max'] == 3.0
        assert ga.logbook[0]['avg'] == pytest.approx(2.0)
        frame = result.history_frame()
        assert list(frame.index) == [0, 1, 2, 3]
        assert {'avg', 'std', 'min', 'max', 'nevals'} <= set(frame.columns)

    def test_evolve_runs_to_completion(self):
        ga = SimpleGeneticAlgorithm(_config(max_generations=5),
                                    population=[ScoredIndividual(float(i)) for i in range(1, 5)])
        result = ga.evolve(show_progress=False)

        assert ga.done()
        assert result.generations_completed == 5
        assert result.stopped_early is False
        assert result.best_score == 4.0
        assert result.execution_time is not None

    def test_early_stopping(self):
        config = _config(max_generations=100)
        ga = SimpleGeneticAlgorithm(config, population=[ScoredIndividual(VAL) for _ in range(4)])
        result = ga.evolve(early_stopping=EarlyStopping.for_config(config, patience=3))

        assert result.stopped_early is True
        assert result.generations_completed == 4
        assert not ga.done()

    def test_debug_flag_logs_generation_summary(self, caplog):
        ga = SimpleGeneticAlgorithm(_config(max_generations=2),
                                    population=[ScoredIndividual(VAL)])
        with caplog.at_level(logging.INFO, logger='ga_monster.engine'):
            ga.step()
        assert "第 1/2 代" in caplog.text

    def test_explicit_rng_is_used(self):
        rng = RandomContext(seed=5)
        ga = SimpleGeneticAlgorithm(_config(), population=[ScoredIndividual(VAL)], rng=rng)
        assert ga.rng is rng

    def test_strategies_know_engine(self):
        ga = SimpleGeneticAlgorithm(_config(), population=[ScoredIndividual(VAL)])
        assert ga.scaling.engine is ga
        assert ga.selector.engine is ga
        assert ga.selector.basis is SortBasis.SCALED
