"""
Unit tests for scaling strategies
"""

import math

import pytest

from ga_monster import DegenerateScalingError, Population, RandomContext, SortBasis, SortOrder
from ga_monster.strategies import LinearScaling, NoScaling, PowerLawScaling, SigmaTruncationScaling
from conftest import VAL, ScoredIndividual


class TestNoScaling:

    def test_fitness_equals_raw(self, make_population):
        population = make_population([VAL, 1.0, -2.5], fitnesses=[0.0, 0.0, 0.0])
        NoScaling().apply(population)

        for ind in population:
            assert ind.fitness() == ind.raw_score()

    def test_scaled_ordering_refreshed(self, make_population):
        population = make_population([1.0, 2.0], fitnesses=[9.0, 0.0])
        population.sort()
        NoScaling().apply(population)

        assert population.best(SortBasis.SCALED).fitness() == 2.0


class TestLinearScaling:

    def test_prescale_max_dominant_branch(self):
        a, b = LinearScaling(2.0).prescale(4.0, 1.0, 1.5)
        assert a == pytest.approx(0.6)
        assert b == pytest.approx(0.6)

    def test_prescale_min_dominant_branch(self):
        a, b = LinearScaling(2.0).prescale(4.0, -2.0, 3.0)
        assert a == pytest.approx(0.6)
        assert b == pytest.approx(1.2)

    def test_apply_uses_midpoint_average(self, make_population):
        population = make_population([1.0, 2.0, 3.0, 4.0])
        LinearScaling().apply(population)

        assert [ind.fitness() for ind in population] == pytest.approx([1.2, 1.8, 2.4, 3.0])

    def test_min_dominant_maps_minimum_to_zero(self, make_population):
        population = make_population([-2.0, 4.0])
        LinearScaling().apply(population)

        assert population[0].fitness() == pytest.approx(0.0)
        assert population[1].fitness() == pytest.approx(3.6)

    def test_preserves_raw_ordering(self):
        rng = RandomContext(seed=3)
        population = Population([ScoredIndividual(rng.uniform(1.0, 100.0)) for _ in range(25)])
        LinearScaling(1.7).apply(population)
        population.sort()

        for i in range(population.size()):
            assert population.individual_at(i, SortBasis.SCALED) is population.individual_at(i, SortBasis.RAW)

    def test_identical_scores_fall_back_to_identity(self, make_population):
        population = make_population([5.0] * 6)
        LinearScaling().apply(population)

        for ind in population:
            assert ind.fitness() == 5.0
            assert not math.isnan(ind.fitness())

    def test_prescale_raises_on_degenerate_input(self):
        with pytest.raises(DegenerateScalingError):
            LinearScaling().prescale(5.0, 5.0, 0.0)

    def test_single_individual(self, make_population):
        population = make_population([VAL])
        LinearScaling().apply(population)
        assert population[0].fitness() == VAL

    def test_low_is_best_uses_numeric_extremes(self, make_population):
        population = make_population([1.0, 2.0, 3.0, 4.0], SortOrder.LOW_IS_BEST)
        LinearScaling().apply(population)

        assert [ind.fitness() for ind in population] == pytest.approx([1.2, 1.8, 2.4, 3.0])

    def test_empty_population_is_noop(self):
        LinearScaling().apply(Population())

    def test_invalid_multiplier(self):
        with pytest.raises(ValueError, match="multiplier must be > 1"):
            LinearScaling(1.0)


class TestSigmaTruncationScaling:

    def test_high_is_best(self, make_population):
        population = make_population([1.0, 2.0, 3.0])
        SigmaTruncationScaling(c=2.0).apply(population)

        offset = 2.0 * (2.0 / 3.0) ** 0.5
        assert [ind.fitness() for ind in population] == pytest.approx(
            [-1.0 + offset, offset, 1.0 + offset])

    def test_low_is_best_keeps_raw_ordering(self, make_population):
        population = make_population([1.0, 5.0], SortOrder.LOW_IS_BEST)
        SigmaTruncationScaling().apply(population)

        assert population.best(SortBasis.SCALED) is population.best(SortBasis.RAW)
        assert population.worst(SortBasis.SCALED) is population.worst(SortBasis.RAW)
        assert [ind.fitness() for ind in population] == pytest.approx([0.0, 4.0])

    def test_low_is_best_truncates_worst(self, make_population):
        # avg = 26.5；c = 0 時上限即為平均
        population = make_population([1.0, 2.0, 3.0, 100.0], SortOrder.LOW_IS_BEST)
        SigmaTruncationScaling(c=0.0).apply(population)

        assert [ind.fitness() for ind in population] == pytest.approx([0.0, 1.0, 2.0, 25.5])

    def test_negative_values_truncated(self, make_population):
        population = make_population([1.0, 2.0, 3.0])
        SigmaTruncationScaling(c=0.0).apply(population)

        assert [ind.fitness() for ind in population] == pytest.approx([0.0, 0.0, 1.0])


class TestPowerLawScaling:

    def test_power(self, make_population):
        population = make_population([1.0, 2.0, 3.0])
        PowerLawScaling(k=2.0).apply(population)

        assert [ind.fitness() for ind in population] == pytest.approx([1.0, 4.0, 9.0])

    def test_negative_raw_rejected(self, make_population):
        with pytest.raises(ValueError):
            PowerLawScaling().apply(make_population([-1.0, 2.0]))
