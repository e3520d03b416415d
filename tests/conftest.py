"""
共用測試個體與族群工廠
"""

import pytest

from ga_monster import GAFactory, GAIndividual, Population, SortOrder

VAL = 3.14159


class ScoredIndividual(GAIndividual):
    """分數固定的個體；記錄變異次數與產生方式"""

    def __init__(self, raw_score, fitness=None, origin='initial', child_factor=1.0):
        super().__init__(raw_score)
        if fitness is not None:
            self.set_fitness(fitness)
        self.origin = origin
        self.child_factor = child_factor
        self.mutations = 0

    def crossover(self, other, rng):
        return ScoredIndividual(self.raw_score() * self.child_factor,
                                origin='crossover', child_factor=self.child_factor)

    def mutate(self, probability, rng):
        self.mutations += 1

    def evaluate(self, evaluation_ctx):
        pass


class ScoredFactory(GAFactory):
    def __init__(self, starting_score=VAL):
        self.starting_score = starting_score
        self.calls = []

    def random_population(self, n, sort_order, rng):
        self.calls.append((n, sort_order))
        return Population([ScoredIndividual(self.starting_score) for _ in range(n)], sort_order)


@pytest.fixture
def make_population():
    def _make(scores, sort_order=SortOrder.HIGH_IS_BEST, fitnesses=None):
        if fitnesses is None:
            individuals = [ScoredIndividual(s) for s in scores]
        else:
            individuals = [ScoredIndividual(s, f) for s, f in zip(scores, fitnesses)]
        return Population(individuals, sort_order)
    return _make
