"""
旅行推銷員問題 (TSP)

示範如何以排列表示的個體實作 GAIndividual / GAFactory。
原始分數為環路總長度，應搭配 minimize=True 使用。
"""

from typing import Optional, Sequence
import logging

import numpy as np

from ..individual import GAFactory, GAIndividual
from ..population import Population, SortOrder
from ..random_ctx import RandomContext

logger = logging.getLogger(__name__)


class TSPInstance:
    """
    城市座標與距離矩陣，作為個體 evaluate() 的評估上下文
    """

    def __init__(self, coordinates: Sequence[Sequence[float]]):
        self.coordinates = np.asarray(coordinates, dtype=float)
        if self.coordinates.ndim != 2 or len(self.coordinates) < 2:
            raise ValueError("coordinates must be an (n, d) array with n >= 2")
        diff = self.coordinates[:, None, :] - self.coordinates[None, :, :]
        self.distances = np.sqrt((diff ** 2).sum(axis=-1))

    @classmethod
    def random(cls, n_cities: int, rng: RandomContext, scale: float = 100.0) -> "TSPInstance":
        """在 [0, scale)^2 內隨機產生 n_cities 個城市"""
        coordinates = rng.generator.uniform(0.0, scale, size=(n_cities, 2))
        return cls(coordinates)

    @property
    def n_cities(self) -> int:
        return len(self.coordinates)

    def tour_length(self, tour: Sequence[int]) -> float:
        order = np.asarray(tour, dtype=int)
        return float(self.distances[order, np.roll(order, -1)].sum())


class TSPIndividual(GAIndividual):
    """
    以城市排列表示的環路
    """

    def __init__(self, tour: Sequence[int], raw_score: Optional[float] = None):
        super().__init__(raw_score)
        self.tour = list(tour)

    def crossover(self, other: "TSPIndividual", rng: RandomContext) -> "TSPIndividual":
        """
        順序交配 (OX)：保留本個體的一段，其餘城市依 other 的順序填入
        """
        size = len(self.tour)
        a, b = sorted(rng.sample_indices(size, 2))
        segment = self.tour[a:b + 1]
        kept = set(segment)
        rest = [city for city in other.tour if city not in kept]
        child_tour = rest[:a] + segment + rest[a:]
        return TSPIndividual(child_tour)

    def mutate(self, probability: float, rng: RandomContext):
        """逐位置以 probability 的機率與另一個隨機位置交換"""
        size = len(self.tour)
        if size < 2:
            return
        changed = False
        for i in range(size):
            if rng.flip(probability):
                j = rng.randint(0, size - 1)
                if j >= i:
                    j += 1
                self.tour[i], self.tour[j] = self.tour[j], self.tour[i]
                changed = True
        if changed:
            self.evaluated = False

    def evaluate(self, evaluation_ctx: TSPInstance):
        self.set_raw_score(evaluation_ctx.tour_length(self.tour))


class TSPFactory(GAFactory):
    """
    產生隨機環路的工廠
    """

    def __init__(self, instance: TSPInstance):
        self.instance = instance

    def random_population(self, n: int, sort_order: SortOrder,
                          rng: RandomContext) -> Population:
        individuals = []
        for _ in range(n):
            ind = TSPIndividual(rng.permutation(self.instance.n_cities))
            ind.evaluate(self.instance)
            individuals.append(ind)
        logger.debug(f"已產生 {n} 條隨機環路 ({self.instance.n_cities} 個城市)")
        return Population(individuals, sort_order)
