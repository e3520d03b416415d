"""
縮放策略模組

將個體的原始分數轉換為適應度分數。縮放策略只讀原始分數、寫適應度，
不會重新排列或改變族群大小。
"""

from typing import Tuple
import logging

import numpy as np

from .base import EvolutionStrategy
from ..exceptions import DegenerateScalingError
from ..population import Population, SortBasis, SortOrder

logger = logging.getLogger(__name__)

LINEAR_SCALING_MULTIPLIER = 2.0


class ScalingStrategy(EvolutionStrategy):
    """
    縮放策略基類
    """

    def __init__(self):
        super().__init__()
        self.name = "scaling_strategy"

    def apply(self, population: Population):
        """
        為族群中每個個體寫入適應度分數，每個個體恰好訪問一次

        Args:
            population: 要縮放的族群
        """
        if population.is_empty():
            return
        self._apply(population)
        population.invalidate(SortBasis.SCALED)

    def _apply(self, population: Population):
        raise NotImplementedError("子類必須實現 _apply 方法")


class NoScaling(ScalingStrategy):
    """
    不縮放：適應度等於原始分數
    """

    def __init__(self):
        super().__init__()
        self.name = "none"

    def _apply(self, population: Population):
        for ind in population:
            ind.set_fitness(ind.raw_score())


class LinearScaling(ScalingStrategy):
    """
    線性縮放 (Goldberg)

    fitness = a * raw + b，係數由族群的最大、最小原始分數決定。
    平均值採用 (max - min) / 2 的中點定義，而非族群平均。
    """

    def __init__(self, multiplier: float = LINEAR_SCALING_MULTIPLIER):
        """
        Args:
            multiplier: 最佳個體相對於平均的期望倍數，必須 > 1
        """
        super().__init__()
        if multiplier <= 1.0:
            raise ValueError(f"multiplier must be > 1, got {multiplier}")
        self.name = "linear"
        self.multiplier = multiplier

    def prescale(self, max_score: float, min_score: float, avg: float) -> Tuple[float, float]:
        """
        計算線性係數

        Returns:
            (a, b)

        Raises:
            DegenerateScalingError: 分母為零（例如所有分數相同）
        """
        if max_score == min_score:
            raise DegenerateScalingError(f"all raw scores are equal ({max_score})")

        m = self.multiplier
        if min_score > (m * avg - max_score) / (m - 1.0):
            delta = max_score - avg
            if delta == 0:
                raise DegenerateScalingError("max-dominant branch has zero delta")
            a = (m - 1.0) * avg / delta
            b = avg * (max_score - m * avg) / delta
        else:
            delta = avg - min_score
            if delta == 0:
                raise DegenerateScalingError("min-dominant branch has zero delta")
            a = avg / delta
            b = -min_score * avg / delta
        return a, b

    def _apply(self, population: Population):
        max_score = population.best(SortBasis.RAW).raw_score()
        min_score = population.worst(SortBasis.RAW).raw_score()
        if population.sort_order is SortOrder.LOW_IS_BEST:
            max_score, min_score = min_score, max_score
        avg = (max_score - min_score) / 2.0

        try:
            a, b = self.prescale(max_score, min_score, avg)
        except DegenerateScalingError as e:
            logger.debug(f"線性縮放退化，回退為恆等縮放: {e}")
            a, b = 1.0, 0.0

        for ind in population:
            ind.set_fitness(a * ind.raw_score() + b)


class SigmaTruncationScaling(ScalingStrategy):
    """
    Sigma 截斷縮放

    HIGH_IS_BEST: fitness = raw - (avg - c * std)，負值截為 0。
    LOW_IS_BEST: 高於 avg + c * std 的原始分數截為該上限，再減去最小原始分數，
    適應度仍是越低越好，最佳個體為 0。兩種方向下適應度排序都與原始分數排序一致。
    """

    def __init__(self, c: float = 2.0):
        super().__init__()
        if c < 0:
            raise ValueError(f"c must be >= 0, got {c}")
        self.name = "sigma_truncation"
        self.c = c

    def _apply(self, population: Population):
        stats = population.statistics(SortBasis.RAW)
        avg, std = stats['avg'], stats['std']

        if population.sort_order is SortOrder.LOW_IS_BEST:
            ceiling = avg + self.c * std
            for ind in population:
                ind.set_fitness(min(ind.raw_score(), ceiling) - stats['min'])
        else:
            floor = avg - self.c * std
            for ind in population:
                ind.set_fitness(max(0.0, ind.raw_score() - floor))


class PowerLawScaling(ScalingStrategy):
    """
    冪次縮放：fitness = raw ** k
    """

    def __init__(self, k: float = 1.005):
        super().__init__()
        self.name = "power_law"
        self.k = k

    def _apply(self, population: Population):
        raw = np.asarray(population.scores(SortBasis.RAW), dtype=float)
        if (raw < 0).any():
            raise ValueError("power law scaling requires non-negative raw scores")
        for ind, f in zip(population, np.power(raw, self.k)):
            ind.set_fitness(float(f))
