"""
選擇策略模組

實現排名、均勻、輪盤賭、錦標賽與隨機通用抽樣 (SUS) 選擇。
選擇器綁定一個族群與一個分數基準，update() 後才能抽樣；
選擇器只讀取族群，不會修改它。
"""

from typing import List, Optional
import logging

import numpy as np

from .base import EvolutionStrategy
from ..exceptions import EmptyPopulationError
from ..individual import GAIndividual
from ..population import Population, SortBasis, SortOrder
from ..random_ctx import RandomContext

logger = logging.getLogger(__name__)


class SelectionStrategy(EvolutionStrategy):
    """
    選擇策略基類
    """

    def __init__(self, population: Optional[Population] = None,
                 basis: SortBasis = SortBasis.RAW):
        """
        Args:
            population: 綁定的族群（可稍後以 assign() 指定）
            basis: 依原始分數或縮放後適應度選擇
        """
        super().__init__()
        self.name = "selection_strategy"
        self.population = population
        self.basis = basis

    def assign(self, population: Population):
        """綁定新的族群；內部狀態需要再次 update()"""
        self.population = population
        self._reset()

    def _reset(self):
        pass

    def update(self):
        """依目前族群重新計算內部抽樣結構"""
        pass

    def _require_population(self) -> Population:
        if self.population is None or self.population.is_empty():
            raise EmptyPopulationError(f"{self.name} selector has no individuals to select from")
        return self.population

    @staticmethod
    def _require_rng(rng: Optional[RandomContext], name: str) -> RandomContext:
        if rng is None:
            raise ValueError(f"{name} selection requires a RandomContext")
        return rng

    def select(self, rng: Optional[RandomContext] = None) -> GAIndividual:
        """
        抽出一個個體（放回抽樣）

        Args:
            rng: 隨機數上下文；確定性選擇器可省略

        Returns:
            族群中的個體（不是拷貝）
        """
        raise NotImplementedError("子類必須實現 select 方法")

    def select_many(self, n: int, rng: Optional[RandomContext] = None) -> List[GAIndividual]:
        """連續抽出 n 個個體"""
        if n <= 0:
            return []
        return [self.select(rng) for _ in range(n)]


class RankSelector(SelectionStrategy):
    """
    排名選擇

    永遠回傳目前基準下的最佳個體。
    """

    def __init__(self, population: Optional[Population] = None,
                 basis: SortBasis = SortBasis.RAW):
        super().__init__(population, basis)
        self.name = "rank"

    def update(self):
        self._require_population().sort(self.basis)

    def select(self, rng: Optional[RandomContext] = None) -> GAIndividual:
        return self._require_population().individual_at(0, self.basis)


class UniformSelector(SelectionStrategy):
    """
    均勻選擇

    每個個體被選中的機率相同，與分數無關。
    """

    def __init__(self, population: Optional[Population] = None,
                 basis: SortBasis = SortBasis.RAW):
        super().__init__(population, basis)
        self.name = "uniform"

    def select(self, rng: Optional[RandomContext] = None) -> GAIndividual:
        population = self._require_population()
        rng = self._require_rng(rng, self.name)
        index = rng.randint(0, population.size())
        return population[index]


class RouletteWheelSelector(SelectionStrategy):
    """
    輪盤賭選擇

    被選中的機率與分數成正比。LOW_IS_BEST 時以 (max + min - score)
    作為權重；所有權重相同或總和為零時退化為均分。
    """

    def __init__(self, population: Optional[Population] = None,
                 basis: SortBasis = SortBasis.RAW):
        super().__init__(population, basis)
        self.name = "roulette"
        self._cumulative: Optional[np.ndarray] = None

    def _reset(self):
        self._cumulative = None

    def _weights(self, population: Population) -> np.ndarray:
        scores = np.asarray(
            [Population.score_of(population.individual_at(i, self.basis), self.basis)
             for i in range(population.size())],
            dtype=float,
        )
        high, low = scores.max(), scores.min()

        if population.sort_order is SortOrder.LOW_IS_BEST:
            weights = high + low - scores
        else:
            weights = scores

        if (weights < 0).any():
            logger.warning("檢測到負分數，輪盤賭權重截為 0")
            weights = np.clip(weights, 0.0, None)

        if high == low or weights.sum() <= 0:
            weights = np.ones_like(scores)
        return weights

    def update(self):
        population = self._require_population()
        population.sort(self.basis)
        weights = self._weights(population)
        self._cumulative = np.cumsum(weights) / weights.sum()
        # 避免浮點誤差使最後一格小於 1
        self._cumulative[-1] = 1.0
        logger.debug(f"輪盤賭表已更新: {population.size()} 格")

    def _ensure_table(self) -> np.ndarray:
        if self._cumulative is None or len(self._cumulative) != self._require_population().size():
            self.update()
        return self._cumulative

    def _pick(self, u: float) -> GAIndividual:
        cumulative = self._ensure_table()
        position = int(np.searchsorted(cumulative, u, side='right'))
        position = min(position, len(cumulative) - 1)
        return self.population.individual_at(position, self.basis)

    def select(self, rng: Optional[RandomContext] = None) -> GAIndividual:
        rng = self._require_rng(rng, self.name)
        return self._pick(rng.uniform())


class StochasticUniversalSelector(RouletteWheelSelector):
    """
    隨機通用抽樣 (SUS)

    與輪盤賭相同的機率表，但 select_many() 只抽一次起點，
    再以等距指標取出 n 個個體，降低抽樣變異。
    """

    def __init__(self, population: Optional[Population] = None,
                 basis: SortBasis = SortBasis.RAW):
        super().__init__(population, basis)
        self.name = "sus"

    def select_many(self, n: int, rng: Optional[RandomContext] = None) -> List[GAIndividual]:
        if n <= 0:
            return []
        rng = self._require_rng(rng, self.name)
        step = 1.0 / n
        start = rng.uniform(0.0, step)
        return [self._pick(start + i * step) for i in range(n)]


class TournamentSelector(SelectionStrategy):
    """
    錦標賽選擇

    均勻地（可重複）抽出 tournament_size 個個體，回傳其中最佳者。
    """

    def __init__(self, population: Optional[Population] = None,
                 basis: SortBasis = SortBasis.RAW, tournament_size: int = 3):
        """
        Args:
            tournament_size: 錦標賽大小
        """
        super().__init__(population, basis)
        if tournament_size < 1:
            raise ValueError(f"tournament_size must be >= 1, got {tournament_size}")
        self.name = "tournament"
        self.tournament_size = tournament_size

    def update(self):
        self._require_population().sort(self.basis)

    def select(self, rng: Optional[RandomContext] = None) -> GAIndividual:
        population = self._require_population()
        rng = self._require_rng(rng, self.name)
        # 排序位置越小越好，相同分數由穩定排序決定
        positions = rng.sample_indices(population.size(), self.tournament_size)
        return population.individual_at(min(positions), self.basis)
