"""
族群模組

族群保存一組個體，並分別維護依原始分數與依適應度的排序。
兩種排序都是延遲計算的索引快取，個體本身的順序不會被改變。
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence
import logging

import numpy as np

from .exceptions import EmptyPopulationError, IndexOutOfRangeError
from .individual import GAIndividual

logger = logging.getLogger(__name__)


class SortOrder(Enum):
    """分數越高越好或越低越好"""

    HIGH_IS_BEST = "high_is_best"
    LOW_IS_BEST = "low_is_best"

    @classmethod
    def from_minimize(cls, minimize: bool) -> "SortOrder":
        return cls.LOW_IS_BEST if minimize else cls.HIGH_IS_BEST


class SortBasis(Enum):
    """依原始分數 (RAW) 或縮放後適應度 (SCALED)"""

    RAW = "raw"
    SCALED = "scaled"


class Population:
    """
    遺傳演算法族群

    - 依 sort_order 決定「最佳」的方向
    - 原始分數排序與適應度排序各自獨立快取
    - 修改個體序列或分數後兩種排序都會失效，直到再次排序
    - 空族群是合法狀態，但需要個體的操作會拋出 EmptyPopulationError
    """

    def __init__(self, individuals: Optional[Sequence[GAIndividual]] = None,
                 sort_order: SortOrder = SortOrder.HIGH_IS_BEST):
        """
        Args:
            individuals: 個體序列，族群取得其所有權
            sort_order: 排序方向
        """
        self._individuals: List[GAIndividual] = list(individuals) if individuals else []
        self._sort_order = sort_order
        self._orders: Dict[SortBasis, Optional[List[int]]] = {
            SortBasis.RAW: None,
            SortBasis.SCALED: None,
        }

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    @sort_order.setter
    def sort_order(self, value: SortOrder):
        if value is not self._sort_order:
            self._sort_order = value
            self.invalidate()

    @property
    def individuals(self) -> List[GAIndividual]:
        """個體的淺拷貝（插入順序）"""
        return list(self._individuals)

    def size(self) -> int:
        return len(self._individuals)

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[GAIndividual]:
        return iter(self._individuals)

    def __getitem__(self, index: int) -> GAIndividual:
        """依插入順序存取個體"""
        return self._individuals[index]

    def is_empty(self) -> bool:
        return not self._individuals

    # 成員修改
    def add(self, individual: GAIndividual):
        """加入一個個體，兩種排序失效"""
        self._individuals.append(individual)
        self.invalidate()

    def replace_individuals(self, individuals: Sequence[GAIndividual]):
        """以新序列整體取代所有個體"""
        self._individuals = list(individuals)
        self.invalidate()

    def invalidate(self, basis: Optional[SortBasis] = None):
        """
        使排序快取失效

        Args:
            basis: 只使指定基準失效；None 表示兩者皆失效
        """
        if basis is None:
            self._orders[SortBasis.RAW] = None
            self._orders[SortBasis.SCALED] = None
        else:
            self._orders[basis] = None

    def invalidate_scores(self):
        """個體分數被外部修改後呼叫"""
        self.invalidate()

    def is_sorted(self, basis: SortBasis) -> bool:
        return self._orders[basis] is not None

    # 排序
    @staticmethod
    def score_of(individual: GAIndividual, basis: SortBasis) -> float:
        if basis is SortBasis.RAW:
            return individual.raw_score()
        return individual.fitness()

    def _sort(self, basis: SortBasis):
        # sorted() 是穩定排序，reverse=True 時相同分數仍保持插入順序
        descending = self._sort_order is SortOrder.HIGH_IS_BEST
        self._orders[basis] = sorted(
            range(len(self._individuals)),
            key=lambda i: self.score_of(self._individuals[i], basis),
            reverse=descending,
        )

    def sort_by_raw(self):
        self._sort(SortBasis.RAW)

    def sort_by_fitness(self):
        self._sort(SortBasis.SCALED)

    def sort(self, basis: Optional[SortBasis] = None):
        """依指定基準排序；None 時兩種都排序"""
        if basis is None:
            self.sort_by_raw()
            self.sort_by_fitness()
        else:
            self._sort(basis)

    def _order(self, basis: SortBasis) -> List[int]:
        order = self._orders[basis]
        if order is None:
            logger.debug(f"{basis.value} 排序已失效，重新排序")
            self._sort(basis)
            order = self._orders[basis]
        return order

    # 存取
    def individual_at(self, index: int, basis: SortBasis = SortBasis.RAW) -> GAIndividual:
        """
        依排序存取個體，index 0 為最佳

        Raises:
            IndexOutOfRangeError: index 不在 [0, size()) 之間
        """
        if index < 0 or index >= len(self._individuals):
            raise IndexOutOfRangeError(
                f"index {index} out of range for population of size {len(self._individuals)}"
            )
        return self._individuals[self._order(basis)[index]]

    def best(self, basis: SortBasis = SortBasis.RAW) -> GAIndividual:
        if not self._individuals:
            raise EmptyPopulationError("cannot take best individual of an empty population")
        return self.individual_at(0, basis)

    def worst(self, basis: SortBasis = SortBasis.RAW) -> GAIndividual:
        if not self._individuals:
            raise EmptyPopulationError("cannot take worst individual of an empty population")
        return self.individual_at(len(self._individuals) - 1, basis)

    def rank_of(self, individual: GAIndividual, basis: SortBasis = SortBasis.RAW) -> int:
        """回傳個體在指定排序中的位置"""
        order = self._order(basis)
        for position, index in enumerate(order):
            if self._individuals[index] is individual:
                return position
        raise ValueError("individual is not a member of this population")

    # 統計
    def scores(self, basis: SortBasis = SortBasis.RAW) -> List[float]:
        """依插入順序回傳分數"""
        return [self.score_of(ind, basis) for ind in self._individuals]

    def statistics(self, basis: SortBasis = SortBasis.RAW) -> Dict[str, float]:
        """
        計算族群分數統計

        Returns:
            包含 sum、avg、std、min、max 的字典
        """
        if not self._individuals:
            raise EmptyPopulationError("cannot compute statistics of an empty population")
        values = np.asarray(self.scores(basis), dtype=float)
        return {
            'sum': float(values.sum()),
            'avg': float(values.mean()),
            'std': float(values.std()),
            'min': float(values.min()),
            'max': float(values.max()),
        }

    def __repr__(self) -> str:
        return f"Population(size={len(self._individuals)}, sort_order={self._sort_order.value})"
