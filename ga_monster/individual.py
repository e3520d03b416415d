"""
個體與工廠能力介面

核心引擎只透過這裡定義的介面接觸個體：原始分數、適應度、
交配、變異與評估。具體的表示方式由應用端實作。
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional, TYPE_CHECKING

from .random_ctx import RandomContext

if TYPE_CHECKING:
    from .population import Population, SortOrder


class GAIndividual(ABC):
    """
    遺傳演算法個體基類

    子類必須實現 crossover、mutate、evaluate。原始分數在評估後固定，
    適應度分數則由縮放策略寫入。
    """

    def __init__(self, raw_score: Optional[float] = None):
        """
        Args:
            raw_score: 已知的原始分數（可選）；給定時視為已評估
        """
        self.id: str = str(uuid.uuid4())
        self.generation: int = 0
        self._raw_score: float = 0.0 if raw_score is None else float(raw_score)
        self._fitness: float = self._raw_score
        self.evaluated: bool = raw_score is not None

    # 原始分數
    def raw_score(self) -> float:
        return self._raw_score

    def set_raw_score(self, score: float):
        """設置原始分數並標記為已評估"""
        self._raw_score = float(score)
        self.evaluated = True

    # 適應度分數
    def fitness(self) -> float:
        return self._fitness

    def set_fitness(self, fitness: float):
        self._fitness = float(fitness)

    @abstractmethod
    def crossover(self, other: "GAIndividual", rng: RandomContext) -> "GAIndividual":
        """
        與另一個個體交配，產生新的子代

        Args:
            other: 另一個父代
            rng: 隨機數上下文

        Returns:
            未評估的新個體
        """
        raise NotImplementedError("子類必須實現 crossover 方法")

    @abstractmethod
    def mutate(self, probability: float, rng: RandomContext):
        """
        就地變異

        Args:
            probability: 變異機率，由個體自行決定如何套用（例如逐基因）
            rng: 隨機數上下文
        """
        raise NotImplementedError("子類必須實現 mutate 方法")

    @abstractmethod
    def evaluate(self, evaluation_ctx: Any):
        """計算原始分數，實作應呼叫 set_raw_score()"""
        raise NotImplementedError("子類必須實現 evaluate 方法")

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}({self.id[:8]}..., gen={self.generation}, "
                f"raw={self._raw_score:.4f}, fitness={self._fitness:.4f})")


class GAFactory(ABC):
    """
    族群工廠

    用於在沒有初始族群時建立第一代。
    """

    @abstractmethod
    def random_population(self, n: int, sort_order: "SortOrder",
                          rng: RandomContext) -> "Population":
        """
        建立 n 個隨機個體組成的族群

        Args:
            n: 個體數量
            sort_order: 族群的排序方向
            rng: 隨機數上下文

        Returns:
            新族群
        """
        raise NotImplementedError("子類必須實現 random_population 方法")
