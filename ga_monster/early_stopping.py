"""
早停機制

追蹤每一代的最佳原始分數；連續 patience 代沒有優於紀錄超過 min_delta 時，
要求引擎提前結束。方向沿用族群的 SortOrder。
"""

from typing import Any, Dict, List, Optional

from .config import GAConfig
from .population import SortOrder


class EarlyStopping:
    """
    停滯偵測

    Example:
        >>> stopper = EarlyStopping.for_config(config, patience=10)
        >>> while not ga.done():
        ...     ga.step()
        ...     if stopper.check(ga):
        ...         break
    """

    def __init__(self, patience: int = 10, min_delta: float = 0.0,
                 sort_order: SortOrder = SortOrder.HIGH_IS_BEST):
        """
        Args:
            patience: 容許連續無改進的世代數
            min_delta: 改進量必須大於此值才算有進步
            sort_order: 分數的優劣方向

        Raises:
            ValueError: patience < 1 或 min_delta < 0
        """
        if patience < 1:
            raise ValueError(f"patience must be at least 1 generation, got {patience}")
        if min_delta < 0:
            raise ValueError(f"min_delta must be non-negative, got {min_delta}")

        self.patience = patience
        self.min_delta = min_delta
        self.sort_order = sort_order
        self.reset()

    @classmethod
    def for_config(cls, config: GAConfig, patience: int = 10,
                   min_delta: float = 0.0) -> "EarlyStopping":
        """依配置的 minimize 旗標決定方向"""
        return cls(patience=patience, min_delta=min_delta,
                   sort_order=SortOrder.from_minimize(config.minimize))

    def reset(self):
        self.best_score: Optional[float] = None
        self.best_generation: Optional[int] = None
        self.stale_generations = 0
        self.triggered = False
        self.history: List[float] = []

    def _improves(self, score: float) -> bool:
        if self.best_score is None:
            return True
        if self.sort_order is SortOrder.LOW_IS_BEST:
            return self.best_score - score > self.min_delta
        return score - self.best_score > self.min_delta

    def update(self, score: float, generation: Optional[int] = None) -> bool:
        """
        記錄一個世代的最佳分數

        Args:
            score: 該世代最佳個體的原始分數
            generation: 世代編號；省略時以已記錄的次數代替

        Returns:
            True 表示應該停止
        """
        if generation is None:
            generation = len(self.history)
        self.history.append(score)

        if self._improves(score):
            self.best_score = score
            self.best_generation = generation
            self.stale_generations = 0
        else:
            self.stale_generations += 1

        self.triggered = self.stale_generations >= self.patience
        return self.triggered

    def check(self, ga) -> bool:
        """以引擎目前族群的最佳個體更新狀態"""
        return self.update(ga.population.best().raw_score(), ga.current_generation)

    def status(self) -> Dict[str, Any]:
        return {
            'best_score': self.best_score,
            'best_generation': self.best_generation,
            'stale_generations': self.stale_generations,
            'patience': self.patience,
            'min_delta': self.min_delta,
            'sort_order': self.sort_order.value,
            'triggered': self.triggered,
            'observed': len(self.history),
        }

    def __repr__(self) -> str:
        return (f"EarlyStopping(patience={self.patience}, min_delta={self.min_delta}, "
                f"sort_order={self.sort_order.value}, stale={self.stale_generations})")
