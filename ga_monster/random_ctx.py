"""
隨機數上下文

所有需要隨機性的操作都顯式接收一個 RandomContext，不使用全域亂數狀態。
"""

from typing import Optional, Sequence
import numpy as np


class RandomContext:
    """
    可設定種子的隨機數來源

    包裝 numpy.random.Generator，提供遺傳演算法需要的少數幾種抽樣。

    Example:
        >>> rng = RandomContext(seed=42)
        >>> rng.uniform()          # [0, 1)
        >>> rng.randint(0, 10)     # [0, 10)
        >>> rng.flip(0.8)          # 以 0.8 的機率回傳 True
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Args:
            seed: 隨機種子，None 時由作業系統熵源產生
        """
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    @property
    def generator(self) -> np.random.Generator:
        """底層的 numpy Generator"""
        return self._generator

    def reseed(self, seed: Optional[int] = None):
        """以新種子重設隨機數狀態"""
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        """回傳 [low, high) 間的均勻浮點數"""
        return float(self._generator.uniform(low, high))

    def randint(self, low: int, high: int) -> int:
        """回傳 [low, high) 間的均勻整數"""
        if high <= low:
            raise ValueError(f"high must be > low, got low={low}, high={high}")
        return int(self._generator.integers(low, high))

    def flip(self, probability: float) -> bool:
        """以給定機率回傳 True (擲硬幣)"""
        if probability <= 0.0:
            return False
        if probability >= 1.0:
            return True
        return self.uniform() < probability

    def sample_indices(self, n: int, k: int) -> Sequence[int]:
        """從 [0, n) 中可重複地抽取 k 個索引"""
        return [int(i) for i in self._generator.integers(0, n, size=k)]

    def permutation(self, n: int) -> Sequence[int]:
        """回傳 0..n-1 的隨機排列"""
        return [int(i) for i in self._generator.permutation(n)]

    def __repr__(self) -> str:
        return f"RandomContext(seed={self.seed})"
