"""
演化策略模組

包含所有可插拔策略的實現：
- 縮放策略 (原始分數 → 適應度)
- 選擇策略 (依分數抽樣個體)
"""

from .base import EvolutionStrategy
from .scaling import *
from .selection import *

__all__ = [
    'EvolutionStrategy',
    # 縮放策略
    'ScalingStrategy', 'NoScaling', 'LinearScaling', 'SigmaTruncationScaling', 'PowerLawScaling',
    # 選擇策略
    'SelectionStrategy', 'RankSelector', 'UniformSelector', 'RouletteWheelSelector',
    'StochasticUniversalSelector', 'TournamentSelector',
]
