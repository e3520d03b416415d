"""
ga_monster - 通用遺傳演算法引擎

族群 (雙重排序)、縮放策略、選擇策略與世代狀態機。個體表示、
交配與變異由應用端透過 GAIndividual 介面提供。
"""

from typing import Any, Dict, Optional, Sequence, Union

from .config import GAConfig, GAFlags, load_config
from .early_stopping import EarlyStopping
from .engine import GAState, GeneticAlgorithm, SimpleGeneticAlgorithm
from .exceptions import (
    AlreadyDoneError,
    ConfigurationError,
    DegenerateScalingError,
    EmptyPopulationError,
    GAError,
    IndexOutOfRangeError,
    InvalidProbabilityError,
)
from .individual import GAFactory, GAIndividual
from .population import Population, SortBasis, SortOrder
from .random_ctx import RandomContext
from .result import EvolutionResult
from .strategies import scaling as scaling_module
from .strategies import selection as selection_module

__version__ = "0.1.0"

# 策略名稱到類名的映射
STRATEGY_MAPPINGS = {
    'scaling': {
        'none': 'NoScaling',
        'linear': 'LinearScaling',
        'sigma_truncation': 'SigmaTruncationScaling',
        'power_law': 'PowerLawScaling',
    },
    'selection': {
        'rank': 'RankSelector',
        'uniform': 'UniformSelector',
        'roulette': 'RouletteWheelSelector',
        'tournament': 'TournamentSelector',
        'sus': 'StochasticUniversalSelector',
    },
}


def _create_strategy(strategy_type: str, strategy_config: Dict[str, Any]):
    """
    根據配置動態創建策略

    Args:
        strategy_type: 'scaling' 或 'selection'
        strategy_config: {"name": ..., "parameters": {...}}；選擇策略可另含 "basis"

    Raises:
        ConfigurationError: 策略名稱不存在或參數無效
    """
    name = strategy_config.get('name')
    mapping = STRATEGY_MAPPINGS[strategy_type]
    if name not in mapping:
        raise ConfigurationError(
            f"unsupported {strategy_type} strategy: {name}. available: {list(mapping)}"
        )

    module = scaling_module if strategy_type == 'scaling' else selection_module
    strategy_class = getattr(module, mapping[name])
    params = dict(strategy_config.get('parameters', {}))

    if strategy_type == 'selection':
        basis = strategy_config.get('basis', SortBasis.SCALED.value)
        try:
            params['basis'] = SortBasis(basis)
        except ValueError:
            raise ConfigurationError(f"unknown score basis: {basis}") from None

    try:
        return strategy_class(**params)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"failed to create {strategy_type}.{name}: {e}. parameters: {params}"
        ) from e


def create_genetic_algorithm(config: Dict[str, Any],
                             factory: Optional[GAFactory] = None,
                             population: Optional[Union[Population, Sequence[GAIndividual]]] = None,
                             rng: Optional[RandomContext] = None,
                             evaluation_context: Any = None) -> SimpleGeneticAlgorithm:
    """
    從配置字典創建 SimpleGeneticAlgorithm

    Args:
        config: 包含 "ga"（GAConfig 或欄位字典）、可選 "scaling"、"selection" 區段
        factory: 族群工廠
        population: 初始族群
        rng: 隨機數上下文
        evaluation_context: 評估上下文

    Returns:
        尚未初始化的引擎
    """
    ga_config = config.get('ga', {})
    if not isinstance(ga_config, GAConfig):
        ga_config = GAConfig.from_dict(ga_config)

    scaling = _create_strategy('scaling', config['scaling']) if 'scaling' in config else None
    selector = _create_strategy('selection', config['selection']) if 'selection' in config else None

    return SimpleGeneticAlgorithm(
        ga_config,
        factory=factory,
        population=population,
        rng=rng,
        scaling=scaling,
        selector=selector,
        evaluation_context=evaluation_context,
    )


__all__ = [
    'AlreadyDoneError',
    'ConfigurationError',
    'DegenerateScalingError',
    'EarlyStopping',
    'EmptyPopulationError',
    'EvolutionResult',
    'GAConfig',
    'GAError',
    'GAFactory',
    'GAFlags',
    'GAIndividual',
    'GAState',
    'GeneticAlgorithm',
    'IndexOutOfRangeError',
    'InvalidProbabilityError',
    'Population',
    'RandomContext',
    'STRATEGY_MAPPINGS',
    'SimpleGeneticAlgorithm',
    'SortBasis',
    'SortOrder',
    'create_genetic_algorithm',
    'load_config',
]
