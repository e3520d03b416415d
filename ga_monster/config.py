"""
遺傳演算法配置

GAConfig 在一次演化前建立，之後唯讀。load_config() 從 JSON 檔案載入，
檔案中的 "ga" 區段對應 GAConfig 的欄位。
"""

from dataclasses import asdict, dataclass, field, fields
from enum import IntFlag
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

from .exceptions import ConfigurationError, InvalidProbabilityError

logger = logging.getLogger(__name__)


class GAFlags(IntFlag):
    """配置旗標"""

    NONE = 0
    DEBUG = 1


@dataclass(frozen=True)
class GAConfig:
    """
    遺傳演算法配置

    Attributes:
        max_generations: 最大世代數
        crossover_probability: 每對父代進行交配的機率 [0, 1]
        mutation_probability: 傳給個體 mutate() 的變異機率 [0, 1]
        minimize: True 時分數越低越好
        flags: GAFlags 旗標組合
        population_size: 使用工廠建立初始族群時的個體數
        elitism: 是否將上一代最佳個體保留到下一代
        seed: 引擎自建 RandomContext 時使用的種子
    """

    max_generations: int = 100
    crossover_probability: float = 0.9
    mutation_probability: float = 0.01
    minimize: bool = False
    flags: GAFlags = field(default=GAFlags.NONE)
    population_size: int = 30
    elitism: bool = True
    seed: Optional[int] = None

    def __post_init__(self):
        for name in ('crossover_probability', 'mutation_probability'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidProbabilityError(f"{name} must be in [0, 1], got {value}")

        if self.max_generations < 0:
            raise ConfigurationError(f"max_generations must be >= 0, got {self.max_generations}")
        if self.population_size < 1:
            raise ConfigurationError(f"population_size must be >= 1, got {self.population_size}")

        # 允許以整數傳入旗標
        object.__setattr__(self, 'flags', GAFlags(self.flags))

    @property
    def debug(self) -> bool:
        return bool(self.flags & GAFlags.DEBUG)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "GAConfig":
        """
        從字典建立配置

        Args:
            values: 欄位名稱到值的映射；flags 可為整數或旗標名稱列表

        Raises:
            ConfigurationError: 含有未知欄位
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"unknown GA config fields: {sorted(unknown)}")

        values = dict(values)
        flags = values.get('flags')
        if isinstance(flags, (list, tuple)):
            combined = GAFlags.NONE
            for name in flags:
                try:
                    combined |= GAFlags[str(name).upper()]
                except KeyError:
                    raise ConfigurationError(f"unknown GA flag: {name}") from None
            values['flags'] = combined
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['flags'] = int(self.flags)
        return data


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    載入 JSON 配置文件

    Args:
        config_path: 配置文件路徑

    Returns:
        配置字典；其中 "ga" 區段已轉換為 GAConfig

    Raises:
        FileNotFoundError: 文件不存在
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"配置文件不存在: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config = json.load(f)

    config['ga'] = GAConfig.from_dict(config.get('ga', {}))
    logger.info(f"✅ 配置載入成功: {config_file.name}")
    return config
