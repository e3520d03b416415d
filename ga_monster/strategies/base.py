"""
演化策略基類

縮放與選擇策略共用的最小介面。
"""

from typing import Any, Dict


class EvolutionStrategy:
    """
    演化策略基類

    所有縮放、選擇策略都繼承此類；引擎透過 set_engine() 註冊自己。
    """

    def __init__(self):
        self.engine = None
        self.name = "base_strategy"

    def set_engine(self, engine):
        """設置演化引擎引用"""
        self.engine = engine

    def parameters(self) -> Dict[str, Any]:
        """策略的可配置參數（不含引擎、族群與內部快取）"""
        return {
            key: value for key, value in vars(self).items()
            if not key.startswith('_') and key not in ('engine', 'name', 'population')
        }

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.parameters().items())
        return f"{self.__class__.__name__}({params})"
