"""
遺傳演算法例外類別

結構性與配置錯誤直接拋給呼叫端；數值退化 (DegenerateScalingError)
由縮放策略在本地攔截並回退。
"""


class GAError(Exception):
    """所有 ga_monster 例外的基類"""

    pass


class EmptyPopulationError(GAError):
    """族群為空，但操作至少需要一個個體"""

    pass


class IndexOutOfRangeError(GAError, IndexError):
    """族群索引超出範圍"""

    pass


class InvalidProbabilityError(GAError, ValueError):
    """交配/變異機率不在 [0, 1] 之間"""

    pass


class ConfigurationError(GAError, ValueError):
    """其他無效的配置值"""

    pass


class DegenerateScalingError(GAError):
    """所有原始分數相同，線性縮放的分母為零"""

    pass


class AlreadyDoneError(GAError):
    """演化已達終止條件後仍呼叫 step()"""

    pass
