"""
演化結果類

封裝一次演化的最佳個體、最終族群與逐代統計。
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd
from deap import tools

from .individual import GAIndividual


@dataclass
class EvolutionResult:
    """
    演化結果

    logbook 每筆記錄包含 gen、nevals、avg、std、min、max（原始分數）。
    """

    config: Dict[str, Any]
    best_individual: Optional[GAIndividual]
    final_population: List[GAIndividual]
    logbook: tools.Logbook
    generations_completed: int
    total_evaluations: int
    stopped_early: bool = False
    execution_time: Optional[float] = None

    @property
    def best_score(self) -> Optional[float]:
        if self.best_individual is None:
            return None
        return self.best_individual.raw_score()

    def history_frame(self) -> pd.DataFrame:
        """逐代統計的 DataFrame，以 gen 為索引"""
        frame = pd.DataFrame(list(self.logbook))
        if not frame.empty:
            frame = frame.set_index('gen')
        return frame

    @property
    def improvement(self) -> float:
        """最後一代與第 0 代最佳分數的差（依 minimize 方向取正值為改進）"""
        if len(self.logbook) < 2:
            return 0.0
        key = 'min' if self.config.get('minimize') else 'max'
        first, last = self.logbook[0][key], self.logbook[-1][key]
        return (first - last) if self.config.get('minimize') else (last - first)

    def get_summary(self) -> Dict[str, Any]:
        return {
            'generations_completed': self.generations_completed,
            'total_evaluations': self.total_evaluations,
            'population_size': len(self.final_population),
            'best_score': self.best_score,
            'improvement': self.improvement,
            'stopped_early': self.stopped_early,
            'execution_time': self.execution_time,
        }
