"""
遺傳演算法引擎

GeneticAlgorithm 定義 initialize / step / done 狀態機，
SimpleGeneticAlgorithm 實作非重疊世代的簡單遺傳演算法：

    縮放 → 選擇 → 交配/變異 → 評估 → (菁英保留) → 替換
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, List, Optional, Sequence, Union
import copy
import logging
import time

import numpy as np
from deap import tools
from tqdm import tqdm

from .config import GAConfig
from .early_stopping import EarlyStopping
from .exceptions import AlreadyDoneError, ConfigurationError, EmptyPopulationError
from .individual import GAFactory, GAIndividual
from .population import Population, SortBasis, SortOrder
from .random_ctx import RandomContext
from .result import EvolutionResult
from .strategies.scaling import LinearScaling, ScalingStrategy
from .strategies.selection import RouletteWheelSelector, SelectionStrategy

logger = logging.getLogger(__name__)


class GAState(Enum):
    CREATED = "created"
    INITIALIZED = "initialized"
    DONE = "done"


class GeneticAlgorithm(ABC):
    """
    遺傳演算法基類

    公開方法負責記錄日誌，實際行為由 _*_internal 方法提供。
    """

    def initialize(self):
        logger.debug("遺傳演算法 - 初始化")
        self._initialize_internal()

    def step(self) -> int:
        """執行一個世代，回傳新的世代計數"""
        logger.debug("遺傳演算法 - 單步")
        return self._step_internal()

    def done(self) -> bool:
        return self._done_internal()

    @property
    @abstractmethod
    def population(self) -> Population:
        ...

    @abstractmethod
    def _initialize_internal(self):
        ...

    @abstractmethod
    def _step_internal(self) -> int:
        ...

    @abstractmethod
    def _done_internal(self) -> bool:
        ...


class SimpleGeneticAlgorithm(GeneticAlgorithm):
    """
    簡單遺傳演算法

    每個世代以選擇策略抽出父代配對，依交配機率決定交配或直接複製，
    子代經變異與評估後整批取代舊族群。啟用 elitism 時，
    若上一代最佳個體優於新一代最佳個體，則以它取代新一代最差個體。
    """

    def __init__(self, config: GAConfig,
                 factory: Optional[GAFactory] = None,
                 population: Optional[Union[Population, Sequence[GAIndividual]]] = None,
                 rng: Optional[RandomContext] = None,
                 scaling: Optional[ScalingStrategy] = None,
                 selector: Optional[SelectionStrategy] = None,
                 evaluation_context: Any = None):
        """
        Args:
            config: 演化配置
            factory: 族群工廠；給定時以它建立初始族群
            population: 初始族群（沒有工廠時必須提供）
            rng: 隨機數上下文；None 時以 config.seed 建立
            scaling: 縮放策略，預設 LinearScaling
            selector: 選擇策略，預設以適應度為基準的 RouletteWheelSelector
            evaluation_context: 傳給個體 evaluate() 的上下文

        Raises:
            EmptyPopulationError: 工廠與初始族群都沒有提供
            ConfigurationError: 工廠與初始族群同時提供
        """
        self.config = config
        self.rng = rng if rng is not None else RandomContext(config.seed)
        self.evaluation_context = evaluation_context
        sort_order = SortOrder.from_minimize(config.minimize)

        if factory is not None and population is not None:
            raise ConfigurationError(
                "pass either a factory or an initial population, not both"
            )
        if factory is not None:
            population = factory.random_population(config.population_size, sort_order, self.rng)
        elif population is None:
            raise EmptyPopulationError(
                "SimpleGeneticAlgorithm requires either a factory or an initial population"
            )

        if not isinstance(population, Population):
            population = Population(population, sort_order)
        if population.sort_order is not sort_order:
            logger.debug(f"族群排序方向改為 {sort_order.value} 以符合配置")
            population.sort_order = sort_order
        self._population = population

        self.scaling = scaling if scaling is not None else LinearScaling()
        self.selector = selector if selector is not None else RouletteWheelSelector(basis=SortBasis.SCALED)
        self.scaling.set_engine(self)
        self.selector.set_engine(self)

        self.current_generation = 0
        self.state = GAState.CREATED
        self.best_individual: Optional[GAIndividual] = None
        self.total_evaluations = 0

        self.stats = tools.Statistics(key=lambda ind: ind.raw_score())
        self.stats.register('avg', np.mean)
        self.stats.register('std', np.std)
        self.stats.register('min', np.min)
        self.stats.register('max', np.max)
        self.logbook = tools.Logbook()
        self.logbook.header = ['gen', 'nevals'] + self.stats.fields

        logger.info(f"遺傳演算法已創建: 族群={population.size()}, 世代={config.max_generations}, "
                    f"縮放={self.scaling!r}, 選擇={self.selector!r}")

    @property
    def population(self) -> Population:
        return self._population

    def _is_better(self, a: float, b: float) -> bool:
        if self._population.sort_order is SortOrder.LOW_IS_BEST:
            return a < b
        return a > b

    def _evaluate(self, individuals: Sequence[GAIndividual], force: bool = False) -> int:
        evaluated = 0
        for ind in individuals:
            if force or not ind.evaluated:
                ind.evaluate(self.evaluation_context)
                evaluated += 1
        self.total_evaluations += evaluated
        return evaluated

    def _update_best_individual(self):
        current_best = self._population.best(SortBasis.RAW)
        if (self.best_individual is None
                or self._is_better(current_best.raw_score(), self.best_individual.raw_score())):
            self.best_individual = current_best
            logger.debug(f"第 {self.current_generation} 代發現新的最佳個體: raw={current_best.raw_score():.6f}")

    def _record_generation_stats(self, nevals: int):
        record = self.stats.compile(self._population)
        self.logbook.record(gen=self.current_generation, nevals=nevals, **record)

        message = (f"第 {self.current_generation}/{self.config.max_generations} 代: "
                   f"best={self._population.best(SortBasis.RAW).raw_score():.6f} "
                   f"avg={record['avg']:.6f}")
        if self.config.debug:
            logger.info(message)
        else:
            logger.debug(message)

    def _initialize_internal(self):
        # 尚未結束時可重新初始化（重新開始計數）；結束後必須建立新的引擎
        if self.state is GAState.DONE:
            raise AlreadyDoneError(
                f"cannot re-initialize a finished run ({self.current_generation}/{self.config.max_generations})"
            )
        if self._population.is_empty():
            raise EmptyPopulationError("cannot initialize a genetic algorithm with an empty population")

        self.current_generation = 0
        self.best_individual = None
        self.total_evaluations = 0
        self.logbook = tools.Logbook()
        self.logbook.header = ['gen', 'nevals'] + self.stats.fields

        nevals = self._evaluate(self._population)
        self._population.invalidate_scores()
        self.scaling.apply(self._population)
        self.selector.assign(self._population)

        self._update_best_individual()
        self._record_generation_stats(nevals)
        self.state = GAState.DONE if self._done_internal() else GAState.INITIALIZED
        logger.info(f"🌱 初始族群就緒: {self._population.size()} 個個體")

    def _breed(self, n: int) -> List[GAIndividual]:
        """
        產生 n 個子代

        每對父代以 rng.flip(crossover_probability) 決定交配或複製。變異不在此處擲硬幣：
        mutation_probability > 0 時每個子代都呼叫 mutate(probability, rng)，
        由個體以該機率逐基因決定是否變異。
        """
        pairs = (n + 1) // 2
        parents = self.selector.select_many(2 * pairs, self.rng)
        offspring: List[GAIndividual] = []
        crossovers = 0

        for mom, dad in zip(parents[0::2], parents[1::2]):
            if self.rng.flip(self.config.crossover_probability):
                sis = mom.crossover(dad, self.rng)
                bro = dad.crossover(mom, self.rng)
                crossovers += 1
            else:
                sis, bro = copy.deepcopy(mom), copy.deepcopy(dad)

            for child in (sis, bro):
                if self.config.mutation_probability > 0.0:
                    child.mutate(self.config.mutation_probability, self.rng)
                child.generation = self.current_generation + 1
            offspring.extend((sis, bro))

        logger.debug(f"   {pairs} 對父代, {crossovers} 次交配")
        return offspring[:n]

    def _step_internal(self) -> int:
        if self._done_internal():
            raise AlreadyDoneError(
                f"generation limit reached ({self.current_generation}/{self.config.max_generations})"
            )
        if self.state is GAState.CREATED:
            self.initialize()

        old_population = self._population
        size = old_population.size()

        self.scaling.apply(old_population)
        self.selector.assign(old_population)
        self.selector.update()

        offspring = self._breed(size)
        # 變異後的拷貝必須重新評估
        nevals = self._evaluate(offspring, force=True)

        if self.config.elitism:
            candidates = Population(offspring, old_population.sort_order)
            old_best = old_population.best(SortBasis.RAW)
            if self._is_better(old_best.raw_score(), candidates.best(SortBasis.RAW).raw_score()):
                worst = candidates.worst(SortBasis.RAW)
                worst_index = next(i for i, ind in enumerate(offspring) if ind is worst)
                offspring[worst_index] = old_best
                logger.debug(f"   菁英保留: raw={old_best.raw_score():.6f}")

        new_population = Population(offspring, old_population.sort_order)
        self.scaling.apply(new_population)
        self._population = new_population
        self.selector.assign(new_population)

        self.current_generation += 1
        self._update_best_individual()
        self._record_generation_stats(nevals)
        if self._done_internal():
            self.state = GAState.DONE
        return self.current_generation

    def _done_internal(self) -> bool:
        return self.current_generation >= self.config.max_generations

    def evolve(self, early_stopping: Optional[EarlyStopping] = None,
               show_progress: bool = False) -> EvolutionResult:
        """
        執行演化直到 done() 或早停

        Args:
            early_stopping: 早停機制（可選）
            show_progress: 是否顯示 tqdm 進度條

        Returns:
            演化結果
        """
        logger.info("🚀 開始演化過程")
        start = time.time()
        if self.state is GAState.CREATED:
            self.initialize()

        stopped_early = False
        with tqdm(total=self.config.max_generations, initial=self.current_generation,
                  desc="演化", disable=not show_progress) as progress:
            while not self.done():
                self.step()
                best_score = self._population.best(SortBasis.RAW).raw_score()
                progress.update(1)
                progress.set_postfix(best=f"{best_score:.4f}")

                if early_stopping is not None and early_stopping.check(self):
                    logger.info(f"⏹️ 演化在第 {self.current_generation} 世代提前停止")
                    stopped_early = True
                    break

        result = self.result()
        result.stopped_early = stopped_early
        result.execution_time = time.time() - start
        logger.info(f"✅ 演化完成! 最佳原始分數: {result.best_score:.6f}")
        return result

    def result(self) -> EvolutionResult:
        return EvolutionResult(
            config=self.config.to_dict(),
            best_individual=self.best_individual,
            final_population=self._population.individuals,
            logbook=self.logbook,
            generations_completed=self.current_generation,
            total_evaluations=self.total_evaluations,
        )
