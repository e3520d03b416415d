#!/usr/bin/env python3
"""
命令列入口

以 JSON 配置檔執行 TSP 示範演化：

    ga-monster --config configs/tsp_config.json
    ga-monster --config configs/tsp_config.json --test --output summary.json
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence
import argparse
import json
import logging
import sys

from . import create_genetic_algorithm
from .config import load_config
from .early_stopping import EarlyStopping
from .exceptions import GAError
from .problems.tsp import TSPFactory, TSPInstance
from .random_ctx import RandomContext
from .result import EvolutionResult

logger = logging.getLogger(__name__)


def print_experiment_info(config: Dict[str, Any]):
    """打印實驗信息"""
    ga_config = config['ga']
    experiment = config.get('experiment', {})
    termination = config.get('termination', {})

    print("\n" + "🚀" * 30)
    print(f"📋 實驗名稱: {experiment.get('name', 'unnamed')}")
    if experiment.get('description'):
        print(f"📝 實驗描述: {experiment['description']}")
    print(f"🔢 族群大小: {ga_config.population_size}")
    print(f"🔄 演化世代: {ga_config.max_generations}")
    print(f"🎯 縮放/選擇: {config.get('scaling', {}).get('name', 'linear')} / "
          f"{config.get('selection', {}).get('name', 'roulette')}")
    if termination.get('early_stopping'):
        print(f"🛑 早停機制: 啟用 (patience={termination.get('parameters', {}).get('patience', 10)})")
    else:
        print("🛑 早停機制: 停用")
    print("🚀" * 30 + "\n")


def run_experiment(config: Dict[str, Any], show_progress: bool = True) -> EvolutionResult:
    """
    依配置建立 TSP 問題並執行演化

    Args:
        config: load_config() 回傳的配置字典

    Returns:
        演化結果
    """
    problem = config.get('problem', {})
    instance = TSPInstance.random(problem.get('n_cities', 20),
                                  RandomContext(problem.get('seed')))

    ga = create_genetic_algorithm(config, factory=TSPFactory(instance),
                                  evaluation_context=instance)

    early_stopping = None
    termination = config.get('termination', {})
    if termination.get('early_stopping'):
        early_stopping = EarlyStopping.for_config(config['ga'], **termination.get('parameters', {}))

    return ga.evolve(early_stopping=early_stopping, show_progress=show_progress)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='ga_monster TSP 示範',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用範例:
  ga-monster --config configs/tsp_config.json
  ga-monster --config configs/tsp_config.json --test -v
        """
    )
    parser.add_argument('--config', required=True, help='配置文件路徑')
    parser.add_argument('--test', action='store_true', help='測試模式 (覆蓋為小規模參數)')
    parser.add_argument('--output', help='結果摘要 JSON 輸出路徑')
    parser.add_argument('--verbose', '-v', action='store_true', help='詳細輸出模式')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(args.config)

        if args.test:
            print("🧪 測試模式啟用")
            config['ga'] = replace(config['ga'], population_size=20, max_generations=10)

        print_experiment_info(config)

        start_time = datetime.now()
        result = run_experiment(config, show_progress=not args.verbose)
        duration = (datetime.now() - start_time).total_seconds()

        print("\n✅ 演化計算完成!")
        print(f"⏱️  總執行時間: {duration:.2f} 秒")
        print(f"📈 最終世代: {result.generations_completed}")
        print(f"🏆 最短環路: {result.best_score:.4f}")

        if args.output:
            summary = result.get_summary()
            summary.update({
                'experiment_name': config.get('experiment', {}).get('name'),
                'start_time': start_time.isoformat(),
                'config': config['ga'].to_dict(),
            })
            output_file = Path(args.output)
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(summary, f, indent=2, ensure_ascii=False)
            print(f"📄 實驗摘要保存於: {output_file}")
        return 0

    except KeyboardInterrupt:
        print("\n⚠️ 用戶中斷實驗")
        return 1
    except (GAError, FileNotFoundError, json.JSONDecodeError) as e:
        print(f"\n❌ 實驗執行失敗: {e}")
        if args.verbose:
            logger.exception("實驗執行失敗")
        return 1


if __name__ == "__main__":
    sys.exit(main())
