"""レイテンシ標本の統計量。

どれも入力だけに依存する純粋関数。空の標本や要素数 1 の標本でも例外を出さず
0.0 を返す (集計結果の JSON に NaN を混ぜないため)。
"""

import statistics
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Summary:
    """min / max / mean / 標本標準偏差。"""

    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    std: float = 0.0


def mean(samples: Sequence[float]) -> float:
    """算術平均。空なら 0.0。"""
    if not samples:
        return 0.0
    return statistics.fmean(samples)


def sample_std(samples: Sequence[float]) -> float:
    """標本標準偏差 (n-1 で割る)。要素数 2 未満なら 0.0。"""
    if len(samples) < 2:
        return 0.0
    return statistics.stdev(samples)


def summarize(samples: Sequence[float]) -> Summary:
    """標本をまとめて Summary にする。"""
    if not samples:
        return Summary()
    return Summary(
        min=min(samples),
        max=max(samples),
        mean=mean(samples),
        std=sample_std(samples),
    )


def ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator。分母が 0 なら 0.0。"""
    if denominator == 0:
        return 0.0
    return numerator / denominator
