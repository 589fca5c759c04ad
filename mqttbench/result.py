"""ベンチマーク結果と JSON 出力。"""

import json
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PublisherResult:
    """publisher 1 クライアント分の結果。"""

    id: int
    successes: int = 0
    failures: int = 0
    # 送信ループの実行時間 (秒)
    run_time: float = 0.0
    # publish 呼び出しの所要時間 (ms)
    pub_time_min: float = 0.0
    pub_time_max: float = 0.0
    pub_time_mean: float = 0.0
    pub_time_std: float = 0.0
    # 成功数 / run_time
    pubs_per_sec: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "actual_published": self.successes,
            "failures": self.failures,
            "run_time": self.run_time,
            "pub_time_min": self.pub_time_min,
            "pub_time_max": self.pub_time_max,
            "pub_time_mean": self.pub_time_mean,
            "pub_time_std": self.pub_time_std,
            "publish_per_sec": self.pubs_per_sec,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PublisherResult":
        return cls(
            id=d["id"],
            successes=d["actual_published"],
            failures=d["failures"],
            run_time=d["run_time"],
            pub_time_min=d["pub_time_min"],
            pub_time_max=d["pub_time_max"],
            pub_time_mean=d["pub_time_mean"],
            pub_time_std=d["pub_time_std"],
            pubs_per_sec=d["publish_per_sec"],
        )


@dataclass(frozen=True)
class SubscriberResult:
    """subscriber 1 クライアント分の結果。

    published と fwd_ratio はワーカーが作った時点では 0。集計時に同じ ID の
    PublisherResult と突き合わせた新しいレコードで置き換える。
    """

    id: int
    published: int = 0
    received: int = 0
    fwd_ratio: float = 0.0
    # 転送レイテンシ (ms)
    fwd_latency_min: float = 0.0
    fwd_latency_max: float = 0.0
    fwd_latency_mean: float = 0.0
    fwd_latency_std: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "actual_published": self.published,
            "received": self.received,
            "fwd_success_ratio": self.fwd_ratio,
            "fwd_time_min": self.fwd_latency_min,
            "fwd_time_max": self.fwd_latency_max,
            "fwd_time_mean": self.fwd_latency_mean,
            "fwd_time_std": self.fwd_latency_std,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SubscriberResult":
        return cls(
            id=d["id"],
            published=d["actual_published"],
            received=d["received"],
            fwd_ratio=d["fwd_success_ratio"],
            fwd_latency_min=d["fwd_time_min"],
            fwd_latency_max=d["fwd_time_max"],
            fwd_latency_mean=d["fwd_time_mean"],
            fwd_latency_std=d["fwd_time_std"],
        )


@dataclass(frozen=True)
class TotalPublisherResult:
    """全 publisher の集計。"""

    pub_ratio: float = 0.0
    successes: int = 0
    failures: int = 0
    total_run_time: float = 0.0
    avg_run_time: float = 0.0
    pub_time_min: float = 0.0
    pub_time_max: float = 0.0
    # クライアントごとの平均の平均 / 標本標準偏差
    pub_time_mean_avg: float = 0.0
    pub_time_mean_std: float = 0.0
    total_msgs_per_sec: float = 0.0
    avg_msgs_per_sec: float = 0.0

    def to_dict(self) -> dict:
        return {
            "publish_success_ratio": self.pub_ratio,
            "successes": self.successes,
            "failures": self.failures,
            "total_run_time": self.total_run_time,
            "avg_run_time": self.avg_run_time,
            "pub_time_min": self.pub_time_min,
            "pub_time_max": self.pub_time_max,
            "pub_time_mean_avg": self.pub_time_mean_avg,
            "pub_time_mean_std": self.pub_time_mean_std,
            "total_msgs_per_sec": self.total_msgs_per_sec,
            "avg_msgs_per_sec": self.avg_msgs_per_sec,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TotalPublisherResult":
        return cls(
            pub_ratio=d["publish_success_ratio"],
            successes=d["successes"],
            failures=d["failures"],
            total_run_time=d["total_run_time"],
            avg_run_time=d["avg_run_time"],
            pub_time_min=d["pub_time_min"],
            pub_time_max=d["pub_time_max"],
            pub_time_mean_avg=d["pub_time_mean_avg"],
            pub_time_mean_std=d["pub_time_mean_std"],
            total_msgs_per_sec=d["total_msgs_per_sec"],
            avg_msgs_per_sec=d["avg_msgs_per_sec"],
        )


@dataclass(frozen=True)
class TotalSubscriberResult:
    """全 subscriber の集計。"""

    fwd_ratio: float = 0.0
    received: int = 0
    published: int = 0
    fwd_latency_min: float = 0.0
    fwd_latency_max: float = 0.0
    fwd_latency_mean_avg: float = 0.0
    fwd_latency_mean_std: float = 0.0

    def to_dict(self) -> dict:
        return {
            "fwd_success_ratio": self.fwd_ratio,
            "successes": self.received,
            "actual_total_published": self.published,
            "fwd_latency_min": self.fwd_latency_min,
            "fwd_latency_max": self.fwd_latency_max,
            "fwd_latency_mean_avg": self.fwd_latency_mean_avg,
            "fwd_latency_mean_std": self.fwd_latency_mean_std,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TotalSubscriberResult":
        return cls(
            fwd_ratio=d["fwd_success_ratio"],
            received=d["successes"],
            published=d["actual_total_published"],
            fwd_latency_min=d["fwd_latency_min"],
            fwd_latency_max=d["fwd_latency_max"],
            fwd_latency_mean_avg=d["fwd_latency_mean_avg"],
            fwd_latency_mean_std=d["fwd_latency_mean_std"],
        )


@dataclass(frozen=True)
class ResultDocument:
    """1 回の実行結果全体。"""

    pub_runs: list[PublisherResult] = field(default_factory=list)
    sub_runs: list[SubscriberResult] = field(default_factory=list)
    pub_totals: TotalPublisherResult = field(default_factory=TotalPublisherResult)
    sub_totals: TotalSubscriberResult = field(default_factory=TotalSubscriberResult)

    def to_dict(self) -> dict:
        return {
            "publish runs": [r.to_dict() for r in self.pub_runs],
            "subscribe runs": [r.to_dict() for r in self.sub_runs],
            "publish totals": self.pub_totals.to_dict(),
            "receive totals": self.sub_totals.to_dict(),
        }

    def to_json(self) -> bytes:
        # allow_nan=False: 比率や統計量に NaN / inf が紛れたら即座に失敗させる
        return json.dumps(self.to_dict(), allow_nan=False).encode("utf-8")

    @classmethod
    def from_dict(cls, d: dict) -> "ResultDocument":
        return cls(
            pub_runs=[PublisherResult.from_dict(r) for r in d["publish runs"]],
            sub_runs=[SubscriberResult.from_dict(r) for r in d["subscribe runs"]],
            pub_totals=TotalPublisherResult.from_dict(d["publish totals"]),
            sub_totals=TotalSubscriberResult.from_dict(d["receive totals"]),
        )

    @classmethod
    def from_json(cls, data: bytes | str) -> "ResultDocument":
        return cls.from_dict(json.loads(data))
