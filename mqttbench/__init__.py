"""MQTT の publish / 転送レイテンシを計測するベンチマーク。"""

from mqttbench.config import BenchmarkConfig, ConfigurationError
from mqttbench.engine import LatencyBenchmark, start
from mqttbench.result import (
    PublisherResult,
    ResultDocument,
    SubscriberResult,
    TotalPublisherResult,
    TotalSubscriberResult,
)

__all__ = [
    "BenchmarkConfig",
    "ConfigurationError",
    "LatencyBenchmark",
    "PublisherResult",
    "ResultDocument",
    "SubscriberResult",
    "TotalPublisherResult",
    "TotalSubscriberResult",
    "start",
]
