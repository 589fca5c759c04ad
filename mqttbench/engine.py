"""
publisher / subscriber ペアを並行に走らせるレイテンシベンチマーク。

subscriber を全員購読させてから publisher を起動し、送信完了後に一定時間
待ってから subscriber を止め、双方の結果を集計して 1 つのドキュメントにする。
"""

import logging
import queue
import time

from mqttbench.aggregate import calculate_publish_results, calculate_subscribe_results
from mqttbench.client import (
    ClientError,
    ClientFactory,
    default_client_factory,
    parse_broker_url,
)
from mqttbench.config import BenchmarkConfig, ConfigurationError
from mqttbench.publisher import PublisherWorker
from mqttbench.result import PublisherResult, ResultDocument, SubscriberResult
from mqttbench.subscriber import SubscriberWorker

logger = logging.getLogger(__name__)


class LatencyBenchmark:
    """N 組の publisher / subscriber によるベンチマーク。"""

    def __init__(
        self,
        config: BenchmarkConfig,
        client_factory: ClientFactory | None = None,
    ):
        config.validate()
        if client_factory is None:
            try:
                parse_broker_url(config.broker)
            except ClientError as e:
                raise ConfigurationError(str(e)) from e
            client_factory = default_client_factory
        self.config = config
        self.client_factory = client_factory
        # 1 秒刻みの待機に使う (テストで差し替える)
        self.sleep = time.sleep

    def run(self) -> ResultDocument:
        """ベンチマークを実行する。"""
        cfg = self.config

        # --- subscriber 起動 ---
        if not cfg.quiet:
            logger.info("Starting subscribe..")
        ready: queue.Queue[int] = queue.Queue()
        sub_results: queue.Queue[SubscriberResult] = queue.Queue()
        subscribers = [
            SubscriberWorker(i, cfg, self.client_factory, ready, sub_results)
            for i in range(cfg.clients)
        ]
        for sub in subscribers:
            sub.start()

        # 全員の購読完了を待つ
        for _ in range(cfg.clients):
            ready.get()
        if not cfg.quiet:
            logger.info("all subscribe job done.")

        # --- publisher 起動 ---
        if not cfg.quiet:
            logger.info("Starting publish..")
        pub_results: queue.Queue[PublisherResult] = queue.Queue()
        start = time.perf_counter()
        publishers = [
            PublisherWorker(i, cfg, self.client_factory, pub_results)
            for i in range(cfg.clients)
        ]
        for pub in publishers:
            pub.start()

        # 到着順に受け取る
        pubs = [pub_results.get() for _ in range(cfg.clients)]
        total_run_time = time.perf_counter() - start
        for pub in publishers:
            pub.join()
        pub_totals = calculate_publish_results(pubs, total_run_time)

        # --- 配送中のメッセージを待つ ---
        for i in range(cfg.quiescence_secs):
            self.sleep(1)
            if not cfg.quiet:
                logger.info(
                    f"Benchmark will stop after {cfg.quiescence_secs - i} seconds."
                )

        for sub in subscribers:
            sub.stop()
        subs = [sub_results.get() for _ in range(cfg.clients)]
        for sub in subscribers:
            sub.join()

        matched, sub_totals = calculate_subscribe_results(subs, pubs)
        if not cfg.quiet:
            logger.info("All jobs done.")

        return ResultDocument(
            pub_runs=sorted(pubs, key=lambda r: r.id),
            sub_runs=sorted(matched, key=lambda r: r.id),
            pub_totals=pub_totals,
            sub_totals=sub_totals,
        )


def start(
    broker: str,
    topic: str,
    qos: int,
    size: int,
    count: int,
    clients: int,
    quiet: bool,
    client_factory: ClientFactory | None = None,
) -> bytes:
    """ベンチマークを実行し、結果を JSON バイト列で返す。"""
    config = BenchmarkConfig(
        broker=broker,
        topic=topic,
        qos=qos,
        size=size,
        count=count,
        clients=clients,
        quiet=quiet,
    )
    return LatencyBenchmark(config, client_factory).run().to_json()
