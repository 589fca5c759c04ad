"""publisher ワーカー。"""

import logging
import os
import queue
import threading
import time

from mqttbench import stats
from mqttbench.client import ClientError, ClientFactory
from mqttbench.config import BenchmarkConfig
from mqttbench.message import new_message
from mqttbench.result import PublisherResult

logger = logging.getLogger(__name__)


class PublisherWorker(threading.Thread):
    """1 クライアント分のメッセージを送信し、結果を results に入れる。"""

    def __init__(
        self,
        client_id: int,
        config: BenchmarkConfig,
        client_factory: ClientFactory,
        results: "queue.Queue[PublisherResult]",
    ):
        super().__init__(name=f"publisher-{client_id}", daemon=True)
        self.client_id = client_id
        self.config = config
        self.topic = config.topic_for(client_id)
        self.client_factory = client_factory
        self.results = results

    def run(self) -> None:
        # 想定外の例外で落ちても結果は必ず返す (集計側が待ち続けないように)
        result = PublisherResult(id=self.client_id, failures=self.config.count)
        try:
            result = self.publish_all()
        finally:
            self.results.put(result)

    def publish_all(self) -> PublisherResult:
        """接続して count 件送信する。失敗は数えるだけで再送しない。"""
        cfg = self.config
        try:
            client = self.client_factory(
                f"mqttbench-pub-{os.getpid()}-{self.client_id}", cfg
            )
            client.connect()
        except ClientError as e:
            logger.warning(f"publisher {self.client_id}: {e}")
            return PublisherResult(id=self.client_id, failures=cfg.count)

        if not cfg.quiet:
            logger.info(f"publisher {self.client_id}: connected, topic={self.topic}")

        latencies: list[float] = []
        failures = 0
        start = time.perf_counter()
        for _ in range(cfg.count):
            msg = new_message(self.topic, cfg.qos, cfg.size)
            t0 = time.perf_counter()
            try:
                client.publish(msg.topic, msg.qos, msg.payload)
            except ClientError as e:
                msg.error = True
                failures += 1
                logger.warning(f"publisher {self.client_id}: {e}")
                continue
            latencies.append((time.perf_counter() - t0) * 1000)
        run_time = time.perf_counter() - start

        try:
            client.disconnect()
        except ClientError as e:
            logger.warning(f"publisher {self.client_id}: disconnect failed: {e}")

        summary = stats.summarize(latencies)
        result = PublisherResult(
            id=self.client_id,
            successes=len(latencies),
            failures=failures,
            run_time=run_time,
            pub_time_min=summary.min,
            pub_time_max=summary.max,
            pub_time_mean=summary.mean,
            pub_time_std=summary.std,
            pubs_per_sec=stats.ratio(len(latencies), run_time),
        )
        if not cfg.quiet:
            logger.info(
                f"publisher {self.client_id}: done, "
                f"{result.successes} ok / {result.failures} failed "
                f"in {run_time:.3f}s"
            )
        return result
