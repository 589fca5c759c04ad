"""subscriber ワーカー。"""

import logging
import os
import queue
import threading
import time

from mqttbench import stats
from mqttbench.client import ClientError, ClientFactory
from mqttbench.config import BenchmarkConfig
from mqttbench.message import Message, received_message
from mqttbench.result import SubscriberResult

logger = logging.getLogger(__name__)

# inbox に入れる停止シグナル
_STOP = object()


class SubscriberWorker(threading.Thread):
    """購読して受信レイテンシを記録し、stop() 後に結果を results に入れる。

    配信コールバックは受信時刻付きのメッセージを自分専用の inbox に入れるだけ。
    ワーカースレッドは inbox をブロッキングで読み、メッセージと停止シグナルの
    どちらか先に来た方を処理する。
    """

    def __init__(
        self,
        client_id: int,
        config: BenchmarkConfig,
        client_factory: ClientFactory,
        ready: "queue.Queue[int]",
        results: "queue.Queue[SubscriberResult]",
    ):
        super().__init__(name=f"subscriber-{client_id}", daemon=True)
        self.client_id = client_id
        self.config = config
        self.topic = config.topic_for(client_id)
        self.client_factory = client_factory
        self.ready = ready
        self.results = results
        self.inbox: queue.Queue = queue.Queue()

        self.received = 0
        self.errors = 0
        self.latencies: list[float] = []

    def stop(self) -> None:
        """受信を終えて結果を確定させる。"""
        self.inbox.put(_STOP)

    def _on_message(self, topic: str, qos: int, payload: bytes) -> None:
        self.inbox.put(received_message(topic, qos, payload, time.time_ns()))

    def run(self) -> None:
        client = None
        # 接続に失敗しても ready と結果は必ず通知する (待ち合わせが終わらなくなるため)
        try:
            client = self._connect()
        except Exception:
            logger.exception(f"subscriber {self.client_id}: setup failed")
        finally:
            self.ready.put(self.client_id)

        try:
            self._receive(client)
        finally:
            self.results.put(self.result())

    def _receive(self, client) -> None:
        while True:
            item = self.inbox.get()
            if item is _STOP:
                break
            self._record(item)

        # 切断で配信スレッドを止めてから、それまでに届いた分を数える
        if client is not None:
            try:
                client.disconnect()
            except ClientError as e:
                logger.warning(f"subscriber {self.client_id}: disconnect failed: {e}")

        while True:
            try:
                item = self.inbox.get_nowait()
            except queue.Empty:
                break
            if item is not _STOP:
                self._record(item)

    def _connect(self):
        try:
            client = self.client_factory(
                f"mqttbench-sub-{os.getpid()}-{self.client_id}", self.config
            )
            client.connect()
        except ClientError as e:
            logger.warning(f"subscriber {self.client_id}: {e}")
            return None
        try:
            client.subscribe(self.topic, self.config.qos, self._on_message)
        except ClientError as e:
            logger.warning(f"subscriber {self.client_id}: {e}")
            try:
                client.disconnect()
            except ClientError as de:
                logger.debug(f"subscriber {self.client_id}: disconnect failed: {de}")
            return None
        if not self.config.quiet:
            logger.info(f"subscriber {self.client_id}: subscribed to {self.topic}")
        return client

    def _record(self, msg: Message) -> None:
        self.received += 1
        if msg.error:
            self.errors += 1
            return
        self.latencies.append(msg.latency_ms())

    def result(self) -> SubscriberResult:
        """現在までの受信から結果を作る。"""
        summary = stats.summarize(self.latencies)
        if self.errors and not self.config.quiet:
            logger.info(
                f"subscriber {self.client_id}: {self.errors} payloads without timestamp"
            )
        return SubscriberResult(
            id=self.client_id,
            received=self.received,
            fwd_latency_min=summary.min,
            fwd_latency_max=summary.max,
            fwd_latency_mean=summary.mean,
            fwd_latency_std=summary.std,
        )
