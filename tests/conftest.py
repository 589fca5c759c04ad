import threading
import time

import pytest

from mqttbench.client import ClientError
from mqttbench.message import encode_payload


class FakeBroker:
    """プロセス内で配送する偽ブローカー。"""

    def __init__(self):
        self.lock = threading.Lock()
        self.subscriptions: dict[str, list] = {}
        self.clients: list["FakeClient"] = []
        # 失敗させたいクライアント ID の接尾辞 ("pub-0", "sub-1" など)
        self.refuse_connect: set[str] = set()
        self.refuse_subscribe: set[str] = set()
        # topic -> 何件目 (0 始まり) の publish を失敗させるか
        self.fail_publish: dict[str, set[int]] = {}
        # 配送しない topic
        self.drop_topics: set[str] = set()
        # ロール -> クライアント生成時 / subscribe 時に送出する例外
        self.factory_errors: dict[str, Exception] = {}
        self.subscribe_errors: dict[str, Exception] = {}
        # 切断時に最後の 1 件を配信する topic
        self.deliver_on_disconnect: set[str] = set()
        self.published: dict[str, int] = {}

    def factory(self, client_id, config):
        role = FakeClient.role_of(client_id)
        if role in self.factory_errors:
            raise self.factory_errors[role]
        client = FakeClient(self, client_id)
        with self.lock:
            self.clients.append(client)
        return client

    def deliver(self, topic, qos, payload):
        with self.lock:
            n = self.published.get(topic, 0)
            self.published[topic] = n + 1
            if n in self.fail_publish.get(topic, set()):
                raise ClientError(f"publish to {topic} failed: injected")
            callbacks = [] if topic in self.drop_topics else list(
                self.subscriptions.get(topic, [])
            )
        for cb in callbacks:
            cb(topic, qos, payload)


class FakeClient:
    def __init__(self, broker, client_id):
        self.broker = broker
        self.client_id = client_id
        # "mqttbench-pub-<pid>-<n>" -> "pub-<n>"
        self.role = self.role_of(client_id)
        self.topic = None
        self.connected = False
        self.disconnected = False

    @staticmethod
    def role_of(client_id):
        parts = client_id.split("-")
        return f"{parts[1]}-{parts[3]}"

    def connect(self):
        if self.role in self.broker.refuse_connect:
            raise ClientError("connection refused: injected")
        self.connected = True

    def subscribe(self, topic, qos, on_message):
        if self.role in self.broker.refuse_subscribe:
            raise ClientError(f"subscribe {topic} rejected: injected")
        if self.role in self.broker.subscribe_errors:
            raise self.broker.subscribe_errors[self.role]
        self.topic = topic
        with self.broker.lock:
            self.broker.subscriptions.setdefault(topic, []).append(on_message)

    def publish(self, topic, qos, payload):
        self.broker.deliver(topic, qos, payload)

    def disconnect(self):
        if self.topic in self.broker.deliver_on_disconnect:
            self.broker.deliver(self.topic, 0, encode_payload(16, time.time_ns()))
        self.disconnected = True


@pytest.fixture
def broker():
    return FakeBroker()
