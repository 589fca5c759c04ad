"""paho-mqtt クライアントの薄いラッパー。

ワーカーからは connect / subscribe / publish / disconnect だけが見える。
テストでは同じメソッドを持つ偽クライアントを client_factory で差し替える。
"""

import logging
import threading
from typing import Callable
from urllib.parse import urlparse

import paho.mqtt.client as mqtt
from paho.mqtt.client import CallbackAPIVersion

from mqttbench.config import BenchmarkConfig

logger = logging.getLogger(__name__)

# (topic, qos, payload) を受け取る配信コールバック
OnMessage = Callable[[str, int, bytes], None]

_TLS_SCHEMES = {"ssl", "tls", "mqtts"}
_PLAIN_SCHEMES = {"tcp", "mqtt", ""}

DEFAULT_ACK_TIMEOUT = 10.0


class ClientError(RuntimeError):
    """接続 / 購読 / 送信の失敗。"""


def parse_broker_url(url: str) -> tuple[str, int, bool]:
    """ブローカー URL を (host, port, tls) に分解する。"""
    if "://" not in url:
        url = f"tcp://{url}"
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in _TLS_SCHEMES:
        tls = True
    elif scheme in _PLAIN_SCHEMES:
        tls = False
    else:
        raise ClientError(f"unsupported broker scheme: {parsed.scheme}")
    if not parsed.hostname:
        raise ClientError(f"broker URL has no host: {url}")
    port = parsed.port or (8883 if tls else 1883)
    return parsed.hostname, port, tls


class MqttClient:
    """1 つのクライアント ID に対応する MQTT 接続。"""

    def __init__(
        self,
        client_id: str,
        broker: str,
        username: str = "",
        password: str = "",
        keepalive: int = 60,
        ack_timeout: float = DEFAULT_ACK_TIMEOUT,
    ):
        self.client_id = client_id
        self.host, self.port, self.tls = parse_broker_url(broker)
        self.keepalive = keepalive
        self.ack_timeout = ack_timeout

        self._client = mqtt.Client(
            callback_api_version=CallbackAPIVersion.VERSION2,
            client_id=client_id,
            protocol=mqtt.MQTTv311,
        )
        if username:
            self._client.username_pw_set(username, password or None)
        if self.tls:
            self._client.tls_set()

        self._connected = threading.Event()
        self._connect_failure: str | None = None
        self._subscribed = threading.Event()
        self._subscribe_failure: str | None = None
        self._on_message: OnMessage | None = None

        self._client.on_connect = self._handle_connect
        self._client.on_subscribe = self._handle_subscribe
        self._client.on_message = self._handle_message

    # --- paho コールバック (ネットワークスレッドで呼ばれる) ---

    def _handle_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            self._connect_failure = str(reason_code)
        self._connected.set()

    def _handle_subscribe(self, client, userdata, mid, reason_codes, properties=None):
        failed = [str(rc) for rc in reason_codes if rc.is_failure]
        if failed:
            self._subscribe_failure = ", ".join(failed)
        self._subscribed.set()

    def _handle_message(self, client, userdata, msg):
        if self._on_message is not None:
            self._on_message(msg.topic, msg.qos, msg.payload)

    # --- 公開 API ---

    def connect(self) -> None:
        """接続して CONNACK を待つ。"""
        try:
            self._client.connect(self.host, self.port, keepalive=self.keepalive)
        except (OSError, ValueError) as e:
            raise ClientError(f"connect to {self.host}:{self.port} failed: {e}") from e
        self._client.loop_start()

        if not self._connected.wait(self.ack_timeout):
            self._client.loop_stop()
            raise ClientError(f"no CONNACK within {self.ack_timeout}s")
        if self._connect_failure is not None:
            self._client.loop_stop()
            raise ClientError(f"connection refused: {self._connect_failure}")

    def subscribe(self, topic: str, qos: int, on_message: OnMessage) -> None:
        """購読して SUBACK を待つ。"""
        self._on_message = on_message
        try:
            rc, _ = self._client.subscribe(topic, qos=qos)
        except ValueError as e:
            raise ClientError(f"subscribe {topic} failed: {e}") from e
        if rc != mqtt.MQTT_ERR_SUCCESS:
            raise ClientError(f"subscribe {topic} failed: {mqtt.error_string(rc)}")
        if not self._subscribed.wait(self.ack_timeout):
            raise ClientError(f"no SUBACK for {topic} within {self.ack_timeout}s")
        if self._subscribe_failure is not None:
            raise ClientError(f"subscribe {topic} rejected: {self._subscribe_failure}")

    def publish(self, topic: str, qos: int, payload: bytes) -> None:
        """送信し、QoS に応じた完了 (PUBACK / PUBCOMP / 書き込み) を待つ。"""
        try:
            info = self._client.publish(topic, payload, qos=qos)
            info.wait_for_publish()
            published = info.is_published()
        except (ValueError, RuntimeError) as e:
            raise ClientError(f"publish to {topic} failed: {e}") from e
        if info.rc != mqtt.MQTT_ERR_SUCCESS or not published:
            raise ClientError(
                f"publish to {topic} failed: {mqtt.error_string(info.rc)}"
            )

    def disconnect(self) -> None:
        """切断してネットワークスレッドを止める。"""
        self._client.disconnect()
        self._client.loop_stop()


# (client_id, config) からクライアントを作るファクトリ
ClientFactory = Callable[[str, BenchmarkConfig], MqttClient]


def default_client_factory(client_id: str, config: BenchmarkConfig) -> MqttClient:
    """設定から paho ベースのクライアントを作る。"""
    return MqttClient(
        client_id,
        config.broker,
        username=config.username,
        password=config.password,
        keepalive=config.keepalive,
    )
