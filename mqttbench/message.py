"""ベンチマークで送受信するメッセージ。"""

import struct
import time
from dataclasses import dataclass

# ペイロード先頭: 送信時刻 (epoch ナノ秒, big-endian uint64)
_HEADER = struct.Struct("!Q")
HEADER_SIZE = _HEADER.size


@dataclass
class Message:
    """1 件のメッセージ。"""

    topic: str
    qos: int
    payload: bytes = b""
    # 送信 / 受信時刻 (epoch ナノ秒)
    sent: int = 0
    delivered: int = 0
    error: bool = False

    def latency_ms(self) -> float:
        """送信から受信までのミリ秒。"""
        return (self.delivered - self.sent) / 1_000_000


def encode_payload(size: int, sent_ns: int) -> bytes:
    """送信時刻を埋め込んだ size バイトのペイロードを作る。

    タイムスタンプを入れる都合上、size が HEADER_SIZE 未満でも
    HEADER_SIZE バイトは送る。
    """
    pad = b"x" * max(0, size - HEADER_SIZE)
    return _HEADER.pack(sent_ns) + pad


def decode_sent(payload: bytes) -> int | None:
    """ペイロードから送信時刻を取り出す。短すぎる場合は None。"""
    if len(payload) < HEADER_SIZE:
        return None
    (sent_ns,) = _HEADER.unpack_from(payload)
    return sent_ns


def new_message(topic: str, qos: int, size: int) -> Message:
    """現在時刻を埋め込んだメッセージを作る。"""
    sent = time.time_ns()
    return Message(
        topic=topic,
        qos=qos,
        payload=encode_payload(size, sent),
        sent=sent,
    )


def received_message(topic: str, qos: int, payload: bytes, delivered: int) -> Message:
    """受信したペイロードから Message を復元する。"""
    sent = decode_sent(payload)
    return Message(
        topic=topic,
        qos=qos,
        payload=payload,
        sent=sent if sent is not None else 0,
        delivered=delivered,
        error=sent is None,
    )
