"""ベンチマーク設定。"""

from dataclasses import dataclass


class ConfigurationError(ValueError):
    """起動前に検出される設定エラー。"""


@dataclass
class BenchmarkConfig:
    """ベンチマークのパラメータ。"""

    # ブローカー URL (tcp://host:port, ssl://host:port など)
    broker: str = "tcp://localhost:1883"
    # トピックのプレフィックス (実際のトピックは "<topic>-<id>")
    topic: str = "/test"
    # QoS (0, 1, 2)
    qos: int = 1
    # ペイロードサイズ (バイト)
    size: int = 100
    # クライアントあたりのメッセージ数
    count: int = 100
    # publisher / subscriber のペア数
    clients: int = 10
    # 進捗ログを抑制する
    quiet: bool = False
    # 認証情報 (空なら認証なし)
    username: str = ""
    password: str = ""
    # キープアライブ間隔 (秒)
    keepalive: int = 60
    # publish 完了後、subscriber を止めるまでの待機秒数
    quiescence_secs: int = 3

    def validate(self) -> None:
        """不正な値があれば ConfigurationError を送出する。"""
        if self.clients < 1:
            raise ConfigurationError(
                f"clients must be at least 1, got {self.clients}"
            )
        if "+" in self.topic or "#" in self.topic:
            raise ConfigurationError(
                f"topic must not contain wildcards, got {self.topic!r}"
            )
        if self.qos not in (0, 1, 2):
            raise ConfigurationError(f"qos must be 0, 1 or 2, got {self.qos}")
        if self.size < 0:
            raise ConfigurationError(f"size must be >= 0, got {self.size}")
        if self.count < 0:
            raise ConfigurationError(f"count must be >= 0, got {self.count}")
        if self.keepalive <= 0:
            raise ConfigurationError(
                f"keepalive must be positive, got {self.keepalive}"
            )
        if self.quiescence_secs < 0:
            raise ConfigurationError(
                f"quiescence_secs must be >= 0, got {self.quiescence_secs}"
            )

    def topic_for(self, client_id: int) -> str:
        """クライアント ID に対応するトピック名。"""
        return f"{self.topic}-{client_id}"
