"""argparse エントリポイント。"""

import argparse
import logging
import sys

from mqttbench.config import BenchmarkConfig, ConfigurationError
from mqttbench.engine import LatencyBenchmark
from mqttbench.result import ResultDocument

logger = logging.getLogger("mqttbench")


def _log_summary(doc: ResultDocument) -> None:
    """集計結果を 1 行ずつログに出す。"""
    p = doc.pub_totals
    s = doc.sub_totals
    logger.info(
        f"publish: {p.successes} ok / {p.failures} failed "
        f"(ratio {p.pub_ratio:.3f}), {p.total_msgs_per_sec:.1f} msg/s, "
        f"latency mean {p.pub_time_mean_avg:.3f} ms"
    )
    logger.info(
        f"receive: {s.received} / {s.published} "
        f"(ratio {s.fwd_ratio:.3f}), "
        f"fwd latency min {s.fwd_latency_min:.3f} / "
        f"mean {s.fwd_latency_mean_avg:.3f} / max {s.fwd_latency_max:.3f} ms"
    )


def build_parser() -> argparse.ArgumentParser:
    """ArgumentParser を構築する。"""
    defaults = BenchmarkConfig()
    parser = argparse.ArgumentParser(
        prog="mqttbench",
        description="MQTT publish / forward latency benchmark",
    )
    parser.add_argument("--broker", default=defaults.broker, help="ブローカー URL")
    parser.add_argument(
        "--topic", default=defaults.topic, help="トピックのプレフィックス"
    )
    parser.add_argument(
        "--qos", type=int, default=defaults.qos, choices=[0, 1, 2]
    )
    parser.add_argument(
        "--size", type=int, default=defaults.size, help="ペイロードサイズ (バイト)"
    )
    parser.add_argument(
        "--count", type=int, default=defaults.count, help="クライアントあたりの件数"
    )
    parser.add_argument(
        "--clients", type=int, default=defaults.clients, help="クライアント数"
    )
    parser.add_argument("--username", default=defaults.username)
    parser.add_argument("--password", default=defaults.password)
    parser.add_argument("--keepalive", type=int, default=defaults.keepalive)
    parser.add_argument(
        "--quiescence",
        type=int,
        default=defaults.quiescence_secs,
        help="publish 完了後に待つ秒数",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="進捗ログを出さない"
    )
    parser.add_argument("--output", default=None, help="JSON 出力先")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI エントリポイント。"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = BenchmarkConfig(
        broker=args.broker,
        topic=args.topic,
        qos=args.qos,
        size=args.size,
        count=args.count,
        clients=args.clients,
        quiet=args.quiet,
        username=args.username,
        password=args.password,
        keepalive=args.keepalive,
        quiescence_secs=args.quiescence,
    )
    try:
        bench = LatencyBenchmark(config)
    except ConfigurationError as e:
        parser.error(str(e))

    doc = bench.run()
    if not args.quiet:
        _log_summary(doc)

    data = doc.to_json()
    if args.output:
        with open(args.output, "wb") as f:
            f.write(data + b"\n")
        if not args.quiet:
            logger.info(f"Results written to {args.output}")
    else:
        sys.stdout.write(data.decode("utf-8") + "\n")


if __name__ == "__main__":
    main()
