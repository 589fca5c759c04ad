"""クライアント横断の集計。"""

from dataclasses import replace
from typing import Sequence

from mqttbench import stats
from mqttbench.result import (
    PublisherResult,
    SubscriberResult,
    TotalPublisherResult,
    TotalSubscriberResult,
)


def calculate_publish_results(
    pub_results: Sequence[PublisherResult], total_run_time: float
) -> TotalPublisherResult:
    """publisher 結果を集計する。

    成功率は合計同士の比 (クライアントごとの比の平均ではない)。
    平均レイテンシの標準偏差はクライアント間のばらつきを表す。
    """
    if not pub_results:
        return TotalPublisherResult(total_run_time=total_run_time)

    successes = sum(r.successes for r in pub_results)
    failures = sum(r.failures for r in pub_results)
    # min は先頭の値、max は 0 から始める
    pub_time_min = pub_results[0].pub_time_min
    pub_time_max = 0.0
    for r in pub_results:
        if r.pub_time_min < pub_time_min:
            pub_time_min = r.pub_time_min
        if r.pub_time_max > pub_time_max:
            pub_time_max = r.pub_time_max

    means = [r.pub_time_mean for r in pub_results]
    rates = [r.pubs_per_sec for r in pub_results]
    run_times = [r.run_time for r in pub_results]

    return TotalPublisherResult(
        pub_ratio=stats.ratio(successes, successes + failures),
        successes=successes,
        failures=failures,
        total_run_time=total_run_time,
        avg_run_time=stats.mean(run_times),
        pub_time_min=pub_time_min,
        pub_time_max=pub_time_max,
        pub_time_mean_avg=stats.mean(means),
        pub_time_mean_std=stats.sample_std(means),
        total_msgs_per_sec=sum(rates),
        avg_msgs_per_sec=stats.mean(rates),
    )


def match_subscriber(
    sub_result: SubscriberResult, pub_results: Sequence[PublisherResult]
) -> SubscriberResult:
    """同じ ID の publisher 結果から published と fwd_ratio を埋めた新しいレコードを返す。

    対応する publisher がなければそのまま返す (published = 0, fwd_ratio = 0.0)。
    """
    for pub in pub_results:
        if pub.id == sub_result.id:
            return replace(
                sub_result,
                published=pub.successes,
                fwd_ratio=stats.ratio(sub_result.received, pub.successes),
            )
    return sub_result


def calculate_subscribe_results(
    sub_results: Sequence[SubscriberResult], pub_results: Sequence[PublisherResult]
) -> tuple[list[SubscriberResult], TotalSubscriberResult]:
    """subscriber 結果を集計する。

    戻り値は (突き合わせ済みの subscriber 結果, 集計)。
    """
    matched = [match_subscriber(r, pub_results) for r in sub_results]
    if not matched:
        return matched, TotalSubscriberResult()

    received = sum(r.received for r in matched)
    published = sum(r.published for r in matched)
    fwd_min = matched[0].fwd_latency_min
    fwd_max = 0.0
    for r in matched:
        if r.fwd_latency_min < fwd_min:
            fwd_min = r.fwd_latency_min
        if r.fwd_latency_max > fwd_max:
            fwd_max = r.fwd_latency_max

    means = [r.fwd_latency_mean for r in matched]

    totals = TotalSubscriberResult(
        fwd_ratio=stats.ratio(received, published),
        received=received,
        published=published,
        fwd_latency_min=fwd_min,
        fwd_latency_max=fwd_max,
        fwd_latency_mean_avg=stats.mean(means),
        fwd_latency_mean_std=stats.sample_std(means),
    )
    return matched, totals
