import math

import pytest

from mqttbench.aggregate import (
    calculate_publish_results,
    calculate_subscribe_results,
    match_subscriber,
)
from mqttbench.result import PublisherResult, SubscriberResult


def _pub(id, successes=100, failures=0, mn=1.0, mx=2.0, mean=1.5, rate=10.0, run_time=1.0):
    return PublisherResult(
        id=id,
        successes=successes,
        failures=failures,
        run_time=run_time,
        pub_time_min=mn,
        pub_time_max=mx,
        pub_time_mean=mean,
        pubs_per_sec=rate,
    )


def _sub(id, received=100, mn=1.0, mx=2.0, mean=1.5):
    return SubscriberResult(
        id=id,
        received=received,
        fwd_latency_min=mn,
        fwd_latency_max=mx,
        fwd_latency_mean=mean,
    )


def test_publish_ratio_is_ratio_of_sums():
    pubs = [_pub(0, successes=1, failures=0), _pub(1, successes=1, failures=9)]
    totals = calculate_publish_results(pubs, 2.0)
    # 合計: 2 / 11。クライアントごとの比の平均 (0.55) とは異なる
    assert totals.pub_ratio == pytest.approx(2 / 11)
    assert totals.successes == 2
    assert totals.failures == 9
    assert totals.total_run_time == 2.0


def test_publish_min_max_across_workers():
    pubs = [_pub(0, mn=1.2, mx=4.0), _pub(1, mn=0.5, mx=9.0), _pub(2, mn=3.0, mx=5.0)]
    totals = calculate_publish_results(pubs, 1.0)
    assert totals.pub_time_min == 0.5
    assert totals.pub_time_max == 9.0


def test_publish_mean_of_means_and_std():
    pubs = [_pub(0, mean=1.0, rate=10.0, run_time=1.0), _pub(1, mean=3.0, rate=30.0, run_time=3.0)]
    totals = calculate_publish_results(pubs, 3.5)
    assert totals.pub_time_mean_avg == pytest.approx(2.0)
    assert totals.pub_time_mean_std == pytest.approx(math.sqrt(2))
    assert totals.total_msgs_per_sec == pytest.approx(40.0)
    assert totals.avg_msgs_per_sec == pytest.approx(20.0)
    assert totals.avg_run_time == pytest.approx(2.0)


def test_publish_single_worker_std_is_zero():
    totals = calculate_publish_results([_pub(0)], 1.0)
    assert totals.pub_time_mean_std == 0.0


def test_publish_no_messages_ratio_is_zero():
    totals = calculate_publish_results([_pub(0, successes=0, failures=0)], 1.0)
    assert totals.pub_ratio == 0.0


def test_subscriber_matched_by_id():
    pubs = [_pub(0, successes=100), _pub(1, successes=50)]
    subs = [_sub(1, received=50), _sub(0, received=80)]
    matched, totals = calculate_subscribe_results(subs, pubs)

    by_id = {r.id: r for r in matched}
    assert by_id[0].published == 100
    assert by_id[0].fwd_ratio == pytest.approx(0.8)
    assert by_id[1].fwd_ratio == pytest.approx(1.0)
    assert totals.published == 150
    assert totals.received == 130
    assert totals.fwd_ratio == pytest.approx(130 / 150)


def test_matching_does_not_mutate_worker_result():
    sub = _sub(0, received=80)
    matched = match_subscriber(sub, [_pub(0, successes=100)])
    assert matched is not sub
    assert sub.published == 0
    assert sub.fwd_ratio == 0.0


def test_unmatched_subscriber_keeps_zero():
    matched, totals = calculate_subscribe_results([_sub(7, received=10)], [_pub(0)])
    assert matched[0].published == 0
    assert matched[0].fwd_ratio == 0.0
    assert totals.published == 0
    assert totals.fwd_ratio == 0.0


def test_subscriber_zero_published_ratio_is_zero():
    matched, _ = calculate_subscribe_results([_sub(0, received=0)], [_pub(0, successes=0)])
    assert matched[0].fwd_ratio == 0.0


def test_subscriber_latency_rollup():
    subs = [_sub(0, mn=1.2, mx=3.0, mean=2.0), _sub(1, mn=0.5, mx=7.0, mean=4.0)]
    _, totals = calculate_subscribe_results(subs, [_pub(0), _pub(1)])
    assert totals.fwd_latency_min == 0.5
    assert totals.fwd_latency_max == 7.0
    assert totals.fwd_latency_mean_avg == pytest.approx(3.0)
    assert totals.fwd_latency_mean_std == pytest.approx(math.sqrt(2))
