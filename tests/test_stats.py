import math

import pytest

from mqttbench import stats


def test_mean():
    assert stats.mean([1.0, 2.0, 3.0, 4.0]) == pytest.approx(2.5)


def test_mean_empty_is_zero():
    assert stats.mean([]) == 0.0


def test_sample_std_uses_bessel_correction():
    # 平均 5、偏差平方和 32、n-1 = 7
    samples = [2, 4, 4, 4, 5, 5, 7, 9]
    assert stats.sample_std(samples) == pytest.approx(math.sqrt(32 / 7))


@pytest.mark.parametrize("samples", [[], [3.5]])
def test_sample_std_short_sequence_is_zero(samples):
    assert stats.sample_std(samples) == 0.0


def test_summarize():
    s = stats.summarize([1.2, 0.5, 3.0])
    assert s.min == 0.5
    assert s.max == 3.0
    assert s.mean == pytest.approx(4.7 / 3)
    assert s.std > 0


def test_summarize_empty():
    assert stats.summarize([]) == stats.Summary()


def test_ratio_zero_denominator():
    assert stats.ratio(0, 0) == 0.0
    assert stats.ratio(5, 0) == 0.0
    assert stats.ratio(80, 100) == pytest.approx(0.8)
