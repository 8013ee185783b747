import pytest
from productivity_analytics.models.patterns import Trend
from productivity_analytics.services.errors import HistoryOrderError
from productivity_analytics.services.trends import (
    classify_change,
    classify_trend,
    consistency,
    ensure_chronological,
    next_matching,
    std_dev,
)

@pytest.mark.parametrize("first,second,trend", [
    (50, 60, Trend.STRONGLY_IMPROVING),
    (50, 53, Trend.IMPROVING),
    (50, 51, Trend.STABLE),
    (50, 48, Trend.STABLE),
    (50, 47, Trend.DECLINING),
    (50, 40, Trend.STRONGLY_DECLINING),
])
def test_classify_change(first, second, trend):
    assert classify_change(first, second) == trend

def test_zero_baseline():
    assert classify_change(0, 10) == Trend.STRONGLY_IMPROVING
    assert classify_change(0, 0) == Trend.STABLE

def test_classify_trend():
    rising = [40 + 5 * i for i in range(10)]
    assert classify_trend(rising) == Trend.STRONGLY_IMPROVING
    assert classify_trend(list(reversed(rising))) == Trend.STRONGLY_DECLINING
    assert classify_trend([70] * 12) == Trend.STABLE

def test_short_series_is_insufficient():
    assert classify_trend([10, 90] * 4) == Trend.INSUFFICIENT_DATA
    assert classify_trend([10, 90] * 4, min_points=4) == Trend.STABLE

def test_spread_statistics():
    assert std_dev([]) == 0.0
    assert std_dev([80, 80, 80]) == 0.0
    assert std_dev([40, 60]) == 10
    assert consistency([50]) == 1.0
    assert abs(consistency([40, 60]) - 0.9) < 1e-9

def test_ensure_chronological(make_observation):
    ordered = [make_observation(m) for m in (0, 0, 5)]
    assert ensure_chronological(iter(ordered)) == ordered
    with pytest.raises(HistoryOrderError):
        ensure_chronological([make_observation(5), make_observation(0)])

def test_next_matching():
    scores = [10, 70, 20, 30, 80, 5]
    assert next_matching(scores, lambda s: s >= 60) == [1, 4, 4, 4, None, None]
    assert next_matching([], lambda s: True) == []
