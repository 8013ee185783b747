"""Statistics shared by pattern recognition and insight generation"""
from typing import Iterable, List, Optional, Sequence
import logging
from productivity_analytics.models.observation import Observation
from productivity_analytics.models.patterns import Trend
from productivity_analytics.services.errors import HistoryOrderError

logger = logging.getLogger(__name__)

def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0

def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation"""
    if not values:
        return 0.0
    avg = mean(values)
    return (sum((x - avg) ** 2 for x in values) / len(values)) ** 0.5

def consistency(values: Sequence[float]) -> float:
    """0..1, higher when scores (0-100 scale) vary less"""
    if len(values) < 2:
        return 1.0
    return max(0.0, 1.0 - std_dev(values) / 100)

def classify_change(first: float, second: float) -> Trend:
    """Classify the percentage change from first to second"""
    if first <= 0:
        return Trend.STRONGLY_IMPROVING if second > 0 else Trend.STABLE
    change = (second - first) / first * 100
    if change > 10:
        return Trend.STRONGLY_IMPROVING
    if change > 5:
        return Trend.IMPROVING
    if change > -5:
        return Trend.STABLE
    if change > -10:
        return Trend.DECLINING
    return Trend.STRONGLY_DECLINING

def classify_trend(scores: Sequence[float], min_points: int = 10) -> Trend:
    """Compare the mean of the first half of a series to the second half"""
    if len(scores) < min_points:
        return Trend.INSUFFICIENT_DATA
    half = len(scores) // 2
    return classify_change(mean(scores[:half]), mean(scores[half:]))

def half_means(scores: Sequence[float]) -> tuple:
    half = len(scores) // 2
    if half == 0:
        avg = mean(scores)
        return avg, avg
    return mean(scores[:half]), mean(scores[half:])

def ensure_chronological(observations: Iterable[Observation]) -> List[Observation]:
    """Return the observations as a list, failing fast if time runs backwards"""
    ordered = list(observations)
    for previous, current in zip(ordered, ordered[1:]):
        if current.timestamp < previous.timestamp:
            raise HistoryOrderError(
                f"Observation at {current.timestamp.isoformat()} follows "
                f"{previous.timestamp.isoformat()}; history must be chronological"
            )
    return ordered

def minutes_between(start, end) -> float:
    return (end - start).total_seconds() / 60

def next_matching(values: Sequence[float], predicate) -> List[Optional[int]]:
    """For each position, the index of the first later value matching ``predicate``"""
    found: List[Optional[int]] = [None] * len(values)
    upcoming = None
    for index in range(len(values) - 1, -1, -1):
        found[index] = upcoming
        if predicate(values[index]):
            upcoming = index
    return found
