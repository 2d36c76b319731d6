from datetime import datetime, timedelta, timezone
from typing import List, NamedTuple, Optional, Sequence

from ..models.price_point import PricePoint


class AlignedSeries(NamedTuple):
    series_a: List[float]
    series_b: List[float]


def filter_window(history: Sequence[PricePoint], start: datetime, end: datetime) -> List[PricePoint]:
    return [p for p in history if start <= p.timestamp <= end]


def align_price_histories(
    history_a: Sequence[PricePoint],
    history_b: Sequence[PricePoint],
    minutes: float,
    now: Optional[datetime] = None,
) -> AlignedSeries:
    """
    Pair each point of ``history_a`` with the closest-in-time point of ``history_b``.

    Both histories are first restricted to the trailing window
    ``[now - minutes, now]`` (inclusive). Matching is one-directional: every
    surviving A point picks its nearest B point, several A points may share a
    B point, and B points nobody picks are left out. On equal distance the
    earlier B point in iteration order wins. Neither history needs to be
    sorted. Output follows the order of the filtered A points.
    """
    end = now or datetime.now(timezone.utc)
    start = end - timedelta(minutes=minutes)

    filtered_a = filter_window(history_a, start, end)
    filtered_b = filter_window(history_b, start, end)

    aligned_a: List[float] = []
    aligned_b: List[float] = []
    for point_a in filtered_a:
        closest = None
        min_diff = None
        for point_b in filtered_b:
            diff = abs(point_a.timestamp - point_b.timestamp)
            if min_diff is None or diff < min_diff:
                min_diff = diff
                closest = point_b
        if closest is not None:
            aligned_a.append(point_a.price)
            aligned_b.append(closest.price)

    return AlignedSeries(aligned_a, aligned_b)
