"""Descriptive statistics over ranked match scores."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional

from .models import DistributionBucket, RankingStatistics, ScoreDistribution


def _valid(values: Iterable[Optional[float]]) -> List[float]:
    return [float(value) for value in values if value is not None and not math.isnan(value)]


def calculate_statistics(values: Iterable[Optional[float]]) -> RankingStatistics:
    """Min, max, mean, median and population standard deviation, rounded to 0.1."""

    ordered = sorted(_valid(values))
    if not ordered:
        return RankingStatistics(min=0, max=0, mean=0, median=0, std_dev=0)

    count = len(ordered)
    mean = sum(ordered) / count
    mid = count // 2
    median = (ordered[mid - 1] + ordered[mid]) / 2 if count % 2 == 0 else ordered[mid]
    std_dev = math.sqrt(sum((value - mean) ** 2 for value in ordered) / count)

    return RankingStatistics(
        min=round(ordered[0], 1),
        max=round(ordered[-1], 1),
        mean=round(mean, 1),
        median=round(median, 1),
        std_dev=round(std_dev, 1),
    )


def calculate_percentile(value: Optional[float], all_values: Iterable[Optional[float]]) -> int:
    """Share of values strictly below ``value``, as a whole percentage."""

    valid = _valid(all_values)
    if value is None or math.isnan(value) or not valid:
        return 0
    below = sum(1 for other in valid if other < value)
    return round(below / len(valid) * 100)


def distribution(values: Iterable[Optional[float]], bucket_count: int = 5) -> ScoreDistribution:
    """Histogram of scores over ``bucket_count`` equal-width buckets.

    Buckets are half-open ``[start, end)`` except the last, which is closed,
    so every value lands in exactly one bucket. Identical values share a
    single bucket.
    """

    valid = _valid(values)
    if not valid or bucket_count < 1:
        return ScoreDistribution(buckets=[], total=0)

    low = min(valid)
    high = max(valid)
    if high == low:
        label = f"{round(low)}-{round(high)}"
        return ScoreDistribution(
            buckets=[DistributionBucket(range=label, count=len(valid))], total=len(valid)
        )

    bucket_size = (high - low) / bucket_count
    counts = [0] * bucket_count
    for value in valid:
        index = min(int((value - low) / bucket_size), bucket_count - 1)
        counts[index] += 1

    buckets = []
    for index, count in enumerate(counts):
        start = low + index * bucket_size
        end = high if index == bucket_count - 1 else start + bucket_size
        buckets.append(DistributionBucket(range=f"{round(start)}-{round(end)}", count=count))

    return ScoreDistribution(buckets=buckets, total=len(valid))


def gap_from_top(score: float, top_score: float) -> Dict[str, float]:
    if top_score == 0:
        return {"absolute": 0.0, "percentage": 0.0}
    return {
        "absolute": round(top_score - score, 1),
        "percentage": round((top_score - score) / top_score * 100, 1),
    }


def performance_label(percentile: float) -> str:
    if percentile >= 90:
        return "Exceptional"
    if percentile >= 75:
        return "Above Average"
    if percentile >= 50:
        return "Average"
    if percentile >= 25:
        return "Below Average"
    return "Needs Improvement"


def ordinal(rank: int) -> str:
    if 10 <= rank % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(rank % 10, "th")
    return f"{rank}{suffix}"


def is_top_tier(rank: int, total_applicants: int) -> bool:
    """Top third of the pool (at least three places); only first place for tiny pools."""

    if total_applicants <= 3:
        return rank == 1
    return rank <= max(3, math.ceil(total_applicants * 0.33))


__all__ = [
    "calculate_percentile",
    "calculate_statistics",
    "distribution",
    "gap_from_top",
    "is_top_tier",
    "ordinal",
    "performance_label",
]
