"""Tests for ranking statistics helpers."""

from __future__ import annotations

import math

import pytest

import jobsync
from jobsync.statistics import (
    calculate_percentile,
    calculate_statistics,
    distribution,
    gap_from_top,
    is_top_tier,
    ordinal,
    performance_label,
)


def test_statistics_of_scores() -> None:
    stats = calculate_statistics([90, 70, 80, 60])

    assert stats.min == 60
    assert stats.max == 90
    assert stats.mean == 75
    assert stats.median == 75
    assert stats.std_dev == pytest.approx(11.2)


def test_statistics_skip_missing_values() -> None:
    stats = calculate_statistics([None, 50, math.nan, 70, 60])
    assert (stats.min, stats.max, stats.median) == (50, 70, 60)


def test_statistics_of_empty_input() -> None:
    stats = calculate_statistics([])
    assert stats.model_dump() == {"min": 0, "max": 0, "mean": 0, "median": 0, "std_dev": 0}


def test_percentile_counts_values_strictly_below() -> None:
    values = [10, 20, 30, 40]
    assert calculate_percentile(40, values) == 75
    assert calculate_percentile(10, values) == 0
    assert calculate_percentile(None, values) == 0
    assert calculate_percentile(10, []) == 0


def test_distribution_buckets_cover_range() -> None:
    result = distribution([0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100])

    assert result.total == 11
    assert [bucket.range for bucket in result.buckets] == ["0-20", "20-40", "40-60", "60-80", "80-100"]
    assert [bucket.count for bucket in result.buckets] == [2, 2, 2, 2, 3]
    assert sum(bucket.count for bucket in result.buckets) == result.total
    assert distribution([]).buckets == []


@pytest.mark.parametrize(
    "values, counts",
    [
        ([0, 20, 100], [1, 1, 0, 0, 1]),
        ([0, 50, 99.94], [1, 0, 1, 0, 1]),
        ([12.5, 99.96, 40.04, 40.04], [1, 2, 0, 0, 1]),
    ],
)
def test_distribution_counts_each_value_once(values, counts) -> None:
    result = distribution(values)

    assert [bucket.count for bucket in result.buckets] == counts
    assert sum(counts) == result.total == len(values)


def test_distribution_of_identical_values_uses_one_bucket() -> None:
    result = distribution([70, 70, 70])

    assert [(bucket.range, bucket.count) for bucket in result.buckets] == [("70-70", 3)]
    assert result.total == 3


def test_gap_from_top() -> None:
    assert gap_from_top(80, 100) == {"absolute": 20.0, "percentage": 20.0}
    assert gap_from_top(10, 0) == {"absolute": 0.0, "percentage": 0.0}


@pytest.mark.parametrize(
    "percentile, label",
    [(95, "Exceptional"), (75, "Above Average"), (50, "Average"), (30, "Below Average"), (5, "Needs Improvement")],
)
def test_performance_label(percentile: float, label: str) -> None:
    assert performance_label(percentile) == label


@pytest.mark.parametrize(
    "rank, text",
    [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (13, "13th"), (21, "21st"), (112, "112th")],
)
def test_ordinal(rank: int, text: str) -> None:
    assert ordinal(rank) == text


def test_top_tier() -> None:
    assert is_top_tier(1, 3)
    assert not is_top_tier(2, 3)
    assert is_top_tier(3, 5)
    assert not is_top_tier(4, 5)
    assert is_top_tier(4, 10)
    assert not is_top_tier(5, 10)


def test_statistics_helpers_are_exported_from_the_package() -> None:
    assert jobsync.calculate_statistics is calculate_statistics
    assert jobsync.distribution is distribution
    assert "calculate_percentile" in jobsync.__all__
