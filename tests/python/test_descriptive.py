import math

import numpy as np
import pytest

from app.utils.descriptive import (
    clean,
    coefficient_of_variation,
    mean,
    median,
    moving_average,
    percentile,
    standard_deviation,
    summary,
)


def test_mean_basic_and_empty():
    assert mean([]) == 0, "empty sample must give 0"
    assert mean([2, 4, 6]) == 4


def test_invalid_entries_are_dropped_before_computing():
    values = [1.0, None, float("nan"), 3.0, float("inf")]
    assert clean(values).tolist() == [1.0, 3.0]
    assert mean(values) == 2.0
    assert mean([None, float("nan")]) == 0.0, "all-invalid sample must give 0"


def test_median_odd_and_even():
    assert median([1, 2, 3, 4]) == 2.5
    assert median([1, 2, 3]) == 2
    assert median([3, 1, 2]) == 2, "median sorts first"
    assert median([]) == 0


def test_percentile_endpoints_and_interpolation():
    xs = [7.0, 1.0, 4.0, 10.0, 2.5]
    assert percentile(xs, 0) == min(xs)
    assert percentile(xs, 100) == max(xs)
    # fractional index 0.25 * 4 = 1 -> second order statistic
    assert percentile(xs, 25) == pytest.approx(2.5)
    # 0.5 * 3 = 1.5 -> halfway between 2 and 3
    assert percentile([1, 2, 3, 4], 50) == pytest.approx(2.5)
    assert percentile([], 50) == 0


def test_percentile_clamps_out_of_range_p():
    xs = [3, 1, 2]
    assert percentile(xs, -10) == 1
    assert percentile(xs, 250) == 3


def test_standard_deviation_is_population():
    # mean 5, squared deviations sum 32, n=8 -> var 4
    assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert standard_deviation([5, 5, 5, 5]) == 0, "constant sample must give exactly 0"
    assert standard_deviation([]) == 0


def test_coefficient_of_variation_guards_zero_mean():
    cv = coefficient_of_variation([0, 0, 0])
    assert cv == 0 and not math.isnan(cv)
    assert coefficient_of_variation([-1, 1]) == 0, "mean 0 must not divide"
    assert coefficient_of_variation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(40.0)


def test_summary_bundles_cleaned_stats():
    s = summary([4, None, 1, 3, float("nan"), 2])
    assert (s.min, s.max, s.count) == (1.0, 4.0, 4)
    assert s.mean == pytest.approx(2.5)
    assert s.median == pytest.approx(2.5)
    assert s.std == pytest.approx(np.std([1, 2, 3, 4]))


def test_summary_empty_is_all_zero():
    s = summary([])
    assert (s.min, s.max, s.mean, s.median, s.std, s.count) == (0, 0, 0, 0, 0, 0)


def test_moving_average_full_windows_only():
    assert moving_average([1, 2, 3, 4, 5], 3) == [2, 3, 4]
    assert moving_average([1, 2, 3], 3) == [2]
    assert moving_average([1, 2], 3) == [], "no partial windows"
    assert moving_average([1, 2, 3], 0) == []
    assert len(moving_average(list(range(20)), 4)) == 17
