"""
Unit Tests for the numeric helpers.
"""
import math

import numpy as np
import pytest

from heart_explorer.metrics import (
    bin, extent, find_bin, is_number, mean, round_half_away, signed,
)


class TestMean:

    def test_sum_over_count(self):
        values = [3, 8, 10, 15]
        assert mean(values) == sum(values) / len(values)

    def test_empty_is_zero(self):
        assert mean([]) == 0

    def test_ignores_missing_and_non_numeric(self):
        assert mean([1, None, float("nan"), "x", 3]) == 2

    def test_only_missing_values_is_zero(self):
        assert mean([None, float("nan")]) == 0

    def test_numpy_values(self):
        assert mean(np.array([1.0, 2.0, 6.0])) == 3


class TestExtent:

    def test_min_max(self):
        assert extent([3, None, 1, 7, float("nan")]) == (1.0, 7.0)

    def test_empty(self):
        assert extent([]) == (None, None)
        assert extent(["a", None]) == (None, None)


class TestIsNumber:

    @pytest.mark.parametrize("value", [0, 1.5, np.int64(3), np.float64(2.0)])
    def test_numbers(self, value):
        assert is_number(value)

    @pytest.mark.parametrize("value", [None, "1", True, float("nan"), math.inf])
    def test_not_numbers(self, value):
        assert not is_number(value)


class TestBin:

    def test_counts_sum_to_in_domain_values(self):
        values = [20, 23.9, 24, 79, 80, 19, 81, None, "x"]
        bins = bin(values, 20, 80, 15)
        assert len(bins) == 15
        assert sum(b.count for b in bins) == 5

    def test_bins_are_contiguous(self):
        bins = bin([], 0, 630, 15)
        assert bins[0].lower == 0
        assert bins[-1].upper == 630
        for left, right in zip(bins, bins[1:]):
            assert left.upper == right.lower

    def test_half_open_except_last(self):
        bins = bin([20, 23.9, 24, 79, 80], 20, 80, 15)
        assert bins[0].count == 2
        assert bins[1].count == 1
        assert bins[-1].count == 2
        assert bins[-1].closed
        assert not any(b.closed for b in bins[:-1])

    def test_value_on_inner_edge_goes_right(self):
        bins = bin([24], 20, 80, 15)
        assert bins[0].count == 0
        assert bins[1].count == 1

    @pytest.mark.parametrize("lo,hi,count", [(0, 10, 0), (10, 10, 5), (10, 0, 5)])
    def test_invalid_arguments(self, lo, hi, count):
        with pytest.raises(ValueError):
            bin([1, 2], lo, hi, count)

    def test_find_bin(self):
        bins = bin([], 20, 80, 15)
        assert find_bin(bins, 20) == 0
        assert find_bin(bins, 45) == 6
        assert find_bin(bins, 80) == 14
        assert find_bin(bins, 81) is None
        assert find_bin(bins, None) is None


class TestRounding:

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3), (-2.5, -3), (49.6, 50), (0.4, 0), (-0.4, 0), (10, 10),
    ])
    def test_round_half_away(self, value, expected):
        assert round_half_away(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (50, "+50"), (49.5, "+50"), (-3.4, "-3"), (0.2, "+0"), (-0.2, "-0"), (0, "0"),
    ])
    def test_signed(self, value, expected):
        assert signed(value) == expected
