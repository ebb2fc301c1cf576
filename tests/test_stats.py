"""Tests for outlier filtering and confidence scoring."""

from __future__ import annotations

from oxira.models.market import Confidence
from oxira.stats import calculate_confidence, filter_outliers, format_dollar_amount, spread


class TestFilterOutliers:
    def test_drops_order_of_magnitude_outlier(self) -> None:
        assert filter_outliers([3e9, 5e9, 8e9, 590e9]) == [3e9, 5e9, 8e9]

    def test_drops_low_outlier(self) -> None:
        assert filter_outliers([1e6, 4e9, 5e9, 6e9]) == [4e9, 5e9, 6e9]

    def test_short_lists_unchanged(self) -> None:
        assert filter_outliers([]) == []
        assert filter_outliers([1e9]) == [1e9]
        assert filter_outliers([9e9, 1e6]) == [9e9, 1e6]

    def test_result_sorted(self) -> None:
        assert filter_outliers([8e9, 3e9, 5e9]) == [3e9, 5e9, 8e9]

    def test_keeps_two_smallest_when_too_few_survive(self) -> None:
        # median 1e9: only the median itself is inside the fence
        assert filter_outliers([1e6, 1e9, 1e12]) == [1e6, 1e9]


class TestSpread:
    def test_relative_width(self) -> None:
        assert spread(5e9, 10e9) == 0.5

    def test_empty_range(self) -> None:
        assert spread(0.0, 0.0) == 0.0


class TestCalculateConfidence:
    def test_high(self) -> None:
        assert calculate_confidence(3, 3, 0.3, False) == Confidence.HIGH

    def test_medium(self) -> None:
        assert calculate_confidence(2, 2, 0.8, False) == Confidence.MEDIUM

    def test_wide_spread_is_not_high(self) -> None:
        assert calculate_confidence(5, 5, 0.9, False) == Confidence.MEDIUM

    def test_low(self) -> None:
        assert calculate_confidence(1, 1, 0.0, False) == Confidence.LOW

    def test_scope_mismatch_never_high(self) -> None:
        assert calculate_confidence(5, 5, 0.1, True) == Confidence.MEDIUM
        assert calculate_confidence(1, 3, 0.1, True) == Confidence.LOW


class TestFormatDollarAmount:
    def test_units(self) -> None:
        assert format_dollar_amount(2.5e12) == "$2.5 trillion"
        assert format_dollar_amount(5.2e9) == "$5.2 billion"
        assert format_dollar_amount(450e6) == "$450.0 million"
        assert format_dollar_amount(12_500) == "$12,500"
