"""Outlier filtering and confidence estimation over market-size figures."""

from __future__ import annotations

import statistics

from oxira.models.market import Confidence

# Values outside [median / FENCE, median * FENCE] are dropped.
OUTLIER_FENCE = 10.0


def filter_outliers(values: list[float]) -> list[float]:
    """Drop figures more than an order of magnitude away from the median.

    Returns the surviving values sorted ascending. Lists with fewer than
    three values come back unchanged; when fewer than two values survive,
    the two smallest originals are returned so callers always have a range.
    """
    if len(values) < 3:
        return values
    ordered = sorted(values)
    median = statistics.median(ordered)
    kept = [v for v in ordered if median / OUTLIER_FENCE <= v <= median * OUTLIER_FENCE]
    if len(kept) >= 2:
        return kept
    return ordered[:2]


def spread(low: float, high: float) -> float:
    """Relative width of a range: (high - low) / high, 0 for an empty range."""
    if high <= 0:
        return 0.0
    return (high - low) / high


def calculate_confidence(
    source_count: int,
    figure_count: int,
    figure_spread: float,
    has_scope_mismatch: bool,
) -> Confidence:
    # A scope mismatch means two market definitions are mixed: never "high".
    if has_scope_mismatch:
        if source_count >= 2 and figure_count >= 2:
            return Confidence.MEDIUM
        return Confidence.LOW
    if source_count >= 3 and figure_count >= 3 and figure_spread < 0.5:
        return Confidence.HIGH
    if source_count >= 2 and figure_count >= 2 and figure_spread < 2:
        return Confidence.MEDIUM
    return Confidence.LOW


def format_dollar_amount(value: float) -> str:
    if value >= 1e12:
        return f"${value / 1e12:.1f} trillion"
    if value >= 1e9:
        return f"${value / 1e9:.1f} billion"
    if value >= 1e6:
        return f"${value / 1e6:.1f} million"
    return f"${value:,.0f}"
