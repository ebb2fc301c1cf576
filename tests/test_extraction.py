"""Tests for the text-extraction helpers."""

from __future__ import annotations

import pytest

from oxira.extraction import (
    AMBIGUOUS_SCOPE_DEFAULT,
    classify_scope,
    extract_dollar_figures,
    extract_features,
    extract_growth_rate,
    extract_scoped_figures,
    extract_tagline,
    split_sentences,
)
from oxira.models.market import MarketScope


class TestExtractDollarFigures:
    def test_dollar_with_word_unit(self) -> None:
        assert extract_dollar_figures("The market is worth $5.2 billion") == [5.2e9]

    def test_dollar_with_letter_unit(self) -> None:
        assert extract_dollar_figures("valued at $3.2B in 2024") == [3.2e9]

    def test_thousands_separator(self) -> None:
        assert extract_dollar_figures("about $1,200 million") == [1.2e9]

    def test_unit_then_usd(self) -> None:
        assert extract_dollar_figures("reached 450 million USD last year") == [450e6]

    def test_unit_then_dollars(self) -> None:
        assert extract_dollar_figures("a 2 trillion dollars opportunity") == [2e12]

    def test_usd_prefix(self) -> None:
        assert extract_dollar_figures("estimated at USD 12.5 billion") == [12.5e9]

    def test_multiple_figures_in_order(self) -> None:
        text = "grew from $2 billion in 2020 to $5 billion in 2024"
        assert extract_dollar_figures(text) == [2e9, 5e9]

    def test_overlapping_forms_count_once(self) -> None:
        assert extract_dollar_figures("worth $3 billion USD") == [3e9]

    def test_case_insensitive_units(self) -> None:
        assert extract_dollar_figures("$4 BILLION and $20m") == [4e9, 20e6]

    def test_no_figures(self) -> None:
        assert extract_dollar_figures("no numbers here, just 42 apples") == []

    def test_consecutive_calls_do_not_leak_state(self) -> None:
        assert extract_dollar_figures("$1 billion") == [1e9]
        assert extract_dollar_figures("$2 billion") == [2e9]
        assert extract_dollar_figures("$1 billion") == [1e9]


class TestExtractGrowthRate:
    def test_cagr_of(self) -> None:
        assert extract_growth_rate("expanding at a CAGR of 12.5% through 2030") == "12.5%"

    def test_percent_then_cagr(self) -> None:
        assert extract_growth_rate("expected 7.5% CAGR over the period") == "7.5%"

    def test_growing_at(self) -> None:
        assert extract_growth_rate("the sector is growing at 15% annually") == "15%"

    def test_compound_annual_growth_rate(self) -> None:
        assert extract_growth_rate("a compound annual growth rate of 9.1%") == "9.1%"

    def test_annual_growth(self) -> None:
        assert extract_growth_rate("posting 4% annual growth") == "4%"

    def test_none_when_absent(self) -> None:
        assert extract_growth_rate("The market is worth $5 billion") is None


class TestClassifyScope:
    @pytest.mark.parametrize(
        "text",
        [
            "The mobile car wash app market is valued at $3.2B",
            "Market size for on-demand car wash platforms",
            "Online booking software for detailers",
        ],
    )
    def test_narrow(self, text: str) -> None:
        assert classify_scope(text) == MarketScope.NARROW

    @pytest.mark.parametrize(
        "text",
        [
            "The car wash services industry reached $16.6 billion",
            "The global car washing sector is expected to grow",
            "The total market for car wash reached $20B",
        ],
    )
    def test_broad(self, text: str) -> None:
        assert classify_scope(text) == MarketScope.BROAD

    def test_both_indicators_use_default(self) -> None:
        assert classify_scope("The car wash app services industry is growing") == MarketScope.BROAD

    def test_neither_indicator_uses_default(self) -> None:
        assert classify_scope("Car wash market valued at $5 billion") == MarketScope.BROAD

    def test_default_is_broad_and_overridable(self) -> None:
        assert AMBIGUOUS_SCOPE_DEFAULT == MarketScope.BROAD
        assert classify_scope("Car wash market", default=MarketScope.NARROW) == MarketScope.NARROW


class TestExtractScopedFigures:
    def test_each_sentence_scoped_separately(self) -> None:
        snippet = (
            "The car wash app market hit $2 billion in 2024. "
            "The overall car wash industry is worth $40 billion."
        )
        figures = extract_scoped_figures("Car wash report", snippet)
        assert [(f.value, f.scope) for f in figures] == [
            (2e9, MarketScope.NARROW),
            (40e9, MarketScope.BROAD),
        ]

    def test_title_used_when_sentence_has_no_indicator(self) -> None:
        figures = extract_scoped_figures("Car wash app market report", "It reached $1.5 billion.")
        assert figures[0].scope == MarketScope.NARROW

    def test_no_figures(self) -> None:
        assert extract_scoped_figures("Title", "Nothing to see.") == []

    def test_split_keeps_decimal_figures_intact(self) -> None:
        assert split_sentences("Worth $5.2 billion. Growing fast.") == [
            "Worth $5.2 billion.",
            "Growing fast.",
        ]


class TestExtractTagline:
    def test_first_suitable_line(self) -> None:
        markdown = "# Acme\n\nProject management for busy teams\n\nMore text here"
        assert extract_tagline(markdown) == "Project management for busy teams"

    def test_heading_markers_stripped(self) -> None:
        assert extract_tagline("## The fastest way to ship software") == (
            "The fastest way to ship software"
        )

    def test_skips_navigation(self) -> None:
        markdown = "Home | Pricing | Blog\nLog in to your account\nShort\nWash cars from your phone"
        assert extract_tagline(markdown) == "Wash cars from your phone"

    def test_none_when_nothing_fits(self) -> None:
        assert extract_tagline("Log in | Sign up\nShort") is None

    def test_only_first_five_lines(self) -> None:
        markdown = "a\nb\nc\nd\ne\nThis line is long enough to be a tagline"
        assert extract_tagline(markdown) is None


class TestExtractFeatures:
    def test_bullets_with_all_markers(self) -> None:
        markdown = "- Real-time tracking\n* Automated scheduling\n• Priority support"
        assert extract_features(markdown) == [
            "Real-time tracking",
            "Automated scheduling",
            "Priority support",
        ]

    def test_filters_boilerplate_and_length(self) -> None:
        markdown = (
            "- Short\n- Read our privacy policy\n- Sign up for free today\n- Unlimited projects"
        )
        assert extract_features(markdown) == ["Unlimited projects"]

    def test_caps_at_five(self) -> None:
        markdown = "\n".join(f"- Feature number {i}" for i in range(10))
        assert len(extract_features(markdown)) == 5
