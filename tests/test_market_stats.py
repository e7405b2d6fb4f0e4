"""Unit tests for historical and live summaries."""

import pytest

from conftest import NOW, live, sold
from pipeline.market_stats import (
    analyze_trend,
    data_limitations,
    detect_exceptional_sales,
    historical_confidence,
    market_sentiment,
    price_range,
    recent_sales,
    summarize_historical,
    summarize_live,
)
from services.marketplace import Listing


class TestPriceRange:

    def test_uses_min_and_max(self):
        assert price_range([1000, 2000, 3000, 4000]) == (1000, 4000)

    def test_single_sale_widened(self):
        assert price_range([1000]) == (925, 1075)

    def test_wide_small_sample_untouched(self):
        assert price_range([1000, 3000]) == (1000, 3000)

    def test_empty(self):
        assert price_range([]) == (0, 0)


class TestHistoricalConfidence:

    def test_base_only(self):
        sales = [sold(1000, days_ago=1000)]
        assert historical_confidence(sales, total_matches=1, now=NOW) == pytest.approx(0.5)

    def test_bonuses_are_capped(self):
        sales = [sold(1000 + i) for i in range(10)]
        assert historical_confidence(sales, total_matches=120, now=NOW) == 0.95

    def test_coverage_sample_and_recency(self):
        sales = [sold(1000 + i) for i in range(5)]
        # 0.5 + 0.1 coverage + 0.1 sample + 0.15 recency
        assert historical_confidence(sales, total_matches=25, now=NOW) == pytest.approx(0.85)

    def test_artist_match_bonus(self):
        sales = [sold(1000, title="Lisa Larson katt", days_ago=2000) for _ in range(3)]
        without = historical_confidence(sales, total_matches=3, now=NOW)
        with_artist = historical_confidence(sales, total_matches=3, artist="Lisa Larson", now=NOW)
        assert with_artist == pytest.approx(without + 0.15)


class TestSummaries:

    def test_historical_ignores_unsold(self):
        listings = [sold(1000), sold(3000), Listing(title="Unsold", estimate=2000)]
        summary = summarize_historical(listings, total_matches=2, now=NOW)
        assert summary.sample_size == 2
        assert (summary.low, summary.high) == (1000, 3000)
        assert summary.median == 2000

    def test_historical_none_without_sales(self):
        assert summarize_historical([Listing(title="Unsold", estimate=2000)]) is None

    def test_live_activity(self):
        listings = [
            live(1000, bids=3, reserve_met=True),
            live(2000, bids=1, reserve_met=False),
            live(None, bids=0, reserve_met=False),
            live(3000, bids=4, reserve_met=True),
        ]
        summary = summarize_live(listings, total_matches=10)
        assert summary.sample_size == 4
        assert summary.total_bids == 8
        assert summary.reserve_met_percentage == 50
        assert summary.sentiment == "moderate"
        assert (summary.estimate_low, summary.estimate_high) == (1000, 3000)
        assert summary.average_bids_per_item == 2.0
        assert summary.total_matches == 10

    def test_live_none_when_empty(self):
        assert summarize_live([]) is None

    def test_live_without_estimates(self):
        summary = summarize_live([live(None, bids=2)])
        assert not summary.has_estimates
        assert summary.midpoint is None


class TestSentiment:

    @pytest.mark.parametrize("pct,expected", [
        (80, "strong"),
        (50, "moderate"),
        (30, "neutral"),
        (10, "weak"),
    ])
    def test_thresholds(self, pct, expected):
        assert market_sentiment(pct) == expected


def test_recent_window_is_24_months():
    old = [sold(1000, days_ago=800) for _ in range(2)]
    recent = [sold(1000, days_ago=10) for _ in range(2)]
    assert historical_confidence(recent, now=NOW) > historical_confidence(old, now=NOW)


class TestTrend:

    def test_rising_when_newer_half_is_dearer(self):
        sales = [sold(1000, days_ago=d) for d in (300, 250, 200)]
        sales += [sold(1500, days_ago=d) for d in (100, 50, 10)]
        trend = analyze_trend(sales)
        assert trend.trend == "rising_strong"
        assert trend.change_percent == 50
        assert trend.span_months == 10
        assert trend.data_quality is None

    def test_stable_prices(self):
        sales = [sold(1000, days_ago=d) for d in (90, 60, 30, 10)]
        trend = analyze_trend(sales)
        assert trend.trend == "stable"
        assert trend.change_percent == 0

    def test_falling(self):
        sales = [sold(1000, days_ago=200), sold(1000, days_ago=150), sold(900, days_ago=20), sold(900, days_ago=10)]
        assert analyze_trend(sales).trend == "falling"

    def test_huge_swing_flagged_as_mixed_data(self):
        sales = [sold(100, days_ago=400), sold(100, days_ago=300), sold(20000, days_ago=20), sold(20000, days_ago=10)]
        trend = analyze_trend(sales)
        assert trend.trend == "rising_strong"
        assert trend.change_percent == 200
        assert trend.data_quality == "mixed_suspicious"

    def test_too_few_sales(self):
        assert analyze_trend([sold(1000), sold(2000)]).trend == "insufficient_data"


class TestExceptionalSales:

    def sales(self):
        return [sold(1000, days_ago=10 + i) for i in range(7)] + [sold(10000, title="Omega Constellation guld")]

    def test_statistical_threshold(self):
        exceptional = detect_exceptional_sales(self.sales())
        assert exceptional.threshold == 3000
        assert [s.price for s in exceptional.sales] == [10000]
        assert exceptional.valuation_based is False
        assert exceptional.to_dict()["sales"][0]["priceVsMedian"] == 1000

    def test_valuation_raises_the_bar(self):
        exceptional = detect_exceptional_sales(self.sales(), valuation=5000)
        assert exceptional.threshold == 5000
        assert exceptional.valuation_based is True
        assert exceptional.to_dict()["sales"][0]["priceVsValuation"] == 200

    def test_none_when_valuation_is_higher_than_every_sale(self):
        assert detect_exceptional_sales(self.sales(), valuation=12000) is None

    def test_needs_three_sales(self):
        assert detect_exceptional_sales([sold(1000), sold(50000)]) is None

    def test_narrowing_keeps_the_statistical_floor(self):
        exceptional = detect_exceptional_sales(self.sales())
        assert exceptional.for_valuation(500).threshold == 3000
        assert exceptional.for_valuation(None).valuation is None


class TestRecentSalesAndLimitations:

    def test_newest_first_and_capped(self):
        sales = [sold(1000 + d, days_ago=d) for d in (50, 10, 70, 30, 20, 60, 40)]
        assert [s.price for s in recent_sales(sales)] == [1010, 1020, 1030, 1040, 1050]

    def test_small_old_and_loosely_matched_sample(self):
        sales = [sold(1000, title="Katt i stengods", days_ago=500)]
        assert data_limitations(sales, artist="Lisa Larson", now=NOW) == [
            "Limited data",
            "Few recent sales",
            "Includes similar artists or makers",
        ]

    def test_broad_recent_sample_has_no_caveats(self):
        sales = [sold(1000, title="Lisa Larson katt", days_ago=10 + i) for i in range(6)]
        assert data_limitations(sales, artist="Lisa Larson", now=NOW) == []

    def test_summary_serializes_the_extras(self):
        sales = [sold(1000, days_ago=10 + i) for i in range(7)] + [sold(10000)]
        result = summarize_historical(sales, total_matches=8, now=NOW).to_dict()
        assert result["trend"]["trend"] in {"rising", "rising_strong", "stable", "falling", "falling_strong"}
        assert result["exceptionalSales"]["count"] == 1
        assert len(result["recentSales"]) == 5
        assert result["recentSales"][0]["price"] == 1000
        assert result["limitations"] == []
