"""Unit tests for confidence fusion and insight generation."""

import pytest

from pipeline.insights import REGIME_NORMAL, REGIME_STRONG, REGIME_WEAK, InsightEngine
from pipeline.models import HistoricalSummary, LiveSummary


def history(confidence=0.6, sample_size=5, low=1000, high=2000):
    return HistoricalSummary(low=low, high=high, confidence=confidence, sample_size=sample_size)


def market(sample_size=5, reserve_pct=50, bids=10, estimates=(2000, 3000)):
    summary = LiveSummary(
        sample_size=sample_size,
        total_bids=bids,
        reserve_met_percentage=reserve_pct,
        average_bids_per_item=bids / sample_size if sample_size else 0,
    )
    if estimates:
        summary.estimate_low, summary.estimate_high = estimates
        summary.estimate_average = sum(estimates) / 2
    return summary


@pytest.fixture
def engine():
    return InsightEngine()


class TestCombinedConfidence:

    def test_live_adds_to_historical(self):
        assert InsightEngine.combined_confidence(history(0.6), market()) == pytest.approx(0.8)

    def test_capped_at_one(self):
        assert InsightEngine.combined_confidence(history(0.9), market()) == 1.0

    def test_historical_only(self):
        assert InsightEngine.combined_confidence(history(0.6), None) == 0.6

    def test_live_only(self):
        assert InsightEngine.combined_confidence(None, market(sample_size=10)) == pytest.approx(0.8)
        assert InsightEngine.combined_confidence(None, market(sample_size=2)) == pytest.approx(0.6)

    def test_never_below_historical_when_live_present(self):
        for confidence in (0.1, 0.5, 0.85, 0.95):
            combined = InsightEngine.combined_confidence(history(confidence), market())
            assert confidence <= combined <= 1.0


class TestRegime:

    def test_regimes(self, engine):
        assert engine.market_regime(market(reserve_pct=80)) == REGIME_STRONG
        assert engine.market_regime(market(reserve_pct=20)) == REGIME_WEAK
        assert engine.market_regime(market(reserve_pct=50)) == REGIME_NORMAL

    def test_small_sample_is_always_normal(self, engine):
        assert engine.market_regime(market(sample_size=3, reserve_pct=0)) == REGIME_NORMAL
        assert engine.market_regime(None) == REGIME_NORMAL


class TestInsights:

    def test_small_sample_gets_insufficient_data_instead_of_weakness(self, engine):
        insights = engine.generate_insights(None, market(sample_size=3, reserve_pct=0, bids=0))
        assert len(insights) == 1
        assert insights[0].kind == "market_info"
        assert insights[0].message.startswith("Insufficient data")
        assert insights[0].significance == "medium"
        assert all(i.kind not in ("market_strength", "market_weakness") for i in insights)

    def test_strong_market_without_history(self, engine):
        insights = engine.generate_insights(None, market(reserve_pct=80))
        assert [i.kind for i in insights] == ["market_strength"]
        assert insights[0].significance == "high"

    def test_weak_market_no_bids(self, engine):
        insights = engine.generate_insights(None, market(reserve_pct=0, bids=0))
        assert insights[0].message == "Weak market, no bids"
        assert insights[0].significance == "high"

    def test_weak_regime_stated_once(self, engine):
        insights = engine.generate_insights(history(), market(reserve_pct=20))
        assert len(insights) == 1
        assert insights[0].kind == "conflict"
        assert "weak market" in insights[0].message.lower()

    def test_strong_regime_stated_once(self, engine):
        insights = engine.generate_insights(history(), market(reserve_pct=80))
        assert len(insights) == 1
        assert insights[0].message == "Strong market, favourable time to sell"

    def test_small_divergence_gives_no_price_insight(self, engine):
        insights = engine.generate_insights(history(0.8, sample_size=12), market(estimates=(1100, 1900)))
        assert [i.message for i in insights] == ["Stable market, good data quality"]

    def test_market_only_price_comparison(self, engine):
        insights = engine.generate_insights(history(), market(reserve_pct=50))
        assert insights[0].kind == "price_comparison"
        assert insights[0].message == "Prices currently higher than history (+67%)"
        assert insights[0].significance == "high"

    def test_extreme_valuation(self, engine):
        insights = engine.generate_insights(history(), market(reserve_pct=50), valuation=4000)
        assert insights[0].kind == "price_comparison"
        assert insights[0].message == "Your valuation is +167% over history"
        assert insights[0].significance == "high"

    def test_low_valuation_in_strong_market(self, engine):
        insights = engine.generate_insights(history(), market(reserve_pct=80), valuation=1000)
        assert insights[0].message == "Strong market, your valuation may be too low"
        # Regime already stated by the price insight
        assert len(insights) == 1

    def test_no_data_no_insights(self, engine):
        assert engine.generate_insights(None, None) == []

    def test_small_history_without_live(self, engine):
        insights = engine.generate_insights(history(sample_size=3), None)
        assert insights[0].message == "Market data available (3 sales)"
        assert engine.generate_insights(history(sample_size=2), None) == []


class TestSnapshot:

    def test_no_comparable_data(self, engine):
        snapshot = engine.build_snapshot("omega armbandsur", None, None)
        assert snapshot.no_comparable_data
        assert snapshot.combined_confidence == 0.3
        assert snapshot.insights == []
        assert snapshot.price_range is None

    def test_price_range_prefers_history(self, engine):
        snapshot = engine.build_snapshot("q", history(), market())
        assert snapshot.price_range == {"low": 1000, "high": 2000, "currency": "SEK"}
        assert snapshot.market_context == "Normal activity in ongoing auctions"

    def test_to_dict_keys(self, engine):
        data = engine.build_snapshot("q", None, market()).to_dict()
        assert data["historical"] is None
        assert data["live"]["reserveMetPercentage"] == 50
        assert data["priceRange"] == {"low": 2000, "high": 3000, "currency": "SEK"}
        assert data["noComparableData"] is False
