"""
Insight / Confidence Fusion Engine

Fuses the historical and live summaries into one MarketSnapshot:

- combined confidence from whichever sources are present
- market regime (strong / weak / normal) from the live reserve-met rate,
  only trusted at or above the live sample-size gate
- at most one price-comparison insight, picked from a regime x delta table
- a market-activity insight unless the price insight already states the regime
- a low-significance historical fallback when nothing else was said
"""

import logging
from typing import List, Optional

from config import INSIGHTS, InsightConfig
from pipeline.models import (
    HistoricalSummary,
    Insight,
    LiveSummary,
    MarketSnapshot,
    SearchAttempt,
)

logger = logging.getLogger(__name__)

REGIME_STRONG = "strong"
REGIME_WEAK = "weak"
REGIME_NORMAL = "normal"

# Phrases used to recognize that a price insight already stated the regime
REGIME_PHRASES = {
    REGIME_STRONG: "strong market",
    REGIME_WEAK: "weak market",
}

SENTIMENT_CONTEXT = {
    "strong": "Strong demand in ongoing auctions",
    "moderate": "Moderate activity in ongoing auctions",
    "weak": "Low activity in ongoing auctions",
    "neutral": "Normal activity in ongoing auctions",
}


def pct_diff(value: float, reference: float) -> float:
    return (value - reference) / reference * 100


class InsightEngine:
    """Stateless fusion of historical and live market summaries"""

    def __init__(self, config: InsightConfig = INSIGHTS):
        self.config = config

    # ------------------------------------------------------------
    # Confidence and regime
    # ------------------------------------------------------------

    @staticmethod
    def combined_confidence(
        historical: Optional[HistoricalSummary],
        live: Optional[LiveSummary],
    ) -> float:
        if historical and live:
            return min(1.0, historical.confidence + 0.2)
        if historical:
            return historical.confidence
        if live:
            return 0.5 + min(0.3, live.sample_size / 20)
        return 0.3

    def has_reliable_sample(self, live: Optional[LiveSummary]) -> bool:
        return live is not None and live.sample_size >= self.config.min_live_sample

    def market_regime(self, live: Optional[LiveSummary]) -> str:
        """Strong/weak only above the sample gate, normal otherwise."""
        if not self.has_reliable_sample(live):
            return REGIME_NORMAL
        if live.reserve_met_percentage > self.config.strong_reserve_pct:
            return REGIME_STRONG
        if live.reserve_met_percentage < self.config.weak_reserve_pct:
            return REGIME_WEAK
        return REGIME_NORMAL

    @staticmethod
    def activity_summary(live: LiveSummary) -> str:
        n = live.sample_size
        if live.total_bids == 0:
            return f"no bids on {n} ongoing auctions"
        if live.reserve_met_percentage == 0:
            return (
                f"bids placed but no reserve met ({n} auctions, "
                f"avg {live.average_bids_per_item:.1f} bids each)"
            )
        return f"{live.reserve_met_percentage}% of reserves met ({n} ongoing auctions)"

    # ------------------------------------------------------------
    # Price comparison
    # ------------------------------------------------------------

    def price_insight(
        self,
        historical: Optional[HistoricalSummary],
        live: Optional[LiveSummary],
        valuation: Optional[float] = None,
    ) -> Optional[Insight]:
        """At most one price-comparison insight, None below the 15% divergence floor."""
        if not historical or not live or not live.has_estimates:
            return None
        if not historical.low or not historical.high:
            return None

        hist_avg = historical.midpoint
        live_avg = live.midpoint
        if not hist_avg or not live_avg:
            return None

        price_diff = pct_diff(live_avg, hist_avg)
        if abs(price_diff) <= self.config.price_diff_min:
            return None

        regime = self.market_regime(live)
        if valuation:
            insight = self._valuation_insight(
                regime,
                price_diff,
                pct_diff(valuation, hist_avg),
                pct_diff(valuation, live_avg),
                live,
            )
        else:
            insight = self._market_only_insight(regime, price_diff, live)

        if insight:
            logger.info(f"[INSIGHTS] {insight.kind}/{insight.significance}: {insight.message}")
        return insight

    def _valuation_insight(
        self,
        regime: str,
        price_diff: float,
        cat_vs_hist: float,
        cat_vs_live: float,
        live: LiveSummary,
    ) -> Optional[Insight]:
        c = self.config
        activity = self.activity_summary(live)

        if regime == REGIME_WEAK:
            if cat_vs_hist > c.price_diff_large:
                return Insight(
                    "conflict",
                    f"Your valuation is +{cat_vs_hist:.0f}% over history in a weak market",
                    "high",
                    f"Market is weak: {activity}. Lower the reserve to avoid an unsold lot.",
                )
            if price_diff > c.price_diff_notable:
                return Insight(
                    "conflict",
                    "High estimates but weak demand in a weak market",
                    "high",
                    f"Ongoing auctions are estimated {price_diff:.0f}% above past hammer prices, "
                    f"but {activity}. Set the reserve conservatively.",
                )
            if cat_vs_live > 20:
                return Insight(
                    "market_weakness",
                    "Your valuation is above ongoing auctions in a weak market",
                    "medium",
                    f"Market is weak: {activity}. Consider lowering the reserve.",
                )
            return None

        if regime == REGIME_STRONG:
            if cat_vs_hist < -20 and price_diff > c.price_diff_notable:
                return Insight(
                    "market_strength",
                    "Strong market, your valuation may be too low",
                    "medium",
                    f"{activity}. Ongoing auctions are {price_diff:.0f}% above history while your "
                    f"valuation is {abs(cat_vs_hist):.0f}% below. Consider raising it.",
                )
            if cat_vs_hist > c.price_diff_extreme:
                return Insight(
                    "price_comparison",
                    f"Your valuation is +{cat_vs_hist:.0f}% over history",
                    "medium",
                    f"Even in a strong market ({activity}) this is well above past hammer prices.",
                )
            if price_diff > c.price_diff_large:
                return Insight(
                    "market_strength",
                    "Strong market, favourable time to sell",
                    "medium",
                    f"{activity}. Ongoing auctions are estimated {price_diff:.0f}% above history.",
                )
            return None

        if cat_vs_hist > c.price_diff_extreme:
            detail = (
                f"Ongoing auctions are {price_diff:.0f}% above history but your valuation is "
                f"{cat_vs_hist:.0f}% above. Lower it towards market level."
                if price_diff > c.price_diff_notable
                else "Ongoing auctions sit close to historical levels. Lower the valuation."
            )
            return Insight(
                "price_comparison",
                f"Your valuation is +{cat_vs_hist:.0f}% over history",
                "high",
                detail,
            )
        if cat_vs_hist > c.price_diff_large:
            if price_diff > c.price_diff_large:
                return Insight(
                    "price_comparison",
                    "Rising market, current valuation is reasonable",
                    "medium",
                    f"Ongoing auctions are {price_diff:.0f}% above history. Your valuation is "
                    f"{cat_vs_hist:.0f}% over history but in line with the trend.",
                )
            return Insight(
                "price_comparison",
                "Valuation somewhat high, be careful",
                "medium",
                "Both ongoing auctions and your valuation are above history. "
                "The market does not fully support a sharp increase.",
            )
        if cat_vs_hist < -20:
            if price_diff > c.price_diff_notable:
                return Insight(
                    "price_comparison",
                    "Your valuation may be low, ongoing auctions are higher",
                    "medium",
                    f"Ongoing auctions are {price_diff:.0f}% above history while your valuation "
                    f"is {abs(cat_vs_hist):.0f}% below. Consider raising it.",
                )
            return None
        if price_diff > c.price_diff_large:
            return Insight(
                "price_comparison",
                "Prices currently higher than history",
                "medium",
                f"Ongoing auctions are estimated {price_diff:.0f}% above past hammer prices.",
            )
        if price_diff < -c.price_diff_notable:
            return Insight(
                "price_comparison",
                "Prices currently lower than history",
                "medium",
                f"Ongoing auctions are estimated {abs(price_diff):.0f}% below past hammer prices. "
                f"Price carefully.",
            )
        return None

    def _market_only_insight(self, regime: str, price_diff: float, live: LiveSummary) -> Optional[Insight]:
        c = self.config
        activity = self.activity_summary(live)

        if regime == REGIME_WEAK and price_diff > c.price_diff_min:
            return Insight(
                "conflict",
                "High estimates but weak demand in a weak market",
                "high",
                f"Ongoing auctions are estimated {price_diff:.0f}% above past hammer prices, "
                f"but {activity}. Set the reserve conservatively.",
            )
        if regime == REGIME_STRONG and price_diff > c.price_diff_min:
            return Insight(
                "market_strength",
                "Strong market, favourable time to sell",
                "medium",
                f"{activity}. Ongoing auctions are estimated {price_diff:.0f}% above history.",
            )

        significance = "high" if abs(price_diff) > c.price_diff_notable else "medium"
        if price_diff > c.price_diff_notable:
            message = f"Prices currently higher than history (+{price_diff:.0f}%)"
        elif price_diff > c.price_diff_min:
            message = f"Prices slightly higher than history (+{price_diff:.0f}%)"
        elif price_diff < -c.price_diff_notable:
            message = f"Prices currently lower than history ({price_diff:.0f}%)"
        else:
            message = f"Prices slightly lower than history ({price_diff:.0f}%)"
        return Insight(
            "price_comparison",
            message,
            significance,
            f"Ongoing auction estimates compared with past hammer prices; {activity}.",
        )

    # ------------------------------------------------------------
    # Activity and fallback
    # ------------------------------------------------------------

    def activity_insight(self, live: Optional[LiveSummary], existing: List[Insight]) -> Optional[Insight]:
        """Strength/weakness at or above the sample gate, insufficient-data below it."""
        if not live or live.sample_size <= 0:
            return None

        activity = self.activity_summary(live)
        if not self.has_reliable_sample(live):
            return Insight(
                "market_info",
                f"Insufficient data ({live.sample_size} ongoing auctions)",
                "medium" if live.total_bids == 0 else "low",
                f"Only {live.sample_size} ongoing auctions found, too few for a reliable "
                f"market reading: {activity}.",
            )

        regime = self.market_regime(live)
        phrase = REGIME_PHRASES.get(regime)
        if phrase is None:
            return None
        if any(phrase in i.message.lower() for i in existing):
            logger.debug(f"[INSIGHTS] Regime '{regime}' already stated, skipping activity insight")
            return None

        if regime == REGIME_STRONG:
            return Insight(
                "market_strength",
                f"Strong market, {live.reserve_met_percentage}% reach reserve",
                "high",
                f"{activity}. A high share of auctions reach their reserve.",
            )
        return Insight(
            "market_weakness",
            "Weak market, no bids" if live.total_bids == 0
            else f"Weak market, {live.reserve_met_percentage}% reach reserve",
            "high" if live.total_bids == 0 else "medium",
            f"{activity}. Few auctions reach their reserve. Set the reserve conservatively.",
        )

    def fallback_insight(self, historical: Optional[HistoricalSummary]) -> Optional[Insight]:
        if not historical:
            return None
        c = self.config
        price_text = f"Price range {historical.low}-{historical.high} {historical.currency}."
        if historical.confidence > c.stable_history_confidence and historical.sample_size >= c.stable_history_sample:
            return Insight(
                "market_info",
                "Stable market, good data quality",
                "low",
                f"{historical.sample_size} past sales analysed at "
                f"{historical.confidence * 100:.0f}% confidence. {price_text}",
            )
        if historical.sample_size >= c.min_history_sample:
            return Insight(
                "market_info",
                f"Market data available ({historical.sample_size} sales)",
                "low",
                f"{historical.sample_size} past sales analysed. {price_text}",
            )
        return None

    def generate_insights(
        self,
        historical: Optional[HistoricalSummary],
        live: Optional[LiveSummary],
        valuation: Optional[float] = None,
    ) -> List[Insight]:
        insights: List[Insight] = []

        price = self.price_insight(historical, live, valuation)
        if price:
            insights.append(price)

        activity = self.activity_insight(live, insights)
        if activity:
            insights.append(activity)

        if not insights:
            fallback = self.fallback_insight(historical)
            if fallback:
                insights.append(fallback)
        return insights

    # ------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------

    @staticmethod
    def price_range(
        historical: Optional[HistoricalSummary],
        live: Optional[LiveSummary],
    ) -> Optional[dict]:
        if historical:
            return {"low": historical.low, "high": historical.high, "currency": historical.currency}
        if live and live.has_estimates:
            return {"low": round(live.estimate_low), "high": round(live.estimate_high), "currency": "SEK"}
        return None

    @staticmethod
    def market_context(live: Optional[LiveSummary]) -> Optional[str]:
        if not live:
            return None
        return SENTIMENT_CONTEXT.get(live.sentiment, "Ongoing auction activity")

    def build_snapshot(
        self,
        query: str,
        historical: Optional[HistoricalSummary],
        live: Optional[LiveSummary],
        valuation: Optional[float] = None,
        attempts: Optional[List[SearchAttempt]] = None,
    ) -> MarketSnapshot:
        snapshot = MarketSnapshot(
            query=query,
            combined_confidence=self.combined_confidence(historical, live),
            historical=historical,
            live=live,
            price_range=self.price_range(historical, live),
            insights=self.generate_insights(historical, live, valuation),
            attempts=list(attempts or []),
            market_context=self.market_context(live),
        )
        logger.info(
            f"[INSIGHTS] '{query}': conf={snapshot.combined_confidence:.2f}, "
            f"{len(snapshot.insights)} insights"
        )
        return snapshot
