"""
Market Statistics

Summaries of raw listings for the fusion engine: a historical price range
with a coverage/recency based confidence, and live-auction activity.
"""

import logging
import statistics
import time
from typing import List, Optional

from pipeline.models import ExceptionalSales, HistoricalSummary, LiveSummary, TrendAnalysis
from services.marketplace import Listing

logger = logging.getLogger(__name__)

MONTH_SECONDS = 30 * 24 * 3600
RECENT_SECONDS = 24 * MONTH_SECONDS
CURRENT_SECONDS = 12 * MONTH_SECONDS
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95
MIN_RANGE_FRACTION = 0.15
RECENT_SALES_SHOWN = 5
MIN_TREND_SALES = 3
MIN_EXCEPTIONAL_SALES = 3


def historical_confidence(
    sales: List[Listing],
    total_matches: int = 0,
    artist: Optional[str] = None,
    object_type: Optional[str] = None,
    now: Optional[float] = None,
) -> float:
    """Base 0.5 plus coverage, sample, recency and title-match bonuses, clamped."""
    now = now if now is not None else time.time()
    confidence = 0.5

    # Market coverage
    if total_matches >= 500:
        confidence += 0.4
    elif total_matches >= 100:
        confidence += 0.3
    elif total_matches >= 50:
        confidence += 0.2
    elif total_matches >= 20:
        confidence += 0.1

    n = len(sales)
    if n >= 20:
        confidence += 0.2
    elif n >= 10:
        confidence += 0.15
    elif n >= 5:
        confidence += 0.1
    elif n >= 3:
        confidence += 0.05

    if n:
        recent = [s for s in sales if s.sold_at and now - s.sold_at <= RECENT_SECONDS]
        if len(recent) >= n * 0.7:
            confidence += 0.15
        elif len(recent) >= n * 0.5:
            confidence += 0.1

        if artist:
            artist = artist.lower()
            hits = sum(1 for s in sales if artist in s.title.lower())
            if hits >= n * 0.8:
                confidence += 0.15
            elif hits >= n * 0.5:
                confidence += 0.1

        if object_type:
            object_type = object_type.lower()
            hits = sum(1 for s in sales if object_type in s.title.lower())
            if hits >= n * 0.8:
                confidence += 0.1

    return min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, confidence))


def price_range(prices: List[float]) -> tuple:
    """Actual min/max, widened to 15% of the mean for three samples or fewer."""
    if not prices:
        return 0, 0
    low = round(min(prices))
    high = round(max(prices))
    mean = sum(prices) / len(prices)

    if len(prices) <= 3:
        width = high - low
        min_width = mean * MIN_RANGE_FRACTION
        if width < min_width:
            center = (low + high) / 2
            low = max(0, round(center - min_width / 2))
            high = round(center + min_width / 2)
    return low, high


def analyze_trend(sales: List[Listing]) -> TrendAnalysis:
    """
    Compare the average price of the older half of the dated sales with the
    newer half. Swings above 500% usually mean the search mixed different
    markets, so they are capped and flagged; above 1000% only the direction
    is kept.
    """
    dated = sorted((s for s in sales if s.sold_at), key=lambda s: s.sold_at)
    if len(dated) < MIN_TREND_SALES:
        return TrendAnalysis(trend="insufficient_data")

    span_months = round((dated[-1].sold_at - dated[0].sold_at) / MONTH_SECONDS)
    mid = len(dated) // 2
    older, newer = dated[:mid], dated[mid:]
    older_avg = sum(s.price for s in older) / len(older)
    newer_avg = sum(s.price for s in newer) / len(newer)
    change = (newer_avg - older_avg) / older_avg * 100

    if abs(change) > 1000:
        logger.warning(f"[STATS] Trend of {change:.0f}% looks like mixed market data")
        if change > 0:
            return TrendAnalysis("rising_strong", 200, span_months, "mixed_suspicious")
        return TrendAnalysis("falling_strong", -80, span_months, "mixed_suspicious")

    quality = None
    if abs(change) > 500:
        quality = "extreme_trend"
        change = min(change, 300) if change > 0 else max(change, -75)

    if change > 15:
        trend = "rising_strong"
    elif change > 5:
        trend = "rising"
    elif change < -15:
        trend = "falling_strong"
    elif change < -5:
        trend = "falling"
    else:
        trend = "stable"
    return TrendAnalysis(trend, round(change), span_months, quality)


def detect_exceptional_sales(
    sales: List[Listing],
    valuation: Optional[float] = None,
) -> Optional[ExceptionalSales]:
    """Sales above max(3x median, 2x upper quartile), and above the valuation when given."""
    prices = sorted(s.price for s in sales)
    if len(prices) < MIN_EXCEPTIONAL_SALES:
        return None

    median = statistics.median(prices)
    q3 = prices[int(len(prices) * 0.75)]
    base = ExceptionalSales(
        sales=sorted(sales, key=lambda s: s.price, reverse=True),
        base_threshold=max(median * 3, q3 * 2),
        median=median,
    )
    return base.for_valuation(valuation)


def recent_sales(sales: List[Listing], limit: int = RECENT_SALES_SHOWN) -> List[Listing]:
    return sorted(sales, key=lambda s: s.sold_at or 0, reverse=True)[:limit]


def data_limitations(
    sales: List[Listing],
    artist: Optional[str] = None,
    now: Optional[float] = None,
) -> List[str]:
    """Caveats a cataloger should see next to the price range."""
    now = now if now is not None else time.time()
    n = len(sales)
    limitations = []
    if n < 5:
        limitations.append("Limited data")

    current = [s for s in sales if s.sold_at and now - s.sold_at <= CURRENT_SECONDS]
    if len(current) < n * 0.5:
        limitations.append("Few recent sales")

    if artist:
        artist = artist.lower()
        exact = sum(1 for s in sales if artist in s.title.lower())
        if exact < n * 0.7:
            limitations.append("Includes similar artists or makers")
    return limitations


def summarize_historical(
    listings: List[Listing],
    total_matches: int = 0,
    artist: Optional[str] = None,
    object_type: Optional[str] = None,
    currency: str = "SEK",
    now: Optional[float] = None,
    valuation: Optional[float] = None,
) -> Optional[HistoricalSummary]:
    """Summary of hammered sales, None when nothing actually sold."""
    sales = [l for l in listings if l.price and l.price > 0]
    if not sales:
        logger.info(f"[STATS] No actual sales among {len(listings)} historical listings")
        return None

    prices = [s.price for s in sales]
    low, high = price_range(prices)
    summary = HistoricalSummary(
        low=low,
        high=high,
        confidence=historical_confidence(sales, total_matches, artist, object_type, now),
        sample_size=len(sales),
        total_matches=max(total_matches, len(sales)),
        average=sum(prices) / len(prices),
        median=statistics.median(prices),
        currency=currency,
        trend=analyze_trend(sales),
        exceptional_sales=detect_exceptional_sales(sales, valuation),
        recent_sales=recent_sales(sales),
        limitations=data_limitations(sales, artist, now),
    )
    logger.info(
        f"[STATS] Historical: {summary.sample_size} sales, {low}-{high} {currency}, "
        f"conf={summary.confidence:.2f}"
    )
    return summary


def market_sentiment(reserve_met_pct: float) -> str:
    if reserve_met_pct > 70:
        return "strong"
    if reserve_met_pct > 40:
        return "moderate"
    if reserve_met_pct < 20:
        return "weak"
    return "neutral"


def summarize_live(listings: List[Listing], total_matches: int = 0) -> Optional[LiveSummary]:
    """Estimate range and bidding activity of live auctions, None when empty."""
    if not listings:
        return None

    n = len(listings)
    estimates = [l.estimate for l in listings if l.estimate and l.estimate > 0]
    total_bids = sum(l.bid_count for l in listings)
    reserve_pct = sum(1 for l in listings if l.reserve_met) / n * 100

    summary = LiveSummary(
        sample_size=n,
        total_bids=total_bids,
        reserve_met_percentage=round(reserve_pct),
        average_bids_per_item=total_bids / n,
        sentiment=market_sentiment(reserve_pct),
        total_matches=max(total_matches, n),
    )
    if estimates:
        summary.estimate_low = min(estimates)
        summary.estimate_high = max(estimates)
        summary.estimate_average = sum(estimates) / len(estimates)

    logger.info(
        f"[STATS] Live: {n} auctions, {total_bids} bids, "
        f"{summary.reserve_met_percentage}% reserves met ({summary.sentiment})"
    )
    return summary
