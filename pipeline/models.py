"""
Pipeline Data Model

Records passed between the classifier, query state, resolver and insight
engine. Every record serializes with to_dict() for the HTTP layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from agents.base import TermKind
from services.marketplace import Listing

# Rank per kind, lower sorts earlier in the canonical query
KIND_PRIORITY = {
    TermKind.BRAND: 1,
    TermKind.OBJECT_TYPE: 2,
    TermKind.MATERIAL: 3,
    TermKind.GEMSTONE: 4,
    TermKind.DENOMINATION: 5,
    TermKind.MODEL: 6,
    TermKind.COUNTRY: 7,
    TermKind.PERIOD: 8,
    TermKind.KEYWORD: 9,
}

HISTORICAL = "historical"
LIVE = "live"

STAGE_INITIAL = "initial"
STAGE_RELAXED = "relaxed"
STAGE_EMERGENCY = "emergency"


def priority_for(kind: TermKind) -> int:
    return KIND_PRIORITY.get(kind, KIND_PRIORITY[TermKind.KEYWORD])


class Provenance(Enum):
    """Who introduced or last selected a term"""
    SYSTEM = "system"
    USER = "user"
    ORACLE = "oracle"


@dataclass
class Term:
    """A typed search term owned by one QueryState"""
    text: str
    kind: TermKind
    priority_score: int
    is_core: bool = False
    is_selected: bool = False
    provenance: Provenance = Provenance.SYSTEM
    order: int = 0

    @property
    def key(self) -> str:
        return self.text.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "kind": self.kind.value,
            "priorityScore": self.priority_score,
            "isCore": self.is_core,
            "isSelected": self.is_selected,
            "provenance": self.provenance.value,
            "order": self.order,
        }


@dataclass
class CandidateTerm:
    """Seed for QueryState.initialize, from the classifier, the oracle or the caller"""
    text: str
    kind: Optional[TermKind] = None
    pre_selected: Optional[bool] = None
    confidence: Optional[float] = None
    provenance: Provenance = Provenance.SYSTEM
    is_core: bool = False  # protected regardless of the seed query, e.g. the item's artist

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateTerm":
        kind = data.get("kind")
        provenance = data.get("provenance") or Provenance.USER.value
        return cls(
            text=str(data.get("text") or data.get("term") or "").strip(),
            kind=TermKind(kind) if kind in {k.value for k in TermKind} else None,
            pre_selected=data.get("preSelected"),
            confidence=data.get("confidence"),
            provenance=Provenance(provenance) if provenance in {p.value for p in Provenance} else Provenance.USER,
            is_core=bool(data.get("isCore", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "kind": self.kind.value if self.kind else None,
            "preSelected": self.pre_selected,
            "confidence": self.confidence,
            "provenance": self.provenance.value,
            "isCore": self.is_core,
        }


@dataclass
class QueryChange:
    """Notification delivered to QueryState listeners"""
    event: str  # initialize, select, deselect, rebuild, full_control, reset
    source: str
    before: str
    after: str

    @property
    def changed(self) -> bool:
        return self.before != self.after

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "source": self.source,
            "before": self.before,
            "after": self.after,
        }


@dataclass
class SearchAttempt:
    """One marketplace lookup inside a backoff ladder"""
    query: str
    scope: str  # historical, live
    result_count: int
    succeeded: bool
    stage: str = STAGE_INITIAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "scope": self.scope,
            "resultCount": self.result_count,
            "succeeded": self.succeeded,
            "stage": self.stage,
        }


@dataclass
class Resolution:
    """Outcome of one backoff ladder"""
    scope: str
    query: str  # query that produced the listings, or the original query when exhausted
    listings: List[Listing] = field(default_factory=list)
    attempts: List[SearchAttempt] = field(default_factory=list)
    total_matches: int = 0

    @property
    def no_comparable_data(self) -> bool:
        return not self.listings

    @property
    def relaxed(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].stage != STAGE_INITIAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "query": self.query,
            "resultCount": len(self.listings),
            "totalMatches": self.total_matches,
            "attempts": [a.to_dict() for a in self.attempts],
            "noComparableData": self.no_comparable_data,
        }


@dataclass
class TrendAnalysis:
    """Older half vs newer half of the sales, by sale date"""
    trend: str  # rising_strong, rising, stable, falling, falling_strong, insufficient_data
    change_percent: Optional[int] = None
    span_months: int = 0
    data_quality: Optional[str] = None  # extreme_trend, mixed_suspicious

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trend": self.trend,
            "changePercent": self.change_percent,
            "spanMonths": self.span_months,
            "dataQuality": self.data_quality,
        }


def _sale_dict(listing: Listing) -> Dict[str, Any]:
    title = listing.title or ""
    return {
        "title": title[:60] + ("..." if len(title) > 60 else ""),
        "price": listing.price,
        "estimate": listing.estimate,
        "soldAt": listing.sold_at,
        "house": listing.house,
        "url": listing.url,
    }


@dataclass
class ExceptionalSales:
    """
    Confirmed sales far above the typical price.

    With a valuation, a sale must also beat the valuation to count.
    """
    sales: List[Listing]
    base_threshold: float
    median: float
    valuation: Optional[float] = None

    @property
    def threshold(self) -> float:
        return max(self.base_threshold, self.valuation or 0)

    @property
    def valuation_based(self) -> bool:
        return bool(self.valuation)

    def for_valuation(self, valuation: Optional[float]) -> Optional["ExceptionalSales"]:
        """Narrow to the sales above the valuation too, None when none remain."""
        valuation = valuation if valuation and valuation > 0 else None
        narrowed = ExceptionalSales(self.sales, self.base_threshold, self.median, valuation)
        narrowed.sales = [s for s in self.sales if s.price > narrowed.threshold]
        return narrowed if narrowed.sales else None

    def to_dict(self) -> Dict[str, Any]:
        sales = []
        for listing in self.sales:
            sale = _sale_dict(listing)
            sale["priceVsMedian"] = round(listing.price / self.median * 100) if self.median else None
            sale["priceVsValuation"] = round(listing.price / self.valuation * 100) if self.valuation else None
            sales.append(sale)
        return {
            "count": len(self.sales),
            "threshold": round(self.threshold),
            "valuationBased": self.valuation_based,
            "sales": sales,
        }


@dataclass
class HistoricalSummary:
    """Ended-listing statistics"""
    low: int
    high: int
    confidence: float
    sample_size: int
    total_matches: int = 0
    average: float = 0.0
    median: float = 0.0
    currency: str = "SEK"
    trend: Optional[TrendAnalysis] = None
    exceptional_sales: Optional[ExceptionalSales] = None
    recent_sales: List[Listing] = field(default_factory=list)
    limitations: List[str] = field(default_factory=list)

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priceRange": {"low": self.low, "high": self.high, "currency": self.currency},
            "confidence": round(self.confidence, 2),
            "sampleSize": self.sample_size,
            "totalMatches": self.total_matches,
            "average": round(self.average),
            "median": round(self.median),
            "trend": self.trend.to_dict() if self.trend else None,
            "exceptionalSales": self.exceptional_sales.to_dict() if self.exceptional_sales else None,
            "recentSales": [_sale_dict(l) for l in self.recent_sales],
            "limitations": self.limitations,
        }


@dataclass
class LiveSummary:
    """Live-auction activity statistics"""
    sample_size: int
    total_bids: int
    reserve_met_percentage: int
    estimate_low: Optional[float] = None
    estimate_high: Optional[float] = None
    estimate_average: Optional[float] = None
    average_bids_per_item: float = 0.0
    sentiment: str = "neutral"
    total_matches: int = 0

    @property
    def has_estimates(self) -> bool:
        return self.estimate_low is not None and self.estimate_high is not None

    @property
    def midpoint(self) -> Optional[float]:
        if not self.has_estimates:
            return None
        return (self.estimate_low + self.estimate_high) / 2

    def to_dict(self) -> Dict[str, Any]:
        estimates = None
        if self.has_estimates:
            estimates = {
                "low": round(self.estimate_low),
                "high": round(self.estimate_high),
                "average": round(self.estimate_average or 0),
            }
        return {
            "currentEstimates": estimates,
            "totalBids": self.total_bids,
            "averageBidsPerItem": round(self.average_bids_per_item, 1),
            "reserveMetPercentage": self.reserve_met_percentage,
            "sampleSize": self.sample_size,
            "totalMatches": self.total_matches,
            "sentiment": self.sentiment,
        }


@dataclass(frozen=True)
class Insight:
    """One narrative finding, consumed once by the caller"""
    kind: str  # price_comparison, conflict, market_strength, market_weakness, market_info
    message: str
    significance: str  # low, medium, high
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "kind": self.kind,
            "message": self.message,
            "significance": self.significance,
        }
        if self.detail:
            result["detail"] = self.detail
        return result


@dataclass
class MarketSnapshot:
    """Fused market view for one analysis request"""
    query: str
    combined_confidence: float
    historical: Optional[HistoricalSummary] = None
    live: Optional[LiveSummary] = None
    price_range: Optional[Dict[str, Any]] = None
    insights: List[Insight] = field(default_factory=list)
    attempts: List[SearchAttempt] = field(default_factory=list)
    historical_query: Optional[str] = None
    live_query: Optional[str] = None
    search_url: Optional[str] = None
    market_context: Optional[str] = None

    @property
    def no_comparable_data(self) -> bool:
        return self.historical is None and self.live is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "historical": self.historical.to_dict() if self.historical else None,
            "live": self.live.to_dict() if self.live else None,
            "combinedConfidence": round(self.combined_confidence, 2),
            "priceRange": self.price_range,
            "insights": [i.to_dict() for i in self.insights],
            "attempts": [a.to_dict() for a in self.attempts],
            "historicalQuery": self.historical_query,
            "liveQuery": self.live_query,
            "searchUrl": self.search_url,
            "marketContext": self.market_context,
            "noComparableData": self.no_comparable_data,
        }
