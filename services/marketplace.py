"""
Marketplace Search Service

Keyword search against the auction marketplace items endpoint, for ended
(historical) and live listings. The index is opaque: no relevance ranking,
and an empty result is common and meaningful.

A failed request (network error, non-200, unreadable body) raises
ResolutionFailed. It is never turned into an empty result, so the backoff
ladder only ever relaxes on genuine zero-hit answers.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from config import MARKETPLACE
from services.exceptions import ResolutionFailed

logger = logging.getLogger(__name__)

# Module configuration (set by configure_marketplace)
_config = {
    "base_url": MARKETPLACE.base_url,
    "search_page_url": MARKETPLACE.search_page_url,
    "currency": MARKETPLACE.currency,
    "per_page": MARKETPLACE.per_page,
    "timeout": MARKETPLACE.timeout,
    "http_client": None,  # Shared httpx client for connection pooling
}


def configure_marketplace(http_client=None, base_url: str = None, per_page: int = None):
    """Configure the marketplace module with an HTTP client and endpoint overrides."""
    if http_client:
        _config["http_client"] = http_client
    if base_url:
        _config["base_url"] = base_url
    if per_page:
        _config["per_page"] = per_page


@dataclass
class Listing:
    """One marketplace listing, ended or live"""
    title: str
    price: Optional[float] = None  # hammer price, ended listings only
    estimate: Optional[float] = None
    upper_estimate: Optional[float] = None
    bid_count: int = 0
    current_bid: Optional[float] = None
    reserve_met: bool = False
    currency: str = "SEK"
    ends_at: Optional[float] = None  # unix seconds
    sold_at: Optional[float] = None  # unix seconds of the winning bid
    url: Optional[str] = None
    house: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "price": self.price,
            "estimate": self.estimate,
            "upperEstimate": self.upper_estimate,
            "bidCount": self.bid_count,
            "reserveMet": self.reserve_met,
            "currency": self.currency,
            "endsAt": self.ends_at,
            "url": self.url,
            "house": self.house,
        }


@dataclass
class SearchResult:
    """Filtered listings plus the index's own total hit count"""
    listings: List[Listing] = field(default_factory=list)
    total_entries: int = 0


# ============================================================
# PARSING
# ============================================================

def _first_bid(item: dict) -> Optional[dict]:
    bids = item.get("bids") or []
    return bids[0] if bids else None


def _positive(value) -> Optional[float]:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _is_currency_ok(item: dict) -> bool:
    currency = item.get("currency")
    return not currency or currency == _config["currency"]


def _is_historical(item: dict, now: float) -> bool:
    bid = _first_bid(item)
    has_price = (
        (item.get("hammered") and bid and _positive(bid.get("amount")))
        or _positive(item.get("estimate"))
        or _positive(item.get("upper_estimate"))
    )
    ended = (
        item.get("hammered")
        or (item.get("ends_at") and item["ends_at"] < now)
        or item.get("state") == "ended"
    )
    return bool(has_price and ended)


def _is_live(item: dict, now: float) -> bool:
    return (
        not item.get("hammered")
        and item.get("state") == "published"
        and (item.get("ends_at") or 0) > now
    )


def parse_listing(item: dict, scope: str) -> Listing:
    bid = _first_bid(item)
    bid_amount = _positive(bid.get("amount")) if bid else None
    return Listing(
        title=item.get("title") or "",
        price=bid_amount if scope == "historical" and item.get("hammered") else None,
        estimate=_positive(item.get("estimate")),
        upper_estimate=_positive(item.get("upper_estimate")),
        bid_count=len(item.get("bids") or []),
        current_bid=bid_amount if scope == "live" else None,
        reserve_met=bool(item.get("reserve_met")),
        currency=item.get("currency") or _config["currency"],
        ends_at=item.get("ends_at"),
        sold_at=(bid.get("timestamp") if bid else None) or item.get("ends_at"),
        url=item.get("url"),
        house=item.get("house"),
    )


def parse_search_response(data: dict, scope: str, now: float = None) -> SearchResult:
    """Filter a raw items payload down to usable listings for the scope."""
    now = now if now is not None else time.time()
    items = data.get("items") or []
    keep = _is_historical if scope == "historical" else _is_live

    listings = [
        parse_listing(item, scope)
        for item in items
        if _is_currency_ok(item) and keep(item, now)
    ]
    pagination = data.get("pagination") or {}
    total = pagination.get("total_entries", len(items)) or 0

    skipped = len(items) - len(listings)
    if skipped:
        logger.debug(f"[MARKET] {scope}: filtered out {skipped}/{len(items)} items")
    return SearchResult(listings=listings, total_entries=int(total))


# ============================================================
# SEARCH
# ============================================================

async def search_listings(query: str, scope: str) -> SearchResult:
    """
    Run one keyword search for ended ("historical") or live listings.
    Raises ResolutionFailed when the marketplace itself fails.
    """
    params = {"q": query, "per_page": _config["per_page"]}
    if scope == "historical":
        params["is"] = "ended"

    url = _config["base_url"]
    timeout = _config["timeout"]
    headers = {"User-Agent": MARKETPLACE.user_agent, "Accept": "application/json"}

    try:
        # Use shared HTTP client if available (connection pooling)
        http_client = _config.get("http_client")
        if http_client:
            response = await http_client.get(url, params=params, headers=headers, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"[MARKET] {scope} search failed for '{query}': {e}")
        raise ResolutionFailed(query, scope, message=f"Marketplace request failed: {e}", cause=e)

    if response.status_code != 200:
        logger.warning(f"[MARKET] API returned {response.status_code} for '{query}'")
        raise ResolutionFailed(
            query,
            scope,
            status_code=response.status_code,
            message=f"Marketplace returned HTTP {response.status_code}",
        )

    try:
        data = response.json()
    except ValueError as e:
        raise ResolutionFailed(query, scope, message="Marketplace returned invalid JSON", cause=e)

    result = parse_search_response(data, scope)
    logger.info(
        f"[MARKET] {scope} '{query}': {len(result.listings)} usable "
        f"of {result.total_entries} total"
    )
    return result


def get_search_url(query: str, scope: str = "historical") -> str:
    """Human-facing marketplace search link for a query."""
    params = {"q": query}
    if scope == "historical":
        params["is"] = "ended"
    return f"{_config['search_page_url']}?{urlencode(params)}"
