"""
Shared fixtures.

The marketplace is replaced by a scripted fake: each query string maps to
a list of listings (or an exception) per scope, anything else returns zero
hits. Calls are recorded so tests can assert on the backoff ladder.
"""

import time
from typing import Dict, List, Optional, Tuple

import pytest

from pipeline.orchestrator import AnalysisOrchestrator
from pipeline.resolver import MarketDataResolver
from pipeline.session import ItemAttributes
from services.marketplace import Listing, SearchResult
from smart_cache import SnapshotCache

NOW = time.time()
DAY = 24 * 3600


def sold(price: float, title: str = "Omega armbandsur", days_ago: int = 30) -> Listing:
    """Ended listing with a hammer price."""
    return Listing(
        title=title,
        price=price,
        estimate=price,
        bid_count=5,
        reserve_met=True,
        ends_at=NOW - days_ago * DAY,
        sold_at=NOW - days_ago * DAY,
    )


def live(
    estimate: Optional[float] = 1000,
    bids: int = 0,
    reserve_met: bool = False,
    title: str = "Omega armbandsur",
) -> Listing:
    """Ongoing auction."""
    return Listing(
        title=title,
        estimate=estimate,
        bid_count=bids,
        reserve_met=reserve_met,
        ends_at=NOW + 3 * DAY,
    )


class FakeMarketplace:
    """Scripted stand-in for services.marketplace.search_listings"""

    def __init__(self):
        self.responses: Dict[Tuple[str, str], object] = {}
        self.calls: List[Tuple[str, str]] = []
        self.hook = None

    def add(self, query: str, scope: str, listings, total: Optional[int] = None):
        if isinstance(listings, Exception):
            self.responses[(query, scope)] = listings
        else:
            self.responses[(query, scope)] = SearchResult(
                listings=list(listings),
                total_entries=total if total is not None else len(listings),
            )

    def queries(self, scope: str) -> List[str]:
        return [q for q, s in self.calls if s == scope]

    async def __call__(self, query: str, scope: str) -> SearchResult:
        self.calls.append((query, scope))
        if self.hook is not None:
            await self.hook(query, scope)
        response = self.responses.get((query, scope))
        if isinstance(response, Exception):
            raise response
        return response or SearchResult()


@pytest.fixture
def fake_market():
    return FakeMarketplace()


@pytest.fixture
def resolver(fake_market):
    return MarketDataResolver(search=fake_market)


@pytest.fixture
def orchestrator(resolver):
    return AnalysisOrchestrator(resolver=resolver, cache=SnapshotCache(max_size=10, ttl=3600))


@pytest.fixture
def watch_item():
    return ItemAttributes(
        object_type="armbandsur",
        title="Omega Seamaster stål 1970-tal",
    )
