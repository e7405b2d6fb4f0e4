"""
Analysis Orchestrator

Single entry point for turning item attributes into a MarketSnapshot.

Flow:
1. Classify + synthesize the initial query (rule-based)
2. Optional oracle pass; its pre-selection overrides query tokenization
3. Seed the session's QueryState
4. Resolve historical and live listings concurrently (backoff ladders)
5. Summarize both result sets
6. Fuse into a snapshot with insights

The orchestrator owns the snapshot cache and the request-token discard of
superseded analyses. ResolutionFailed is never caught here.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from agents.base import TermKind
from pipeline.insights import InsightEngine
from pipeline.market_stats import summarize_historical, summarize_live
from pipeline.models import MarketSnapshot
from pipeline.resolver import MarketDataResolver, ResolutionContext
from pipeline.session import CatalogSession, ItemAttributes
from pipeline.synthesizer import QuerySynthesizer, SynthesisResult
from pipeline.term_classifier import candidates_from_oracle
from services.exceptions import AnthropicAPIError, MalformedOracleResponse
from services.marketplace import get_search_url
from smart_cache import SnapshotCache

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    """Snapshot, or a stale marker when a newer request superseded this one"""
    token: int
    snapshot: Optional[MarketSnapshot] = None
    stale: bool = False
    from_cache: bool = False

    def to_dict(self) -> Dict[str, Any]:
        if self.stale:
            return {"stale": True, "token": self.token}
        result = self.snapshot.to_dict()
        result["token"] = self.token
        result["fromCache"] = self.from_cache
        return result


class AnalysisOrchestrator:
    """
    Wires classifier, query state, resolver and insight engine together.

    One instance serves every session; all per-item state lives in the
    CatalogSession passed in.
    """

    def __init__(
        self,
        resolver: MarketDataResolver = None,
        synthesizer: QuerySynthesizer = None,
        insight_engine: InsightEngine = None,
        oracle=None,
        cache: SnapshotCache = None,
    ):
        self.resolver = resolver or MarketDataResolver()
        self.synthesizer = synthesizer or QuerySynthesizer()
        self.insights = insight_engine or InsightEngine()
        self.oracle = oracle
        self.cache = cache if cache is not None else SnapshotCache()

        # Stats tracking
        self.stats = {
            "sessions_prepared": 0,
            "analyses": 0,
            "cache_hits": 0,
            "stale_discarded": 0,
            "no_comparable_data": 0,
            "oracle_used": 0,
            "oracle_fallbacks": 0,
        }

    # ------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------

    async def prepare(
        self,
        session: CatalogSession,
        item: ItemAttributes,
        use_oracle: bool = True,
    ) -> SynthesisResult:
        """Synthesize the initial query and seed the session's query state."""
        synthesis = self.synthesizer.synthesize(
            item.object_type, item.title, item.description, item.artist
        )
        candidates = list(synthesis.candidates)
        source = "system"

        if use_oracle and self.oracle is not None and self.oracle.enabled:
            try:
                oracle_terms = await self.oracle.classify(item.to_dict())
                core = {c.text.lower() for c in candidates if c.is_core}
                oracle_candidates = [
                    replace(c, is_core=True) if c.text.lower() in core else c
                    for c in candidates_from_oracle(oracle_terms)
                ]
                seen = {c.text.lower() for c in oracle_candidates}
                for candidate in candidates:
                    if candidate.text.lower() not in seen:
                        oracle_candidates.append(replace(candidate, pre_selected=False))
                candidates = oracle_candidates
                source = "oracle"
                self.stats["oracle_used"] += 1
            except (MalformedOracleResponse, AnthropicAPIError) as e:
                logger.warning(f"[ORACLE] Falling back to rule-based classification: {e}")
                self.stats["oracle_fallbacks"] += 1

        session.item = item
        session.synthesis = synthesis
        session.state.initialize(synthesis.search_terms, candidates, source)
        self.stats["sessions_prepared"] += 1
        logger.info(
            f"[ANALYZE] Session {session.session_id} prepared: "
            f"'{session.state.get_current_query()}' ({synthesis.strategy_tag}, {source})"
        )
        return synthesis

    # ------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------

    def _context(self, session: CatalogSession) -> ResolutionContext:
        item = session.item
        brands = {t.text for t in session.state.selected_terms if t.kind == TermKind.BRAND}
        return ResolutionContext(
            artist=item.artist if item else None,
            brands=brands,
            object_type=session.synthesis.classification.object_type if session.synthesis else None,
        )

    async def analyze(
        self,
        session: CatalogSession,
        item: Optional[ItemAttributes] = None,
        valuation: Optional[float] = None,
    ) -> AnalysisOutcome:
        """
        Analyze the session's current query.

        A new or changed item re-seeds the session first. Raises
        ResolutionFailed when the marketplace itself fails.
        """
        if item is not None and (session.item is None or item != session.item):
            await self.prepare(session, item)
        if valuation is None and session.item is not None:
            valuation = session.item.valuation

        token = session.next_token()
        query = session.state.get_current_query()
        self.stats["analyses"] += 1

        cached = self.cache.get(query)
        if cached is not None:
            self.stats["cache_hits"] += 1
            snapshot = self._refuse(cached, valuation)
            from_cache = True
            logger.info(f"[CACHE] Snapshot hit for '{query}'")
        else:
            snapshot = await self._resolve(session, query, valuation)
            from_cache = False
            if snapshot.no_comparable_data:
                self.stats["no_comparable_data"] += 1
            else:
                self.cache.set(query, snapshot)

        snapshot = self._with_valuation(snapshot, valuation)

        if not session.is_current(token):
            self.stats["stale_discarded"] += 1
            logger.info(f"[ANALYZE] Discarding stale result for '{query}' (token {token})")
            return AnalysisOutcome(token=token, stale=True)

        session.last_snapshot = snapshot
        return AnalysisOutcome(token=token, snapshot=snapshot, from_cache=from_cache)

    async def _resolve(self, session: CatalogSession, query: str, valuation: Optional[float]) -> MarketSnapshot:
        context = self._context(session)
        historical_res, live_res = await self.resolver.resolve_both(query, context)

        item = session.item
        historical = summarize_historical(
            historical_res.listings,
            historical_res.total_matches,
            artist=item.artist if item else None,
            object_type=context.object_type,
        )
        live = summarize_live(live_res.listings, live_res.total_matches)

        snapshot = self.insights.build_snapshot(
            query,
            historical,
            live,
            valuation,
            historical_res.attempts + live_res.attempts,
        )
        snapshot.historical_query = historical_res.query if historical_res.listings else None
        snapshot.live_query = live_res.query if live_res.listings else None
        snapshot.search_url = get_search_url(snapshot.historical_query or query) if query else None
        return snapshot

    def _refuse(self, cached: MarketSnapshot, valuation: Optional[float]) -> MarketSnapshot:
        """Re-run fusion on cached summaries so the valuation-dependent insights stay current."""
        snapshot = self.insights.build_snapshot(
            cached.query,
            cached.historical,
            cached.live,
            valuation,
            cached.attempts,
        )
        snapshot.historical_query = cached.historical_query
        snapshot.live_query = cached.live_query
        snapshot.search_url = cached.search_url
        return snapshot

    @staticmethod
    def _with_valuation(snapshot: MarketSnapshot, valuation: Optional[float]) -> MarketSnapshot:
        """Copy whose exceptional sales also beat the valuation. Cached snapshots keep the full set."""
        historical = snapshot.historical
        if historical is None or historical.exceptional_sales is None:
            return snapshot
        exceptional = historical.exceptional_sales.for_valuation(valuation)
        return replace(snapshot, historical=replace(historical, exceptional_sales=exceptional))

    def get_stats(self) -> Dict[str, Any]:
        return dict(self.stats)
