"""
Market Data Resolver - progressive relaxation over an opaque keyword index.

Zero hits is a normal answer from the marketplace, so an over-specific
query is relaxed one term at a time:

    1. Try the full query.
    2. Score every remaining term, drop the lowest (earliest on ties), retry.
    3. Stop on the first hit, when one term is left, or after max_attempts.
    4. One emergency attempt: quoting removed, top terms by score only,
       skipped if that exact query string was already tried.

This is a relevance backoff, not a retry. ResolutionFailed from the
marketplace propagates immediately and never enters the ladder.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from agents.vocabulary import (
    ALL_BRANDS,
    BROAD_PERIODS,
    DISTINCTIVE_MATERIALS,
    OBJECT_TYPE_NOUNS,
    PRECIOUS_METAL_ALIASES,
)
from config import RESOLVER, ResolverConfig
from pipeline.models import (
    HISTORICAL,
    LIVE,
    STAGE_EMERGENCY,
    STAGE_INITIAL,
    STAGE_RELAXED,
    Resolution,
    SearchAttempt,
)
from services import marketplace
from services.marketplace import SearchResult

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r'"[^"]+"|\S+')
_YEAR_RE = re.compile(r'^\d{4}$')
_DECADE_RE = re.compile(r'\d{2,4}[-\s]?tal(et)?$')

# Relaxation scores, higher survives longer
SCORE_BRAND = 100
SCORE_OBJECT_TYPE = 90
SCORE_QUOTED = 85
SCORE_MATERIAL = 70
SCORE_PERIOD = 60
SCORE_OTHER = 40

_BRANDS = frozenset(ALL_BRANDS)
_MATERIALS = frozenset(DISTINCTIVE_MATERIALS) | frozenset(PRECIOUS_METAL_ALIASES)
_PERIODS = frozenset(BROAD_PERIODS)

SearchFn = Callable[[str, str], Awaitable[SearchResult]]


@dataclass
class ResolutionContext:
    """What the caller knows about the item, used to score terms"""
    artist: Optional[str] = None
    brands: Set[str] = field(default_factory=set)
    object_type: Optional[str] = None

    def is_brand(self, bare: str) -> bool:
        if self.artist and bare == self.artist.lower():
            return True
        return bare in _BRANDS or bare in self.brands


def tokenize(query: str) -> List[str]:
    """Quote-aware tokens, quotes kept."""
    return _TOKEN_RE.findall(query or "")


def _is_object_type(bare: str, context: ResolutionContext) -> bool:
    if context.object_type and bare == context.object_type.lower():
        return True
    if bare in OBJECT_TYPE_NOUNS:
        return True
    # Swedish compounds: "guldring", "bordslampa"
    return any(len(noun) >= 4 and bare.endswith(noun) for noun in OBJECT_TYPE_NOUNS)


def term_priority(token: str, context: Optional[ResolutionContext] = None) -> int:
    """Relaxation score for one query token."""
    context = context or ResolutionContext()
    quoted = token.startswith('"') and token.endswith('"') and len(token) > 1
    bare = token.strip('"').strip().lower()

    if context.is_brand(bare):
        return SCORE_BRAND
    if _is_object_type(bare, context):
        return SCORE_OBJECT_TYPE
    if quoted:
        return SCORE_QUOTED
    if bare in _MATERIALS:
        return SCORE_MATERIAL
    if _YEAR_RE.match(bare) or _DECADE_RE.search(bare) or bare in _PERIODS:
        return SCORE_PERIOD
    return SCORE_OTHER


def drop_lowest(tokens: List[str], context: Optional[ResolutionContext] = None) -> Tuple[List[str], str]:
    """Remove the single lowest-scoring token. On ties the later token goes, as in emergency_query."""
    scores = [term_priority(t, context) for t in tokens]
    index = min(range(len(tokens)), key=lambda i: (scores[i], -i))
    return tokens[:index] + tokens[index + 1:], tokens[index]


def emergency_query(tokens: List[str], context: Optional[ResolutionContext] = None, max_terms: int = 3) -> str:
    """Unquoted query of the best-scoring tokens, in their original order. Earlier tokens win ties."""
    ranked = sorted(range(len(tokens)), key=lambda i: (-term_priority(tokens[i], context), i))
    keep = sorted(ranked[:max_terms])
    return " ".join(tokens[i].strip('"') for i in keep)


class MarketDataResolver:
    """Runs backoff ladders against the marketplace search capability"""

    def __init__(self, search: Optional[SearchFn] = None, config: ResolverConfig = RESOLVER):
        self._search = search
        self.config = config

    async def _run_search(self, query: str, scope: str) -> SearchResult:
        search = self._search or marketplace.search_listings
        return await search(query, scope)

    async def resolve(
        self,
        query: str,
        scope: str,
        context: Optional[ResolutionContext] = None,
    ) -> Resolution:
        """One backoff ladder for one scope. Raises ResolutionFailed on service errors."""
        tokens = tokenize(query)
        attempts: List[SearchAttempt] = []
        if not tokens:
            logger.info(f"[RESOLVER] {scope}: empty query, nothing to search")
            return Resolution(scope=scope, query=query, attempts=attempts)

        tried = set()
        current = tokens
        stage = STAGE_INITIAL

        while True:
            attempt_query = " ".join(current)
            result = await self._run_search(attempt_query, scope)
            found = len(result.listings)
            attempts.append(SearchAttempt(attempt_query, scope, found, found > 0, stage))
            tried.add(attempt_query)

            if found:
                if stage != STAGE_INITIAL:
                    logger.info(f"[RESOLVER] {scope}: relaxed to '{attempt_query}' ({found} hits)")
                return Resolution(scope, attempt_query, result.listings, attempts, result.total_entries)

            if len(attempts) >= self.config.max_attempts or len(current) <= 1:
                break

            current, dropped = drop_lowest(current, context)
            stage = STAGE_RELAXED
            logger.debug(f"[RESOLVER] {scope}: 0 hits, dropping '{dropped}'")

        if self.config.emergency_enabled:
            loose = emergency_query(tokens, context, self.config.emergency_max_terms)
            if loose and loose not in tried:
                result = await self._run_search(loose, scope)
                found = len(result.listings)
                attempts.append(SearchAttempt(loose, scope, found, found > 0, STAGE_EMERGENCY))
                if found:
                    logger.info(f"[RESOLVER] {scope}: emergency query '{loose}' found {found}")
                    return Resolution(scope, loose, result.listings, attempts, result.total_entries)

        logger.info(f"[RESOLVER] {scope}: no comparable data for '{query}' after {len(attempts)} attempts")
        return Resolution(scope=scope, query=query, attempts=attempts)

    async def resolve_both(
        self,
        query: str,
        context: Optional[ResolutionContext] = None,
    ) -> Tuple[Resolution, Resolution]:
        """
        Historical and live ladders run concurrently. The first ResolutionFailed
        propagates and the other ladder is cancelled.
        """
        tasks = [
            asyncio.ensure_future(self.resolve(query, HISTORICAL, context)),
            asyncio.ensure_future(self.resolve(query, LIVE, context)),
        ]
        try:
            historical, live = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise
        return historical, live
