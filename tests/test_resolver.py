"""Unit tests for the backoff ladder."""

import asyncio

import pytest

from config import ResolverConfig
from conftest import live, sold
from pipeline.models import HISTORICAL, LIVE, STAGE_EMERGENCY, STAGE_INITIAL, STAGE_RELAXED
from pipeline.resolver import (
    SCORE_BRAND,
    SCORE_MATERIAL,
    SCORE_OBJECT_TYPE,
    SCORE_OTHER,
    SCORE_PERIOD,
    SCORE_QUOTED,
    MarketDataResolver,
    ResolutionContext,
    drop_lowest,
    emergency_query,
    term_priority,
)
from services.exceptions import ResolutionFailed


class TestTermPriority:

    def test_scores(self):
        assert term_priority("omega") == SCORE_BRAND
        assert term_priority("armbandsur") == SCORE_OBJECT_TYPE
        assert term_priority("guldring") == SCORE_OBJECT_TYPE
        assert term_priority('"blå fågel"') == SCORE_QUOTED
        assert term_priority("silver") == SCORE_MATERIAL
        assert term_priority("1970-tal") == SCORE_PERIOD
        assert term_priority("1890") == SCORE_PERIOD
        assert term_priority("seamaster") == SCORE_OTHER

    def test_context_artist_and_brands(self):
        context = ResolutionContext(artist="Lisa Larson", brands={"gustavsberg"})
        assert term_priority('"lisa larson"', context) == SCORE_BRAND
        assert term_priority("gustavsberg", context) == SCORE_BRAND

    def test_drop_lowest_removes_lowest_score(self):
        tokens, dropped = drop_lowest(["omega", "seamaster", "stål"])
        assert dropped == "seamaster"
        assert tokens == ["omega", "stål"]

    def test_drop_lowest_removes_latest_on_tie(self):
        tokens, dropped = drop_lowest(["omega", "seamaster", "rund"])
        assert dropped == "rund"
        assert tokens == ["omega", "seamaster"]

    def test_tie_rule_shared_with_emergency_query(self):
        tokens = ["omega", "seamaster", "rund", "liten"]
        kept, _ = drop_lowest(tokens)
        assert emergency_query(tokens, max_terms=3) == " ".join(kept)

    def test_emergency_keeps_top_terms_in_original_order(self):
        query = emergency_query(['"art deco"', "seamaster", "omega", "1970-tal"], max_terms=3)
        assert query == "art deco omega 1970-tal"


class TestResolve:

    @pytest.mark.asyncio
    async def test_first_attempt_hit(self, resolver, fake_market):
        fake_market.add("omega armbandsur", HISTORICAL, [sold(5000)], total=42)
        resolution = await resolver.resolve("omega armbandsur", HISTORICAL)
        assert resolution.query == "omega armbandsur"
        assert resolution.total_matches == 42
        assert len(resolution.attempts) == 1
        assert resolution.attempts[0].stage == STAGE_INITIAL
        assert not resolution.relaxed

    @pytest.mark.asyncio
    async def test_drops_lowest_priority_term_first(self, resolver, fake_market):
        fake_market.add("omega", HISTORICAL, [sold(5000)])
        resolution = await resolver.resolve("omega armbandsur", HISTORICAL)
        assert fake_market.queries(HISTORICAL) == ["omega armbandsur", "omega"]
        assert resolution.query == "omega"
        assert resolution.attempts[1].stage == STAGE_RELAXED
        assert resolution.relaxed

    @pytest.mark.asyncio
    async def test_ladder_bounded_and_emergency_skipped_when_already_tried(self, resolver, fake_market):
        resolution = await resolver.resolve("omega armbandsur stål 1970-tal seamaster", HISTORICAL)
        assert fake_market.queries(HISTORICAL) == [
            "omega armbandsur stål 1970-tal seamaster",
            "omega armbandsur 1970-tal seamaster",
            "omega armbandsur 1970-tal",
            "omega armbandsur",
        ]
        assert resolution.no_comparable_data
        assert resolution.query == "omega armbandsur stål 1970-tal seamaster"
        assert all(not a.succeeded for a in resolution.attempts)

    @pytest.mark.asyncio
    async def test_each_relaxation_is_strictly_shorter(self, resolver, fake_market):
        resolution = await resolver.resolve("omega armbandsur stål 1970-tal seamaster", LIVE)
        counts = [len(a.query.split()) for a in resolution.attempts if a.stage != STAGE_EMERGENCY]
        assert all(later < earlier for earlier, later in zip(counts, counts[1:]))
        assert len(resolution.attempts) <= 5

    @pytest.mark.asyncio
    async def test_emergency_attempt_unquotes(self, resolver, fake_market):
        fake_market.add("lisa larson katt", HISTORICAL, [sold(800, "Lisa Larson katt")])
        context = ResolutionContext(artist="lisa larson")
        resolution = await resolver.resolve('"lisa larson" katt', HISTORICAL, context)
        assert fake_market.queries(HISTORICAL) == ['"lisa larson" katt', '"lisa larson"', "lisa larson katt"]
        assert resolution.attempts[-1].stage == STAGE_EMERGENCY
        assert resolution.query == "lisa larson katt"
        assert len(resolution.listings) == 1

    @pytest.mark.asyncio
    async def test_emergency_can_be_disabled(self, fake_market):
        resolver = MarketDataResolver(search=fake_market, config=ResolverConfig(emergency_enabled=False))
        await resolver.resolve('"lisa larson" katt', HISTORICAL, ResolutionContext(artist="lisa larson"))
        assert len(fake_market.calls) == 2

    @pytest.mark.asyncio
    async def test_empty_query_makes_no_calls(self, resolver, fake_market):
        resolution = await resolver.resolve("   ", HISTORICAL)
        assert fake_market.calls == []
        assert resolution.no_comparable_data

    @pytest.mark.asyncio
    async def test_service_failure_propagates_without_backoff(self, resolver, fake_market):
        fake_market.add("omega armbandsur", HISTORICAL, ResolutionFailed("omega armbandsur", HISTORICAL))
        with pytest.raises(ResolutionFailed):
            await resolver.resolve("omega armbandsur", HISTORICAL)
        assert fake_market.calls == [("omega armbandsur", HISTORICAL)]


class TestResolveBoth:

    @pytest.mark.asyncio
    async def test_scopes_resolved_independently(self, resolver, fake_market):
        fake_market.add("omega armbandsur", HISTORICAL, [sold(5000)])
        fake_market.add("omega", LIVE, [live(4000)])
        historical, live_res = await resolver.resolve_both("omega armbandsur")
        assert historical.scope == HISTORICAL
        assert historical.query == "omega armbandsur"
        assert live_res.scope == LIVE
        assert live_res.query == "omega"

    @pytest.mark.asyncio
    async def test_failure_in_one_scope_propagates(self, resolver, fake_market):
        fake_market.add("omega", LIVE, ResolutionFailed("omega", LIVE, status_code=503))
        with pytest.raises(ResolutionFailed) as exc_info:
            await resolver.resolve_both("omega")
        assert exc_info.value.details["scope"] == LIVE

    @pytest.mark.asyncio
    async def test_failure_cancels_the_other_ladder(self, resolver, fake_market):
        cancelled = []

        async def slow_live(query, scope):
            if scope == LIVE:
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    cancelled.append(query)
                    raise

        fake_market.hook = slow_live
        fake_market.add("omega", HISTORICAL, ResolutionFailed("omega", HISTORICAL, status_code=503))
        with pytest.raises(ResolutionFailed) as exc_info:
            await resolver.resolve_both("omega")
        await asyncio.sleep(0.01)

        assert exc_info.value.details["scope"] == HISTORICAL
        assert cancelled == ["omega"]
        assert fake_market.queries(LIVE) == ["omega"]

    @pytest.mark.asyncio
    async def test_both_scopes_failing_raises_the_first(self, resolver, fake_market):
        fake_market.add("omega", HISTORICAL, ResolutionFailed("omega", HISTORICAL))
        fake_market.add("omega", LIVE, ResolutionFailed("omega", LIVE))
        with pytest.raises(ResolutionFailed) as exc_info:
            await resolver.resolve_both("omega")
        assert exc_info.value.details["scope"] == HISTORICAL
