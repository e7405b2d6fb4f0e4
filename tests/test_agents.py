"""Unit tests for domain detection and per-agent synthesis."""

from agents import detect_domain, get_agent
from agents.base import TermKind, count_terms, quote_term


class TestDomainDetection:

    def test_watch_wins_over_jewelry_for_wristwatch(self):
        domain, reasons = detect_domain("armbandsur", "Omega Seamaster stål 1970-tal")
        assert domain == "watch"
        assert any("jewelry: excluded" in r for r in reasons)

    def test_ring_is_jewelry(self):
        domain, _ = detect_domain("ring", "Ring 18k vitguld med briljant")
        assert domain == "jewelry"

    def test_coin_from_compound_word(self):
        domain, _ = detect_domain("", "Silvermynt 2 kronor 1876 Sverige")
        assert domain == "coin"

    def test_unknown_item_is_generic(self):
        domain, reasons = detect_domain("", "Vacker gammal lykta")
        assert domain == "generic"
        assert reasons[-1] == "generic: fallback"

    def test_unknown_domain_falls_back_to_generic_agent(self):
        assert get_agent("spaceships").domain_name == "generic"
        assert get_agent("watch") is get_agent("watch")


class TestWatchAgent:

    def test_brand_tier(self):
        synthesis = get_agent("watch").synthesize("armbandsur", "Omega Seamaster stål 1970-tal")
        assert synthesis.search_terms == "armbandsur omega"
        assert synthesis.confidence == 0.8
        assert synthesis.strategy_tag == "watch_brand"
        assert synthesis.term_count == 2

    def test_extracts_material_and_decade(self):
        matches = get_agent("watch").extract_all("Omega Seamaster stål 1970-tal")
        by_kind = {m.kind: m.text for m in matches}
        assert by_kind[TermKind.BRAND] == "omega"
        assert by_kind[TermKind.MATERIAL] == "stål"
        assert by_kind[TermKind.PERIOD] == "1970-tal"

    def test_material_alias_and_default_object_type(self):
        synthesis = get_agent("watch").synthesize("", "Fickur i 18k guld")
        assert synthesis.search_terms == "fickur guld"
        assert synthesis.strategy_tag == "watch_material"
        assert synthesis.confidence == 0.7

    def test_multi_word_brand_is_quoted(self):
        synthesis = get_agent("watch").synthesize("armbandsur", "Patek Philippe Calatrava")
        assert synthesis.search_terms == 'armbandsur "patek philippe"'


class TestOtherAgents:

    def test_jewelry_gold_tier(self):
        synthesis = get_agent("jewelry").synthesize("ring", "Ring 18k vitguld med briljant")
        assert synthesis.search_terms == "ring guld"
        assert synthesis.strategy_tag == "jewelry_gold"
        assert synthesis.confidence == 0.8
        gemstones = [a for a in synthesis.attributes if a.kind == TermKind.GEMSTONE]
        assert gemstones[0].text == "diamant"

    def test_coin_silver_tier(self):
        synthesis = get_agent("coin").synthesize("", "Silvermynt 2 kronor 1876 Sverige")
        assert synthesis.search_terms == "mynt silver"
        assert synthesis.strategy_tag == "coin_silver"
        texts = [a.text for a in synthesis.attributes]
        assert "2 kronor" in texts
        assert "sverige" in texts
        assert "1876" in texts

    def test_audio_object_type_normalized(self):
        synthesis = get_agent("audio").synthesize("Förstärkare", "Marantz 2270 receiver")
        assert synthesis.search_terms == "förstärkare marantz"
        assert synthesis.strategy_tag == "audio_brand"

    def test_stamp_without_attributes_uses_basic_confidence(self):
        synthesis = get_agent("stamp").synthesize("frimärken", "Frimärksalbum")
        assert synthesis.search_terms == "frimärken"
        assert synthesis.strategy_tag == "stamp_basic"
        assert synthesis.confidence == 0.7


class TestGenericAgent:

    def test_artist_plus_object_type(self):
        synthesis = get_agent("generic").synthesize("skulptur", "Katt i stengods", artist="Lisa Larson")
        assert synthesis.search_terms == '"lisa larson" skulptur'
        assert synthesis.strategy_tag == "generic_artist"
        assert synthesis.confidence == 0.7

    def test_object_type_only(self):
        synthesis = get_agent("generic").synthesize("", "Stor vas i glas")
        assert synthesis.search_terms == "vas"
        assert synthesis.strategy_tag == "generic_object_type"

    def test_title_words_fallback(self):
        synthesis = get_agent("generic").synthesize("", "Vacker gammal lykta")
        assert synthesis.search_terms == "vacker gammal lykta"
        assert synthesis.strategy_tag == "generic_title"
        assert synthesis.confidence == 0.5


class TestHelpers:

    def test_quote_term(self):
        assert quote_term("omega") == "omega"
        assert quote_term("art deco") == '"art deco"'
        assert quote_term('"art deco"') == '"art deco"'

    def test_count_terms_is_quote_aware(self):
        assert count_terms('"georg jensen" brosch silver') == 3
