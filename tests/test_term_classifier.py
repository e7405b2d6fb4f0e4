"""Unit tests for term classification and query synthesis."""

from agents.base import TermKind
from pipeline.models import Provenance
from pipeline.synthesizer import QuerySynthesizer
from pipeline.term_classifier import candidates_from_oracle, classify_terms, detect_term_kind
from services.oracle import OracleTerm


class TestClassifyTerms:

    def test_watch_item(self):
        classification = classify_terms("armbandsur", "Omega Seamaster stål 1970-tal")
        assert classification.domain == "watch"
        assert classification.object_type == "armbandsur"
        assert [a.text for a in classification.attributes] == ["omega", "stål", "1970-tal"]

    def test_candidates_order_and_no_preselection(self):
        classification = classify_terms("skulptur", "Katt i stengods", artist="Lisa Larson")
        candidates = classification.candidates()
        assert candidates[0].text == "lisa larson"
        assert candidates[0].kind == TermKind.BRAND
        assert candidates[1].text == "skulptur"
        assert candidates[1].kind == TermKind.OBJECT_TYPE
        assert all(c.pre_selected is None for c in candidates)
        assert all(c.provenance == Provenance.SYSTEM for c in candidates)

    def test_candidates_are_unique(self):
        classification = classify_terms("ring", "Ring ring ring")
        texts = [c.text for c in classification.candidates()]
        assert len(texts) == len(set(texts))

    def test_empty_item_does_not_raise(self):
        classification = classify_terms("", "")
        assert classification.domain == "generic"
        assert classification.candidates() == []


class TestDetectTermKind:

    def test_kinds(self):
        assert detect_term_kind("omega") == TermKind.BRAND
        assert detect_term_kind("armbandsur") == TermKind.OBJECT_TYPE
        assert detect_term_kind("guld") == TermKind.MATERIAL
        assert detect_term_kind("safir") == TermKind.GEMSTONE
        assert detect_term_kind("1970") == TermKind.PERIOD
        assert detect_term_kind("1970-tal") == TermKind.PERIOD
        assert detect_term_kind("art deco") == TermKind.PERIOD
        assert detect_term_kind("dansk") == TermKind.COUNTRY
        assert detect_term_kind("5 öre") == TermKind.DENOMINATION
        assert detect_term_kind("sl1200") == TermKind.MODEL
        assert detect_term_kind("seamaster") == TermKind.KEYWORD
        assert detect_term_kind("") == TermKind.KEYWORD

    def test_quotes_ignored(self):
        assert detect_term_kind('"georg jensen"') == TermKind.BRAND


class TestOracleCandidates:

    def test_converts_and_retypes(self):
        candidates = candidates_from_oracle([
            OracleTerm("omega", "brand", True, 0.9),
            OracleTerm("stål", None, False, 0.5),
            OracleTerm("Omega", "brand", True, 0.9),
        ])
        assert [c.text for c in candidates] == ["omega", "stål"]
        assert candidates[0].pre_selected is True
        assert candidates[1].pre_selected is False
        assert candidates[1].kind == TermKind.MATERIAL
        assert all(c.provenance == Provenance.ORACLE for c in candidates)


class TestQuerySynthesizer:

    def test_watch_example(self):
        result = QuerySynthesizer().synthesize("armbandsur", "Omega Seamaster stål 1970-tal")
        assert result.search_terms == "armbandsur omega"
        assert result.confidence == 0.8
        assert result.strategy_tag == "watch_brand"
        assert result.domain == "watch"
        assert [c.text for c in result.candidates] == ["armbandsur", "omega", "stål", "1970-tal"]

    def test_strategy_tag_is_deterministic(self):
        synthesizer = QuerySynthesizer()
        first = synthesizer.synthesize("ring", "Ring 18k vitguld med briljant")
        second = synthesizer.synthesize("ring", "Ring 18k vitguld med briljant")
        assert first.strategy_tag == second.strategy_tag == "jewelry_gold"

    def test_to_dict(self):
        data = QuerySynthesizer().synthesize("armbandsur", "Omega").to_dict()
        assert data["searchTerms"] == "armbandsur omega"
        assert data["termCount"] == 2
