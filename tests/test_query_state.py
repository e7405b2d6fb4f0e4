"""Unit tests for QueryState selection bookkeeping."""

import threading

import pytest

from agents.base import TermKind, quote_term
from pipeline.models import CandidateTerm, Provenance
from pipeline.query_state import QueryState, QueryStateListener, period_year, tokenize_query


class RecordingListener(QueryStateListener):
    def __init__(self):
        self.changes = []

    def on_query_change(self, change):
        self.changes.append(change)


class FailingListener(QueryStateListener):
    def on_query_change(self, change):
        raise RuntimeError("listener blew up")


WATCH_CANDIDATES = [
    CandidateTerm("armbandsur", TermKind.OBJECT_TYPE),
    CandidateTerm("omega", TermKind.BRAND, confidence=0.8),
    CandidateTerm("stål", TermKind.MATERIAL, confidence=0.65),
    CandidateTerm("1970-tal", TermKind.PERIOD, confidence=0.6),
]


@pytest.fixture
def state():
    query_state = QueryState.new(full_control=False)
    query_state.initialize("armbandsur omega", WATCH_CANDIDATES, "system")
    return query_state


class TestInitialize:

    def test_canonical_order_puts_brand_first(self, state):
        assert state.get_current_query() == "omega armbandsur"
        assert [t.text for t in state.core_terms] == ["armbandsur", "omega"]

    def test_unselected_candidates_are_available(self, state):
        texts = [t.text for t in state.available_terms]
        assert texts == ["armbandsur", "omega", "stål", "1970-tal"]
        assert not state.is_selected("stål")

    def test_preselection_overrides_query_tokens(self):
        query_state = QueryState.new()
        query_state.initialize(
            "ring guld diamant",
            [
                CandidateTerm("guld", TermKind.MATERIAL, pre_selected=True, provenance=Provenance.ORACLE),
                CandidateTerm("diamant", TermKind.GEMSTONE, pre_selected=False, provenance=Provenance.ORACLE),
            ],
            "oracle",
        )
        # "ring" is core vocabulary so it is kept even though the oracle did not pick it
        assert query_state.get_current_query() == "ring guld"
        assert not query_state.is_selected("diamant")

    def test_reinitialize_replaces_terms(self, state):
        state.initialize("vas", [], "system")
        assert state.get_current_query() == "vas"
        assert state.get_term("omega") is None


class TestSelection:

    def test_select_orders_by_priority(self, state):
        assert state.select_term("1970-tal")
        assert state.select_term("stål")
        assert state.get_current_query() == "omega armbandsur stål 1970-tal"

    def test_unknown_term_added_as_user_keyword(self, state):
        state.select_term("seamaster")
        term = state.get_term("seamaster")
        assert term.kind == TermKind.KEYWORD
        assert term.provenance == Provenance.USER
        assert state.get_current_query() == "omega armbandsur seamaster"

    def test_multi_word_term_is_quoted(self, state):
        state.select_term("Art Deco")
        assert state.get_current_query() == 'omega armbandsur "art deco"'
        assert state.get_term("art deco").kind == TermKind.PERIOD

    def test_empty_term_rejected(self, state):
        assert state.select_term("  ") is False

    def test_deselect_unknown_returns_false(self, state):
        assert state.deselect_term("rolex") is False

    def test_period_equivalence(self, state):
        state.select_term("1970-tal")
        assert state.is_selected("1970")
        assert state.is_selected("1970-TAL")
        # Selecting the bare year does not add a second period term
        state.select_term("1970")
        assert state.get_current_query() == "omega armbandsur 1970-tal"

    def test_model_number_is_not_a_period(self, state):
        state.select_term("1200")
        assert not state.is_selected("sl1200")

    def test_canonical_query_always_matches_selection(self, state):
        for action, text in [("select", "stål"), ("select", "guld"), ("deselect", "stål"),
                             ("select", "1970-tal"), ("deselect", "guld")]:
            getattr(state, f"{action}_term")(text)
            expected = " ".join(t.text for t in state.selected_terms)
            assert state.get_current_query() == expected
        assert state.get_current_query() == "omega armbandsur 1970-tal"


class TestCoreProtection:

    def test_core_term_cannot_be_deselected(self, state):
        assert state.deselect_term("omega") is False
        assert state.get_current_query() == "omega armbandsur"

    def test_full_control_allows_deselecting_core(self, state):
        state.set_full_control(True)
        assert state.deselect_term("omega") is True
        assert state.get_current_query() == "armbandsur"

    def test_leaving_full_control_restores_core(self, state):
        state.set_full_control(True)
        state.deselect_term("omega")
        state.set_full_control(False)
        assert state.get_current_query() == "omega armbandsur"

    def test_non_core_term_always_deselectable(self, state):
        state.select_term("stål")
        assert state.deselect_term("stål") is True

    def test_candidate_flagged_core_is_protected(self):
        query_state = QueryState.new(full_control=False)
        query_state.initialize("skulptur", [CandidateTerm("bertil vallien", TermKind.BRAND, is_core=True)])
        assert query_state.get_current_query() == '"bertil vallien" skulptur'
        assert query_state.deselect_term("bertil vallien") is False
        query_state.set_full_control(True)
        assert query_state.deselect_term("bertil vallien") is True
        assert query_state.get_current_query() == "skulptur"


class TestListeners:

    def test_listener_receives_before_and_after(self, state):
        listener = RecordingListener()
        state.add_listener(listener)
        state.select_term("stål", source="user")
        change = listener.changes[-1]
        assert change.event == "select"
        assert change.source == "user"
        assert change.before == "omega armbandsur"
        assert change.after == "omega armbandsur stål"
        assert state.last_mutation_source == "user"

    def test_failing_listener_does_not_block_others(self, state):
        recording = RecordingListener()
        state.add_listener(FailingListener())
        state.add_listener(recording)
        state.select_term("stål")
        assert state.get_current_query() == "omega armbandsur stål"
        assert len(recording.changes) == 1

    def test_removed_listener_not_notified(self, state):
        listener = RecordingListener()
        state.add_listener(listener)
        state.remove_listener(listener)
        state.select_term("stål")
        assert listener.changes == []

    def test_reset(self, state):
        listener = RecordingListener()
        state.add_listener(listener)
        state.reset(source="user")
        assert state.get_current_query() == ""
        assert state.available_terms == []
        assert listener.changes[-1].event == "reset"
        assert listener.changes[-1].before == "omega armbandsur"


class TestConcurrentMutation:

    def test_interleaved_edits_form_one_consistent_history(self, state):
        listener = RecordingListener()
        state.add_listener(listener)
        words = ["katt", "hund", "fisk", "häst", "uggla", "räv"]
        barrier = threading.Barrier(len(words))

        def edit(word):
            barrier.wait()
            for i in range(50):
                state.select_term(word)
                state.deselect_term(words[(words.index(word) + i) % len(words)])

        threads = [threading.Thread(target=edit, args=(w,)) for w in words]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        changes = listener.changes
        # every select notifies, a deselect of an unselected term does not
        assert len(changes) >= len(words) * 50
        assert changes[0].before == "omega armbandsur"
        for previous, change in zip(changes, changes[1:]):
            assert change.before == previous.after
        expected = " ".join(quote_term(t.text) for t in state.selected_terms)
        assert state.get_current_query() == expected
        assert changes[-1].after == expected
        assert state.is_selected("omega")


class TestHelpers:

    def test_tokenize_keeps_quoted_phrases(self):
        assert tokenize_query('"georg jensen" brosch') == ["georg jensen", "brosch"]

    def test_period_year(self):
        assert period_year("1970-tal") == "1970"
        assert period_year("1970") == "1970"
        assert period_year("sl1200") is None

    def test_to_dict(self, state):
        data = state.to_dict()
        assert data["canonicalQuery"] == "omega armbandsur"
        assert data["coreTerms"] == ["armbandsur", "omega"]
        assert data["fullControl"] is False
