"""
Query State - the single authoritative search query for a cataloging session.

The canonical query is never edited directly. It is always rebuilt from the
selected terms: core terms first, then ascending priority score, then
extraction order. Core terms (major brands, primary object-type nouns found
in the seed query, plus candidates flagged core such as the item's artist)
stay selected unless the session is in user full-control mode.

One QueryState per session. All mutations take the session's re-entrant
lock and notify listeners synchronously before returning.
"""

import logging
import re
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from agents.base import TermKind, quote_term
from agents.vocabulary import CORE_VOCABULARY
from config import QUERY_FULL_CONTROL_DEFAULT
from pipeline.models import CandidateTerm, Provenance, QueryChange, Term, priority_for
from pipeline.term_classifier import detect_term_kind

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r'"[^"]+"|\S+')
_YEAR_RE = re.compile(r'(?<!\w)(\d{4})(?!\d)')


def tokenize_query(query: str) -> List[str]:
    """Quote-aware tokens with the quotes stripped."""
    return [t.strip('"').strip() for t in _TOKEN_RE.findall(query or "") if t.strip('"').strip()]


def period_year(text: str) -> Optional[str]:
    match = _YEAR_RE.search(text or "")
    return match.group(1) if match else None


def _provenance_for(source: str) -> Provenance:
    try:
        return Provenance(source)
    except ValueError:
        return Provenance.SYSTEM


class QueryStateListener(ABC):
    """Observer for canonical query changes"""

    @abstractmethod
    def on_query_change(self, change: QueryChange) -> None:
        ...


class QueryState:
    """Selection bookkeeping plus the canonical query for one session"""

    def __init__(self, full_control: Optional[bool] = None):
        self._lock = threading.RLock()
        self._terms: Dict[str, Term] = {}
        self._listeners: List[QueryStateListener] = []
        self._next_order = 0
        self.canonical_query = ""
        self.last_mutation_source: Optional[str] = None
        self.full_control = QUERY_FULL_CONTROL_DEFAULT if full_control is None else full_control

    @classmethod
    def new(cls, full_control: Optional[bool] = None) -> "QueryState":
        return cls(full_control=full_control)

    # ------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------

    def add_listener(self, listener: QueryStateListener):
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: QueryStateListener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, change: QueryChange):
        for listener in list(self._listeners):
            try:
                listener.on_query_change(change)
            except Exception as e:
                logger.error(
                    f"[QUERY] Listener {type(listener).__name__} failed on {change.event}: {e}",
                    exc_info=True,
                )

    # ------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------

    @property
    def available_terms(self) -> List[Term]:
        with self._lock:
            return sorted(self._terms.values(), key=lambda t: t.order)

    @property
    def selected_terms(self) -> List[Term]:
        with self._lock:
            return self._ordered(t for t in self._terms.values() if t.is_selected)

    @property
    def core_terms(self) -> List[Term]:
        with self._lock:
            return [t for t in self.available_terms if t.is_core]

    def get_current_query(self) -> str:
        with self._lock:
            return self.canonical_query

    def is_selected(self, text: str) -> bool:
        """Case-insensitive match, with "1970" and "1970-tal" treated as the same selection."""
        with self._lock:
            return self._find(text, selected_only=True) is not None

    def get_term(self, text: str) -> Optional[Term]:
        with self._lock:
            return self._find(text)

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def initialize(
        self,
        query: str,
        candidates: Optional[Iterable[CandidateTerm]] = None,
        source: str = "system",
    ) -> str:
        """
        Seed the session from a query and candidate terms.

        Candidate pre-selection (e.g. from the oracle) wins over the query
        tokens when any candidate carries one.
        """
        candidates = [c for c in (candidates or []) if c.text and c.text.strip('"').strip()]
        with self._lock:
            before = self.canonical_query
            self._terms = {}
            self._next_order = 0

            for candidate in candidates:
                term = self._add_term(
                    candidate.text.strip('"').strip(),
                    candidate.kind,
                    candidate.provenance,
                )
                if candidate.pre_selected:
                    term.is_selected = True
                if candidate.is_core:
                    term.is_core = True
                    term.is_selected = True

            tokens = tokenize_query(query)
            if not any(c.pre_selected is not None for c in candidates):
                for token in tokens:
                    self._find_or_add(token, _provenance_for(source)).is_selected = True

            for token in tokens:
                if token.lower() in CORE_VOCABULARY:
                    term = self._find_or_add(token, _provenance_for(source))
                    term.is_core = True
                    term.is_selected = True

            core = [t.text for t in self._terms.values() if t.is_core]
            logger.info(
                f"[QUERY] Initialized from '{query}' ({source}): "
                f"{len(self._terms)} terms, core={core}"
            )
            return self._rebuild(source, "initialize", before)

    def select_term(self, text: str, source: str = "user", kind: Optional[TermKind] = None) -> bool:
        """Select a term, adding it as a user term if unknown. True if selected afterwards."""
        text = (text or "").strip().strip('"').strip()
        if not text:
            return False
        with self._lock:
            before = self.canonical_query
            term = self._find(text)
            if term is None:
                term = self._add_term(text, kind, _provenance_for(source))
            term.is_selected = True
            self._rebuild(source, "select", before)
            return True

    def deselect_term(self, text: str, source: str = "user") -> bool:
        """
        Deselect a term. Core terms are refused (returns False, no change)
        unless the session is in full-control mode.
        """
        with self._lock:
            term = self._find(text, selected_only=True)
            if term is None:
                return False
            if term.is_core and not self.full_control:
                logger.info(f"[QUERY] Refused to deselect core term '{term.text}'")
                return False
            before = self.canonical_query
            term.is_selected = False
            self._rebuild(source, "deselect", before)
            return True

    def rebuild_query(self, source: str = "system") -> str:
        with self._lock:
            return self._rebuild(source, "rebuild", self.canonical_query)

    def set_full_control(self, enabled: bool, source: str = "user") -> str:
        """Toggle full-control mode. Leaving it re-selects every core term."""
        with self._lock:
            before = self.canonical_query
            self.full_control = bool(enabled)
            if not self.full_control:
                for term in self._terms.values():
                    if term.is_core:
                        term.is_selected = True
            logger.info(f"[QUERY] Full control {'ON' if self.full_control else 'OFF'}")
            return self._rebuild(source, "full_control", before)

    def reset(self, source: str = "system"):
        """Drop all terms. Listeners stay registered."""
        with self._lock:
            before = self.canonical_query
            self._terms = {}
            self._next_order = 0
            self.canonical_query = ""
            self.last_mutation_source = source
            self._notify(QueryChange("reset", source, before, ""))

    # ------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------

    @staticmethod
    def _ordered(terms: Iterable[Term]) -> List[Term]:
        return sorted(terms, key=lambda t: (not t.is_core, t.priority_score, t.order))

    def _rebuild(self, source: str, event: str, before: str) -> str:
        selected = self._ordered(t for t in self._terms.values() if t.is_selected)
        self.canonical_query = " ".join(quote_term(t.text) for t in selected)
        self.last_mutation_source = source
        if before != self.canonical_query:
            logger.info(f"[QUERY] {event} ({source}): '{before}' -> '{self.canonical_query}'")
        self._notify(QueryChange(event, source, before, self.canonical_query))
        return self.canonical_query

    def _find(self, text: str, selected_only: bool = False) -> Optional[Term]:
        key = (text or "").strip().strip('"').strip().lower()
        if not key:
            return None

        term = self._terms.get(key)
        if term is not None and (term.is_selected or not selected_only):
            return term

        year = period_year(key)
        if year is None:
            return None
        for term in self._terms.values():
            if selected_only and not term.is_selected:
                continue
            if period_year(term.key) == year:
                return term
        return None

    def _find_or_add(self, text: str, provenance: Provenance) -> Term:
        return self._find(text) or self._add_term(text, None, provenance)

    def _add_term(self, text: str, kind: Optional[TermKind], provenance: Provenance) -> Term:
        existing = self._find(text)
        if existing is not None:
            return existing
        kind = kind or detect_term_kind(text)
        term = Term(
            text=text.lower(),
            kind=kind,
            priority_score=priority_for(kind),
            provenance=provenance,
            order=self._next_order,
        )
        self._next_order += 1
        self._terms[term.key] = term
        return term

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "canonicalQuery": self.canonical_query,
                "availableTerms": [t.to_dict() for t in self.available_terms],
                "selectedTerms": [t.text for t in self.selected_terms],
                "coreTerms": [t.text for t in self.core_terms],
                "lastMutationSource": self.last_mutation_source,
                "fullControl": self.full_control,
            }
