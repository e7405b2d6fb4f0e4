"""
Term Classifier

Lexical, rule-based typing of free item text. Picks the most specific
domain, runs that domain's extractor list and returns every typed attribute
in extraction order so the query state can offer unselected alternatives.

Nothing here raises on odd input: an item with no recognizable vocabulary
simply classifies as generic with few or no attributes.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from agents import detect_domain, get_agent
from agents.base import AttributeMatch, TermKind
from agents.vocabulary import (
    ALL_BRANDS,
    BROAD_PERIODS,
    COIN_MATERIALS,
    COUNTRIES,
    DECADE_PATTERN,
    DENOMINATION_PATTERN,
    DISTINCTIVE_MATERIALS,
    GEMSTONES,
    INSTRUMENT_MATERIALS,
    JEWELRY_MATERIALS,
    MODEL_PATTERN,
    OBJECT_TYPE_NOUNS,
    PRECIOUS_METAL_ALIASES,
    WATCH_MATERIALS,
    YEAR_PATTERN,
)
from pipeline.models import CandidateTerm, Provenance

logger = logging.getLogger(__name__)

_ALL_MATERIALS = frozenset(
    JEWELRY_MATERIALS + WATCH_MATERIALS + INSTRUMENT_MATERIALS + COIN_MATERIALS
    + DISTINCTIVE_MATERIALS + list(PRECIOUS_METAL_ALIASES)
)
_BRANDS = frozenset(ALL_BRANDS)
_OBJECT_TYPES = frozenset(OBJECT_TYPE_NOUNS)
_GEMSTONES = frozenset(GEMSTONES)
_COUNTRIES = frozenset(COUNTRIES)
_PERIODS = frozenset(BROAD_PERIODS)

_YEAR_RE = re.compile(rf'^{YEAR_PATTERN}$', re.IGNORECASE)
_DECADE_RE = re.compile(rf'^{DECADE_PATTERN}$', re.IGNORECASE)
_DENOMINATION_RE = re.compile(rf'^{DENOMINATION_PATTERN}$', re.IGNORECASE)
_MODEL_RE = re.compile(rf'^{MODEL_PATTERN}$', re.IGNORECASE)


@dataclass
class Classification:
    """Domain plus typed attributes for one item"""
    domain: str
    object_type: str
    attributes: List[AttributeMatch] = field(default_factory=list)
    artist: Optional[str] = None
    reasons: List[str] = field(default_factory=list)

    def candidates(self) -> List[CandidateTerm]:
        """
        Artist, object type, then attributes in extraction order. No
        pre-selection. The artist is a core term like a known brand.
        """
        seen = set()
        result = []

        def add(text: str, kind: TermKind, confidence: Optional[float] = None, is_core: bool = False):
            key = text.lower()
            if not text or key in seen:
                return
            seen.add(key)
            result.append(CandidateTerm(
                text=text,
                kind=kind,
                confidence=confidence,
                provenance=Provenance.SYSTEM,
                is_core=is_core,
            ))

        if self.artist:
            add(self.artist, TermKind.BRAND, is_core=True)
        if self.object_type:
            add(self.object_type, TermKind.OBJECT_TYPE)
        for attribute in self.attributes:
            add(attribute.text, attribute.kind, attribute.confidence)
        return result

    def to_dict(self) -> Dict:
        return {
            "domain": self.domain,
            "objectType": self.object_type,
            "artist": self.artist,
            "attributes": [
                {"text": a.text, "kind": a.kind.value, "confidence": a.confidence, "tier": a.tier}
                for a in self.attributes
            ],
            "reasons": self.reasons,
        }


def classify_terms(
    object_type: str,
    title: str,
    description: str = "",
    artist: Optional[str] = None,
) -> Classification:
    """Detect the domain and extract every typed attribute from the item text."""
    domain, reasons = detect_domain(object_type, title, description)
    agent = get_agent(domain)
    text = f"{title or ''} {description or ''}".lower()

    classification = Classification(
        domain=domain,
        object_type=agent.object_type_for(object_type, f"{object_type or ''} {text}".lower()),
        attributes=agent.extract_all(text),
        artist=(artist or "").strip().lower() or None,
        reasons=reasons,
    )
    logger.debug(
        f"[CLASSIFY] {domain}: object_type='{classification.object_type}', "
        f"{len(classification.attributes)} attributes"
    )
    return classification


def detect_term_kind(text: str) -> TermKind:
    """Type a single user- or oracle-supplied term."""
    term = (text or "").strip().strip('"').lower()
    if not term:
        return TermKind.KEYWORD

    if _YEAR_RE.match(term) or _DECADE_RE.match(term) or term in _PERIODS:
        return TermKind.PERIOD
    if term in _BRANDS:
        return TermKind.BRAND
    if term in _OBJECT_TYPES:
        return TermKind.OBJECT_TYPE
    if term in _ALL_MATERIALS:
        return TermKind.MATERIAL
    if term in _GEMSTONES:
        return TermKind.GEMSTONE
    if term in _COUNTRIES:
        return TermKind.COUNTRY
    if _DENOMINATION_RE.match(term):
        return TermKind.DENOMINATION
    if _MODEL_RE.match(term):
        return TermKind.MODEL
    return TermKind.KEYWORD


def candidates_from_oracle(oracle_terms) -> List[CandidateTerm]:
    """
    Convert parsed oracle terms into candidates that carry pre-selection.
    Unknown or missing kinds are re-typed lexically.
    """
    kinds = {k.value: k for k in TermKind}
    candidates = []
    seen = set()
    for term in oracle_terms:
        text = term.term.strip().strip('"')
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        candidates.append(CandidateTerm(
            text=text,
            kind=kinds.get(term.kind) or detect_term_kind(text),
            pre_selected=bool(term.pre_selected),
            confidence=term.confidence,
            provenance=Provenance.ORACLE,
        ))
    return candidates
