"""
Base Agent class for all domain agents.

A domain agent is a data table (detection keywords, an ordered extractor
list, per-tier confidences) consumed by the generic classifier logic below.
Each domain module only declares its tables; matching and synthesis live here.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .vocabulary import (
    BROAD_PERIODS,
    COUNTRIES,
    COUNTRY_ALIASES,
    DECADE_PATTERN,
    YEAR_PATTERN,
)

MAX_CONFIDENCE = 0.9


class TermKind(Enum):
    """Kinds of typed search terms"""
    BRAND = "brand"
    MATERIAL = "material"
    GEMSTONE = "gemstone"
    OBJECT_TYPE = "object_type"
    PERIOD = "period"
    COUNTRY = "country"
    DENOMINATION = "denomination"
    MODEL = "model"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class AttributeMatch:
    """One extractor hit: the search text plus the tier it was scored at"""
    kind: TermKind
    text: str
    matched: str
    confidence: float
    tier: str


@dataclass
class Synthesis:
    """Initial search phrase for an item"""
    search_terms: str
    confidence: float
    strategy_tag: str
    term_count: int
    domain: str
    object_type: str = ""
    attribute: Optional[AttributeMatch] = None
    attributes: List[AttributeMatch] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "searchTerms": self.search_terms,
            "confidence": round(self.confidence, 2),
            "strategyTag": self.strategy_tag,
            "termCount": self.term_count,
            "domain": self.domain,
        }


def quote_term(text: str) -> str:
    """Wrap multi-word terms in exact-phrase quotes for the keyword index."""
    text = text.strip()
    if " " in text and not (text.startswith('"') and text.endswith('"')):
        return f'"{text}"'
    return text


def count_terms(query: str) -> int:
    """Count quote-aware terms in a query string."""
    return len(re.findall(r'"[^"]+"|\S+', query))


# ============================================================
# EXTRACTORS
# ============================================================

class Extractor:
    """
    Ordered attribute extractor.

    Returns the first match or None. Confidence is looked up per canonical
    value in `tiers`, falling back to `default_tier`.
    """

    def __init__(
        self,
        kind: TermKind,
        tiers: Optional[Dict[str, Tuple[float, str]]] = None,
        default_tier: Tuple[float, str] = (0.6, "basic"),
        aliases: Optional[Dict[str, str]] = None,
    ):
        self.kind = kind
        self.tiers = tiers or {}
        self.default_tier = default_tier
        self.aliases = aliases or {}

    def find(self, text: str) -> Optional[str]:
        raise NotImplementedError

    def canonical(self, matched: str) -> str:
        return self.aliases.get(matched, matched)

    def extract(self, text: str) -> Optional[AttributeMatch]:
        matched = self.find(text)
        if not matched:
            return None
        value = self.canonical(matched)
        confidence, tier = self.tiers.get(value, self.default_tier)
        return AttributeMatch(
            kind=self.kind,
            text=value,
            matched=matched,
            confidence=confidence,
            tier=tier,
        )


class VocabularyExtractor(Extractor):
    """
    First vocabulary entry (in list order) found in the text.

    boundary="word" requires whole words, "prefix" only requires the entry to
    start a word (so "guld" matches "guldring"), "none" is a plain substring test.
    """

    def __init__(self, kind: TermKind, vocabulary: Sequence[str], boundary: str = "word", **kwargs):
        super().__init__(kind, **kwargs)
        self.vocabulary = list(vocabulary)
        self._patterns = [(entry, self._compile(entry, boundary)) for entry in self.vocabulary]

    @staticmethod
    def _compile(entry: str, boundary: str):
        escaped = re.escape(entry)
        if boundary == "word":
            return re.compile(rf'(?<!\w){escaped}(?!\w)')
        if boundary == "prefix":
            return re.compile(rf'(?<!\w){escaped}')
        return re.compile(escaped)

    def find(self, text: str) -> Optional[str]:
        for entry, pattern in self._patterns:
            if pattern.search(text):
                return entry
        return None


class PatternExtractor(Extractor):
    """First regex match in text order; group 1 is the value."""

    def __init__(self, kind: TermKind, pattern: str, joiner: str = " ", **kwargs):
        super().__init__(kind, **kwargs)
        self.pattern = re.compile(pattern, re.IGNORECASE)
        self.joiner = joiner

    def find(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if not match:
            return None
        return self.joiner.join(match.group(1).lower().split())


class ChainExtractor(Extractor):
    """Tries several extractors of the same kind in order (e.g. broad period, decade, year)."""

    def __init__(self, kind: TermKind, extractors: Sequence[Extractor], **kwargs):
        super().__init__(kind, **kwargs)
        self.extractors = list(extractors)

    def find(self, text: str) -> Optional[str]:
        for extractor in self.extractors:
            found = extractor.find(text)
            if found:
                return extractor.canonical(found)
        return None


# ============================================================
# BASE AGENT
# ============================================================

class BaseDomainAgent:
    """Base class for domain agents"""

    domain_name = "base"

    # Case-insensitive substring keywords that place an item in this domain
    KEYWORDS: List[str] = []

    # Any of these present disqualifies the domain
    EXCLUDE_KEYWORDS: List[str] = []

    # Used when no object type hint and no keyword can be lifted from the title
    DEFAULT_OBJECT_TYPE = ""

    # Confidence when no attribute is found
    BASIC_CONFIDENCE = 0.6

    def __init__(self):
        self.extractors: List[Extractor] = self.build_extractors()

    def build_extractors(self) -> List[Extractor]:
        """Ordered extractor list, highest tier first. Override in subclasses."""
        return []

    # ------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------

    def detect(self, text: str) -> Tuple[bool, List[str]]:
        """
        Test the lowercased item text against the domain keywords.
        Returns (matches, reasons).
        """
        excluded = [kw for kw in self.EXCLUDE_KEYWORDS if kw in text]
        if excluded:
            return False, [f"{self.domain_name}: excluded by {excluded}"]
        hits = [kw for kw in self.KEYWORDS if kw in text]
        if hits:
            return True, [f"{self.domain_name}: matched {hits[:3]}"]
        return False, []

    # ------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------

    def extract_all(self, text: str) -> List[AttributeMatch]:
        """Run every extractor once, in order. Each contributes at most one match."""
        text = text.lower()
        matches = []
        for extractor in self.extractors:
            found = extractor.extract(text)
            if found:
                matches.append(found)
        return matches

    def object_type_for(self, object_type: str, text: str) -> str:
        """Object type hint if given, else the first domain keyword found in the text."""
        object_type = (object_type or "").strip().lower()
        if object_type:
            return object_type
        for kw in self.KEYWORDS:
            if kw in text:
                return kw
        return self.DEFAULT_OBJECT_TYPE

    # ------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------

    def synthesize(
        self,
        object_type: str,
        title: str,
        description: str = "",
        artist: Optional[str] = None,
    ) -> Synthesis:
        """Object type plus the first non-null attribute, scored by tier."""
        text = f"{title} {description}".lower()
        base = self.object_type_for(object_type, f"{object_type} {text}".lower())
        attributes = self.extract_all(text)

        chosen = None
        for attribute in attributes:
            if attribute.text and attribute.text not in base:
                chosen = attribute
                break

        terms = [quote_term(base)] if base else []
        if chosen:
            terms.append(quote_term(chosen.text))
            confidence = chosen.confidence
            strategy = f"{self.domain_name}_{chosen.tier}"
        else:
            confidence = self.BASIC_CONFIDENCE
            strategy = f"{self.domain_name}_basic"

        search_terms = " ".join(terms)
        return Synthesis(
            search_terms=search_terms,
            confidence=min(confidence, MAX_CONFIDENCE),
            strategy_tag=strategy,
            term_count=count_terms(search_terms),
            domain=self.domain_name,
            object_type=base,
            attribute=chosen,
            attributes=attributes,
        )


# ============================================================
# SHARED EXTRACTOR BUILDERS
# ============================================================

def period_extractor(confidence: float = 0.6, tier: str = "period") -> Extractor:
    """Broad style period, then decade ("1970-tal"), then a bare four-digit year."""
    return ChainExtractor(
        TermKind.PERIOD,
        [
            VocabularyExtractor(TermKind.PERIOD, BROAD_PERIODS),
            PatternExtractor(TermKind.PERIOD, DECADE_PATTERN, joiner="-"),
            PatternExtractor(TermKind.PERIOD, YEAR_PATTERN),
        ],
        default_tier=(confidence, tier),
    )


def country_extractor(confidence: float = 0.65, tier: str = "country") -> Extractor:
    return VocabularyExtractor(
        TermKind.COUNTRY,
        COUNTRIES,
        boundary="prefix",
        aliases=COUNTRY_ALIASES,
        default_tier=(confidence, tier),
    )
