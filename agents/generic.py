"""
Generic Agent - fallback for items no domain claims.

Synthesis is deliberately plain: the artist plus object type when an artist
is known, else the object type, else the first words of the title. The broad
extractors still run so the query state can offer typed alternatives.
"""

import re
from typing import Optional

from .base import (
    BaseDomainAgent,
    Synthesis,
    TermKind,
    VocabularyExtractor,
    count_terms,
    country_extractor,
    period_extractor,
    quote_term,
)
from .vocabulary import (
    ALL_BRANDS,
    DISTINCTIVE_MATERIALS,
    GEMSTONE_ALIASES,
    GEMSTONES,
    OBJECT_TYPE_NOUNS,
    PRECIOUS_METAL_ALIASES,
    STOP_WORDS,
)

GENERIC_CONFIDENCE = 0.5
ARTIST_CONFIDENCE = 0.7
TITLE_WORDS = 3


class GenericAgent(BaseDomainAgent):
    """Fallback agent"""

    domain_name = "generic"
    BASIC_CONFIDENCE = GENERIC_CONFIDENCE

    def build_extractors(self):
        return [
            VocabularyExtractor(TermKind.BRAND, ALL_BRANDS),
            VocabularyExtractor(TermKind.OBJECT_TYPE, OBJECT_TYPE_NOUNS),
            VocabularyExtractor(
                TermKind.MATERIAL,
                DISTINCTIVE_MATERIALS,
                boundary="prefix",
                aliases=PRECIOUS_METAL_ALIASES,
            ),
            VocabularyExtractor(
                TermKind.GEMSTONE,
                GEMSTONES,
                boundary="prefix",
                aliases=GEMSTONE_ALIASES,
            ),
            country_extractor(),
            period_extractor(),
        ]

    def detect(self, text):
        return True, ["generic: fallback"]

    def object_type_for(self, object_type, text):
        object_type = (object_type or "").strip().lower()
        if object_type:
            return object_type
        for noun in OBJECT_TYPE_NOUNS:
            if re.search(rf'(?<!\w){re.escape(noun)}(?!\w)', text):
                return noun
        return ""

    @staticmethod
    def title_words(title: str, limit: int = TITLE_WORDS) -> list:
        words = re.findall(r'[\wåäöéü&-]+', title.lower())
        words = [w for w in words if w not in STOP_WORDS and len(w) > 1]
        return words[:limit]

    def synthesize(
        self,
        object_type: str,
        title: str,
        description: str = "",
        artist: Optional[str] = None,
    ) -> Synthesis:
        text = f"{title} {description}".lower()
        base = self.object_type_for(object_type, text)
        attributes = self.extract_all(text)
        artist = (artist or "").strip().lower()

        if artist:
            terms = [quote_term(artist)] + ([quote_term(base)] if base else [])
            confidence, strategy = ARTIST_CONFIDENCE, "generic_artist"
        elif base:
            terms = [quote_term(base)]
            confidence, strategy = GENERIC_CONFIDENCE, "generic_object_type"
        else:
            terms = self.title_words(title)
            confidence, strategy = GENERIC_CONFIDENCE, "generic_title"

        search_terms = " ".join(terms)
        return Synthesis(
            search_terms=search_terms,
            confidence=confidence,
            strategy_tag=strategy,
            term_count=count_terms(search_terms),
            domain=self.domain_name,
            object_type=base,
            attributes=attributes,
        )
