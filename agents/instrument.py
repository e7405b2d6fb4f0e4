"""
Instrument Agent - pianos, strings, guitars, winds, accordions.
"""

from .base import (
    BaseDomainAgent,
    TermKind,
    VocabularyExtractor,
    country_extractor,
    period_extractor,
)
from .vocabulary import (
    INSTRUMENT_BRANDS,
    INSTRUMENT_KEYWORDS,
    INSTRUMENT_MATERIALS,
)


class InstrumentAgent(BaseDomainAgent):
    """Agent for musical instruments - maker, tonewood/metal, country, period"""

    domain_name = "instrument"

    KEYWORDS = INSTRUMENT_KEYWORDS
    DEFAULT_OBJECT_TYPE = "instrument"

    def build_extractors(self):
        return [
            VocabularyExtractor(TermKind.BRAND, INSTRUMENT_BRANDS, default_tier=(0.85, "brand")),
            VocabularyExtractor(
                TermKind.MATERIAL,
                INSTRUMENT_MATERIALS,
                boundary="prefix",
                default_tier=(0.7, "material"),
            ),
            country_extractor(0.65),
            period_extractor(0.6),
        ]
