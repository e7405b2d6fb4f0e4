"""
Audio Agent - hi-fi and vintage audio equipment.

Searches use a normalized object type ("amplifier" and "förstärkare" both
become "förstärkare") so English and Swedish listings land on the same
query.
"""

from .base import (
    BaseDomainAgent,
    PatternExtractor,
    TermKind,
    VocabularyExtractor,
    period_extractor,
)
from .vocabulary import (
    AUDIO_BRANDS,
    AUDIO_KEYWORDS,
    AUDIO_OBJECT_TYPES,
    MODEL_PATTERN,
)


class AudioAgent(BaseDomainAgent):
    """Agent for audio equipment - brand, model number, period"""

    domain_name = "audio"

    KEYWORDS = AUDIO_KEYWORDS
    DEFAULT_OBJECT_TYPE = "stereo"

    def build_extractors(self):
        return [
            VocabularyExtractor(TermKind.BRAND, AUDIO_BRANDS, default_tier=(0.8, "brand")),
            PatternExtractor(TermKind.MODEL, MODEL_PATTERN, default_tier=(0.7, "model")),
            period_extractor(0.65),
        ]

    def object_type_for(self, object_type, text):
        hint = (object_type or "").strip().lower()
        for raw, normalized in AUDIO_OBJECT_TYPES.items():
            if raw in hint:
                return normalized
        if hint:
            return hint
        for raw, normalized in AUDIO_OBJECT_TYPES.items():
            if raw in text:
                return normalized
        return super().object_type_for("", text)
