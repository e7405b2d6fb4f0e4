"""
Watch Agent - wristwatches, pocket watches and clocks.

Brand dominates value for watches, so the brand extractor runs first.
Case material is the next strongest signal, then the production period.
"""

from .base import (
    BaseDomainAgent,
    TermKind,
    VocabularyExtractor,
    period_extractor,
)
from .vocabulary import (
    PRECIOUS_METAL_ALIASES,
    WATCH_BRANDS,
    WATCH_KEYWORDS,
    WATCH_MATERIALS,
)


class WatchAgent(BaseDomainAgent):
    """Agent for watches - brand, case material, period"""

    domain_name = "watch"

    KEYWORDS = WATCH_KEYWORDS
    DEFAULT_OBJECT_TYPE = "armbandsur"

    MATERIAL_TIERS = {
        "guld": (0.7, "material"),
        "silver": (0.65, "material"),
        "platina": (0.75, "material"),
    }

    def build_extractors(self):
        return [
            VocabularyExtractor(TermKind.BRAND, WATCH_BRANDS, default_tier=(0.8, "brand")),
            VocabularyExtractor(
                TermKind.MATERIAL,
                WATCH_MATERIALS,
                boundary="prefix",
                aliases=PRECIOUS_METAL_ALIASES,
                tiers=self.MATERIAL_TIERS,
                default_tier=(0.65, "material"),
            ),
            period_extractor(0.6),
        ]
