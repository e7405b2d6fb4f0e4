"""
Jewelry Agent - rings, necklaces, bracelets, brooches, earrings.

Precious metal is the main value driver for jewelry and gets the highest
tiers. Any watch-movement vocabulary disqualifies the item so watches are
never searched as jewelry.
"""

from .base import (
    BaseDomainAgent,
    TermKind,
    VocabularyExtractor,
    country_extractor,
    period_extractor,
)
from .vocabulary import (
    GEMSTONE_ALIASES,
    GEMSTONES,
    JEWELRY_BRANDS,
    JEWELRY_KEYWORDS,
    JEWELRY_MATERIALS,
    PRECIOUS_METAL_ALIASES,
    WATCH_MOVEMENT_TERMS,
)


class JewelryAgent(BaseDomainAgent):
    """Agent for jewelry - brand, metal, stone, country, period"""

    domain_name = "jewelry"

    KEYWORDS = JEWELRY_KEYWORDS
    EXCLUDE_KEYWORDS = WATCH_MOVEMENT_TERMS
    DEFAULT_OBJECT_TYPE = "smycke"

    MATERIAL_TIERS = {
        "guld": (0.8, "gold"),
        "silver": (0.75, "silver"),
        "platina": (0.85, "platinum"),
    }

    GEMSTONE_TIERS = {
        "diamant": (0.7, "diamond"),
    }

    def build_extractors(self):
        return [
            VocabularyExtractor(TermKind.BRAND, JEWELRY_BRANDS, default_tier=(0.8, "brand")),
            VocabularyExtractor(
                TermKind.MATERIAL,
                JEWELRY_MATERIALS,
                boundary="prefix",
                aliases=PRECIOUS_METAL_ALIASES,
                tiers=self.MATERIAL_TIERS,
                default_tier=(0.65, "material"),
            ),
            VocabularyExtractor(
                TermKind.GEMSTONE,
                GEMSTONES,
                boundary="prefix",
                aliases=GEMSTONE_ALIASES,
                tiers=self.GEMSTONE_TIERS,
                default_tier=(0.65, "stone"),
            ),
            country_extractor(0.6),
            period_extractor(0.6),
        ]
