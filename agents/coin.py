"""
Coin Agent - coins, medals and banknotes.

Metal matters most (gold and silver coins trade on content), then the
denomination, the issuing country and the minting year.
"""

from .base import (
    BaseDomainAgent,
    PatternExtractor,
    TermKind,
    VocabularyExtractor,
    country_extractor,
)
from .vocabulary import (
    COIN_KEYWORDS,
    COIN_MATERIALS,
    DENOMINATION_PATTERN,
    PRECIOUS_METAL_ALIASES,
    YEAR_PATTERN,
)


class CoinAgent(BaseDomainAgent):
    """Agent for numismatics - metal, denomination, country, year"""

    domain_name = "coin"

    KEYWORDS = COIN_KEYWORDS
    DEFAULT_OBJECT_TYPE = "mynt"

    MATERIAL_TIERS = {
        "guld": (0.85, "gold"),
        "silver": (0.8, "silver"),
    }

    def build_extractors(self):
        return [
            VocabularyExtractor(
                TermKind.MATERIAL,
                COIN_MATERIALS,
                boundary="prefix",
                aliases=PRECIOUS_METAL_ALIASES,
                tiers=self.MATERIAL_TIERS,
                default_tier=(0.65, "material"),
            ),
            PatternExtractor(
                TermKind.DENOMINATION,
                DENOMINATION_PATTERN,
                default_tier=(0.7, "denomination"),
            ),
            country_extractor(0.65),
            PatternExtractor(TermKind.PERIOD, YEAR_PATTERN, default_tier=(0.6, "year")),
        ]
