"""
Stamp Agent - philately.

Stamp collections are organized by country and era, so those are the only
attributes worth adding to the search.
"""

from .base import (
    BaseDomainAgent,
    country_extractor,
    period_extractor,
)
from .vocabulary import STAMP_KEYWORDS


class StampAgent(BaseDomainAgent):
    """Agent for stamps - country, period"""

    domain_name = "stamp"

    KEYWORDS = STAMP_KEYWORDS
    DEFAULT_OBJECT_TYPE = "frimärken"
    BASIC_CONFIDENCE = 0.7

    def build_extractors(self):
        return [
            country_extractor(0.8),
            period_extractor(0.7),
        ]
