"""
Query Synthesizer

Builds the initial ranked search phrase for an item by dispatching to the
domain agent picked by the term classifier. The strategy tag is a pure
function of the classification, so the same item always yields the same tag.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agents import get_agent
from pipeline.models import CandidateTerm
from pipeline.term_classifier import Classification, classify_terms

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """Initial query plus the candidates it was drawn from"""
    search_terms: str
    confidence: float
    strategy_tag: str
    term_count: int
    domain: str
    classification: Classification
    candidates: List[CandidateTerm] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "searchTerms": self.search_terms,
            "confidence": round(self.confidence, 2),
            "strategyTag": self.strategy_tag,
            "termCount": self.term_count,
            "domain": self.domain,
            "candidates": [c.to_dict() for c in self.candidates],
            "reasons": self.classification.reasons,
        }


class QuerySynthesizer:
    """Stateless; one instance can be shared by every session"""

    def synthesize(
        self,
        object_type: str,
        title: str,
        description: str = "",
        artist: Optional[str] = None,
    ) -> SynthesisResult:
        classification = classify_terms(object_type, title, description, artist)
        agent = get_agent(classification.domain)
        synthesis = agent.synthesize(object_type, title, description, artist)

        result = SynthesisResult(
            search_terms=synthesis.search_terms,
            confidence=synthesis.confidence,
            strategy_tag=synthesis.strategy_tag,
            term_count=synthesis.term_count,
            domain=synthesis.domain,
            classification=classification,
            candidates=classification.candidates(),
        )
        logger.info(
            f"[SYNTH] '{result.search_terms}' conf={result.confidence:.2f} "
            f"tag={result.strategy_tag}"
        )
        return result
