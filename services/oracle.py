"""
Classification Oracle

Optional LLM pass that proposes search terms for an item, each with a kind,
a pre-selection decision and a confidence. When it answers with usable
data its pre-selection is trusted over naive query tokenization; anything
else raises and the caller falls back to rule-based classification.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import anthropic

from config import MODEL_ORACLE, ORACLE_MAX_TOKENS
from services.exceptions import AnthropicAPIError, MalformedOracleResponse
from services.response_wrapper import format_item_data, sanitize_json_response

logger = logging.getLogger(__name__)

ORACLE_SYSTEM_PROMPT = """You help catalogers of a Swedish auction house build marketplace search queries.
Given an item, list the search terms a buyer would use to find comparable sales.

Return ONLY JSON:
{"terms": [{"term": "omega", "kind": "brand", "preSelected": true, "confidence": 0.9}]}

kind is one of: brand, material, gemstone, object_type, period, country, denomination, model, keyword.
Pre-select at most 4 terms: the brand or artist, the object type, and at most two strong attributes.
Use lowercase Swedish terms as they appear in the item text."""

MAX_TERMS = 12


@dataclass
class OracleTerm:
    term: str
    kind: Optional[str] = None
    pre_selected: bool = False
    confidence: Optional[float] = None


def parse_oracle_terms(raw: str) -> List[OracleTerm]:
    """Parse the oracle reply. Raises MalformedOracleResponse on anything unusable."""
    if not raw or not raw.strip():
        raise MalformedOracleResponse("empty response")

    text = sanitize_json_response(raw)
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as e:
        raise MalformedOracleResponse("invalid JSON", raw=raw, cause=e)

    entries = data.get("terms") if isinstance(data, dict) else data
    if not isinstance(entries, list) or not entries:
        raise MalformedOracleResponse("no terms list", raw=raw)

    terms = []
    for entry in entries[:MAX_TERMS]:
        if not isinstance(entry, dict):
            raise MalformedOracleResponse("term entry is not an object", raw=raw)
        term = str(entry.get("term") or "").strip()
        if not term:
            continue
        confidence = entry.get("confidence")
        try:
            confidence = float(confidence) if confidence is not None else None
        except (TypeError, ValueError):
            confidence = None
        terms.append(OracleTerm(
            term=term.lower(),
            kind=(entry.get("kind") or None),
            pre_selected=bool(entry.get("preSelected", False)),
            confidence=confidence,
        ))

    if not terms:
        raise MalformedOracleResponse("all terms empty", raw=raw)
    if not any(t.pre_selected for t in terms):
        raise MalformedOracleResponse("no term pre-selected", raw=raw)
    return terms


class ClassificationOracle:
    """Anthropic-backed term proposer. Disabled when no client is configured."""

    def __init__(self, client: Any = None, model: str = MODEL_ORACLE, max_tokens: int = ORACLE_MAX_TOKENS):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def classify(self, item: dict) -> List[OracleTerm]:
        """
        Ask the oracle for typed terms.

        Raises AnthropicAPIError when the call fails and
        MalformedOracleResponse when the reply cannot be used.
        """
        if not self.enabled:
            raise AnthropicAPIError("Oracle not configured", model=self.model)

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=ORACLE_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": format_item_data(item)}],
            )
        except anthropic.APIError as e:
            logger.error(f"[ORACLE] Anthropic error: {e}")
            raise AnthropicAPIError(str(e), model=self.model, cause=e)

        if not response.content:
            raise MalformedOracleResponse("no content blocks")
        raw = next((b.text for b in response.content if getattr(b, "text", None) is not None), None)
        if raw is None:
            raise MalformedOracleResponse("no text block")
        raw = raw.strip()
        terms = parse_oracle_terms(raw)
        logger.info(
            f"[ORACLE] {len(terms)} terms, pre-selected: "
            f"{[t.term for t in terms if t.pre_selected]}"
        )
        return terms
