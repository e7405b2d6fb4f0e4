"""
Domain Agents for Term Classification
Each agent declares the keyword set, extractor list and confidence tiers
for one item domain. Matching and synthesis are shared in base.py.
"""

from .base import (
    AttributeMatch,
    BaseDomainAgent,
    MAX_CONFIDENCE,
    Synthesis,
    TermKind,
    count_terms,
    quote_term,
)
from .jewelry import JewelryAgent
from .watch import WatchAgent
from .audio import AudioAgent
from .instrument import InstrumentAgent
from .coin import CoinAgent
from .stamp import StampAgent
from .generic import GenericAgent

# Agent registry
DOMAIN_AGENTS = {
    "jewelry": JewelryAgent,
    "watch": WatchAgent,
    "audio": AudioAgent,
    "instrument": InstrumentAgent,
    "coin": CoinAgent,
    "stamp": StampAgent,
    "generic": GenericAgent,
}

# Most specific first; generic always matches
DOMAIN_PRECEDENCE = ["jewelry", "watch", "audio", "instrument", "coin", "stamp", "generic"]

_instances = {}


def get_agent(domain: str) -> BaseDomainAgent:
    """Get the (shared, stateless) agent for a domain, generic if unknown"""
    if domain not in DOMAIN_AGENTS:
        domain = "generic"
    if domain not in _instances:
        _instances[domain] = DOMAIN_AGENTS[domain]()
    return _instances[domain]


def detect_domain(object_type: str, title: str, description: str = "") -> tuple:
    """Detect item domain from the item text, return (domain, reasoning)"""
    text = f"{object_type or ''} {title or ''} {description or ''}".lower()
    reasons = []

    for domain in DOMAIN_PRECEDENCE:
        matched, why = get_agent(domain).detect(text)
        reasons.extend(why)
        if matched:
            return domain, reasons

    return "generic", reasons


__all__ = [
    'AttributeMatch', 'BaseDomainAgent', 'MAX_CONFIDENCE', 'Synthesis', 'TermKind',
    'count_terms', 'quote_term',
    'JewelryAgent', 'WatchAgent', 'AudioAgent', 'InstrumentAgent',
    'CoinAgent', 'StampAgent', 'GenericAgent',
    'DOMAIN_AGENTS', 'DOMAIN_PRECEDENCE', 'get_agent', 'detect_domain',
]
