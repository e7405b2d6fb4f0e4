"""
Pipeline Module - Query Resolution and Market Fusion

Stages:
- Term classifier + synthesizer: item attributes -> initial query and typed terms
- Query state: per-session selection and canonical query
- Resolver: progressive relaxation against the marketplace
- Market stats + insights: summaries, confidence and narrative insights
- Orchestrator: coordinates the stages per session

Usage:
    from pipeline import AnalysisOrchestrator, CatalogSession, ItemAttributes
    orchestrator = AnalysisOrchestrator()
    session = CatalogSession()
    outcome = await orchestrator.analyze(session, ItemAttributes(...))
"""

from .models import (
    CandidateTerm,
    HistoricalSummary,
    Insight,
    LiveSummary,
    MarketSnapshot,
    Provenance,
    QueryChange,
    Resolution,
    SearchAttempt,
    Term,
)
from .query_state import QueryState, QueryStateListener
from .term_classifier import Classification, classify_terms
from .synthesizer import QuerySynthesizer, SynthesisResult
from .resolver import MarketDataResolver, ResolutionContext
from .insights import InsightEngine
from .session import CatalogSession, ItemAttributes
from .orchestrator import AnalysisOrchestrator, AnalysisOutcome

__all__ = [
    'CandidateTerm',
    'HistoricalSummary',
    'Insight',
    'LiveSummary',
    'MarketSnapshot',
    'Provenance',
    'QueryChange',
    'Resolution',
    'SearchAttempt',
    'Term',
    'QueryState',
    'QueryStateListener',
    'Classification',
    'classify_terms',
    'QuerySynthesizer',
    'SynthesisResult',
    'MarketDataResolver',
    'ResolutionContext',
    'InsightEngine',
    'CatalogSession',
    'ItemAttributes',
    'AnalysisOrchestrator',
    'AnalysisOutcome',
]
