"""
Configuration package.

Re-exports everything from config/settings.py so callers can simply
`from config import CACHE, MARKETPLACE`.
"""

from .settings import (
    # Server
    HOST,
    PORT,
    DEBUG,

    # Oracle
    ANTHROPIC_API_KEY,
    MODEL_ORACLE,
    ORACLE_ENABLED,
    ORACLE_MAX_TOKENS,

    # Query state
    QUERY_FULL_CONTROL_DEFAULT,

    # Grouped settings
    MarketplaceConfig,
    MARKETPLACE,
    ResolverConfig,
    RESOLVER,
    InsightConfig,
    INSIGHTS,
    DEV_MODE,
    CacheConfig,
    CACHE,
)

__all__ = [
    'HOST', 'PORT', 'DEBUG',
    'ANTHROPIC_API_KEY', 'MODEL_ORACLE', 'ORACLE_ENABLED', 'ORACLE_MAX_TOKENS',
    'QUERY_FULL_CONTROL_DEFAULT',
    'MarketplaceConfig', 'MARKETPLACE',
    'ResolverConfig', 'RESOLVER',
    'InsightConfig', 'INSIGHTS',
    'DEV_MODE', 'CacheConfig', 'CACHE',
]
