"""
Services Package

Marketplace client, external API clients and the exception hierarchy.
App wiring (app_state, app_factory) is imported from its own modules.
"""

from .marketplace import (
    Listing,
    SearchResult,
    search_listings,
    get_search_url,
    configure_marketplace,
)
from .clients import create_anthropic_client, create_http_client
from .exceptions import (
    MarketDataException,
    AnalysisError,
    MalformedOracleResponse,
    ExternalServiceError,
    ResolutionFailed,
    AnthropicAPIError,
    ValidationError,
    InvalidRequestError,
    SessionNotFoundError,
    ConfigurationError,
    MissingAPIKeyError,
)

__all__ = [
    # Marketplace
    'Listing',
    'SearchResult',
    'search_listings',
    'get_search_url',
    'configure_marketplace',
    # Clients
    'create_anthropic_client',
    'create_http_client',
    # Exceptions
    'MarketDataException',
    'AnalysisError',
    'MalformedOracleResponse',
    'ExternalServiceError',
    'ResolutionFailed',
    'AnthropicAPIError',
    'ValidationError',
    'InvalidRequestError',
    'SessionNotFoundError',
    'ConfigurationError',
    'MissingAPIKeyError',
]
