"""
API client initialization for external services.

Creates the Anthropic (Claude) client used by the classification oracle
and the shared httpx client used for marketplace searches.
"""

import logging
from typing import Any, Optional

import anthropic
import httpx

from services.exceptions import MissingAPIKeyError

logger = logging.getLogger(__name__)


def create_anthropic_client(api_key: Optional[str], required: bool = False) -> Optional[Any]:
    """
    Create an async Anthropic client for oracle calls.

    Returns None if no api_key is provided, or raises MissingAPIKeyError
    when the caller requires the oracle.
    """
    if not api_key:
        if required:
            raise MissingAPIKeyError("anthropic")
        logger.warning("[CLIENTS] No Anthropic API key provided, oracle unavailable")
        return None

    client = anthropic.AsyncAnthropic(api_key=api_key)
    logger.info("[CLIENTS] Anthropic client initialized")
    return client


def create_http_client(timeout: float = 10.0) -> httpx.AsyncClient:
    """Shared async HTTP client with connection pooling."""
    client = httpx.AsyncClient(
        timeout=timeout,
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
    )
    logger.info("[CLIENTS] Shared HTTP client initialized")
    return client
