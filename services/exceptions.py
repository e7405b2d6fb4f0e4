"""
Custom Exception Hierarchy for the Auction Market Proxy

This module provides a structured exception hierarchy for better error handling
and categorization throughout the application.

Note that an empty backoff ladder (no comparable data) and a refused core-term
deselection are normal outcomes, not exceptions.

Usage:
    from services.exceptions import (
        MarketDataException,
        ResolutionFailed,
        MalformedOracleResponse,
    )

    try:
        snapshot = await orchestrator.analyze(session, item)
    except ResolutionFailed as e:
        logger.error(f"Marketplace unavailable: {e}")
        return e.to_dict()
"""

from typing import Optional, Dict, Any


class MarketDataException(Exception):
    """
    Base exception for all market proxy errors.

    All custom exceptions should inherit from this class to enable
    unified error handling throughout the application.
    """

    def __init__(
        self,
        message: str,
        code: str = "MARKET_PROXY_ERROR",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


# ============================================================
# Analysis Errors
# ============================================================

class AnalysisError(MarketDataException):
    """Base class for analysis-related errors."""

    def __init__(
        self,
        message: str,
        code: str = "ANALYSIS_ERROR",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, code, details, cause)


class MalformedOracleResponse(AnalysisError):
    """Classification oracle returned data that cannot be used."""

    def __init__(
        self,
        reason: str,
        raw: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        details = {"reason": reason}
        if raw:
            details["raw"] = raw[:200]
        super().__init__(
            message=f"Classification oracle returned unusable data: {reason}",
            code="MALFORMED_ORACLE_RESPONSE",
            details=details,
            cause=cause,
        )


# ============================================================
# External Service Errors
# ============================================================

class ExternalServiceError(MarketDataException):
    """Base class for external service errors."""

    def __init__(
        self,
        service: str,
        message: str,
        code: str = "EXTERNAL_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        details["service"] = service
        super().__init__(message, code, details, cause)


class ResolutionFailed(ExternalServiceError):
    """The marketplace search itself failed (network or service error)."""

    def __init__(
        self,
        query: str,
        scope: str,
        status_code: Optional[int] = None,
        message: str = "Marketplace search failed",
        cause: Optional[Exception] = None,
    ):
        details = {"query": query, "scope": scope}
        if status_code:
            details["status_code"] = status_code
        super().__init__(
            service="marketplace",
            message=message,
            code="RESOLUTION_FAILED",
            details=details,
            cause=cause,
        )


class AnthropicAPIError(ExternalServiceError):
    """Error communicating with Anthropic API."""

    def __init__(
        self,
        message: str = "Anthropic API request failed",
        model: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        details = {}
        if model:
            details["model"] = model
        super().__init__(
            service="anthropic",
            message=message,
            code="ANTHROPIC_API_ERROR",
            details=details,
            cause=cause,
        )


# ============================================================
# Validation Errors
# ============================================================

class ValidationError(MarketDataException):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, code, details, cause)


class InvalidRequestError(ValidationError):
    """Request body is missing a field or has the wrong shape."""

    def __init__(self, reason: str, field: Optional[str] = None):
        super().__init__(
            message=f"Invalid request: {reason}",
            field=field,
            code="INVALID_REQUEST",
        )


# ============================================================
# Session Errors
# ============================================================

class SessionNotFoundError(MarketDataException):
    """No cataloging session exists with the given id."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session '{session_id}' not found",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


# ============================================================
# Configuration Errors
# ============================================================

class ConfigurationError(MarketDataException):
    """Configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details,
        )


class MissingAPIKeyError(ConfigurationError):
    """Required API key is missing."""

    def __init__(self, service: str):
        super().__init__(
            message=f"Missing API key for {service}",
            config_key=f"{service.upper()}_API_KEY",
        )
        self.code = "MISSING_API_KEY"
