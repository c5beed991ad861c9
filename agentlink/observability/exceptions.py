# Copyright (c) Microsoft. All rights reserved.
"""
Custom Exceptions Module

Provides a hierarchy of domain-specific exceptions for the agents.
"""

from typing import Any


class AgentLinkError(Exception):
    """Base exception for all agent errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.message,
            "errorCode": self.error_code,
            "details": self.details,
        }


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(AgentLinkError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs):
        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            details={"config_key": config_key} if config_key else {},
            **kwargs,
        )


class MissingAPIKeyError(ConfigurationError):
    """Raised when required API key is missing."""

    def __init__(self, provider: str):
        super().__init__(
            message=f"API key for {provider} is not configured",
            config_key=f"{provider.upper().replace(' ', '_')}_API_KEY",
        )
        self.provider = provider


# =============================================================================
# REQUEST ERRORS
# =============================================================================

class MessageValidationError(AgentLinkError):
    """Raised when a required field such as the message text is blank."""

    status_code = 400

    def __init__(self, message: str = "Message cannot be empty", field: str = "message"):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field},
        )
        self.field = field


class ProtocolDecodeError(AgentLinkError):
    """Raised when a request body is not the expected JSON shape."""

    status_code = 400

    def __init__(self, message: str, errors: list[Any] | None = None, **kwargs):
        super().__init__(
            message=message,
            error_code="PROTOCOL_DECODE_ERROR",
            details={"errors": errors} if errors else {},
            **kwargs,
        )


# =============================================================================
# PEER ERRORS
# =============================================================================

class PeerUnreachableError(AgentLinkError):
    """Raised when a peer agent or callback URL cannot be reached."""

    status_code = 502

    def __init__(
        self,
        url: str,
        reason: str,
        status: int | None = None,
        cause: Exception | None = None,
    ):
        details: dict[str, Any] = {"url": url, "reason": reason}
        if status is not None:
            details["status"] = status
        super().__init__(
            message=f"Peer at {url} is unavailable: {reason}",
            error_code="PEER_UNREACHABLE",
            details=details,
            cause=cause,
        )
        self.url = url
        self.reason = reason
        self.status = status


class MalformedPeerResponseError(AgentLinkError):
    """Raised when a peer reply cannot be decoded as an A2A response."""

    status_code = 502

    def __init__(self, raw_response: str, cause: Exception | None = None):
        super().__init__(
            message="Peer response is not a valid A2A payload",
            error_code="MALFORMED_PEER_RESPONSE",
            details={"raw_response_preview": raw_response[:500]},
            cause=cause,
        )
        self.raw_response = raw_response


# =============================================================================
# LLM ERRORS
# =============================================================================

class CompletionError(AgentLinkError):
    """Raised when the text-completion call fails or returns nothing."""

    def __init__(self, message: str, provider: str | None = None, **kwargs):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        super().__init__(
            message=message,
            error_code="COMPLETION_ERROR",
            details=details,
            **kwargs,
        )
