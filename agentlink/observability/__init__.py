# Copyright (c) Microsoft. All rights reserved.
"""Observability package: structured logging, metrics and exceptions."""

from .exceptions import (
    AgentLinkError,
    CompletionError,
    ConfigurationError,
    MalformedPeerResponseError,
    MessageValidationError,
    MissingAPIKeyError,
    PeerUnreachableError,
    ProtocolDecodeError,
)
from .logging import (
    CORRELATION_HEADER,
    LogContext,
    MetricsCollector,
    PerformanceTracker,
    configure_logging,
    get_correlation_id,
    get_logger,
    metrics,
    new_correlation_id,
    set_correlation_id,
)

__all__ = [
    # Exceptions
    "AgentLinkError",
    "CompletionError",
    "ConfigurationError",
    "MalformedPeerResponseError",
    "MessageValidationError",
    "MissingAPIKeyError",
    "PeerUnreachableError",
    "ProtocolDecodeError",
    # Logging
    "CORRELATION_HEADER",
    "LogContext",
    "MetricsCollector",
    "PerformanceTracker",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "metrics",
    "new_correlation_id",
    "set_correlation_id",
]
