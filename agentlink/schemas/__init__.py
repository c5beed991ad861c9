# Copyright (c) Microsoft. All rights reserved.
"""Protocol schemas package."""

from .protocol import (
    # Enums
    ConversationMode,
    RelayFailureReason,
    # Router input
    InboundMessage,
    # A2A
    A2ARequest,
    A2AResponse,
    AgentCard,
    RelayFailure,
    RelayResult,
    RelaySuccess,
    # Echo
    EchoRequest,
    EchoResponse,
    # Channel
    Activity,
    ChannelAccount,
    ConversationAccount,
    # Health
    HealthResponse,
    utc_now,
)

__all__ = [
    # Enums
    "ConversationMode",
    "RelayFailureReason",
    # Router input
    "InboundMessage",
    # A2A
    "A2ARequest",
    "A2AResponse",
    "AgentCard",
    "RelayFailure",
    "RelayResult",
    "RelaySuccess",
    # Echo
    "EchoRequest",
    "EchoResponse",
    # Channel
    "Activity",
    "ChannelAccount",
    "ConversationAccount",
    # Health
    "HealthResponse",
    "utc_now",
]
