# Copyright (c) Microsoft. All rights reserved.
"""
Protocol Schemas for the A2A relay

Defines the JSON contracts shared by PrimeAgent and SecondaryAgent:
- A2A request/response exchanged over /a2a
- Agent card served for discovery
- Echo request/response for /api/echo
- Channel activity envelope posted to /api/messages

All wire names are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class ConversationMode(str, Enum):
    """Relay mode of a single conversation."""
    NORMAL = "normal"
    FORWARDING = "forwarding"


class RelayFailureReason(str, Enum):
    """Why a relay call did not produce a peer response."""
    UNREACHABLE = "unreachable"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"


# =============================================================================
# ROUTER INPUT
# =============================================================================

class InboundMessage(BaseModel):
    """One message received from the chat transport."""

    model_config = ConfigDict(frozen=True)

    conversation_id: str
    text: str | None = None


# =============================================================================
# A2A PROTOCOL
# =============================================================================

class A2ARequest(CamelModel):
    """Request body for POST /a2a."""
    message: str | None = None
    agent_id: str = ""
    timestamp: datetime = Field(default_factory=utc_now)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class A2AResponse(CamelModel):
    """Response body of POST /a2a."""
    agent_name: str = ""
    protocol: str = ""
    response_text: str = Field(default="", alias="response")
    timestamp: str = ""
    version: str = ""
    capabilities: list[str] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "A2AResponse":
        """Lenient parse of a peer reply: wrong or missing fields become empty."""
        capabilities = payload.get("capabilities")
        if not isinstance(capabilities, list):
            capabilities = []
        return cls(
            agent_name=_as_text(payload.get("agentName")),
            protocol=_as_text(payload.get("protocol")),
            response_text=_as_text(payload.get("response")),
            timestamp=_as_text(payload.get("timestamp")),
            version=_as_text(payload.get("version")),
            capabilities=[c for c in capabilities if isinstance(c, str)],
        )


class RelaySuccess(BaseModel):
    """Peer answered the relay call."""
    ok: Literal[True] = True
    response: A2AResponse


class RelayFailure(BaseModel):
    """Peer could not be used; the caller shows a degraded notice."""
    ok: Literal[False] = False
    reason: RelayFailureReason
    status_code: int | None = None
    detail: str = ""


RelayResult = RelaySuccess | RelayFailure


class AgentCard(CamelModel):
    """Static capability descriptor used for discovery."""
    name: str
    description: str
    url: str
    version: str
    protocol: str = "A2A"
    protocol_version: str = "1.0"
    capabilities: list[str] = Field(default_factory=list)
    endpoints: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# ECHO
# =============================================================================

class EchoRequest(CamelModel):
    """Request body for POST /api/echo."""
    message: str | None = None


class EchoResponse(CamelModel):
    """Echoed message with the running counter."""
    message: str
    message_count: int


# =============================================================================
# CHANNEL ACTIVITIES
# =============================================================================

class ChannelAccount(CamelModel):
    """A participant in a channel conversation."""
    id: str = ""
    name: str | None = None


class ConversationAccount(CamelModel):
    """Conversation reference carried by an activity."""
    id: str
    name: str | None = None


class Activity(CamelModel):
    """Channel activity envelope posted to /api/messages."""

    model_config = ConfigDict(extra="ignore")

    type: str = "message"
    id: str | None = None
    text: str | None = None
    service_url: str | None = None
    channel_id: str | None = None
    conversation: ConversationAccount | None = None
    from_: ChannelAccount | None = Field(default=None, alias="from")
    recipient: ChannelAccount | None = None
    members_added: list[ChannelAccount] = Field(default_factory=list)
    reply_to_id: str | None = None


# =============================================================================
# HEALTH
# =============================================================================

class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    framework: str
    version: str
    timestamp: datetime
    semantic_kernel: str
    # to_camel would give "a2AProtocol"
    a2a_protocol: str = Field(alias="a2aProtocol")
