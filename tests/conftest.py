# Copyright (c) Microsoft. All rights reserved.
"""
Pytest configuration and shared fixtures.
"""

import os
from unittest.mock import AsyncMock, patch

import httpx
import pytest


# =============================================================================
# ENVIRONMENT FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def mock_environment():
    """Mock environment variables for tests."""
    env_vars = {
        "LLM_PROVIDER": "openai",
        "LOG_LEVEL": "WARNING",
        "LOG_FORMAT": "console",
    }
    with patch.dict(os.environ, env_vars):
        yield


@pytest.fixture(autouse=True)
def reset_metrics():
    """Metrics are a process-wide singleton."""
    from agentlink.observability import metrics

    metrics.reset()
    yield
    metrics.reset()


# =============================================================================
# SETTINGS FIXTURES
# =============================================================================

@pytest.fixture
def settings():
    """Settings with no LLM credentials and fixed agent URLs."""
    from agentlink.config import (
        LLMSettings,
        PrimeAgentSettings,
        SecondaryAgentSettings,
        Settings,
        StateSettings,
    )

    return Settings(
        llm=LLMSettings(llm_provider="openai", openai_api_key=None),
        prime=PrimeAgentSettings(
            prime_agent_name="PrimeAgent",
            secondary_agent_url="http://secondary",
            relay_timeout_seconds=5.0,
        ),
        secondary=SecondaryAgentSettings(secondary_agent_name="SecondaryAgent"),
        state=StateSettings(conversation_ttl_seconds=3600, max_conversations=100),
    )


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def mock_completion():
    """Completion provider returning a fixed answer."""
    from agentlink.services import CompletionProvider

    completion = AsyncMock(spec=CompletionProvider)
    completion.complete.return_value = "Use a list comprehension."
    return completion


@pytest.fixture
def mock_relay_client():
    """Relay client whose peer echoes the message."""
    from agentlink.schemas import A2AResponse, RelaySuccess
    from agentlink.services import A2ARelayClient

    relay_client = AsyncMock(spec=A2ARelayClient)

    async def relay(peer_base_url, message, caller_agent_id):
        return RelaySuccess(response=A2AResponse(
            agent_name="SecondaryAgent",
            protocol="A2A",
            response_text=message,
        ))

    relay_client.relay.side_effect = relay
    return relay_client


@pytest.fixture
def mock_callback_client():
    """Callback client recording replies instead of posting them."""
    from agentlink.services import ActivityCallbackClient

    class RecordingCallbackClient(ActivityCallbackClient):
        def __init__(self):
            super().__init__()
            self.sent = []

        async def send_replies(self, activity, replies):
            self.sent.append((activity, list(replies)))
            return len(replies)

        @property
        def replies(self) -> list[str]:
            return [text for _, batch in self.sent for text in batch]

    return RecordingCallbackClient()


@pytest.fixture
def mode_store():
    from agentlink.services import ConversationModeStore

    return ConversationModeStore()


@pytest.fixture
def sample_a2a_payload():
    """A well-formed peer reply."""
    return {
        "agentName": "SecondaryAgent",
        "protocol": "A2A",
        "response": "hello from the peer",
        "timestamp": "2026-01-01T00:00:00+00:00",
        "version": "1.0.0",
        "capabilities": ["echo", "a2a-communication"],
    }


@pytest.fixture
def message_activity():
    """Factory for channel message activities."""
    def make(text: str | None, conversation_id: str = "conv-1") -> dict:
        return {
            "type": "message",
            "id": "activity-1",
            "text": text,
            "serviceUrl": "http://channel.test",
            "channelId": "test",
            "conversation": {"id": conversation_id},
            "from": {"id": "user-1", "name": "User"},
            "recipient": {"id": "bot-1", "name": "Bot"},
        }

    return make


@pytest.fixture
def connection_refused_transport():
    """httpx transport failing every request like a closed port."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    return httpx.MockTransport(handler)
