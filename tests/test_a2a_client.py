# Copyright (c) Microsoft. All rights reserved.
"""
Unit tests for the A2A demo client.
"""

import json
from unittest.mock import patch

import httpx
import pytest


def card(name: str, url: str) -> dict:
    return {
        "name": name,
        "description": f"{name} for tests",
        "url": url,
        "version": "1.0.0",
        "protocol": "A2A",
        "protocolVersion": "1.0",
        "capabilities": ["a2a-communication"],
        "endpoints": {"a2a": "/a2a"},
    }


def two_agent_handler(request: httpx.Request) -> httpx.Response:
    """PrimeAgent prefixes its answers; SecondaryAgent echoes."""
    name = "PrimeAgent" if request.url.host == "prime" else "SecondaryAgent"
    if request.url.path == "/agent-card":
        return httpx.Response(200, json=card(name, f"http://{request.url.host}"))

    message = json.loads(request.content)["message"]
    reply = f"prime says: {message}" if name == "PrimeAgent" else message
    return httpx.Response(200, json={"agentName": name, "protocol": "A2A", "response": reply})


@pytest.fixture
def demo_client():
    from agentlink.services import A2ARelayClient

    return A2ARelayClient(transport=httpx.MockTransport(two_agent_handler))


class TestDemoClient:
    """Tests for discovery and the agent-to-agent exchange."""

    @pytest.mark.asyncio
    async def test_discover_agent(self, demo_client, capsys):
        from agentlink.a2a_client import discover_agent

        agent_card = await discover_agent(demo_client, "http://prime")

        assert agent_card.name == "PrimeAgent"
        assert "Discovered agent: PrimeAgent" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_agent_to_agent_rounds(self, demo_client):
        from agentlink.a2a_client import agent_to_agent_communication, discover_agent

        prime = await discover_agent(demo_client, "http://prime")
        secondary = await discover_agent(demo_client, "http://secondary")

        transcript = await agent_to_agent_communication(
            demo_client,
            prime,
            secondary,
            "hi",
            rounds=2,
            prime_host="http://prime",
            secondary_host="http://secondary",
        )

        assert transcript == [
            "prime says: hi",
            "prime says: hi",
            "prime says: prime says: hi",
            "prime says: prime says: hi",
        ]

    @pytest.mark.asyncio
    async def test_exchange_stops_when_agent_unavailable(self, demo_client, connection_refused_transport):
        from agentlink.a2a_client import agent_to_agent_communication, discover_agent
        from agentlink.services import A2ARelayClient

        prime = await discover_agent(demo_client, "http://prime")
        secondary = await discover_agent(demo_client, "http://secondary")

        transcript = await agent_to_agent_communication(
            A2ARelayClient(transport=connection_refused_transport),
            prime,
            secondary,
            "hi",
            prime_host="http://prime",
            secondary_host="http://secondary",
        )

        assert transcript == []

    @pytest.mark.asyncio
    async def test_main_reports_unreachable_agents(self, connection_refused_transport, capsys):
        from agentlink import a2a_client
        from agentlink.services import A2ARelayClient

        def refusing_client(timeout):
            return A2ARelayClient(timeout=timeout, transport=connection_refused_transport)

        with patch.object(a2a_client, "A2ARelayClient", side_effect=refusing_client):
            exit_code = await a2a_client.main("hello", rounds=1, timeout=1.0)

        assert exit_code == 1
        assert "Could not connect to agent servers" in capsys.readouterr().out
