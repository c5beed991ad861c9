# Copyright (c) Microsoft. All rights reserved.
"""
A2A Client - Agent Communication Demo

Discovers PrimeAgent and SecondaryAgent through their agent cards and
exchanges A2A messages with them:
1. The user's message goes to PrimeAgent (code assistant)
2. PrimeAgent's answer is relayed to SecondaryAgent (echo)
3. Repeated for the requested number of rounds
"""

import argparse
import asyncio
import os

from dotenv import load_dotenv

from agentlink.observability import MalformedPeerResponseError, PeerUnreachableError
from agentlink.schemas import AgentCard, RelayFailure
from agentlink.services import A2ARelayClient

load_dotenv()

# Agent endpoint configuration
PRIME_AGENT_HOST = os.getenv("PRIME_AGENT_URL", "http://localhost:3978")
SECONDARY_AGENT_HOST = os.getenv("SECONDARY_AGENT_URL", "http://localhost:3979")
DEMO_AGENT_ID = "A2ADemoClient"


async def discover_agent(client: A2ARelayClient, host: str) -> AgentCard:
    """
    Discover an A2A agent at the specified host.

    Args:
        client: Relay client used for the request
        host: The base URL of the agent server

    Returns:
        The agent's card
    """
    agent_card = await client.fetch_agent_card(host)

    print(f"✅ Discovered agent: {agent_card.name}")
    print(f"   Description: {agent_card.description}")
    print(f"   URL: {agent_card.url}")
    if agent_card.capabilities:
        print(f"   Capabilities: {agent_card.capabilities}")

    return agent_card


async def send_message_to_agent(client: A2ARelayClient, host: str, name: str, message: str) -> str:
    """
    Send a message to an agent and get the response text.

    A failed relay yields an empty string so the conversation can stop.
    """
    print(f"\n📤 Sending to {name}: '{message}'")

    result = await client.relay(host, message, DEMO_AGENT_ID)
    if isinstance(result, RelayFailure):
        print(f"❌ {name} unavailable ({result.reason.value}): {result.detail}")
        return ""

    response_text = result.response.response_text
    print(f"📥 Response from {name}: '{response_text}'")
    return response_text


async def agent_to_agent_communication(
    client: A2ARelayClient,
    prime: AgentCard,
    secondary: AgentCard,
    initial_message: str,
    rounds: int = 2,
    prime_host: str = PRIME_AGENT_HOST,
    secondary_host: str = SECONDARY_AGENT_HOST,
) -> list[str]:
    """
    Exchange messages between the two agents.

    Returns:
        Every response received, in order
    """
    print("\n" + "=" * 60)
    print("🔄 Starting Agent-to-Agent Communication")
    print("=" * 60)

    transcript: list[str] = []
    current_message = initial_message
    current_sender = "User"

    for round_num in range(1, rounds + 1):
        print(f"\n--- Round {round_num} ---")

        print(f"\n[{current_sender} → {prime.name}]")
        response1 = await send_message_to_agent(client, prime_host, prime.name, current_message)
        if not response1:
            break
        transcript.append(response1)

        print(f"\n[{prime.name} → {secondary.name}]")
        response2 = await send_message_to_agent(client, secondary_host, secondary.name, response1)
        if not response2:
            break
        transcript.append(response2)

        current_message = response2
        current_sender = secondary.name

    print("\n" + "=" * 60)
    print("✅ Agent-to-Agent Communication Complete")
    print("=" * 60)
    return transcript


async def main(message: str, rounds: int, timeout: float) -> int:
    """Discover both agents and run the exchange; returns a process exit code."""
    print("Connecting to agents...")
    print(f"  PrimeAgent:     {PRIME_AGENT_HOST}")
    print(f"  SecondaryAgent: {SECONDARY_AGENT_HOST}")
    print()

    client = A2ARelayClient(timeout=timeout)
    try:
        print("🔍 Discovering PrimeAgent...")
        prime = await discover_agent(client, PRIME_AGENT_HOST)

        print("\n🔍 Discovering SecondaryAgent...")
        secondary = await discover_agent(client, SECONDARY_AGENT_HOST)
    except PeerUnreachableError as e:
        print(f"""
        ❌ Connection Error: Could not connect to agent servers.

        Make sure both agent servers are running:

        Terminal 1: prime-agent
        Terminal 2: secondary-agent

        Then run this script again.

        Error details: {e.message}
        """)
        return 1
    except MalformedPeerResponseError as e:
        print(f"❌ Error: {e.message}")
        return 1

    await agent_to_agent_communication(
        client,
        prime=prime,
        secondary=secondary,
        initial_message=message,
        rounds=rounds,
    )
    return 0


def cli() -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="A2A agent communication demo")
    parser.add_argument(
        "message",
        nargs="?",
        default="Hello! Let's start a conversation between agents.",
        help="Initial message sent to PrimeAgent",
    )
    parser.add_argument("--rounds", type=int, default=2, help="Number of conversation rounds")
    parser.add_argument("--timeout", type=float, default=10.0, help="Seconds per A2A call")
    args = parser.parse_args()

    raise SystemExit(asyncio.run(main(args.message, args.rounds, args.timeout)))


if __name__ == "__main__":
    cli()
