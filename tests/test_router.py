# Copyright (c) Microsoft. All rights reserved.
"""
Unit tests for PrimeAgent's MessageRouter state machine.
"""

import asyncio

import pytest

from agentlink.agents import (
    AGENT_HINT,
    COMPLETION_LABEL,
    MODE_ENDED,
    PROMPT_FOR_INPUT,
    MessageRouter,
)
from agentlink.schemas import (
    ConversationMode,
    InboundMessage,
    RelayFailure,
    RelayFailureReason,
)
from agentlink.services import ConversationModeStore


@pytest.fixture
def router(mode_store, mock_completion, mock_relay_client):
    return MessageRouter(
        mode_store=mode_store,
        completion=mock_completion,
        relay_client=mock_relay_client,
        peer_base_url="http://secondary",
        agent_id="PrimeAgent",
        peer_name="SecondaryAgent",
    )


def msg(text, conversation_id="conv-1"):
    return InboundMessage(conversation_id=conversation_id, text=text)


# =============================================================================
# NORMAL MODE TESTS
# =============================================================================

class TestNormalMode:
    """Messages handled before forwarding is activated."""

    @pytest.mark.asyncio
    async def test_first_message_uses_completion(self, router, mock_completion, mock_relay_client):
        replies = await router.handle(msg("How do I reverse a list?", "brand-new"))

        mock_completion.complete.assert_awaited_once_with("How do I reverse a list?")
        mock_relay_client.relay.assert_not_awaited()
        assert replies == [
            f"{COMPLETION_LABEL}\n\nUse a list comprehension.",
            AGENT_HINT,
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["agent", "AGENT", "  Agent  "])
    async def test_agent_command_activates_forwarding(
        self, router, mode_store, mock_completion, mock_relay_client, command
    ):
        replies = await router.handle(msg(command))

        assert mode_store.get("conv-1") is ConversationMode.FORWARDING
        assert len(replies) == 2
        assert "Agent-to-Agent Mode Activated" in replies[0]
        assert "Say `end`" in replies[1]
        mock_completion.complete.assert_not_awaited()
        mock_relay_client.relay.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_end_in_normal_mode_goes_to_completion(self, router, mode_store, mock_completion):
        await router.handle(msg("end"))

        mock_completion.complete.assert_awaited_once_with("end")
        assert mode_store.get("conv-1") is ConversationMode.NORMAL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", [None, "", "   \n\t"])
    async def test_blank_input_prompts(self, router, mode_store, mock_completion, mock_relay_client, text):
        replies = await router.handle(msg(text))

        assert replies == [PROMPT_FOR_INPUT]
        assert mode_store.get("conv-1") is ConversationMode.NORMAL
        mock_completion.complete.assert_not_awaited()
        mock_relay_client.relay.assert_not_awaited()


# =============================================================================
# FORWARDING MODE TESTS
# =============================================================================

class TestForwardingMode:
    """Messages handled after forwarding is activated."""

    @pytest.mark.asyncio
    async def test_message_relayed_once(self, router, mock_completion, mock_relay_client):
        await router.handle(msg("agent"))

        replies = await router.handle(msg("Review my function"))

        mock_relay_client.relay.assert_awaited_once_with("http://secondary", "Review my function", "PrimeAgent")
        mock_completion.complete.assert_not_awaited()
        assert "forwarding your message to SecondaryAgent" in replies[0]
        assert '"Review my function"' in replies[0]
        assert replies[1] == "📥 **SecondaryAgent Response:**\n\nReview my function"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["end", "END", " End "])
    async def test_end_returns_to_normal(self, router, mode_store, mock_relay_client, command):
        await router.handle(msg("agent"))

        replies = await router.handle(msg(command))

        assert replies == [MODE_ENDED]
        assert mode_store.get("conv-1") is ConversationMode.NORMAL
        mock_relay_client.relay.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_agent_while_forwarding_is_relayed(self, router, mode_store, mock_relay_client):
        await router.handle(msg("agent"))

        await router.handle(msg("agent"))

        mock_relay_client.relay.assert_awaited_once()
        assert mode_store.get("conv-1") is ConversationMode.FORWARDING

    @pytest.mark.asyncio
    async def test_relay_failure_keeps_forwarding(self, router, mode_store, mock_relay_client):
        mock_relay_client.relay.side_effect = None
        mock_relay_client.relay.return_value = RelayFailure(
            reason=RelayFailureReason.UNREACHABLE,
            detail="Connection refused",
        )
        await router.handle(msg("agent"))

        replies = await router.handle(msg("anyone there?"))

        assert replies[-1] == "❌ Error communicating with SecondaryAgent. Please ensure it's running."
        assert mode_store.get("conv-1") is ConversationMode.FORWARDING

    @pytest.mark.asyncio
    async def test_http_failure_reports_status(self, router, mock_relay_client):
        mock_relay_client.relay.side_effect = None
        mock_relay_client.relay.return_value = RelayFailure(
            reason=RelayFailureReason.HTTP_ERROR,
            status_code=500,
        )
        await router.handle(msg("agent"))

        replies = await router.handle(msg("hello"))

        assert "Status: 500" in replies[-1]
        assert "http://secondary" in replies[-1]

    @pytest.mark.asyncio
    async def test_timeout_notice(self, router, mock_relay_client):
        mock_relay_client.relay.side_effect = None
        mock_relay_client.relay.return_value = RelayFailure(reason=RelayFailureReason.TIMEOUT)
        await router.handle(msg("agent"))

        replies = await router.handle(msg("hello"))

        assert "did not answer in time" in replies[-1]

    @pytest.mark.asyncio
    async def test_cycle_between_modes(self, router, mode_store, mock_completion, mock_relay_client):
        for _ in range(3):
            await router.handle(msg("agent"))
            await router.handle(msg("ping"))
            await router.handle(msg("end"))
            await router.handle(msg("question"))

        assert mock_relay_client.relay.await_count == 3
        assert mock_completion.complete.await_count == 3
        assert mode_store.get("conv-1") is ConversationMode.NORMAL

    @pytest.mark.asyncio
    async def test_modes_are_per_conversation(self, router, mock_completion, mock_relay_client):
        await router.handle(msg("agent", "a"))

        await router.handle(msg("hello", "b"))

        mock_completion.complete.assert_awaited_once_with("hello")
        mock_relay_client.relay.assert_not_awaited()


class TestGreeting:
    """Tests for the welcome message."""

    def test_greet_mentions_agent_command(self, router):
        greeting = router.greet()

        assert "PrimeAgent" in greeting
        assert "`agent`" in greeting
        assert "SecondaryAgent" in greeting


# =============================================================================
# CONCURRENT TRANSITION TESTS
# =============================================================================

class RacingModeStore(ConversationModeStore):
    """Store where another request flips the mode right after every read."""

    def get(self, conversation_id):
        mode = super().get(conversation_id)
        flipped = (
            ConversationMode.FORWARDING
            if mode is ConversationMode.NORMAL
            else ConversationMode.NORMAL
        )
        self.set(conversation_id, flipped)
        return mode


class TestConcurrentTransitions:
    """Replies follow the transition that actually happened."""

    def _router(self, store, mock_completion, mock_relay_client):
        return MessageRouter(
            mode_store=store,
            completion=mock_completion,
            relay_client=mock_relay_client,
            peer_base_url="http://secondary",
        )

    @pytest.mark.asyncio
    async def test_lost_activation_is_relayed(self, mock_completion, mock_relay_client):
        store = RacingModeStore()
        router = self._router(store, mock_completion, mock_relay_client)

        replies = await router.handle(msg("agent"))

        assert not any("Agent-to-Agent Mode Activated" in reply for reply in replies)
        mock_relay_client.relay.assert_awaited_once_with("http://secondary", "agent", "PrimeAgent")
        assert store.get("conv-1") is ConversationMode.FORWARDING

    @pytest.mark.asyncio
    async def test_lost_deactivation_goes_to_completion(self, mock_completion, mock_relay_client):
        store = RacingModeStore()
        store.set("conv-1", ConversationMode.FORWARDING)
        router = self._router(store, mock_completion, mock_relay_client)

        replies = await router.handle(msg("end"))

        assert replies != [MODE_ENDED]
        mock_completion.complete.assert_awaited_once_with("end")
        mock_relay_client.relay.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_simultaneous_activations_announce_once(self, router, mock_relay_client):
        results = await asyncio.gather(
            router.handle(msg("agent")),
            router.handle(msg("AGENT")),
        )

        activations = [r for r in results if "Agent-to-Agent Mode Activated" in r[0]]
        assert len(activations) == 1
        mock_relay_client.relay.assert_awaited_once()
