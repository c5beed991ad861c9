# Copyright (c) Microsoft. All rights reserved.
"""
Message Router

PrimeAgent's per-conversation state machine:

    NORMAL      --"agent"-->  FORWARDING   (instructions sent)
    FORWARDING  --"end"---->  NORMAL       (confirmation sent)
    NORMAL      --other---->  NORMAL       (answered by the completion provider)
    FORWARDING  --other---->  FORWARDING   (relayed to the peer agent)

Blank input is answered with a prompt and touches nothing. Commands are
matched case-insensitively after trimming.
"""

from agentlink.observability import LogContext, get_logger, metrics
from agentlink.schemas import (
    ConversationMode,
    InboundMessage,
    RelayFailure,
    RelayFailureReason,
    RelayResult,
)
from agentlink.services.completion import CompletionProvider
from agentlink.services.relay import A2ARelayClient
from agentlink.services.state import ConversationModeStore

logger = get_logger(__name__)

ACTIVATE_COMMAND = "agent"
END_COMMAND = "end"

PROMPT_FOR_INPUT = "Please provide a message for me to process."
COMPLETION_LABEL = "💡 **Code Assistant Response:**"
AGENT_HINT = "💬 *Say `agent` to start an agent-to-agent conversation for specialized analysis.*"
MODE_ENDED = "🔚 **Agent conversation ended.** I'm back to normal coding assistant mode!"


class MessageRouter:
    """
    Decide, per message, between the local completion and the peer relay.

    Args:
        mode_store: Owned conversation mode state
        completion: Normal-mode responder
        relay_client: Forwarding-mode transport
        peer_base_url: Base URL of the peer agent
        agent_id: Name this agent sends as ``agentId``
        peer_name: Display name of the peer used in replies
    """

    def __init__(
        self,
        mode_store: ConversationModeStore,
        completion: CompletionProvider,
        relay_client: A2ARelayClient,
        peer_base_url: str,
        agent_id: str = "PrimeAgent",
        peer_name: str = "SecondaryAgent",
    ):
        self.mode_store = mode_store
        self.completion = completion
        self.relay_client = relay_client
        self.peer_base_url = peer_base_url
        self.agent_id = agent_id
        self.peer_name = peer_name

    async def handle(self, message: InboundMessage) -> list[str]:
        """Process one inbound message and return the replies in order."""
        text = (message.text or "").strip()
        if not text:
            metrics.increment("router_messages", tags={"route": "empty"})
            return [PROMPT_FOR_INPUT]

        conversation_id = message.conversation_id
        with LogContext(conversation_id=conversation_id):
            mode = self.mode_store.get(conversation_id)
            command = text.lower()
            logger.info("message_received", mode=mode.value, chars=len(text))

            if mode is ConversationMode.NORMAL:
                if command == ACTIVATE_COMMAND:
                    if self._activate(conversation_id):
                        return self._activated_replies()
                    # A concurrent request activated first; handle as forwarding
                    return await self._forward(text)
                return await self._complete(text)

            if command == END_COMMAND:
                if self._deactivate(conversation_id):
                    return [MODE_ENDED]
                return await self._complete(text)
            return await self._forward(text)

    def greet(self) -> str:
        """Welcome text for members joining a conversation."""
        return (
            f"👋 Hello! I'm **{self.agent_id}**, a code assistant agent that can:\n\n"
            "• 💻 **Help with coding questions** and programming advice\n"
            "• 🤖 **Communicate with other agents** for advanced workflows\n\n"
            "**Quick Start:**\n"
            "• Ask me any coding question\n"
            "• Say `agent` to start agent-to-agent communication\n"
            f"• I can forward your messages to {self.peer_name} for analysis!"
        )

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def _activate(self, conversation_id: str) -> bool:
        if not self.mode_store.transition(
            conversation_id, ConversationMode.NORMAL, ConversationMode.FORWARDING
        ):
            logger.info("mode_transition_lost", target=ConversationMode.FORWARDING.value)
            return False
        logger.info("forwarding_activated")
        metrics.increment("router_messages", tags={"route": "activate"})
        return True

    def _deactivate(self, conversation_id: str) -> bool:
        if not self.mode_store.transition(
            conversation_id, ConversationMode.FORWARDING, ConversationMode.NORMAL
        ):
            logger.info("mode_transition_lost", target=ConversationMode.NORMAL.value)
            return False
        logger.info("forwarding_ended")
        metrics.increment("router_messages", tags={"route": "end"})
        return True

    def _activated_replies(self) -> list[str]:
        return [
            "🤖 **Agent-to-Agent Mode Activated!**\n\n"
            f"I'll now forward your messages to the {self.peer_name} for specialized code analysis.",
            "✨ **Instructions:**\n"
            f"• Type your message to communicate with {self.peer_name}\n"
            "• Say `end` to return to normal mode\n"
            f"• {self.peer_name} specializes in code analysis and insights!",
        ]

    # =========================================================================
    # DOWNSTREAM CALLS
    # =========================================================================

    async def _complete(self, text: str) -> list[str]:
        metrics.increment("router_messages", tags={"route": "completion"})
        answer = await self.completion.complete(text)
        return [f"{COMPLETION_LABEL}\n\n{answer}", AGENT_HINT]

    async def _forward(self, text: str) -> list[str]:
        metrics.increment("router_messages", tags={"route": "relay"})
        notice = (
            f"📤 **{self.agent_id} forwarding your message to {self.peer_name}...**\n\n"
            f"*Original Message:* \"{text}\""
        )
        result = await self.relay_client.relay(self.peer_base_url, text, self.agent_id)
        return [notice, self.format_relay_result(result)]

    def format_relay_result(self, result: RelayResult) -> str:
        """User-visible text for a relay outcome."""
        if isinstance(result, RelayFailure):
            logger.warning("relay_degraded", reason=result.reason.value, status=result.status_code)
            if result.reason is RelayFailureReason.HTTP_ERROR:
                return (
                    f"❌ Failed to communicate with {self.peer_name}. Status: {result.status_code}\n"
                    f"Make sure {self.peer_name} is running at {self.peer_base_url}."
                )
            if result.reason is RelayFailureReason.TIMEOUT:
                return f"⏱️ {self.peer_name} did not answer in time. Please try again shortly."
            return f"❌ Error communicating with {self.peer_name}. Please ensure it's running."

        peer = result.response.agent_name or self.peer_name
        return f"📥 **{peer} Response:**\n\n{result.response.response_text}"
