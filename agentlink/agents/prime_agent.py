# Copyright (c) Microsoft. All rights reserved.
"""
PrimeAgent - coding assistant with agent-to-agent relay

The agent exposes:
- /api/messages - channel activities, routed by MessageRouter
- /a2a - A2A endpoint answered by the completion provider
- /agent-card and /.well-known/agent.json - Agent Card for discovery
- /api/health, /api/metrics, /
"""

from fastapi import BackgroundTasks, FastAPI, Response

from agentlink import __version__
from agentlink.agents.common import create_agent_app
from agentlink.agents.router import MessageRouter
from agentlink.config import Settings, get_settings
from agentlink.observability import (
    LogContext,
    MessageValidationError,
    ProtocolDecodeError,
    get_logger,
    metrics,
)
from agentlink.schemas import (
    A2ARequest,
    A2AResponse,
    Activity,
    AgentCard,
    InboundMessage,
    utc_now,
)
from agentlink.services import (
    A2ARelayClient,
    ActivityCallbackClient,
    CompletionProvider,
    ConversationModeStore,
)

logger = get_logger(__name__)

PRIME_AGENT_DESCRIPTION = (
    "Coding assistant that answers programming questions and can forward a "
    "conversation to SecondaryAgent over A2A"
)


def create_agent_card(settings: Settings) -> AgentCard:
    """Create the Agent Card for PrimeAgent."""
    prime = settings.prime
    return AgentCard(
        name=prime.prime_agent_name,
        description=PRIME_AGENT_DESCRIPTION,
        url=f"http://localhost:{prime.prime_agent_port}",
        version=__version__,
        protocol_version=settings.a2a_protocol_version,
        capabilities=["code-assistance", "agent-relay", "a2a-communication"],
        endpoints={
            "a2a": "/a2a",
            "agentCard": "/agent-card",
            "messages": "/api/messages",
            "health": "/api/health",
        },
    )


def create_app(
    settings: Settings | None = None,
    *,
    mode_store: ConversationModeStore | None = None,
    completion: CompletionProvider | None = None,
    relay_client: A2ARelayClient | None = None,
    callback_client: ActivityCallbackClient | None = None,
) -> FastAPI:
    """
    Create PrimeAgent. Collaborators default to ones built from ``settings``;
    pass them in to share state or to fake the network in tests.
    """
    settings = settings or get_settings()
    prime = settings.prime

    # An empty store is falsy, so test against None
    if mode_store is None:
        mode_store = ConversationModeStore.from_settings(settings.state)
    if completion is None:
        completion = CompletionProvider(settings.llm)
    if relay_client is None:
        relay_client = A2ARelayClient(timeout=prime.relay_timeout_seconds)
    if callback_client is None:
        callback_client = ActivityCallbackClient(timeout=settings.callback_timeout_seconds)

    router = MessageRouter(
        mode_store=mode_store,
        completion=completion,
        relay_client=relay_client,
        peer_base_url=prime.secondary_agent_url,
        agent_id=prime.prime_agent_name,
        peer_name=settings.secondary.secondary_agent_name,
    )

    agent_card = create_agent_card(settings)
    app = create_agent_app(
        settings,
        agent_card,
        banner=f"{prime.prime_agent_name} is running and ready for agent-to-agent chat!",
        semantic_kernel="enabled" if settings.llm.is_configured else "disabled",
    )
    app.state.router = router
    app.state.mode_store = mode_store

    @app.post("/a2a", response_model=A2AResponse, tags=["A2A"])
    async def a2a(request: A2ARequest):
        """Answer a peer agent with the code assistant."""
        message = (request.message or "").strip()
        if not message:
            raise MessageValidationError()

        with LogContext(peer_agent=request.agent_id):
            logger.info("a2a_request_received", chars=len(message))
            metrics.increment("a2a_requests")
            answer = await completion.complete(message)

        return A2AResponse(
            agent_name=prime.prime_agent_name,
            protocol="A2A",
            response_text=answer,
            timestamp=utc_now().isoformat(),
            version=__version__,
            capabilities=agent_card.capabilities,
        )

    @app.post("/api/messages", tags=["Channel"])
    async def messages(activity: Activity, background_tasks: BackgroundTasks):
        """Route a channel activity; replies go back through the callback URL."""
        if activity.type == "message":
            if activity.conversation is None:
                raise ProtocolDecodeError("Message activity is missing conversation.id")
            replies = await router.handle(
                InboundMessage(conversation_id=activity.conversation.id, text=activity.text)
            )
        elif activity.type == "conversationUpdate":
            recipient_id = activity.recipient.id if activity.recipient else None
            replies = [router.greet() for member in activity.members_added if member.id != recipient_id]
        else:
            logger.debug("activity_ignored", activity_type=activity.type)
            replies = []

        background_tasks.add_task(callback_client.send_replies, activity, replies)
        return Response(status_code=200)

    return app


# Create the FastAPI app instance
app = create_app()


def main() -> None:
    """Run PrimeAgent with uvicorn."""
    import uvicorn

    prime = get_settings().prime
    uvicorn.run(
        "agentlink.agents.prime_agent:app",
        host=prime.prime_agent_host,
        port=prime.prime_agent_port,
    )


if __name__ == "__main__":
    main()
