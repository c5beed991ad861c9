# Copyright (c) Microsoft. All rights reserved.
"""
SecondaryAgent - echo agent

The agent exposes:
- /api/echo - echo with a running message count
- /a2a - A2A endpoint, echoes the message back to the calling agent
- /api/messages - channel activities, echoed back through the callback URL
- /agent-card and /.well-known/agent.json - Agent Card for discovery
- /api/health, /api/metrics, /
"""

from fastapi import BackgroundTasks, FastAPI, Response

from agentlink import __version__
from agentlink.agents.common import create_agent_app
from agentlink.config import Settings, get_settings
from agentlink.observability import LogContext, get_logger
from agentlink.schemas import (
    A2ARequest,
    A2AResponse,
    Activity,
    AgentCard,
    EchoRequest,
    EchoResponse,
    utc_now,
)
from agentlink.services import ActivityCallbackClient, EchoCounter, EchoResponder

logger = get_logger(__name__)

SECONDARY_AGENT_DESCRIPTION = "Echo agent that returns whatever it receives, over HTTP and A2A"
EMPTY_ACTIVITY_REPLY = "[Empty message received]"


def create_agent_card(settings: Settings) -> AgentCard:
    """Create the Agent Card for SecondaryAgent."""
    secondary = settings.secondary
    return AgentCard(
        name=secondary.secondary_agent_name,
        description=SECONDARY_AGENT_DESCRIPTION,
        url=f"http://localhost:{secondary.secondary_agent_port}",
        version=__version__,
        protocol_version=settings.a2a_protocol_version,
        capabilities=["echo", "a2a-communication"],
        endpoints={
            "a2a": "/a2a",
            "agentCard": "/agent-card",
            "echo": "/api/echo",
            "messages": "/api/messages",
            "health": "/api/health",
        },
    )


def create_app(
    settings: Settings | None = None,
    *,
    counter: EchoCounter | None = None,
    callback_client: ActivityCallbackClient | None = None,
) -> FastAPI:
    """Create SecondaryAgent; ``counter`` is shared by every echo route."""
    settings = settings or get_settings()
    name = settings.secondary.secondary_agent_name

    responder = EchoResponder(counter if counter is not None else EchoCounter())
    if callback_client is None:
        callback_client = ActivityCallbackClient(timeout=settings.callback_timeout_seconds)

    agent_card = create_agent_card(settings)
    app = create_agent_app(
        settings,
        agent_card,
        banner=f"{name} is running and ready for agent-to-agent chat!",
        semantic_kernel="not-used",
    )
    app.state.responder = responder

    @app.post("/api/echo", response_model=EchoResponse, tags=["Echo"])
    async def echo(request: EchoRequest):
        """Echo the message with the running count; 400 when it is empty."""
        return responder.echo(request.message)

    @app.post("/a2a", response_model=A2AResponse, tags=["A2A"])
    async def a2a(request: A2ARequest):
        """Echo an A2A message back to the calling agent."""
        with LogContext(peer_agent=request.agent_id):
            result = responder.echo(request.message)

        return A2AResponse(
            agent_name=name,
            protocol="A2A",
            response_text=result.message,
            timestamp=utc_now().isoformat(),
            version=__version__,
            capabilities=agent_card.capabilities,
        )

    @app.post("/api/messages", tags=["Channel"])
    async def messages(activity: Activity, background_tasks: BackgroundTasks):
        """Echo channel messages and greet new members."""
        replies: list[str] = []
        if activity.type == "message":
            text = (activity.text or "").strip()
            if text:
                replies.append(responder.echo(text).message)
            else:
                replies.append(EMPTY_ACTIVITY_REPLY)
        elif activity.type == "conversationUpdate":
            recipient_id = activity.recipient.id if activity.recipient else None
            replies.extend(
                f"Hello! I'm {name} - I simply echo back whatever you send me."
                for member in activity.members_added
                if member.id != recipient_id
            )
        else:
            logger.debug("activity_ignored", activity_type=activity.type)

        background_tasks.add_task(callback_client.send_replies, activity, replies)
        return Response(status_code=200)

    return app


# Create the FastAPI app instance
app = create_app()


def main() -> None:
    """Run SecondaryAgent with uvicorn."""
    import uvicorn

    secondary = get_settings().secondary
    uvicorn.run(
        "agentlink.agents.secondary_agent:app",
        host=secondary.secondary_agent_host,
        port=secondary.secondary_agent_port,
    )


if __name__ == "__main__":
    main()
