# Copyright (c) Microsoft. All rights reserved.
"""
Activity Callback Client

Delivers bot replies for /api/messages by posting a reply activity to
``{serviceUrl}/v3/conversations/{conversation.id}/activities``. Delivery is
best effort: failures are logged and swallowed.
"""

from urllib.parse import quote

import httpx

from agentlink.observability import (
    CORRELATION_HEADER,
    get_correlation_id,
    get_logger,
    metrics,
)
from agentlink.schemas import Activity

logger = get_logger(__name__)


def callback_url(service_url: str, conversation_id: str) -> str:
    """Reply endpoint for a conversation; the id is escaped as one path segment."""
    return f"{service_url.rstrip('/')}/v3/conversations/{quote(conversation_id, safe='')}/activities"


def build_reply(activity: Activity, text: str) -> Activity:
    """Reply activity addressed back to the sender of ``activity``."""
    return Activity(
        type="message",
        text=text,
        service_url=activity.service_url,
        channel_id=activity.channel_id,
        conversation=activity.conversation,
        from_=activity.recipient,
        recipient=activity.from_,
        reply_to_id=activity.id,
    )


class ActivityCallbackClient:
    """Posts reply activities to the channel that sent the inbound activity."""

    def __init__(self, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self._transport = transport

    async def send_replies(self, activity: Activity, replies: list[str]) -> int:
        """Send each reply in order; returns how many were delivered."""
        if not replies:
            return 0
        if not activity.service_url or activity.conversation is None:
            logger.warning("callback_skipped", reason="missing serviceUrl or conversation")
            metrics.increment("callback_deliveries", value=len(replies), tags={"outcome": "skipped"})
            return 0

        url = callback_url(activity.service_url, activity.conversation.id)
        delivered = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for text in replies:
                delivered += await self._send(client, url, build_reply(activity, text))
        return delivered

    async def _send(self, client: httpx.AsyncClient, url: str, reply: Activity) -> bool:
        payload = reply.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            response = await client.post(
                url,
                json=payload,
                headers={CORRELATION_HEADER: get_correlation_id()},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("callback_failed", url=url, reason="unreachable", error=str(e))
            metrics.increment("callback_deliveries", tags={"outcome": "failed"})
            return False

        if not response.is_success:
            logger.warning("callback_failed", url=url, reason="http_error", status=response.status_code)
            metrics.increment("callback_deliveries", tags={"outcome": "failed"})
            return False

        metrics.increment("callback_deliveries", tags={"outcome": "delivered"})
        return True
