# Copyright (c) Microsoft. All rights reserved.
"""
A2A Relay Client

Sends a message to a peer agent's /a2a endpoint and returns an explicit
RelayResult: RelaySuccess with the parsed peer reply, or RelayFailure with
the reason. Nothing is retried. Malformed peer replies degrade to raw text.
"""

import json

import httpx

from agentlink.observability import (
    CORRELATION_HEADER,
    MalformedPeerResponseError,
    PeerUnreachableError,
    PerformanceTracker,
    get_correlation_id,
    get_logger,
    metrics,
)
from agentlink.schemas import (
    A2ARequest,
    A2AResponse,
    AgentCard,
    RelayFailure,
    RelayFailureReason,
    RelayResult,
    RelaySuccess,
)

logger = get_logger(__name__)

A2A_PATH = "/a2a"
AGENT_CARD_PATH = "/agent-card"


class A2ARelayClient:
    """
    Client side of the A2A protocol.

    Args:
        timeout: Seconds allowed for one round trip
        transport: httpx transport override, e.g. to reach an in-process app
    """

    def __init__(self, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def relay(self, peer_base_url: str, message: str, caller_agent_id: str) -> RelayResult:
        """
        Forward ``message`` to ``{peer_base_url}/a2a``.

        Returns:
            RelaySuccess with the peer reply, or RelayFailure if the peer
            could not be reached or answered with a non-success status
        """
        url = f"{peer_base_url.rstrip('/')}{A2A_PATH}"
        request = A2ARequest(message=message, agent_id=caller_agent_id)
        logger.info("relay_started", url=url, agent_id=caller_agent_id)

        try:
            with PerformanceTracker("relay", logger) as tracker:
                tracker.add_metadata(url=url)
                raw = await self._post(url, request)
        except PeerUnreachableError as e:
            metrics.increment("relay_calls", tags={"outcome": e.reason})
            return RelayFailure(
                reason=RelayFailureReason(e.reason),
                status_code=e.status,
                detail=e.message,
            )

        metrics.increment("relay_calls", tags={"outcome": "success"})
        return RelaySuccess(response=self.parse_response(raw))

    async def _post(self, url: str, request: A2ARequest) -> str:
        payload = request.model_dump(mode="json", by_alias=True)
        headers = {CORRELATION_HEADER: get_correlation_id()}
        try:
            async with self._client() as client:
                response = await client.post(url, json=payload, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise PeerUnreachableError(url, RelayFailureReason.TIMEOUT.value, cause=e) from e
        except httpx.HTTPError as e:
            raise PeerUnreachableError(url, RelayFailureReason.UNREACHABLE.value, cause=e) from e

        if not response.is_success:
            raise PeerUnreachableError(
                url,
                RelayFailureReason.HTTP_ERROR.value,
                status=response.status_code,
            )
        return response.text

    @staticmethod
    def parse_response(raw: str) -> A2AResponse:
        """Decode a peer reply; a body that is not an A2A payload becomes the response text."""
        try:
            payload = json.loads(raw)
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            logger.warning("peer_response_malformed", raw_response_preview=raw[:500])
            metrics.increment("peer_responses_malformed")
            return A2AResponse(response_text=raw)

        response = A2AResponse.from_payload(payload)
        if not response.response_text:
            response.response_text = raw
        return response

    async def fetch_agent_card(self, peer_base_url: str) -> AgentCard:
        """
        Discover a peer through its agent card.

        Raises:
            PeerUnreachableError: the card could not be fetched
            MalformedPeerResponseError: the card is not valid JSON
        """
        url = f"{peer_base_url.rstrip('/')}{AGENT_CARD_PATH}"
        try:
            async with self._client() as client:
                response = await client.get(url, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise PeerUnreachableError(url, RelayFailureReason.TIMEOUT.value, cause=e) from e
        except httpx.HTTPError as e:
            raise PeerUnreachableError(url, RelayFailureReason.UNREACHABLE.value, cause=e) from e

        if not response.is_success:
            raise PeerUnreachableError(url, RelayFailureReason.HTTP_ERROR.value, status=response.status_code)

        try:
            return AgentCard.model_validate(response.json())
        except ValueError as e:
            raise MalformedPeerResponseError(response.text, cause=e) from e
