# Copyright (c) Microsoft. All rights reserved.
"""
Echo Service

SecondaryAgent's simple mode: return the message with a running count.
"""

from agentlink.observability import MessageValidationError, get_logger, metrics
from agentlink.schemas import EchoResponse
from agentlink.services.state import EchoCounter

logger = get_logger(__name__)


class EchoResponder:
    """Echo messages back, counting each successful echo."""

    def __init__(self, counter: EchoCounter | None = None):
        self.counter = counter or EchoCounter()

    def echo(self, message: str | None) -> EchoResponse:
        """
        Echo ``message`` and increment the shared counter exactly once.

        Raises:
            MessageValidationError: message is missing or blank
        """
        if not message or not message.strip():
            metrics.increment("echo_rejected")
            raise MessageValidationError("Message cannot be empty")

        count = self.counter.increment()
        logger.info("echo_received", message_count=count, message=message)
        metrics.increment("echo_messages")
        return EchoResponse(message=message, message_count=count)
