# Copyright (c) Microsoft. All rights reserved.
"""
Agents package - PrimeAgent and SecondaryAgent.

This package provides:
- MessageRouter: PrimeAgent's normal / forwarding state machine
- prime_agent.create_app: PrimeAgent FastAPI application
- secondary_agent.create_app: SecondaryAgent FastAPI application

The app modules are not imported here so that importing the router does not
build both applications.
"""

from .router import (
    ACTIVATE_COMMAND,
    AGENT_HINT,
    COMPLETION_LABEL,
    END_COMMAND,
    MODE_ENDED,
    PROMPT_FOR_INPUT,
    MessageRouter,
)

__all__ = [
    "ACTIVATE_COMMAND",
    "AGENT_HINT",
    "COMPLETION_LABEL",
    "END_COMMAND",
    "MODE_ENDED",
    "PROMPT_FOR_INPUT",
    "MessageRouter",
]
