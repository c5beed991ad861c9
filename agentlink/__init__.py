# Copyright (c) Microsoft. All rights reserved.
"""
AgentLink: two cooperating agents over a small A2A protocol.

This package provides:
- PrimeAgent: coding assistant that can relay a conversation to a peer
- SecondaryAgent: echo agent answering over HTTP and A2A
- A2A relay client and demo CLI
"""

__version__ = "1.0.0"

from .config import Settings, get_settings
from .llm import get_llm

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # LLM
    "get_llm",
]
