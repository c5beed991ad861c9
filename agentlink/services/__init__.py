# Copyright (c) Microsoft. All rights reserved.
"""Services package."""

from .callback import ActivityCallbackClient, build_reply, callback_url
from .completion import FALLBACK_REPLY, CompletionProvider
from .echo import EchoResponder
from .relay import A2ARelayClient
from .state import ConversationModeStore, EchoCounter

__all__ = [
    "A2ARelayClient",
    "ActivityCallbackClient",
    "CompletionProvider",
    "ConversationModeStore",
    "EchoCounter",
    "EchoResponder",
    "FALLBACK_REPLY",
    "build_reply",
    "callback_url",
]
