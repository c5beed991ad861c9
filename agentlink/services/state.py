# Copyright (c) Microsoft. All rights reserved.
"""
Shared Conversation State

Owned state objects injected into the agent apps:
- ConversationModeStore: conversation id -> relay mode
- EchoCounter: running count of echoed messages

Both are guarded by a lock so concurrent requests cannot lose updates.
"""

import threading
import time
from collections import OrderedDict
from typing import Callable

from agentlink.config import StateSettings
from agentlink.observability import get_logger, metrics
from agentlink.schemas import ConversationMode

logger = get_logger(__name__)


class ConversationModeStore:
    """
    Per-conversation relay mode.

    Only forwarding conversations are stored; an absent id means NORMAL.
    Entries idle longer than ``ttl_seconds`` expire and the map never holds
    more than ``max_entries`` ids (least recently used goes first).
    """

    def __init__(
        self,
        ttl_seconds: float | None = 3600.0,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds or None
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        # conversation id -> last touched
        self._forwarding: OrderedDict[str, float] = OrderedDict()

    @classmethod
    def from_settings(cls, settings: StateSettings) -> "ConversationModeStore":
        return cls(
            ttl_seconds=settings.conversation_ttl_seconds,
            max_entries=settings.max_conversations,
        )

    def get(self, conversation_id: str) -> ConversationMode:
        """Current mode of a conversation; refreshes its idle timer."""
        with self._lock:
            self._expire()
            if conversation_id in self._forwarding:
                self._touch(conversation_id)
                return ConversationMode.FORWARDING
            return ConversationMode.NORMAL

    def set(self, conversation_id: str, mode: ConversationMode) -> None:
        with self._lock:
            self._set(conversation_id, mode)

    def transition(
        self,
        conversation_id: str,
        expected: ConversationMode,
        target: ConversationMode,
    ) -> bool:
        """Move to ``target`` only if the conversation is still in ``expected``."""
        with self._lock:
            self._expire()
            current = (
                ConversationMode.FORWARDING
                if conversation_id in self._forwarding
                else ConversationMode.NORMAL
            )
            if current is not expected:
                return False
            self._set(conversation_id, target)
            return True

    def __len__(self) -> int:
        with self._lock:
            self._expire()
            return len(self._forwarding)

    def _set(self, conversation_id: str, mode: ConversationMode) -> None:
        if mode is ConversationMode.NORMAL:
            self._forwarding.pop(conversation_id, None)
        else:
            self._touch(conversation_id)
            while len(self._forwarding) > self.max_entries:
                evicted, _ = self._forwarding.popitem(last=False)
                logger.info("conversation_evicted", conversation_id=evicted, reason="capacity")
                metrics.increment("conversations_evicted", tags={"reason": "capacity"})
        metrics.gauge("forwarding_conversations", len(self._forwarding))

    def _touch(self, conversation_id: str) -> None:
        self._forwarding[conversation_id] = self._clock()
        self._forwarding.move_to_end(conversation_id)

    def _expire(self) -> None:
        if self.ttl_seconds is None:
            return
        cutoff = self._clock() - self.ttl_seconds
        # Ordered by last touch, oldest first
        while self._forwarding:
            conversation_id, touched = next(iter(self._forwarding.items()))
            if touched > cutoff:
                break
            del self._forwarding[conversation_id]
            logger.info("conversation_evicted", conversation_id=conversation_id, reason="ttl")
            metrics.increment("conversations_evicted", tags={"reason": "ttl"})


class EchoCounter:
    """Monotonic message counter; not persisted across restarts."""

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        """Add one and return the new value."""
        with self._lock:
            self._value += 1
            return self._value
