# Copyright (c) Microsoft. All rights reserved.
"""
Completion Service

Wraps the single text-completion call PrimeAgent makes for normal-mode
messages. Failures never reach the caller: they are logged and replaced by
a static reply listing the available commands.
"""

from typing import Callable

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate

from agentlink.config import LLMSettings
from agentlink.llm import get_llm
from agentlink.observability import (
    CompletionError,
    MissingAPIKeyError,
    PerformanceTracker,
    get_logger,
    metrics,
)

logger = get_logger(__name__)


CODE_ASSISTANT_SYSTEM_PROMPT = """You are a helpful coding assistant. Analyze the user's request and provide helpful programming advice,
code snippets, or explanations. Be concise but thorough. Format your response nicely for chat."""

CODE_ASSISTANT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", CODE_ASSISTANT_SYSTEM_PROMPT),
    ("human", "User request: {input}"),
])

FALLBACK_REPLY = (
    "I can help you with coding questions and agent communication. "
    "Say `agent` to start agent-to-agent mode."
)


def _content_text(content: str | list) -> str:
    """Flatten a chat message content (plain string or content blocks)."""
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class CompletionProvider:
    """Prompt in, text out."""

    def __init__(
        self,
        llm_settings: LLMSettings | None = None,
        llm_factory: Callable[[], BaseChatModel] | None = None,
        fallback: str = FALLBACK_REPLY,
    ):
        self.llm_settings = llm_settings
        self._llm_factory = llm_factory or (lambda: get_llm(self.llm_settings))
        self.fallback = fallback

    async def complete(self, prompt: str) -> str:
        """Return the model's answer, or the fallback reply on any failure."""
        try:
            with PerformanceTracker("completion", logger) as tracker:
                llm = self._llm_factory()
                messages = CODE_ASSISTANT_PROMPT.format_messages(input=prompt)
                result = await llm.ainvoke(messages)
                text = _content_text(result.content).strip()
                if not text:
                    raise CompletionError("Model returned an empty completion")
                tracker.add_metadata(response_chars=len(text))
        except MissingAPIKeyError as e:
            logger.warning("completion_unconfigured", message=e.message)
            metrics.increment("completion_fallbacks", tags={"reason": "missing_api_key"})
            return self.fallback
        except Exception as e:
            logger.error("completion_failed", error_type=type(e).__name__, error=str(e))
            metrics.increment("completion_fallbacks", tags={"reason": "error"})
            return self.fallback

        metrics.increment("completions")
        return text
