# Copyright (c) Microsoft. All rights reserved.
"""
LLM Factory

Creates chat model instances based on configuration.
Supports OpenAI, Azure OpenAI, and Anthropic.
"""

from langchain_core.language_models import BaseChatModel
from langchain_openai import AzureChatOpenAI, ChatOpenAI

from agentlink.config import LLMSettings, get_settings
from agentlink.observability import MissingAPIKeyError, get_logger

# Initialize logger
logger = get_logger(__name__)


def get_llm(
    llm_settings: LLMSettings | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> BaseChatModel:
    """
    Create an LLM instance based on settings.

    Args:
        llm_settings: Settings to use instead of the cached process settings
        temperature: Override default temperature
        max_tokens: Override default max tokens

    Returns:
        LLM instance configured for the selected provider

    Raises:
        MissingAPIKeyError: The selected provider has no credentials
    """
    llm_settings = llm_settings or get_settings().llm

    temp = temperature if temperature is not None else llm_settings.temperature
    tokens = max_tokens if max_tokens is not None else llm_settings.max_tokens

    provider = llm_settings.llm_provider
    logger.debug("creating_llm", provider=provider, temperature=temp, max_tokens=tokens)

    if provider == "azure_openai":
        if not llm_settings.azure_openai_api_key:
            raise MissingAPIKeyError("Azure OpenAI")

        return AzureChatOpenAI(
            azure_endpoint=llm_settings.azure_openai_endpoint,
            api_key=llm_settings.azure_openai_api_key,
            azure_deployment=llm_settings.azure_openai_deployment,
            api_version=llm_settings.azure_openai_api_version,
            temperature=temp,
            max_tokens=tokens,
        )

    if provider == "anthropic":
        if not llm_settings.anthropic_api_key:
            raise MissingAPIKeyError("Anthropic")

        # Lazy import to avoid requiring anthropic if not used
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            api_key=llm_settings.anthropic_api_key,
            model=llm_settings.anthropic_model,
            temperature=temp,
            max_tokens=tokens,
        )

    if not llm_settings.openai_api_key:
        raise MissingAPIKeyError("OpenAI")

    return ChatOpenAI(
        api_key=llm_settings.openai_api_key,
        model=llm_settings.openai_model,
        temperature=temp,
        max_tokens=tokens,
    )
