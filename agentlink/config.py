# Copyright (c) Microsoft. All rights reserved.
"""
Configuration and Settings for PrimeAgent and SecondaryAgent

Uses Pydantic Settings for type-safe configuration management.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """LLM provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM Provider: "openai", "azure_openai", "anthropic"
    llm_provider: Literal["openai", "azure_openai", "anthropic"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI Configuration
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-3.5-turbo", description="OpenAI model name")

    # Azure OpenAI Configuration
    azure_openai_endpoint: str | None = Field(default=None, description="Azure OpenAI endpoint")
    azure_openai_api_key: str | None = Field(default=None, description="Azure OpenAI API key")
    azure_openai_deployment: str | None = Field(default=None, description="Azure OpenAI deployment name")
    azure_openai_api_version: str = Field(default="2024-08-01-preview", description="Azure OpenAI API version")

    # Anthropic Configuration
    anthropic_api_key: str | None = Field(default=None, description="Anthropic API key")
    anthropic_model: str = Field(default="claude-3-5-sonnet-20241022", description="Anthropic model name")

    # LLM Parameters
    temperature: float = Field(default=0.2, description="LLM temperature")
    max_tokens: int = Field(default=1024, description="Max tokens for LLM response")

    @property
    def is_configured(self) -> bool:
        """True when the selected provider has credentials."""
        if self.llm_provider == "azure_openai":
            return bool(self.azure_openai_api_key)
        if self.llm_provider == "anthropic":
            return bool(self.anthropic_api_key)
        return bool(self.openai_api_key)


class PrimeAgentSettings(BaseSettings):
    """PrimeAgent server configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    prime_agent_name: str = Field(default="PrimeAgent", description="Agent name advertised over A2A")
    prime_agent_host: str = Field(default="0.0.0.0", description="Bind address")
    prime_agent_port: int = Field(default=3978, description="PrimeAgent port")

    # Peer used in forwarding mode
    secondary_agent_url: str = Field(
        default="http://localhost:3979",
        description="Base URL of the SecondaryAgent",
    )
    relay_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for one A2A relay round trip",
    )


class SecondaryAgentSettings(BaseSettings):
    """SecondaryAgent server configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    secondary_agent_name: str = Field(default="SecondaryAgent", description="Agent name advertised over A2A")
    secondary_agent_host: str = Field(default="0.0.0.0", description="Bind address")
    secondary_agent_port: int = Field(default=3979, description="SecondaryAgent port")


class StateSettings(BaseSettings):
    """Conversation state retention."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 0 disables idle expiry
    conversation_ttl_seconds: float = Field(
        default=3600.0,
        ge=0,
        description="Idle time after which a forwarding conversation falls back to normal",
    )
    max_conversations: int = Field(
        default=10_000,
        gt=0,
        description="Maximum number of conversations tracked in forwarding mode",
    )


class Settings(BaseSettings):
    """Main application settings combining all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sub-configurations
    llm: LLMSettings = Field(default_factory=LLMSettings)
    prime: PrimeAgentSettings = Field(default_factory=PrimeAgentSettings)
    secondary: SecondaryAgentSettings = Field(default_factory=SecondaryAgentSettings)
    state: StateSettings = Field(default_factory=StateSettings)

    # Outbound reply delivery for /api/messages
    callback_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout when posting replies to the channel callback URL",
    )

    a2a_protocol_version: str = Field(default="1.0", description="A2A protocol version")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
