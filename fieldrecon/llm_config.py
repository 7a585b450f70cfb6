#!/usr/bin/env python3
"""
LLMConfig - Completion Provider Configuration

Supports multiple providers:
- ollama/model_name (local)
- openai/gpt-4o-mini, openai/gpt-4o
- azure/<deployment-name> (Azure OpenAI, needs AZURE_API_BASE and AZURE_API_VERSION)
- anthropic/claude-3-haiku-20240307
- gemini/gemini-2.0-flash
- groq/llama3-70b-8192

Usage:
    llm_config = LLMConfig(provider="openai/gpt-4o-mini", api_token="sk-...")
    llm_config = LLMConfig(provider="azure/field-mapper")  # Uses AZURE_API_KEY
    llm_config = LLMConfig.from_env()
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


# Provider to environment variable mapping
PROVIDER_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "azure": "AZURE_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "groq": "GROQ_API_KEY",
    "ollama": None,  # Ollama doesn't need API key
}

# Provider to base URL mapping (azure has no default, it is per resource)
PROVIDER_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com",
    "gemini": "https://generativelanguage.googleapis.com/v1beta",
    "groq": "https://api.groq.com/openai/v1",
    "ollama": "http://localhost:11434",
}

# Default models per provider
DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "azure": "gpt-4o-mini",
    "anthropic": "claude-3-haiku-20240307",
    "gemini": "gemini-2.0-flash",
    "groq": "llama3-70b-8192",
    "ollama": "qwen2.5:7b",
}


@dataclass
class LLMConfig:
    """
    Completion provider configuration.

    Parameters:
        provider: Format "provider/model" e.g. "openai/gpt-4o-mini", "ollama/qwen2.5:7b"
        api_token: Optional. If not provided, reads from environment variable based on provider.
                   Can also use "env:VAR_NAME" format to specify custom env var.
        base_url: Optional. Custom API endpoint for the provider.
        max_tokens: Maximum tokens to generate
        timeout: Request timeout in seconds
        extra_params: Additional provider-specific parameters
    """
    provider: str = "openai/gpt-4o-mini"
    api_token: Optional[str] = None
    base_url: Optional[str] = None
    max_tokens: int = 4096
    timeout: int = 300
    top_p: float = 0.9
    extra_params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        parts = self.provider.split("/", 1)
        self._provider_name = parts[0].lower()
        self._model_name = parts[1] if len(parts) > 1 else DEFAULT_MODELS.get(self._provider_name, "")

        self._resolved_token = self._resolve_api_token()

        if self.base_url is None:
            self.base_url = PROVIDER_BASE_URLS.get(self._provider_name)

    def _resolve_api_token(self) -> Optional[str]:
        """Resolve API token from various sources."""
        if self.api_token is None:
            env_var = PROVIDER_ENV_VARS.get(self._provider_name)
            if env_var:
                return os.getenv(env_var)
            return None

        if self.api_token.startswith("env:"):
            env_var = self.api_token[4:].strip()
            return os.getenv(env_var)

        return self.api_token

    @property
    def provider_name(self) -> str:
        return self._provider_name

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def litellm_model(self) -> str:
        """Model string in litellm's "provider/model" form"""
        return f"{self._provider_name}/{self._model_name}"

    @property
    def resolved_api_token(self) -> Optional[str]:
        return self._resolved_token

    @property
    def is_local(self) -> bool:
        return self._provider_name == "ollama"

    @property
    def requires_api_key(self) -> bool:
        return self._provider_name != "ollama"

    def validate(self) -> bool:
        """Validate configuration"""
        if self.requires_api_key and not self._resolved_token:
            env_var = PROVIDER_ENV_VARS.get(self._provider_name, "unknown")
            raise ValueError(
                f"API token required for {self._provider_name}. "
                f"Set api_token or {env_var} environment variable."
            )
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging (never includes the token)"""
        return {
            "provider": self.provider,
            "provider_name": self._provider_name,
            "model_name": self._model_name,
            "base_url": self.base_url,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
            "has_api_token": self._resolved_token is not None,
            "is_local": self.is_local,
        }

    @classmethod
    def from_env(cls, prefix: str = "FIELDRECON") -> "LLMConfig":
        """
        Create LLMConfig from environment variables.

        Reads:
            {prefix}_LLM_PROVIDER (default openai/gpt-4o-mini)
            {prefix}_LLM_API_TOKEN
            {prefix}_LLM_BASE_URL
            {prefix}_LLM_MAX_TOKENS
            {prefix}_LLM_TIMEOUT
        """
        return cls(
            provider=os.getenv(f"{prefix}_LLM_PROVIDER", "openai/gpt-4o-mini"),
            api_token=os.getenv(f"{prefix}_LLM_API_TOKEN"),
            base_url=os.getenv(f"{prefix}_LLM_BASE_URL"),
            max_tokens=int(os.getenv(f"{prefix}_LLM_MAX_TOKENS", "4096")),
            timeout=int(os.getenv(f"{prefix}_LLM_TIMEOUT", "300")),
        )
