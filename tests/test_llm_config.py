#!/usr/bin/env python3
"""
Tests for LLMConfig multi-provider support and the classifier factory
"""

import os
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from fieldrecon.errors import ServiceCallError
from fieldrecon.llm import Completion, OllamaClassifier
from fieldrecon.llm_config import (
    LLMConfig,
    PROVIDER_ENV_VARS,
    PROVIDER_BASE_URLS,
    DEFAULT_MODELS,
)
from fieldrecon.llm_factory import LiteLLMClassifier, create_classifier, setup_classifier
from fieldrecon.retry import RetryExhaustedError


class TestLLMConfigBasic:
    """Basic LLMConfig functionality tests"""

    def test_default_config(self):
        """Default config uses a hosted OpenAI model"""
        config = LLMConfig()
        assert config.provider_name == "openai"
        assert config.model_name == "gpt-4o-mini"
        assert config.is_local is False
        assert config.requires_api_key is True

    def test_provider_parsing(self):
        """Test provider string parsing"""
        config = LLMConfig(provider="azure/field-mapper")
        assert config.provider_name == "azure"
        assert config.model_name == "field-mapper"
        assert config.litellm_model == "azure/field-mapper"

        config = LLMConfig(provider="ollama/qwen2.5:7b")
        assert config.provider_name == "ollama"
        assert config.model_name == "qwen2.5:7b"

    def test_provider_only(self):
        """Only the provider given: default model is used"""
        config = LLMConfig(provider="anthropic")
        assert config.model_name == DEFAULT_MODELS["anthropic"]

    def test_base_url_defaults(self):
        for provider, url in PROVIDER_BASE_URLS.items():
            config = LLMConfig(provider=f"{provider}/test-model")
            assert config.base_url == url

    def test_azure_has_no_default_base_url(self):
        assert LLMConfig(provider="azure/field-mapper").base_url is None

    def test_custom_base_url(self):
        custom_url = "https://proxy.internal/v1"
        config = LLMConfig(provider="openai/gpt-4o", base_url=custom_url)
        assert config.base_url == custom_url


class TestLLMConfigAPIToken:
    """API token resolution tests"""

    def test_explicit_api_token(self):
        config = LLMConfig(provider="openai/gpt-4o", api_token="sk-test-token")
        assert config.resolved_api_token == "sk-test-token"

    def test_env_prefix_api_token(self):
        with patch.dict(os.environ, {"MY_CUSTOM_KEY": "custom-token-value"}):
            config = LLMConfig(provider="openai/gpt-4o", api_token="env:MY_CUSTOM_KEY")
            assert config.resolved_api_token == "custom-token-value"

    def test_auto_env_resolution(self):
        with patch.dict(os.environ, {"AZURE_API_KEY": "azure-token"}):
            config = LLMConfig(provider="azure/field-mapper")
            assert config.resolved_api_token == "azure-token"

    def test_env_var_mapping(self):
        expected = {
            "openai": "OPENAI_API_KEY",
            "azure": "AZURE_API_KEY",
            "anthropic": "ANTHROPIC_API_KEY",
            "gemini": "GEMINI_API_KEY",
            "groq": "GROQ_API_KEY",
        }
        for provider, env_var in expected.items():
            assert PROVIDER_ENV_VARS.get(provider) == env_var

    def test_ollama_no_api_key(self):
        config = LLMConfig(provider="ollama/llama3")
        assert config.requires_api_key is False
        assert PROVIDER_ENV_VARS.get("ollama") is None


class TestLLMConfigValidation:
    """Validation tests"""

    def test_validate_with_api_key(self):
        config = LLMConfig(provider="openai/gpt-4o", api_token="sk-test")
        assert config.validate() is True

    def test_validate_without_api_key_for_cloud(self):
        with patch.dict(os.environ, {}, clear=True):
            config = LLMConfig(provider="openai/gpt-4o")
            with pytest.raises(ValueError, match="API token required"):
                config.validate()

    def test_validate_ollama_without_key(self):
        config = LLMConfig(provider="ollama/llama3")
        assert config.validate() is True


class TestLLMConfigSerialization:
    """Serialization tests"""

    def test_to_dict_hides_token(self):
        config = LLMConfig(provider="openai/gpt-4o-mini", api_token="sk-test", max_tokens=2048)
        d = config.to_dict()

        assert d["provider_name"] == "openai"
        assert d["model_name"] == "gpt-4o-mini"
        assert d["max_tokens"] == 2048
        assert d["has_api_token"] is True
        assert "sk-test" not in str(d)

    def test_from_env(self):
        env_vars = {
            "FIELDRECON_LLM_PROVIDER": "groq/llama3-8b-8192",
            "GROQ_API_KEY": "test-groq-key",
            "FIELDRECON_LLM_TIMEOUT": "45",
        }
        with patch.dict(os.environ, env_vars):
            config = LLMConfig.from_env()

            assert config.provider_name == "groq"
            assert config.model_name == "llama3-8b-8192"
            assert config.timeout == 45
            assert config.resolved_api_token == "test-groq-key"


class TestClassifierFactory:
    """create_classifier / setup_classifier"""

    def test_ollama(self):
        classifier = create_classifier(LLMConfig(provider="ollama/test-model"))
        assert isinstance(classifier, OllamaClassifier)
        assert classifier.model == "test-model"
        assert classifier.base_url == "http://localhost:11434"

    def test_hosted_provider_uses_litellm(self):
        classifier = create_classifier(LLMConfig(provider="azure/field-mapper", api_token="key"))
        assert isinstance(classifier, LiteLLMClassifier)
        assert classifier.model == "azure/field-mapper"

    def test_hosted_provider_without_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="API token required"):
                create_classifier(LLMConfig(provider="openai/gpt-4o-mini"))

    def test_setup_from_env(self):
        with patch.dict(os.environ, {"FIELDRECON_LLM_PROVIDER": "ollama/qwen2.5:7b"}):
            classifier = setup_classifier()
            assert isinstance(classifier, OllamaClassifier)


def _litellm_response(text, prompt_tokens=12, completion_tokens=3):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


class TestLiteLLMClassifier:
    """Calls go through litellm.acompletion (mocked)"""

    @pytest.mark.asyncio
    async def test_classify(self):
        classifier = LiteLLMClassifier(LLMConfig(provider="openai/gpt-4o-mini", api_token="sk-test"))
        mock = AsyncMock(return_value=_litellm_response("[]"))

        with patch("fieldrecon.llm_factory.litellm.acompletion", mock):
            completion = await classifier.classify("system", "user", 0.2)

        assert isinstance(completion, Completion)
        assert completion.text == "[]"
        assert completion.usage.input_tokens == 12
        assert completion.usage.output_tokens == 3

        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["temperature"] == 0.2
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["drop_params"] is True
        assert "api_base" not in kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}

    @pytest.mark.asyncio
    async def test_custom_base_url_forwarded(self):
        config = LLMConfig(provider="azure/field-mapper", api_token="k", base_url="https://res.openai.azure.com")
        mock = AsyncMock(return_value=_litellm_response("[]"))

        with patch("fieldrecon.llm_factory.litellm.acompletion", mock):
            await LiteLLMClassifier(config).classify("s", "u")

        assert mock.call_args.kwargs["api_base"] == "https://res.openai.azure.com"

    @pytest.mark.asyncio
    async def test_provider_error_becomes_service_error(self):
        classifier = LiteLLMClassifier(LLMConfig(provider="openai/gpt-4o-mini", api_token="sk-test"))
        mock = AsyncMock(side_effect=RuntimeError("invalid request"))

        with patch("fieldrecon.llm_factory.litellm.acompletion", mock):
            with pytest.raises(ServiceCallError):
                await classifier.classify("s", "u")

        assert mock.call_count == 1

    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self):
        classifier = LiteLLMClassifier(LLMConfig(provider="openai/gpt-4o-mini", api_token="sk-test"))
        mock = AsyncMock(side_effect=ConnectionError("refused"))

        with patch("fieldrecon.llm_factory.litellm.acompletion", mock), \
                patch("fieldrecon.retry.asyncio.sleep", AsyncMock()):
            with pytest.raises(RetryExhaustedError):
                await classifier.classify("s", "u")

        assert mock.call_count == 3
