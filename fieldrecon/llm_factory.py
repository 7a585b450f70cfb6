import logging
from typing import Any, Optional

import litellm

from .errors import ServiceCallError
from .llm import Completion, OllamaClassifier, TokenUsage
from .llm_config import LLMConfig, PROVIDER_BASE_URLS
from .retry import retry_service

logger = logging.getLogger(__name__)


def setup_classifier(llm_config: Optional[LLMConfig] = None) -> Any:
    """
    Create the completion classifier used for AI field mapping.

    Args:
        llm_config: Optional LLMConfig. If not provided, read from environment.

    Returns:
        Client instance with an async classify(system_prompt, user_prompt, temperature) method
    """
    if llm_config is None:
        llm_config = LLMConfig.from_env()
    return create_classifier(llm_config)


def create_classifier(llm_config: LLMConfig) -> Any:
    """
    Ollama uses the local aiohttp client; every hosted provider goes through litellm.

    See https://docs.litellm.ai/docs/providers for the provider list.
    """
    logger.info(f"Completion provider: {llm_config.provider_name}/{llm_config.model_name}")

    if llm_config.provider_name == "ollama":
        return OllamaClassifier(
            base_url=llm_config.base_url or "http://localhost:11434",
            model=llm_config.model_name,
            num_ctx=llm_config.extra_params.get("num_ctx", 8192),
            num_predict=llm_config.max_tokens,
            top_p=llm_config.top_p,
            timeout=llm_config.timeout,
        )

    llm_config.validate()
    return LiteLLMClassifier(llm_config)


class LiteLLMClassifier:
    """
    Hosted completion client using litellm.

    Provider format: "provider/model" (e.g., "openai/gpt-4o-mini", "azure/field-mapper").
    Parameters a model rejects (e.g. temperature on reasoning models) are dropped.
    """

    def __init__(self, llm_config: LLMConfig):
        self.config = llm_config
        self.model = llm_config.litellm_model
        self.max_tokens = llm_config.max_tokens
        self.timeout = llm_config.timeout

    @retry_service(max_attempts=3)
    async def classify(self, system_prompt: str, user_prompt: str, temperature: float = 0.2) -> Completion:
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
            "drop_params": True,
        }
        if self.config.resolved_api_token:
            kwargs["api_key"] = self.config.resolved_api_token
        # Only custom endpoints are passed on; litellm knows the provider defaults
        if self.config.base_url and self.config.base_url != PROVIDER_BASE_URLS.get(self.config.provider_name):
            kwargs["api_base"] = self.config.base_url

        try:
            response = await litellm.acompletion(**kwargs)
        except (litellm.Timeout, litellm.APIConnectionError) as e:
            raise TimeoutError(f"{self.model}: {e}") from e
        except (TimeoutError, ConnectionError):
            raise
        except Exception as e:
            logger.error(f"LiteLLM error for {self.model}: {e}")
            raise ServiceCallError(f"{self.model}: {e}") from e

        text = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        return Completion(
            text=text,
            usage=TokenUsage(
                input_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
                output_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
            ),
        )
