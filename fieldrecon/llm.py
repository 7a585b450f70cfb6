#!/usr/bin/env python3
from dataclasses import dataclass, field

import aiohttp

from .errors import ServiceCallError
from .retry import NetworkError, retry_service


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Completion:
    """Text answer of a completion service plus its token usage"""
    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


class OllamaClassifier:
    """Minimal async Ollama chat client exposing classify()"""
    def __init__(self, base_url: str, model: str, num_ctx: int = 8192, num_predict: int = 4096, top_p: float = 0.9, timeout: int = 300):
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.options = {
            "num_ctx": num_ctx,
            "num_predict": num_predict,
            "top_p": top_p,
        }

    @retry_service(max_attempts=3)
    async def classify(self, system_prompt: str, user_prompt: str, temperature: float = 0.2) -> Completion:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": False,
            "options": {**self.options, "temperature": temperature},
        }
        timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout_obj) as session:
            async with session.post(f"{self.base_url}/api/chat", json=payload) as resp:
                if resp.status >= 500:
                    raise NetworkError(f"Ollama server error {resp.status}")
                if resp.status != 200:
                    error_text = await resp.text()
                    raise ServiceCallError(f"Ollama API error {resp.status}: {error_text}")
                data = await resp.json()

        message = data.get("message", {}) if isinstance(data, dict) else {}
        text = message.get("content", "") if isinstance(message, dict) else ""
        usage = TokenUsage(
            input_tokens=int(data.get("prompt_eval_count") or 0) if isinstance(data, dict) else 0,
            output_tokens=int(data.get("eval_count") or 0) if isinstance(data, dict) else 0,
        )
        return Completion(text=text or "", usage=usage)
