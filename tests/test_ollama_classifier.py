"""Tests for the local Ollama classifier (aiohttp session mocked)."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from fieldrecon.errors import ServiceCallError
from fieldrecon.llm import OllamaClassifier
from fieldrecon.retry import RetryExhaustedError


def _mock_session(status=200, payload=None, text=""):
    """aiohttp.ClientSession double whose post() returns a response with the given status."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload or {})
    response.text = AsyncMock(return_value=text)

    post_ctx = MagicMock()
    post_ctx.__aenter__ = AsyncMock(return_value=response)
    post_ctx.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.post = MagicMock(return_value=post_ctx)

    session_ctx = MagicMock()
    session_ctx.__aenter__ = AsyncMock(return_value=session)
    session_ctx.__aexit__ = AsyncMock(return_value=False)
    return session_ctx, session


class TestOllamaClassifier:

    @pytest.mark.asyncio
    async def test_classify(self):
        session_ctx, session = _mock_session(payload={
            "message": {"role": "assistant", "content": "[]"},
            "prompt_eval_count": 321,
            "eval_count": 12,
        })
        classifier = OllamaClassifier(base_url="http://localhost:11434/", model="qwen2.5:7b")

        with patch("fieldrecon.llm.aiohttp.ClientSession", return_value=session_ctx):
            completion = await classifier.classify("system", "user", temperature=0.1)

        assert completion.text == "[]"
        assert completion.usage.input_tokens == 321
        assert completion.usage.output_tokens == 12

        url = session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert url == "http://localhost:11434/api/chat"
        assert payload["model"] == "qwen2.5:7b"
        assert payload["stream"] is False
        assert payload["options"]["temperature"] == 0.1
        assert payload["messages"][1] == {"role": "user", "content": "user"}

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        session_ctx, session = _mock_session(status=404, text="model not found")
        classifier = OllamaClassifier(base_url="http://localhost:11434", model="missing")

        with patch("fieldrecon.llm.aiohttp.ClientSession", return_value=session_ctx):
            with pytest.raises(ServiceCallError, match="404"):
                await classifier.classify("s", "u")

        assert session.post.call_count == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        session_ctx, session = _mock_session(status=503)
        classifier = OllamaClassifier(base_url="http://localhost:11434", model="qwen2.5:7b")

        with patch("fieldrecon.llm.aiohttp.ClientSession", return_value=session_ctx), \
                patch("fieldrecon.retry.asyncio.sleep", AsyncMock()):
            with pytest.raises(RetryExhaustedError):
                await classifier.classify("s", "u")

        assert session.post.call_count == 3
