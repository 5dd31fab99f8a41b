"""LLM 클라이언트 테스트"""

import httpx
import openai
import pytest
from conftest import make_llm_client
from langchain_core.messages import HumanMessage, SystemMessage

from app.core.exceptions import RateLimitedError, UpstreamError
from app.infra.llm.client import get_langfuse_handler, map_provider_error, stream_chat
from app.infra.llm.factory import create_llm_client
from app.infra.llm.openai_client import OpenAIClient
from app.infra.llm.vllm_client import VLLMClient

OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(status_code: int, message: str) -> openai.APIStatusError:
    response = httpx.Response(status_code, request=OPENAI_REQUEST)
    return openai.APIStatusError(message, response=response, body=None)


class TestStreamChat:
    """stream_chat 함수 테스트"""

    @pytest.mark.asyncio
    async def test_yields_fragments_in_order(self, test_settings):
        """도착한 조각을 순서대로 전달"""
        client = make_llm_client(["Dev", " notes", "..."])

        result = [
            fragment
            async for fragment in stream_chat(client, "system", "human", test_settings)
        ]

        assert result == ["Dev", " notes", "..."]

    @pytest.mark.asyncio
    async def test_skips_empty_fragments(self, test_settings):
        client = make_llm_client(["", "Hello", "", " world"])

        result = [
            fragment
            async for fragment in stream_chat(client, "system", "human", test_settings)
        ]

        assert "".join(result) == "Hello world"
        assert "" not in result

    @pytest.mark.asyncio
    async def test_sends_system_and_human_messages(self, test_settings):
        client = make_llm_client(["ok"])

        async for _ in stream_chat(client, "You are a writer", "Summarize", test_settings):
            pass

        chat_model = client.get_chat_model.return_value
        messages = chat_model.astream.call_args.args[0]
        assert messages == [
            SystemMessage(content="You are a writer"),
            HumanMessage(content="Summarize"),
        ]

    @pytest.mark.asyncio
    async def test_rate_limit_mapped(self, test_settings):
        """403 rate limit은 RateLimitedError"""
        client = make_llm_client([], error=_status_error(403, "rate limit exceeded for org"))

        with pytest.raises(RateLimitedError) as exc_info:
            async for _ in stream_chat(client, "system", "human", test_settings):
                pass

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "API rate limit exceeded. Try again later."

    @pytest.mark.asyncio
    async def test_error_after_partial_output(self, test_settings):
        """일부 조각 전송 후 실패하면 그때까지의 조각만 받고 예외"""
        client = make_llm_client(["Dev", " notes"], error=_status_error(500, "server error"))
        received = []

        with pytest.raises(UpstreamError) as exc_info:
            async for fragment in stream_chat(client, "system", "human", test_settings):
                received.append(fragment)

        assert received == ["Dev", " notes"]
        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "server error"

    @pytest.mark.asyncio
    async def test_non_openai_error_mapped(self, test_settings):
        """openai 외 예외는 상태 코드 없는 UpstreamError"""
        client = make_llm_client(["partial"], error=RuntimeError("boom"))
        received = []

        with pytest.raises(UpstreamError) as exc_info:
            async for fragment in stream_chat(client, "system", "human", test_settings):
                received.append(fragment)

        assert received == ["partial"]
        assert exc_info.value.upstream_status is None
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Failed to generate response."
        assert exc_info.value.detail == "RuntimeError: boom"

    @pytest.mark.asyncio
    async def test_tagged_error_passes_through(self, test_settings):
        client = make_llm_client([], error=RateLimitedError("Slow down."))

        with pytest.raises(RateLimitedError) as exc_info:
            async for _ in stream_chat(client, "system", "human", test_settings):
                pass

        assert exc_info.value.message == "Slow down."


class TestMapProviderError:
    """map_provider_error 함수 테스트"""

    @pytest.mark.parametrize(
        "status_code,message,expected_type,expected_status",
        [
            (403, "Rate limit exceeded", RateLimitedError, 429),
            (429, "Too many requests", RateLimitedError, 429),
            (403, "Forbidden", UpstreamError, 502),
            (401, "Invalid API key", UpstreamError, 502),
            (503, "Overloaded", UpstreamError, 503),
        ],
    )
    def test_status_errors(self, status_code, message, expected_type, expected_status):
        result = map_provider_error(_status_error(status_code, message))

        assert isinstance(result, expected_type)
        assert result.status_code == expected_status
        assert result.detail == message

    def test_connection_error(self):
        result = map_provider_error(openai.APIConnectionError(request=OPENAI_REQUEST))

        assert isinstance(result, UpstreamError)
        assert result.upstream_status is None
        assert result.status_code == 502


class TestLangfuseHandler:
    """get_langfuse_handler 함수 테스트"""

    def test_disabled_without_keys(self, test_settings):
        assert get_langfuse_handler(test_settings) is None


class TestCreateLLMClient:
    """create_llm_client 함수 테스트"""

    def test_openai(self, test_settings):
        client = create_llm_client(test_settings)

        assert isinstance(client, OpenAIClient)
        assert client.get_model_name() == "gpt-4.1-mini"
        assert client.get_chat_model().temperature == 0.3

    def test_openai_without_key(self, test_settings):
        settings = test_settings.model_copy(update={"openai_api_key": ""})

        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            create_llm_client(settings)

    def test_vllm(self, test_settings):
        settings = test_settings.model_copy(
            update={
                "llm_provider": "vllm",
                "vllm_api_url": "http://localhost:8000/v1",
                "vllm_model": "qwen",
            }
        )

        client = create_llm_client(settings)

        assert isinstance(client, VLLMClient)
        assert client.get_model_name() == "qwen"

    def test_vllm_without_url(self, test_settings):
        settings = test_settings.model_copy(update={"llm_provider": "vllm"})

        with pytest.raises(ValueError, match="VLLM_API_URL"):
            create_llm_client(settings)

    def test_unknown_provider(self, test_settings):
        settings = test_settings.model_copy(update={"llm_provider": "gemini"})

        with pytest.raises(ValueError, match="지원하지 않는"):
            create_llm_client(settings)
