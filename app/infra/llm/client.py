import os
from collections.abc import AsyncIterator
from contextlib import aclosing

import openai
from langchain_core.messages import BaseMessageChunk, HumanMessage, SystemMessage
from langfuse.langchain import CallbackHandler

from app.core.config import Settings
from app.core.exceptions import CustomException, RateLimitedError, UpstreamError
from app.core.logging import get_logger
from app.infra.llm.base import BaseLLMClient

logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "API rate limit exceeded. Try again later."
GENERATION_FAILED_MESSAGE = "Failed to generate response."


def get_langfuse_handler(settings: Settings) -> CallbackHandler | None:
    """Langfuse 콜백 핸들러 반환, 키가 없으면 None"""
    if not settings.langfuse_public_key or not settings.langfuse_secret_key:
        return None

    os.environ.setdefault("LANGFUSE_PUBLIC_KEY", settings.langfuse_public_key)
    os.environ.setdefault("LANGFUSE_SECRET_KEY", settings.langfuse_secret_key)
    os.environ.setdefault("LANGFUSE_HOST", settings.langfuse_base_url)
    return CallbackHandler()


def map_provider_error(e: openai.APIError) -> CustomException:
    """OpenAI SDK 예외를 태그된 예외로 변환"""
    if isinstance(e, openai.APIStatusError):
        message = e.message or str(e)
        if e.status_code == 429 or (e.status_code == 403 and "rate limit" in message.lower()):
            return RateLimitedError(RATE_LIMIT_MESSAGE, detail=message)
        return UpstreamError(e.status_code, GENERATION_FAILED_MESSAGE, detail=message)

    return UpstreamError(None, GENERATION_FAILED_MESSAGE, detail=f"{type(e).__name__}: {e}")


def _chunk_text(chunk: BaseMessageChunk) -> str:
    """스트림 청크에서 텍스트만 추출"""
    content = chunk.content
    if isinstance(content, str):
        return content
    return "".join(
        part.get("text", "") if isinstance(part, dict) else str(part) for part in content
    )


async def stream_chat(
    client: BaseLLMClient,
    system_prompt: str,
    human_prompt: str,
    settings: Settings,
    tags: list[str] | None = None,
) -> AsyncIterator[str]:
    """시스템/사용자 메시지로 채팅 완성을 스트리밍 호출

    도착한 텍스트 조각을 버퍼링 없이 바로 yield한다. 빈 조각은 건너뛴다.

    Raises:
        RateLimitedError: 프로바이더 요청 한도 초과
        UpstreamError: 그 외 프로바이더 실패
    """
    langfuse_handler = get_langfuse_handler(settings)
    config = {
        "callbacks": [langfuse_handler] if langfuse_handler else [],
        "metadata": {"langfuse_tags": tags or []},
    }

    model = client.get_chat_model()
    messages = [
        SystemMessage(content=system_prompt),
        HumanMessage(content=human_prompt),
    ]

    fragments = 0
    try:
        async with aclosing(model.astream(messages, config=config)) as chunks:
            async for chunk in chunks:
                text = _chunk_text(chunk)
                if not text:
                    continue
                fragments += 1
                yield text
    except openai.APIError as e:
        logger.error(
            "LLM 스트리밍 실패 model=%s fragments=%d error=%s",
            client.get_model_name(),
            fragments,
            type(e).__name__,
        )
        raise map_provider_error(e) from e
    except CustomException:
        raise
    except Exception as e:
        logger.error(
            "LLM 스트리밍 실패 model=%s fragments=%d error=%s",
            client.get_model_name(),
            fragments,
            type(e).__name__,
        )
        raise UpstreamError(
            None, GENERATION_FAILED_MESSAGE, detail=f"{type(e).__name__}: {e}"
        ) from e

    logger.info("LLM 스트리밍 완료 model=%s fragments=%d", client.get_model_name(), fragments)
