from typing import Literal

from app.core.config import Settings
from app.core.logging import get_logger
from app.infra.llm.base import BaseLLMClient
from app.infra.llm.openai_client import OpenAIClient
from app.infra.llm.vllm_client import VLLMClient

logger = get_logger(__name__)

LLMProvider = Literal["openai", "vllm"]


def create_llm_client(settings: Settings) -> BaseLLMClient:
    """설정된 프로바이더의 노트 생성용 LLM 클라이언트 생성

    Raises:
        ValueError: 지원하지 않는 프로바이더이거나 필수 설정이 없는 경우
    """
    provider = settings.llm_provider

    if provider == "openai":
        client = OpenAIClient(settings)
    elif provider == "vllm":
        client = VLLMClient(settings)
    else:
        raise ValueError(f"지원하지 않는 LLM 프로바이더: {provider}")

    logger.info("LLM 클라이언트 초기화 provider=%s model=%s", provider, client.get_model_name())
    return client
