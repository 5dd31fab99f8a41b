from fastapi import Request

from app.core.config import Settings, settings
from app.core.exceptions import ProviderNotConfiguredError
from app.infra.github.client import GitHubClient
from app.infra.llm.base import BaseLLMClient


def get_settings() -> Settings:
    return settings


def get_github_client(request: Request) -> GitHubClient:
    """lifespan에서 생성한 GitHub 클라이언트 반환"""
    return request.app.state.github_client


def get_llm_client(request: Request) -> BaseLLMClient:
    """lifespan에서 생성한 LLM 클라이언트 반환

    Raises:
        ProviderNotConfiguredError: 프로바이더 설정이 없어 클라이언트가 없는 경우
    """
    client = getattr(request.app.state, "llm_client", None)
    if client is None:
        raise ProviderNotConfiguredError(getattr(request.app.state, "llm_error", None))
    return client
