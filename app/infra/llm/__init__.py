from app.infra.llm.base import BaseLLMClient
from app.infra.llm.client import stream_chat
from app.infra.llm.factory import create_llm_client
from app.infra.llm.openai_client import OpenAIClient
from app.infra.llm.vllm_client import VLLMClient

__all__ = [
    "BaseLLMClient",
    "OpenAIClient",
    "VLLMClient",
    "create_llm_client",
    "stream_chat",
]
