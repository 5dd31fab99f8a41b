from collections.abc import AsyncIterator

from app.core.config import Settings
from app.domain.notes.prompts import NOTES_HUMAN, NOTES_SYSTEM
from app.domain.notes.schemas import NoteRequest
from app.infra.llm.base import BaseLLMClient
from app.infra.llm.client import stream_chat


def build_notes_prompt(request: NoteRequest) -> str:
    """diff, 설명, URL을 그대로 담은 사용자 메시지 생성"""
    return NOTES_HUMAN.format(
        diff=request.diff_text,
        description=request.description,
        url=request.origin_url,
    )


def stream_notes(
    llm: BaseLLMClient,
    request: NoteRequest,
    settings: Settings,
) -> AsyncIterator[str]:
    """개발자/마케팅 노트를 조각 단위로 스트리밍

    한 번만 순회할 수 있다. 다시 생성하려면 새로 호출해야 한다.
    """
    return stream_chat(
        llm,
        NOTES_SYSTEM,
        build_notes_prompt(request),
        settings,
        tags=["notes", "generate"],
    )
