from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.api.v1.dependencies import get_llm_client, get_settings
from app.core.config import Settings
from app.core.logging import get_logger
from app.domain.notes.relay import open_relay
from app.domain.notes.schemas import NoteRequest
from app.domain.notes.service import stream_notes
from app.infra.llm.base import BaseLLMClient

router = APIRouter(tags=["notes"])
logger = get_logger(__name__)

NOTES_MEDIA_TYPE = "text/plain; charset=utf-8"


@router.post("/notes", response_class=StreamingResponse)
@router.post("/api/generate-notes", response_class=StreamingResponse, include_in_schema=False)
async def generate_notes(
    request: NoteRequest,
    llm: BaseLLMClient = Depends(get_llm_client),
    app_settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    logger.info(
        "노트 생성 시작 url=%s diff_length=%d", request.origin_url, len(request.diff_text)
    )

    body = await open_relay(stream_notes(llm, request, app_settings))

    return StreamingResponse(
        body,
        media_type=NOTES_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache"},
    )
