"""
노트 조각 스트림을 HTTP 응답 바이트 스트림으로 전달

- 첫 조각을 응답 시작 전에 받아 두어, 시작 전 실패는 JSON 에러로 응답
- 조각마다 바로 인코딩해 전달, 다음 조각은 이전 조각 전송 후에 요청
- 소비자가 끊기면 원본 스트림을 닫아 프로바이더 연결 해제
"""

from collections.abc import AsyncGenerator, AsyncIterator

import anyio

from app.core.logging import get_logger

logger = get_logger(__name__)

ENCODING = "utf-8"


async def _close_source(fragments: AsyncIterator[str]) -> None:
    aclose = getattr(fragments, "aclose", None)
    if aclose is None:
        return
    with anyio.CancelScope(shield=True):
        await aclose()


async def relay_fragments(
    first: str | None,
    fragments: AsyncIterator[str],
) -> AsyncGenerator[bytes, None]:
    """미리 받은 첫 조각과 나머지 조각을 순서대로 바이트로 yield"""
    sent = 0
    finished = False
    failed = False
    try:
        if first is not None:
            yield first.encode(ENCODING)
            sent += 1
            async for fragment in fragments:
                yield fragment.encode(ENCODING)
                sent += 1
        finished = True
    except Exception as e:
        # 이미 응답이 시작됐으므로 에러 본문 없이 스트림만 끊는다
        failed = True
        logger.error("노트 스트림 중단 sent=%d error=%s", sent, type(e).__name__)
        raise
    finally:
        if not finished and not failed:
            logger.info("노트 스트림 조기 종료 sent=%d", sent)
        await _close_source(fragments)


async def open_relay(fragments: AsyncIterator[str]) -> AsyncGenerator[bytes, None]:
    """첫 조각을 기다린 뒤 응답 본문용 바이트 스트림 반환

    첫 조각 전에 발생한 예외는 그대로 전파된다.
    """
    try:
        first = await anext(fragments)
    except StopAsyncIteration:
        first = None
    except BaseException:
        await _close_source(fragments)
        raise

    return relay_fragments(first, fragments)
