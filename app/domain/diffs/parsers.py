import re

import httpx

from app.core.config import Settings
from app.core.exceptions import InvalidParameterError
from app.domain.diffs.schemas import PageRequest
from app.infra.github.client import GITHUB_MAX_PER_PAGE

DECIMAL_INT_PATTERN = re.compile(r"-?[0-9]+")


def _parse_positive_int(raw: str | None, default: int, field: str) -> int:
    """쿼리 문자열을 양의 정수로 변환, 비어 있으면 기본값

    Raises:
        InvalidParameterError: 정수가 아니거나 0 이하인 경우
    """
    if raw is None or not raw.strip():
        return default

    text = raw.strip()
    if not DECIMAL_INT_PATTERN.fullmatch(text):
        raise InvalidParameterError(field)

    value = int(text)
    if value <= 0:
        raise InvalidParameterError(field)
    return value


def parse_page_request(
    owner: str | None,
    repo: str | None,
    page: str | None,
    per_page: str | None,
    settings: Settings,
) -> PageRequest:
    """호출자 쿼리 파라미터로 PageRequest 생성

    per_page를 먼저 검증한다. per_page는 GitHub 최대값으로 제한된다.
    """
    per_page_value = _parse_positive_int(per_page, settings.default_per_page, "per_page")
    page_value = _parse_positive_int(page, 1, "page")

    owner_value = (owner or settings.github_owner).strip()
    if not owner_value:
        raise InvalidParameterError("owner")
    repo_value = (repo or settings.github_repo).strip()
    if not repo_value:
        raise InvalidParameterError("repo")

    return PageRequest(
        owner=owner_value,
        repo=repo_value,
        page=page_value,
        per_page=min(per_page_value, GITHUB_MAX_PER_PAGE),
    )


def next_page_from_links(links: dict[str, dict[str, str]]) -> int | None:
    """Link 헤더의 rel="next" URL에서 다음 페이지 번호 추출

    Args:
        links: httpx.Response.links 형태의 relation 딕셔너리

    Returns:
        다음 페이지 번호, 링크가 없거나 page 값이 숫자가 아니면 None
    """
    next_link = links.get("next")
    if not next_link or not next_link.get("url"):
        return None

    try:
        page = httpx.URL(next_link["url"]).params.get("page")
    except httpx.InvalidURL:
        return None

    if page is None or not page.isdigit():
        return None
    return int(page)
