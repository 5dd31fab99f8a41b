from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_github_client, get_settings
from app.core.config import Settings
from app.domain.diffs.parsers import parse_page_request
from app.domain.diffs.schemas import PageResult
from app.domain.diffs.service import list_merged_diffs
from app.infra.github.client import GitHubClient

router = APIRouter(tags=["diffs"])


@router.get("/diffs", response_model=PageResult)
@router.get("/api/sample-diffs", response_model=PageResult, include_in_schema=False)
async def list_diffs(
    owner: str | None = None,
    repo: str | None = None,
    page: str | None = None,
    per_page: str | None = None,
    github: GitHubClient = Depends(get_github_client),
    app_settings: Settings = Depends(get_settings),
) -> PageResult:
    # page / per_page는 문자열로 받아 400 응답 메시지를 직접 만든다
    page_request = parse_page_request(owner, repo, page, per_page, app_settings)
    return await list_merged_diffs(github, page_request)
