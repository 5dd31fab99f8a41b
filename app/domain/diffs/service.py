import asyncio

from app.core.exceptions import CustomException, ErrorCode
from app.core.logging import get_logger
from app.domain.diffs.parsers import next_page_from_links
from app.domain.diffs.schemas import ChangeSetSummary, PageRequest, PageResult
from app.infra.github.client import GitHubClient

logger = get_logger(__name__)


async def _fetch_summary(
    github: GitHubClient,
    owner: str,
    repo: str,
    pull: dict,
) -> ChangeSetSummary | None:
    """PR 하나의 diff를 조회해 요약 생성, 실패하면 로그만 남기고 None"""
    number = pull["number"]
    try:
        diff_text = await github.get_pull_diff(owner, repo, number)
    except CustomException as e:
        logger.warning(
            "PR diff 조회 실패, 결과에서 제외 repo=%s/%s pr=%d cause=%s detail=%s",
            owner,
            repo,
            number,
            e.error_code,
            e.detail or e.message,
            error_code=ErrorCode.PARTIAL_FETCH_FAILURE,
        )
        return None

    return ChangeSetSummary(
        id=str(number),
        description=pull["title"],
        diff_text=diff_text,
        origin_url=pull["html_url"],
    )


async def list_merged_diffs(github: GitHubClient, page_request: PageRequest) -> PageResult:
    """머지된 PR과 diff를 한 페이지 조회

    닫힌 PR 중 merged_at이 있는 것만 남기고, diff는 PR마다 동시에 조회한다.
    diff 조회에 실패한 PR은 결과에서 빠지며 나머지는 그대로 반환된다.

    Args:
        github: GitHub API 클라이언트
        page_request: 조회 대상과 페이지 정보

    Returns:
        diff 목록과 다음 페이지 정보

    Raises:
        RepoNotFoundError: 레포지토리가 없는 경우
        RateLimitedError: GitHub 요청 한도 초과
        UpstreamError: 그 외 목록 조회 실패
    """
    owner, repo = page_request.owner, page_request.repo
    listing = await github.list_closed_pulls(
        owner, repo, page=page_request.page, per_page=page_request.per_page
    )

    merged_pulls = [pr for pr in listing.pulls if pr.get("merged_at") is not None]

    tasks = [_fetch_summary(github, owner, repo, pr) for pr in merged_pulls]
    results = await asyncio.gather(*tasks)
    diffs = [summary for summary in results if summary is not None]

    next_page = next_page_from_links(listing.links)

    logger.info(
        "머지 PR diff 조회 완료 repo=%s/%s page=%d closed=%d merged=%d fetched=%d next=%s",
        owner,
        repo,
        page_request.page,
        len(listing.pulls),
        len(merged_pulls),
        len(diffs),
        next_page,
    )
    return PageResult(
        diffs=diffs,
        next_page=next_page,
        current_page=page_request.page,
        per_page=page_request.per_page,
    )
