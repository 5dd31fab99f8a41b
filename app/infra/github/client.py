from dataclasses import dataclass, field

import httpx

from app.core.config import Settings
from app.core.exceptions import RateLimitedError, RepoNotFoundError, UpstreamError
from app.core.logging import get_logger

logger = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"
GITHUB_MAX_PER_PAGE = 100

RATE_LIMIT_MESSAGE = (
    "GitHub API rate limit exceeded. "
    "Please try again later or provide a GITHUB_TOKEN environment variable."
)


@dataclass
class PullListing:
    """PR 목록 응답과 페이지네이션 링크"""

    pulls: list[dict]
    links: dict[str, dict[str, str]] = field(default_factory=dict)


def _error_message(response: httpx.Response) -> str:
    """GitHub 에러 응답에서 메시지 추출

    JSON의 message 필드 우선, 없으면 본문, 그마저 없으면 reason phrase
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.text or response.reason_phrase


def _is_rate_limited(status_code: int, message: str) -> bool:
    if status_code == 429:
        return True
    return status_code == 403 and "rate limit" in message.lower()


class GitHubClient:
    """GitHub REST API 클라이언트

    모든 실패는 호출 지점에서 RateLimitedError / RepoNotFoundError /
    UpstreamError 중 하나로 변환된다.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str = "https://api.github.com",
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._token = token or None
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubClient":
        return cls(
            token=settings.github_token,
            base_url=settings.github_api_base,
            timeout=settings.github_timeout,
        )

    async def aclose(self) -> None:
        """httpx 클라이언트 종료"""
        await self._client.aclose()

    def _get_headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        """GitHub API 요청 헤더 생성

        Args:
            accept: 응답 미디어 타입

        Returns:
            HTTP 헤더 딕셔너리
        """
        headers = {
            "Accept": accept,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get(
        self,
        path: str,
        accept: str = "application/vnd.github+json",
        params: dict | None = None,
    ) -> httpx.Response:
        """GET 요청 후 실패를 태그된 예외로 변환

        404는 호출 지점마다 의미가 달라 상태 코드 그대로 UpstreamError로 올린다.
        """
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(url, headers=self._get_headers(accept), params=params)
        except httpx.RequestError as e:
            raise UpstreamError(
                None,
                "Failed to reach GitHub.",
                detail=f"{type(e).__name__}: {e}",
            ) from e

        if response.is_success:
            return response

        message = _error_message(response)
        if _is_rate_limited(response.status_code, message):
            raise RateLimitedError(RATE_LIMIT_MESSAGE, detail=message)
        raise UpstreamError(
            response.status_code,
            "Failed to fetch pull requests from GitHub.",
            detail=message,
        )

    async def list_closed_pulls(
        self,
        owner: str,
        repo: str,
        page: int = 1,
        per_page: int = 10,
    ) -> PullListing:
        """최근 업데이트 순으로 닫힌 PR 목록 조회

        Args:
            owner: 레포지토리 소유자
            repo: 레포지토리 이름
            page: 페이지 번호
            per_page: 페이지당 PR 개수

        Returns:
            PR 목록과 Link 헤더 relation

        Raises:
            RepoNotFoundError: 레포지토리가 없는 경우
            RateLimitedError: 요청 한도 초과
            UpstreamError: 그 외 GitHub API 실패
        """
        params = {
            "state": "closed",
            "sort": "updated",
            "direction": "desc",
            "per_page": min(per_page, GITHUB_MAX_PER_PAGE),
            "page": page,
        }

        try:
            response = await self._get(f"/repos/{owner}/{repo}/pulls", params=params)
        except UpstreamError as e:
            if e.upstream_status == 404:
                raise RepoNotFoundError(owner, repo) from e
            raise

        try:
            pulls = response.json()
        except ValueError:
            pulls = None
        if not isinstance(pulls, list):
            raise UpstreamError(
                response.status_code,
                "Failed to fetch pull requests from GitHub.",
                detail=f"Unexpected pull request listing body: {response.text[:200]}",
            )

        logger.info(
            "PR 목록 조회 완료 repo=%s/%s page=%d count=%d", owner, repo, page, len(pulls)
        )
        return PullListing(pulls=pulls, links=dict(response.links))

    async def get_pull_diff(self, owner: str, repo: str, pull_number: int) -> str:
        """PR diff 텍스트 조회

        Args:
            owner: 레포지토리 소유자
            repo: 레포지토리 이름
            pull_number: PR 번호

        Returns:
            unified diff 문자열
        """
        response = await self._get(
            f"/repos/{owner}/{repo}/pulls/{pull_number}",
            accept="application/vnd.github.v3.diff",
        )
        logger.debug("PR diff 조회 완료 repo=%s/%s pr=%d", owner, repo, pull_number)
        return response.text
