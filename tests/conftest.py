"""테스트 공통 fixture"""

import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("ENVIRONMENT", "test")

from unittest.mock import MagicMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from langchain_core.messages import AIMessageChunk  # noqa: E402

from app.api.v1.dependencies import get_github_client, get_llm_client  # noqa: E402
from app.core.config import Settings  # noqa: E402
from app.infra.github.client import GitHubClient  # noqa: E402
from app.infra.llm.base import BaseLLMClient  # noqa: E402
from app.main import app  # noqa: E402

GITHUB_API_BASE = "https://api.github.com"


class FakeGitHubAPI:
    """httpx.MockTransport로 흉내 낸 GitHub REST API

    PR 목록 / diff 요청을 기록하고, 지정한 상태 코드로 실패를 흉내 낸다.
    """

    def __init__(self):
        self.pulls: list[dict] = []
        self.diffs: dict[int, str] = {}
        self.link: str | None = None
        self.list_error: tuple[int, dict] | None = None
        self.list_body: str | None = None
        self.diff_errors: dict[int, int] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/pulls"):
            if self.list_error:
                status, body = self.list_error
                return httpx.Response(status, json=body)
            if self.list_body is not None:
                return httpx.Response(200, text=self.list_body)
            headers = {"link": self.link} if self.link else {}
            return httpx.Response(200, json=self.pulls, headers=headers)

        number = int(path.rsplit("/", 1)[1])
        if number in self.diff_errors:
            return httpx.Response(self.diff_errors[number], json={"message": "Server Error"})
        return httpx.Response(200, text=self.diffs[number])

    def client(self, token: str | None = "test-token") -> GitHubClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return GitHubClient(token=token, base_url=GITHUB_API_BASE, http_client=http_client)


def make_pull(number: int, merged: bool = True, title: str | None = None) -> dict:
    """GitHub PR 목록 항목 생성"""
    return {
        "number": number,
        "title": title or f"PR {number}",
        "html_url": f"https://github.com/acme/widgets/pull/{number}",
        "merged_at": "2024-01-01T00:00:00Z" if merged else None,
    }


def make_llm_client(fragments: list[str], error: Exception | None = None) -> MagicMock:
    """fragments를 순서대로 스트리밍하는 LLM 클라이언트 mock

    error가 주어지면 모든 조각을 보낸 뒤 예외를 발생시킨다.
    """

    async def astream(messages, config=None):
        for fragment in fragments:
            yield AIMessageChunk(content=fragment)
        if error is not None:
            raise error

    chat_model = MagicMock()
    chat_model.astream = MagicMock(side_effect=astream)

    client = MagicMock(spec=BaseLLMClient)
    client.get_chat_model.return_value = chat_model
    client.get_model_name.return_value = "fake-model"
    return client


@pytest.fixture
def test_settings() -> Settings:
    """테스트용 설정"""
    return Settings(
        _env_file=None,
        environment="test",
        openai_api_key="sk-test",
        github_owner="openai",
        github_repo="openai-node",
        default_per_page=10,
    )


@pytest.fixture
def github_api() -> FakeGitHubAPI:
    """가짜 GitHub API"""
    return FakeGitHubAPI()


@pytest.fixture
def sample_pulls() -> list[dict]:
    """머지된 PR 2개와 머지되지 않은 PR 1개"""
    return [make_pull(11), make_pull(12, merged=False), make_pull(13)]


@pytest.fixture
def override_dependencies():
    """app.dependency_overrides 설정 후 테스트가 끝나면 초기화"""

    def _override(github: GitHubClient | None = None, llm: BaseLLMClient | None = None):
        if github is not None:
            app.dependency_overrides[get_github_client] = lambda: github
        if llm is not None:
            app.dependency_overrides[get_llm_client] = lambda: llm

    yield _override
    app.dependency_overrides.clear()


@pytest.fixture
def async_client():
    """비동기 HTTP 클라이언트"""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")
