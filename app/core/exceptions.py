from enum import Enum

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """에러 코드 열거형"""

    INVALID_PARAMETER = "INVALID_PARAMETER"
    REPO_NOT_FOUND = "REPO_NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    PARTIAL_FETCH_FAILURE = "PARTIAL_FETCH_FAILURE"
    PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"


class CustomException(Exception):
    def __init__(
        self,
        status_code: int,
        error_code: ErrorCode | str,
        message: str,
        detail: str | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvalidParameterError(CustomException):
    """호출자 입력값 오류, 네트워크 호출 전에 발생"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            status_code=400,
            error_code=ErrorCode.INVALID_PARAMETER,
            message=f"Invalid {field} parameter",
        )


class RepoNotFoundError(CustomException):
    def __init__(self, owner: str, repo: str):
        self.owner = owner
        self.repo = repo
        super().__init__(
            status_code=404,
            error_code=ErrorCode.REPO_NOT_FOUND,
            message=f"Repository not found: {owner}/{repo}",
        )


class RateLimitedError(CustomException):
    """업스트림 요청 한도 초과, 어느 업스트림이든 429로 응답"""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            status_code=429,
            error_code=ErrorCode.RATE_LIMITED,
            message=message,
            detail=detail,
        )


class UpstreamError(CustomException):
    """분류되지 않은 업스트림 실패

    upstream_status가 5xx면 그대로 전달하고, 그 외에는 502로 응답한다.
    """

    def __init__(self, upstream_status: int | None, message: str, detail: str | None = None):
        self.upstream_status = upstream_status
        if upstream_status is not None and upstream_status >= 500:
            status_code = upstream_status
        else:
            status_code = 502
        super().__init__(
            status_code=status_code,
            error_code=ErrorCode.UPSTREAM_ERROR,
            message=message,
            detail=detail,
        )


class ProviderNotConfiguredError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=503,
            error_code=ErrorCode.PROVIDER_NOT_CONFIGURED,
            message="Completion provider is not configured.",
            detail=detail,
        )


def register_exception_handlers(app):
    @app.exception_handler(CustomException)
    async def custom_exception_handler(request: Request, exc: CustomException):
        logger.warning(
            "요청 처리 실패",
            error_code=exc.error_code,
            status_code=exc.status_code,
            path=request.url.path,
            detail=exc.detail,
        )

        content = {"error": exc.message}
        if isinstance(exc, UpstreamError) and exc.detail:
            content["details"] = exc.detail

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
        )
