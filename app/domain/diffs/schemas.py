from pydantic import BaseModel, ConfigDict, Field


class ChangeSetSummary(BaseModel):
    """머지된 PR 요약"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    description: str
    diff_text: str = Field(alias="diffText")
    origin_url: str = Field(alias="originUrl")


class PageRequest(BaseModel):
    """PR 페이지 조회 요청"""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)


class PageResult(BaseModel):
    """PR diff 페이지 조회 결과"""

    model_config = ConfigDict(populate_by_name=True)

    diffs: list[ChangeSetSummary]
    next_page: int | None = Field(alias="nextPage")
    current_page: int = Field(alias="currentPage")
    per_page: int = Field(alias="perPage")
