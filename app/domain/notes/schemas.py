from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class NoteRequest(BaseModel):
    """노트 생성 요청

    이전 클라이언트가 보내는 diff / url 키도 허용한다.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    description: str
    diff_text: str = Field(min_length=1, validation_alias=AliasChoices("diffText", "diff"))
    origin_url: str = Field(validation_alias=AliasChoices("originUrl", "url"))
