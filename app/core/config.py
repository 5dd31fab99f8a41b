from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정"""

    environment: str = "development"

    # LLM 프로바이더 선택: "openai" 또는 "vllm"
    llm_provider: str = "openai"

    # OpenAI 설정
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"
    openai_timeout: float = 120.0

    # vLLM 설정 - OpenAI 호환 엔드포인트
    vllm_api_url: str = ""
    vllm_api_key: str = ""
    vllm_model: str = ""
    vllm_timeout: float = 180.0

    # 노트 생성 샘플링 온도
    notes_temperature: float = 0.3

    # GitHub
    github_token: str = ""
    github_api_base: str = "https://api.github.com"
    github_timeout: float = 60.0

    # 기본 조회 대상 레포지토리
    github_owner: str = "openai"
    github_repo: str = "openai-node"

    # 페이지 설정
    default_per_page: int = 10

    # 로깅 설정
    log_level: str = "INFO"

    # CORS 설정
    cors_allowed_origins: str = ""

    # 요청 제한 설정
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"

    # Langfuse 설정
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    def validate_for_production(self) -> list[str]:
        """프로덕션 환경에서 필수 설정 검증 후 누락된 항목 반환"""
        errors = []
        if self.llm_provider == "openai" and not self.openai_api_key:
            errors.append("OPENAI_API_KEY")
        if self.llm_provider == "vllm" and not self.vllm_api_url:
            errors.append("VLLM_API_URL")
        if not self.github_token:
            errors.append("GITHUB_TOKEN")
        return errors

    @model_validator(mode="after")
    def validate_settings(self):
        """설정값 범위 검증"""
        if self.llm_provider not in ("openai", "vllm"):
            raise ValueError(f"지원하지 않는 LLM 프로바이더: {self.llm_provider}")
        if self.default_per_page <= 0:
            raise ValueError("DEFAULT_PER_PAGE는 1 이상이어야 합니다")
        return self


settings = Settings()
