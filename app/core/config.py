from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator
from pathlib import Path
from functools import lru_cache
from typing import List, Optional

from app.security.token_codec import SUPPORTED_ALGORITHMS

# 프로젝트 루트 디렉토리
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    애플리케이션 환경 설정 모델
    - config/settings.env 파일이 있으면 자동 로드
    - 환경 변수가 .env 값보다 우선
    """
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / "config" / "settings.env"),
        env_file_encoding="utf-8",
        extra='ignore',
    )

    # Application
    APP_NAME: str = Field("Twigr API", description="API 이름")
    APP_VERSION: str = Field("1.0.0", description="애플리케이션 버전")
    ENVIRONMENT: str = Field("development", description="실행 환경(development/test/production)")

    # Security & JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = Field("HS256", description="토큰 서명 알고리즘 (HS256/HS384/HS512)")
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES: int = Field(
        60 * 24 * 10,
        description="액세스 토큰 만료 시간(분), 기본 10일",
    )
    EXPIRED_TOKEN_STATUS: int = Field(
        401,
        description="만료된 토큰에 대한 응답 상태 코드 (401 또는 403)",
    )
    BCRYPT_ROUNDS: int = Field(12, ge=4, le=31, description="bcrypt 해시 반복 횟수")

    # Database
    DB_USER:     str = "twigr"
    DB_PASSWORD: str = "twigr_pw"
    DB_HOST:     str = "localhost"
    DB_PORT:     int = 3306
    DB_NAME:     str = "twigr"
    DATABASE_URL: Optional[str] = Field(
        None,
        description="전체 DB 연결 URL (우선순위: env > 자동 조합)",
    )

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_AUTHENTICATED_CAPACITY: int = Field(
        100, ge=1, description="인증 사용자 버킷 용량(주기당 요청 수)"
    )
    RATE_LIMIT_ANONYMOUS_CAPACITY: int = Field(
        20, ge=1, description="비인증 클라이언트 버킷 용량(주기당 요청 수)"
    )
    RATE_LIMIT_PERIOD_SECONDS: int = Field(
        60, ge=1, description="버킷이 가득 차기까지 걸리는 리필 주기(초)"
    )
    RATE_LIMIT_TRUSTED_PROXIES: List[str] = Field(
        default_factory=list,
        description="X-Forwarded-For를 신뢰할 프록시 주소 목록 (비어 있으면 접속 주소만 사용)",
    )

    # API versioning
    API_CURRENT_VERSION: str = "1.0.0"
    API_SUPPORTED_VERSIONS: List[str] = ["1.0.0"]

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def _validate_algorithm(cls, v: str) -> str:
        """
        대칭키(HMAC) 서명 알고리즘만 허용
        """
        if v not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM must be one of {', '.join(SUPPORTED_ALGORITHMS)}")
        return v

    @field_validator("EXPIRED_TOKEN_STATUS")
    @classmethod
    def _validate_expired_status(cls, v: int) -> int:
        """
        만료 토큰 응답 코드는 401 또는 403만 허용
        """
        if v not in (401, 403):
            raise ValueError("EXPIRED_TOKEN_STATUS must be 401 or 403")
        return v

    @model_validator(mode="after")
    def _assemble_database_url(self) -> "Settings":
        """
        DATABASE_URL이 설정되어 있으면 그대로 사용하고, 없으면 개별 DB 설정값으로 URL을 조합
        """
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"mysql+asyncmy://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
            )
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        SQLAlchemy가 기대하는 이름의 DB 연결 문자열을 반환
        """
        return self.DATABASE_URL  # 항상 존재함

    @property
    def ACCESS_TOKEN_TTL_SECONDS(self) -> int:
        return self.JWT_ACCESS_TOKEN_EXPIRES_MINUTES * 60

@lru_cache()
def get_settings() -> Settings:
    """
    Settings 인스턴스를 싱글톤으로 반환
    최초 호출 시 객체를 생성하고, 이후 캐싱된 인스턴스를 반환
    """
    return Settings()

# 전역 설정 인스턴스
settings = get_settings()
