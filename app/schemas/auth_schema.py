from typing import Optional

from pydantic import EmailStr, Field, ConfigDict

from app.schemas.common_schema import CamelModel

# ─── 인증 관련 요청/응답 스키마 정의 ─────────────────────────────────────

class RegisterRequest(CamelModel):
    """
    회원가입 요청 모델
    - 유저명(3~30자), 이메일, 비밀번호(8자 이상), 표시 이름(선택)
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "username":    "johndoe",
                "email":       "john.doe@example.com",
                "password":    "password123",
                "displayName": "John Doe",
            }
        },
    )

    username:     str           = Field(..., min_length=3, max_length=30, description="사용자 이름")
    email:        EmailStr      = Field(..., description="이메일 주소")
    password:     str           = Field(..., min_length=8, description="비밀번호")
    display_name: Optional[str] = Field(None, max_length=100, description="표시 이름 (미입력 시 username)")


class LoginRequest(CamelModel):
    """
    로그인 요청 모델
    - username과 비밀번호로 인증 수행
    """
    model_config = ConfigDict(extra="ignore")
    username: str = Field(..., min_length=1, description="로그인용 사용자 이름")
    password: str = Field(..., min_length=1, description="비밀번호")


class RegisterResponse(CamelModel):
    """
    회원가입 결과 모델
    """
    user_id:  str = Field(..., description="생성된 사용자 ID")
    username: str = Field(..., description="사용자 이름")


class TokenResponse(CamelModel):
    """
    인증 토큰 응답 모델
    - token과 토큰 타입, 만료까지 남은 초 포함
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "userId": "8f14e45f-ceea-467f-a0e6-5b2c1f0d9c3a",
                "username": "johndoe",
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "tokenType": "Bearer",
                "expiresIn": 864000,
            }
        },
    )

    user_id:    str = Field(..., description="로그인한 사용자 ID")
    username:   str = Field(..., description="로그인한 사용자 이름")
    token:      str = Field(..., description="Access Token")
    token_type: str = Field(default="Bearer", description="토큰 타입")
    expires_in: int = Field(..., description="토큰 만료까지 남은 시간(초)")
