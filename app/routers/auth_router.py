import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings, Settings
from app.core.database import get_db_session
from app.dependencies import get_optional_identity
from app.schemas.auth_schema import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from app.schemas.common_schema import ApiResponse, MessageResponse
from app.security.identity import Identity
from app.services.auth_service import AuthService

# 로거 설정
logger = logging.getLogger(__name__)

# 라우터 인스턴스
router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=ApiResponse[RegisterResponse], status_code=201)
async def register(
    req: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RegisterResponse]:
    """
    회원가입
    - username/email 중복 시 409
    - displayName 미입력 시 username 사용
    """
    user = await AuthService(db).register(
        username=req.username,
        email=req.email,
        password=req.password,
        display_name=req.display_name,
    )
    return ApiResponse.ok(
        RegisterResponse(user_id=user.id, username=user.username),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(
    req: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TokenResponse]:
    """
    username/비밀번호 로그인
    - 성공 시 Authorization 응답 헤더와 본문에 Bearer 토큰을 담아 반환
    - 실패 원인과 무관하게 401 INVALID_CREDENTIALS
    """
    result = await AuthService(db, settings).login(req.username, req.password)
    response.headers["Authorization"] = f"Bearer {result.token}"
    return ApiResponse.ok(
        TokenResponse(
            user_id=result.identity.user_id,
            username=result.identity.username,
            token=result.token,
            expires_in=result.expires_in,
        ),
        message="Authentication successful",
    )


@router.post("/logout", response_model=ApiResponse[MessageResponse])
async def logout(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> ApiResponse[MessageResponse]:
    """
    로그아웃 (토큰은 서버에 저장되지 않으므로 클라이언트가 폐기)
    """
    AuthService.logout(identity)
    return ApiResponse.ok(MessageResponse(message="Logged out successfully"))
