import logging
from typing import Optional

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings, Settings
from app.core.database import get_db_session
from app.repositories.user_repository import UserRepository
from app.security import token_codec
from app.security.identity import Identity
from app.utils.exceptions import TokenExpiredError, UnauthenticatedError
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(request: Request) -> Optional[str]:
    """
    Authorization 헤더에서 Bearer 토큰 추출
    - 헤더가 없거나 Bearer 스킴이 아니면 None
    """
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.lower().startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):].strip()


class JWTAuthService:
    """
    JWT 토큰 검증 서비스
    - 토큰 검증 후 subject(username)로 사용자를 조회해 Identity 생성
    """
    def __init__(self, secret_key: str, algorithm: str = token_codec.ALGORITHM):
        self._secret_key = secret_key
        self._algorithm = algorithm

    def validate_token(self, token: str) -> str:
        """
        토큰을 검증해 subject(username) 반환
        Raises:
            TokenExpiredError: 만료된 토큰
            UnauthenticatedError: 구조/서명이 잘못된 토큰
        """
        try:
            return token_codec.verify(token, self._secret_key, algorithm=self._algorithm)
        except token_codec.ExpiredTokenError as e:
            logger.warning("만료된 JWT 토큰 (exp=%s)", e.expired_at)
            raise TokenExpiredError("Token has expired")
        except token_codec.TokenError as e:
            logger.warning("유효하지 않은 JWT 토큰: %s", e)
            raise UnauthenticatedError("Invalid authentication token")

    async def authenticate(self, token: str, db_session: AsyncSession) -> Identity:
        """
        토큰 → Identity
        1) 토큰 검증 (만료/위조 구분)
        2) subject로 사용자 조회
        3) 사용자가 없거나 비활성 → UnauthenticatedError
        """
        username = self.validate_token(token)
        user = await UserRepository(db_session).find_by_username(username)
        if user is None or not user.active:
            logger.warning("토큰 subject(%s)에 해당하는 활성 사용자 없음", username)
            raise UnauthenticatedError("Invalid authentication token")
        return Identity.of(user)


async def get_auth_service(
    settings: Settings = Depends(get_settings)
) -> JWTAuthService:
    """
    JWTAuthService 의존성 주입 함수
    - settings.env의 JWT_SECRET_KEY, JWT_ALGORITHM으로 서비스 생성
    """
    return JWTAuthService(settings.JWT_SECRET_KEY, settings.JWT_ALGORITHM)


async def get_optional_identity(
    request: Request,
    auth_service: JWTAuthService = Depends(get_auth_service),
    db_session: AsyncSession = Depends(get_db_session),
) -> Optional[Identity]:
    """
    공개 경로용 선택적 인증
    - Authorization 헤더가 없으면 익명(None)
    - 헤더가 있는데 토큰이 유효하지 않으면 공개 경로라도 거부
    """
    token = extract_bearer_token(request)
    if token is None:
        return None
    return await auth_service.authenticate(token, db_session)


async def get_current_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    """
    보호된 경로용 인증
    - 토큰 없음 → UnauthenticatedError (401)
    - 만료 → TokenExpiredError, 위조/사용자 없음 → UnauthenticatedError
    """
    if identity is None:
        raise UnauthenticatedError("Authentication is required to access this resource")
    return identity


class PageParams:
    """
    page(0부터), size(1~100) 쿼리 파라미터
    """
    def __init__(
        self,
        page: int = Query(0, ge=0, description="0부터 시작하는 페이지 번호"),
        size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="페이지 크기"),
    ):
        self.page = page
        self.size = size
