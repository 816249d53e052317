import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, settings as default_settings
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.security import token_codec
from app.security.identity import Identity
from app.utils.exceptions import ConflictError, InvalidCredentialsError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


def build_password_context(rounds: int) -> CryptContext:
    """
    bcrypt 해시 컨텍스트 생성 (반복 횟수는 설정값 사용)
    """
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


pwd_context = build_password_context(default_settings.BCRYPT_ROUNDS)


def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)


@dataclass(frozen=True)
class LoginResult:
    """
    로그인 성공 결과
    - identity: 인증된 사용자
    - token: 발급된 Access Token
    - expires_in: 토큰 만료까지 남은 초
    """
    identity: Identity
    token: str
    expires_in: int


class AuthService:
    """
    인증 관련 서비스 클래스
    - 회원가입, 로그인(토큰 발급), 로그아웃 기능 제공
    - 토큰은 저장하지 않음: 만료 시각이 유일한 무효화 수단
    """
    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings
        self.user_repo = UserRepository(db)

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> User:
        """
        신규 사용자 등록
        1) username 중복 체크
        2) 이메일 중복 체크
        3) 비밀번호 bcrypt 해시 후 User 저장
        """
        # 1) username 중복 체크
        if await self.user_repo.exists_by_username(username):
            raise ConflictError("Username already exists")

        # 2) 이메일 중복 체크
        if await self.user_repo.exists_by_email(email):
            raise ConflictError("Email already exists")

        # 3) User 생성/저장
        user = User(
            username=username,
            email=email,
            password=hash_password(password),
            display_name=display_name or username,
            following_links=[],
            follower_links=[],
        )
        await self.user_repo.create_user(user)
        await self.user_repo.commit()

        logger.info("회원가입 완료: username=%s, id=%s", user.username, user.id)
        return user

    async def login(self, username: str, password: str, now: Optional[datetime] = None) -> LoginResult:
        """
        username/비밀번호 로그인
        - 존재하지 않는 사용자도 더미 해시 검증을 거쳐 응답 시간을 맞춤
        - 실패 원인(없는 사용자/비활성/비밀번호 불일치)은 구분하지 않음
        """
        user = await self.user_repo.find_by_username(username)
        if user is None:
            pwd_context.dummy_verify()
            logger.warning("로그인 실패 (존재하지 않는 사용자): %s", username)
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not pwd_context.verify(password, user.password):
            logger.warning("로그인 실패 (비밀번호 불일치): %s", username)
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not user.active:
            logger.warning("로그인 실패 (비활성 계정): %s", username)
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        token = token_codec.issue(
            user.username,
            self.settings.JWT_SECRET_KEY,
            timedelta(minutes=self.settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES),
            now=now,
            algorithm=self.settings.JWT_ALGORITHM,
        )
        logger.info("로그인 성공: %s", username)
        return LoginResult(
            identity=Identity.of(user),
            token=token,
            expires_in=self.settings.ACCESS_TOKEN_TTL_SECONDS,
        )

    @staticmethod
    def logout(identity: Optional[Identity]) -> None:
        """
        로그아웃 (서버 측 상태 없음, 클라이언트가 토큰을 폐기)
        """
        if identity is not None:
            logger.info("로그아웃: %s", identity.username)
