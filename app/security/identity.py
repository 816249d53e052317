from dataclasses import dataclass

from app.models.user import User


@dataclass(frozen=True)
class Identity:
    """
    요청 단위 인증 주체
    - 인가 종속성이 만들어 라우터 → 서비스로 명시적으로 전달
    - 전역/스레드 로컬 컨텍스트를 쓰지 않으므로 요청 간 누수가 없음
    """
    user_id: str
    username: str
    user: User

    @classmethod
    def of(cls, user: User) -> "Identity":
        return cls(user_id=user.id, username=user.username, user=user)
