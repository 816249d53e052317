"""
소유권/인가 검사 헬퍼

리소스를 변경하는 동작은 리소스 소유자만 수행할 수 있다.
서비스 계층에서 대상 리소스를 한 번 조회한 직후 호출한다.
"""
import logging

from app.security.identity import Identity
from app.utils.exceptions import ForbiddenError, InvalidOperationError

logger = logging.getLogger(__name__)


def ensure_owner(owner_id: str, actor_id: str, message: str) -> None:
    """
    actor_id가 리소스 소유자(owner_id)가 아니면 ForbiddenError
    """
    if owner_id != actor_id:
        logger.warning("소유자가 아닌 사용자의 변경 시도: actor=%s owner=%s", actor_id, owner_id)
        raise ForbiddenError(message)


def ensure_acting_as(identity: Identity, path_user_id: str) -> None:
    """
    경로에 지정된 사용자 대신 동작하려면 호출자 본인이어야 함
    (/users/{id}, /users/{id}/follow/... 등)
    """
    ensure_owner(path_user_id, identity.user_id, "You can only act on your own account")


def ensure_not_self(actor_id: str, target_id: str, message: str) -> None:
    """
    자기 자신을 대상으로 하는 동작(자기 팔로우 등)이면 InvalidOperationError
    """
    if actor_id == target_id:
        raise InvalidOperationError(message)
