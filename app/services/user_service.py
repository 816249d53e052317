import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.post_repository import PostRepository
from app.repositories.user_repository import UserRepository
from app.security.identity import Identity
from app.security.ownership import ensure_acting_as, ensure_not_self
from app.services.auth_service import hash_password
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import ConflictError, NotFoundError
from app.utils.pagination import Page

logger = logging.getLogger(__name__)


class UserService:
    """
    사용자 프로필 및 팔로우 그래프 관련 서비스
    - 프로필 조회/수정/삭제
    - 팔로우/언팔로우, 팔로워/팔로잉 목록, 팔로우 상태
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.post_repo = PostRepository(db)

    # ─── 조회 ──────────────────────────────────────────────────────────

    async def get_user_by_id(self, user_id: str) -> User:
        user = await self.user_repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found with id: {user_id}")
        return user

    async def get_user_by_username(self, username: str) -> User:
        user = await self.user_repo.find_by_username(username)
        if user is None:
            raise NotFoundError(f"User not found with username: {username}")
        return user

    async def count_posts(self, user_id: str) -> int:
        return await self.post_repo.count_by_user_id(user_id)

    # ─── 프로필 수정/삭제 ──────────────────────────────────────────────

    async def update_user(
        self,
        identity: Identity,
        user_id: str,
        display_name: Optional[str] = None,
        bio: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """
        프로필 수정 (본인만 가능)
        1) 호출자 == 대상 사용자 확인
        2) 이메일 변경 시 다른 사용자와 중복 여부 확인
        3) 입력된 필드만 반영 후 커밋
        """
        ensure_acting_as(identity, user_id)
        user = identity.user

        if email is not None and email != user.email:
            owner = await self.user_repo.find_by_email(email)
            if owner is not None and owner.id != user.id:
                raise ConflictError("Email already exists")
            user.email = email
        if display_name is not None:
            user.display_name = display_name
        if bio is not None:
            user.bio = bio
        if password is not None:
            user.password = hash_password(password)
        user.updated_at = utcnow()

        await self.user_repo.commit()
        logger.info("프로필 수정: %s", user.username)
        return user

    async def delete_user(self, identity: Identity, user_id: str) -> None:
        """
        계정 삭제 (본인만 가능, 하드 삭제)
        - 팔로우 관계, 작성한 게시글, 누른 좋아요를 함께 제거
        """
        ensure_acting_as(identity, user_id)
        await self.user_repo.delete_user(identity.user)
        await self.user_repo.commit()
        logger.info("계정 삭제: %s", identity.username)

    # ─── 팔로우 그래프 ─────────────────────────────────────────────────

    async def follow_user(self, identity: Identity, following_id: str) -> User:
        """
        identity 사용자가 following_id 사용자를 팔로우
        - 자기 자신 → InvalidOperationError
        - 대상 없음 → NotFoundError
        - 이미 팔로우 중이면 변화 없이 현재 상태 반환 (멱등)
        """
        ensure_not_self(identity.user_id, following_id, "You cannot follow yourself")
        target = await self.get_user_by_id(following_id)

        if await self.user_repo.add_follow(identity.user, target):
            await self.user_repo.commit()
            logger.info("팔로우: %s → %s", identity.username, target.username)
        return identity.user

    async def unfollow_user(self, identity: Identity, following_id: str) -> User:
        """
        identity 사용자가 following_id 사용자를 언팔로우
        - 대상 없음 → NotFoundError
        - 팔로우 중이 아니면 변화 없음 (멱등)
        """
        ensure_not_self(identity.user_id, following_id, "You cannot unfollow yourself")
        target = await self.get_user_by_id(following_id)

        if await self.user_repo.remove_follow(identity.user, target):
            await self.user_repo.commit()
            logger.info("언팔로우: %s → %s", identity.username, target.username)
        return identity.user

    async def get_followers(self, user: User) -> List[User]:
        return await self.user_repo.find_by_ids(user.followers)

    async def get_following(self, user: User) -> List[User]:
        return await self.user_repo.find_by_ids(user.following)

    async def get_followers_page(self, user: User, page: int, size: int) -> Page[User]:
        return await self.user_repo.page_by_ids(user.followers, page, size)

    async def get_following_page(self, user: User, page: int, size: int) -> Page[User]:
        return await self.user_repo.page_by_ids(user.following, page, size)

    async def follow_status(self, identity: Identity, user_id: str) -> dict:
        """
        대상 사용자와의 팔로우 관계 및 대상의 팔로워/팔로잉 수
        """
        target = await self.get_user_by_id(user_id)
        return {
            "is_following": identity.user.is_following(target.id),
            "is_follower": target.is_following(identity.user_id),
            "followers_count": target.followers_count,
            "following_count": target.following_count,
        }
