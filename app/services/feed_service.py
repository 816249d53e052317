import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.post import Post
from app.repositories.post_repository import PostRepository
from app.repositories.user_repository import UserRepository
from app.security.identity import Identity
from app.utils.exceptions import NotFoundError
from app.utils.pagination import Page

logger = logging.getLogger(__name__)


class FeedService:
    """
    피드 조회 서비스
    - 개인 피드: 팔로우한 사용자 + 본인의 게시글, 최신순
    - 사용자 피드: 특정 사용자의 게시글, 최신순
    - 작성자 ID 집합에 대한 단일 인덱스 쿼리로 구성 (랭킹 없음)
    """
    def __init__(self, db: AsyncSession):
        self.post_repo = PostRepository(db)
        self.user_repo = UserRepository(db)

    async def personal_feed(self, identity: Identity, page: int, size: int) -> Page[Post]:
        user_ids = set(identity.user.following)
        user_ids.add(identity.user_id)
        feed = await self.post_repo.page_by_user_ids(user_ids, page, size)
        logger.debug("개인 피드 조회: user=%s, authors=%d, total=%d", identity.username, len(user_ids), feed.total)
        return feed

    async def user_feed(self, username: str, page: int, size: int) -> Page[Post]:
        user = await self.user_repo.find_by_username(username)
        if user is None:
            raise NotFoundError(f"User not found with username: {username}")
        return await self.post_repo.page_by_user_ids([user.id], page, size)
