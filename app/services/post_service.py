import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.post import MAX_CONTENT_LENGTH, Comment, Post
from app.models.user import User
from app.repositories.post_repository import PostRepository
from app.repositories.user_repository import UserRepository
from app.security.identity import Identity
from app.security.ownership import ensure_owner
from app.utils.datetime_utils import utcnow
from app.utils.exceptions import NotFoundError, ValidationError
from app.utils.pagination import Page

logger = logging.getLogger(__name__)


def validate_content(content: str, field: str = "Post content") -> str:
    """
    본문 검증: 공백만 있는 본문 또는 280자 초과 → ValidationError
    """
    if content is None or not content.strip():
        raise ValidationError(f"{field} cannot be empty")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"{field} cannot exceed {MAX_CONTENT_LENGTH} characters")
    return content


class PostService:
    """
    게시글/좋아요/댓글 서비스
    - 수정/삭제는 작성자만 가능
    - 좋아요/댓글은 인증된 모든 사용자가 존재하는 게시글에 수행 가능
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.post_repo = PostRepository(db)
        self.user_repo = UserRepository(db)

    async def get_post(self, post_id: str) -> Post:
        post = await self.post_repo.find_by_id(post_id)
        if post is None:
            raise NotFoundError(f"Post not found with id: {post_id}")
        return post

    async def create_post(self, identity: Identity, content: str) -> Post:
        validate_content(content)
        post = Post(
            content=content,
            user_id=identity.user_id,
            username=identity.username,
            likes=[],
            comments=[],
        )
        await self.post_repo.create(post)
        await self.post_repo.commit()
        logger.info("게시글 작성: user=%s, post=%s", identity.username, post.id)
        return post

    async def update_post(self, identity: Identity, post_id: str, content: str) -> Post:
        """
        게시글 수정
        1) 본문 검증
        2) 게시글 조회 (없으면 NotFoundError)
        3) 작성자 확인 (아니면 ForbiddenError)
        """
        validate_content(content)
        post = await self.get_post(post_id)
        ensure_owner(post.user_id, identity.user_id, "You can only update your own posts")

        post.content = content
        post.updated_at = utcnow()
        await self.post_repo.commit()
        return post

    async def delete_post(self, identity: Identity, post_id: str) -> None:
        post = await self.get_post(post_id)
        ensure_owner(post.user_id, identity.user_id, "You can only delete your own posts")

        await self.post_repo.delete(post)
        await self.post_repo.commit()
        logger.info("게시글 삭제: user=%s, post=%s", identity.username, post_id)

    async def get_posts_by_user(self, user_id: str, page: int, size: int) -> Page[Post]:
        """
        특정 사용자의 게시글을 최신순으로 페이지 조회 (사용자 없으면 NotFoundError)
        """
        if await self.user_repo.find_by_id(user_id) is None:
            raise NotFoundError(f"User not found with id: {user_id}")
        return await self.post_repo.page_by_user_ids([user_id], page, size)

    # ─── 좋아요 ─────────────────────────────────────────────────────────

    async def like_post(self, identity: Identity, post_id: str) -> Post:
        """
        좋아요 (이미 눌렀으면 변화 없음)
        """
        post = await self.get_post(post_id)
        if await self.post_repo.add_like(post, identity.user_id):
            await self.post_repo.commit()
            logger.debug("좋아요: user=%s, post=%s", identity.username, post_id)
        return post

    async def unlike_post(self, identity: Identity, post_id: str) -> Post:
        """
        좋아요 취소 (누르지 않았으면 변화 없음)
        """
        post = await self.get_post(post_id)
        if await self.post_repo.remove_like(post, identity.user_id):
            await self.post_repo.commit()
            logger.debug("좋아요 취소: user=%s, post=%s", identity.username, post_id)
        return post

    async def get_liking_users(self, post_id: str) -> List[User]:
        """
        게시글에 좋아요를 누른 사용자 목록 (이미 삭제된 사용자는 제외)
        """
        post = await self.get_post(post_id)
        return await self.user_repo.find_by_ids(post.like_user_ids)

    # ─── 댓글 ───────────────────────────────────────────────────────────

    async def add_comment(self, identity: Identity, post_id: str, content: str) -> Comment:
        validate_content(content, field="Comment content")
        post = await self.get_post(post_id)
        comment = await self.post_repo.add_comment(post, content, identity.user_id, identity.username)
        await self.post_repo.commit()
        logger.debug("댓글 작성: user=%s, post=%s", identity.username, post_id)
        return comment

    async def get_comments(self, post_id: str) -> List[Comment]:
        post = await self.get_post(post_id)
        return list(post.comments)
