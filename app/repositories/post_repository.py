import logging
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.post import Comment, Post, PostLike
from app.repositories.base_repository import BaseRepository
from app.repositories.exceptions import RepositoryError
from app.utils.pagination import Page

logger = logging.getLogger(__name__)


# ==================== 쿼리 빌더 ====================
class PostQueryBuilder:
    """Post 엔티티 쿼리 빌더"""

    @staticmethod
    def by_user_ids(user_ids: Iterable[str]):
        """작성자 ID 집합으로 필터링한 최신순 쿼리"""
        return (
            select(Post)
            .where(Post.user_id.in_(list(user_ids)))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )

    @staticmethod
    def count_by_user_ids(user_ids: Iterable[str]):
        return select(func.count()).select_from(Post).where(Post.user_id.in_(list(user_ids)))


# ==================== Repository ====================
class PostRepository(BaseRepository):
    """
    게시글/좋아요/댓글 데이터 액세스 Repository
    """
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def find_by_id(self, post_id: str) -> Optional[Post]:
        """id로 Post 조회"""
        post = await self.session.get(Post, post_id)
        logger.debug("Post 조회: id=%s, found=%s", post_id, bool(post))
        return post

    async def create(self, post: Post) -> None:
        self.session.add(post)

    async def delete(self, post: Post) -> None:
        await self.session.delete(post)

    async def page_by_user_ids(self, user_ids: Iterable[str], page: int, size: int) -> Page[Post]:
        """
        작성자 ID 집합에 속한 게시글을 최신순으로 페이지 조회 (피드용 단일 인덱스 쿼리)
        """
        ids = list(user_ids)
        if not ids:
            return Page(items=[], page=page, size=size, total=0)
        try:
            total = await self.session.scalar(PostQueryBuilder.count_by_user_ids(ids))
            query = PostQueryBuilder.by_user_ids(ids).offset(page * size).limit(size)
            result = await self.session.execute(query)
            posts = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("게시글 페이지 조회 실패: %s", e)
            raise RepositoryError(f"게시글 페이지 조회 중 오류: {e}")
        logger.debug("게시글 페이지 조회: users=%d, page=%d, found=%d", len(ids), page, len(posts))
        return Page(items=posts, page=page, size=size, total=total or 0)

    async def count_by_user_id(self, user_id: str) -> int:
        return await self.session.scalar(PostQueryBuilder.count_by_user_ids([user_id])) or 0

    async def count_posts(self) -> int:
        return await self.session.scalar(select(func.count()).select_from(Post)) or 0

    async def add_like(self, post: Post, user_id: str) -> bool:
        """
        좋아요 추가 (이미 눌렀으면 변화 없음, False)
        """
        if post.is_liked_by(user_id):
            return False
        post.likes.append(PostLike(post_id=post.id, user_id=user_id))
        return True

    async def remove_like(self, post: Post, user_id: str) -> bool:
        """
        좋아요 취소 (누르지 않았으면 변화 없음, False)
        """
        like = next((l for l in post.likes if l.user_id == user_id), None)
        if like is None:
            return False
        post.likes.remove(like)
        return True

    async def add_comment(self, post: Post, content: str, user_id: str, username: str) -> Comment:
        """
        댓글을 게시글의 댓글 목록 끝에 추가
        """
        comment = Comment(
            content=content,
            user_id=user_id,
            username=username,
            position=len(post.comments),
        )
        post.comments.append(comment)
        return comment
