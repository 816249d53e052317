from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.follow import Follow
from app.models.post import Comment, Post, PostLike
from app.models.user import User
from app.repositories.base_repository import BaseRepository
from app.utils.pagination import Page


class UserRepository(BaseRepository):
    """
    사용자 관련 데이터 액세스 담당 Repository 클래스
    - 자격 증명 조회(username/id), 생성/삭제, 팔로우 관계 변경 기능 제공
    """
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        """
        주어진 ID와 일치하는 User 객체 반환
        """
        return await self.session.get(User, user_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        """
        주어진 username과 일치하는 User 객체 반환
        """
        query = select(User).where(User.username == username)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        주어진 이메일과 일치하는 User 객체 반환
        """
        query = select(User).where(User.email == email)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def exists_by_username(self, username: str) -> bool:
        return await self.find_by_username(username) is not None

    async def exists_by_email(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def find_by_ids(self, user_ids: Iterable[str]) -> List[User]:
        """
        ID 목록에 해당하는 사용자들을 username 순으로 반환 (삭제된 ID는 자연히 제외)
        """
        ids = list(user_ids)
        if not ids:
            return []
        query = select(User).where(User.id.in_(ids)).order_by(User.username)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def page_by_ids(self, user_ids: Iterable[str], page: int, size: int) -> Page[User]:
        """
        ID 목록에 해당하는 사용자들을 페이지 단위로 반환
        """
        ids = list(user_ids)
        if not ids:
            return Page(items=[], page=page, size=size, total=0)
        total = await self.session.scalar(
            select(func.count()).select_from(User).where(User.id.in_(ids))
        )
        query = (
            select(User)
            .where(User.id.in_(ids))
            .order_by(User.username)
            .offset(page * size)
            .limit(size)
        )
        result = await self.session.execute(query)
        return Page(items=list(result.scalars().all()), page=page, size=size, total=total or 0)

    async def count_users(self) -> int:
        return await self.session.scalar(select(func.count()).select_from(User)) or 0

    async def create_user(self, user: User) -> None:
        """
        새 User 엔티티를 세션에 추가
        """
        self.session.add(user)

    async def add_follow(self, follower: User, target: User) -> bool:
        """
        follower → target 팔로우 행 추가
        - 하나의 Follow 행을 양쪽 컬렉션에 모두 넣어 following/followers를 동시에 갱신
        - 이미 팔로우 중이면 아무것도 하지 않고 False
        """
        if follower.is_following(target.id):
            return False
        link = Follow(follower_id=follower.id, following_id=target.id)
        follower.following_links.append(link)
        target.follower_links.append(link)
        return True

    async def remove_follow(self, follower: User, target: User) -> bool:
        """
        follower → target 팔로우 행 제거 (양쪽 컬렉션에서 제거 → delete-orphan으로 삭제)
        - 팔로우 중이 아니면 False
        """
        link = next(
            (l for l in follower.following_links if l.following_id == target.id),
            None,
        )
        if link is None:
            return False
        follower.following_links.remove(link)
        if link in target.follower_links:
            target.follower_links.remove(link)
        return True

    async def delete_user(self, user: User) -> None:
        """
        사용자와 그 사용자의 게시글(좋아요/댓글 포함), 좋아요를 삭제
        - 팔로우 행은 User 관계의 cascade로 함께 삭제
        """
        own_post_ids = select(Post.id).where(Post.user_id == user.id)
        for stmt in (
            delete(PostLike).where(PostLike.post_id.in_(own_post_ids)),
            delete(Comment).where(Comment.post_id.in_(own_post_ids)),
            delete(PostLike).where(PostLike.user_id == user.id),
            delete(Post).where(Post.user_id == user.id),
        ):
            await self.session.execute(stmt.execution_options(synchronize_session=False))
        await self.session.delete(user)
