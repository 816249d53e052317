import uuid
from typing import Set

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.utils.datetime_utils import utcnow

# 게시글/댓글 본문 최대 길이
MAX_CONTENT_LENGTH = 280


class Post(Base):
    """
    게시글(Post) 모델
    - 작성자 ID와 작성자 username(비정규화)을 함께 저장
    - 좋아요는 PostLike 행의 집합, 댓글은 추가 순서대로 정렬된 목록
    """
    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_user_id_created_at", "user_id", "created_at"),
    )

    id: str = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="게시글 고유 ID(UUID 문자열)"
    )
    content: str = Column(
        String(MAX_CONTENT_LENGTH),
        nullable=False,
        doc="게시글 본문 (최대 280자)"
    )
    user_id: str = Column(
        String(36),
        ForeignKey(
            "user.id",
            ondelete="CASCADE"  # 작성자 삭제 시 게시글도 삭제
        ),
        nullable=False,
        index=True,
        doc="작성자(User) ID"
    )
    username: str = Column(
        String(30),
        nullable=False,
        doc="작성자 username (조회 시 조인 회피용 비정규화 필드)"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        index=True,
        doc="작성 시각(UTC)"
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="마지막 수정 시각(UTC)"
    )

    # Post ↔ PostLike (1:N)
    likes = relationship(
        "PostLike",
        cascade="all, delete-orphan",
        lazy="selectin",
        doc="좋아요 행 목록"
    )

    # Post ↔ Comment (1:N, 추가 순서 유지)
    comments = relationship(
        "Comment",
        cascade="all, delete-orphan",
        order_by="Comment.position",
        lazy="selectin",
        doc="댓글 목록 (추가 순서)"
    )

    @property
    def like_user_ids(self) -> Set[str]:
        return {like.user_id for like in self.likes}

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    def is_liked_by(self, user_id: str) -> bool:
        return user_id in self.like_user_ids


class PostLike(Base):
    """
    좋아요(PostLike) 모델
    - (post_id, user_id) 복합 PK로 집합(set) 의미 보장: 같은 사용자의 중복 좋아요 불가
    """
    __tablename__ = "post_like"

    post_id: str = Column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
        doc="좋아요 대상 게시글 ID"
    )
    user_id: str = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
        doc="좋아요를 누른 사용자 ID"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="좋아요 시각(UTC)"
    )


class Comment(Base):
    """
    댓글(Comment) 모델
    - 게시글에 종속, 생성 후 수정/삭제 없음
    """
    __tablename__ = "comment"

    id: str = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="댓글 고유 ID(UUID 문자열)"
    )
    post_id: str = Column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="대상 게시글 ID"
    )
    position: int = Column(
        Integer,
        nullable=False,
        doc="게시글 내 댓글 순번 (0부터, 추가 순서)"
    )
    content: str = Column(
        String(MAX_CONTENT_LENGTH),
        nullable=False,
        doc="댓글 본문 (최대 280자)"
    )
    user_id: str = Column(
        String(36),
        nullable=False,
        doc="작성자 ID (작성자 삭제 후에도 댓글은 username과 함께 유지)"
    )
    username: str = Column(
        String(30),
        nullable=False,
        doc="작성자 username (비정규화)"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="작성 시각(UTC)"
    )
