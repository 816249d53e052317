from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String

from app.core.database import Base
from app.utils.datetime_utils import utcnow


class Follow(Base):
    """
    팔로우(Follow) 모델
    - follower가 following을 팔로우한다는 단일 행
    - 이 한 행이 follower.following 과 following.followers 양쪽 집합을 동시에 구성
    - 복합 PK로 중복 팔로우 방지, CHECK 제약으로 자기 자신 팔로우 방지
    """
    __tablename__ = "follow"
    __table_args__ = (
        CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )

    follower_id: str = Column(
        String(36),
        ForeignKey(
            "user.id",
            ondelete="CASCADE"  # 사용자 삭제 시 팔로우 관계도 삭제
        ),
        primary_key=True,
        doc="팔로우하는 사용자 ID"
    )
    following_id: str = Column(
        String(36),
        ForeignKey(
            "user.id",
            ondelete="CASCADE"
        ),
        primary_key=True,
        index=True,
        doc="팔로우 대상 사용자 ID"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="팔로우 시각(UTC)"
    )
