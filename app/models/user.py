import uuid
from typing import Set

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.utils.datetime_utils import utcnow


class User(Base):
    """
    서비스 사용자(User) 모델
    - 로그인 자격 증명(해시 비밀번호)과 프로필 정보를 저장
    - 팔로우 관계는 Follow 행 하나가 양쪽 집합(following/followers)을 함께 표현
    """
    __tablename__ = "user"

    id: str = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="사용자 고유 ID(UUID 문자열)"
    )
    username: str = Column(
        String(30),
        unique=True,
        index=True,
        nullable=False,
        doc="서비스 내 고유 사용자 이름(로그인 ID)"
    )
    email: str = Column(
        String(120),
        unique=True,
        nullable=False,
        doc="사용자 이메일"
    )
    password: str = Column(
        String(255),
        nullable=False,
        doc="해시 처리된 비밀번호"
    )
    display_name: str = Column(
        String(100),
        nullable=False,
        doc="화면 표시 이름 (미입력 시 username)"
    )
    bio: str = Column(
        Text,
        nullable=True,
        doc="자기소개"
    )
    active: bool = Column(
        Boolean,
        nullable=False,
        default=True,
        doc="계정 활성 여부 (비활성 계정은 로그인/인가 거부)"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="계정 생성 시각(UTC)"
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="프로필 마지막 수정 시각(UTC)"
    )

    # User → Follow (내가 팔로우하는 관계, 1:N)
    following_links = relationship(
        "Follow",
        foreign_keys="Follow.follower_id",
        cascade="all, delete-orphan",
        lazy="selectin",
        doc="이 사용자가 팔로우하는 Follow 행 목록"
    )

    # User → Follow (나를 팔로우하는 관계, 1:N)
    follower_links = relationship(
        "Follow",
        foreign_keys="Follow.following_id",
        cascade="all, delete-orphan",
        lazy="selectin",
        doc="이 사용자를 팔로우하는 Follow 행 목록"
    )

    @property
    def following(self) -> Set[str]:
        return {link.following_id for link in self.following_links}

    @property
    def followers(self) -> Set[str]:
        return {link.follower_id for link in self.follower_links}

    @property
    def following_count(self) -> int:
        return len(self.following_links)

    @property
    def followers_count(self) -> int:
        return len(self.follower_links)

    def is_following(self, user_id: str) -> bool:
        return user_id in self.following
