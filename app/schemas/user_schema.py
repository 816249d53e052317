from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from app.models.user import User
from app.schemas.common_schema import CamelModel

# ─── 사용자 관련 요청/응답 스키마 정의 ───────────────────────────────────

class UserResponse(CamelModel):
    """
    사용자 프로필 응답 모델 (비밀번호 해시는 절대 포함하지 않음)
    """
    id:              str            = Field(..., description="사용자 ID")
    username:        str            = Field(..., description="사용자 이름")
    email:           str            = Field(..., description="이메일")
    display_name:    str            = Field(..., description="표시 이름")
    bio:             Optional[str]  = Field(None, description="자기소개")
    following:       List[str]      = Field(default_factory=list, description="팔로우 중인 사용자 ID 목록")
    followers:       List[str]      = Field(default_factory=list, description="팔로워 사용자 ID 목록")
    following_count: int            = Field(0, description="팔로잉 수")
    followers_count: int            = Field(0, description="팔로워 수")
    post_count:      Optional[int]  = Field(None, description="작성한 게시글 수 (프로필 조회 시)")
    active:          bool           = Field(True, description="계정 활성 여부")
    created_at:      datetime       = Field(..., description="가입 시각(UTC)")
    updated_at:      datetime       = Field(..., description="마지막 수정 시각(UTC)")

    @classmethod
    def from_user(cls, user: User, post_count: Optional[int] = None) -> "UserResponse":
        """
        User 모델 인스턴스를 UserResponse 스키마로 변환
        """
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            bio=user.bio,
            following=sorted(user.following),
            followers=sorted(user.followers),
            following_count=user.following_count,
            followers_count=user.followers_count,
            post_count=post_count,
            active=user.active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UpdateUserRequest(CamelModel):
    """
    프로필 수정 요청 모델 (입력된 필드만 변경)
    """
    display_name: Optional[str]      = Field(None, min_length=1, max_length=100, description="새 표시 이름")
    bio:          Optional[str]      = Field(None, max_length=500, description="새 자기소개")
    email:        Optional[EmailStr] = Field(None, description="새 이메일 (중복 불가)")
    password:     Optional[str]      = Field(None, min_length=8, description="새 비밀번호")


class FollowResultResponse(CamelModel):
    """
    팔로우/언팔로우 결과 모델
    """
    following:    int  = Field(..., description="요청자의 팔로잉 수")
    is_following: bool = Field(..., description="요청 후 팔로우 상태")


class FollowStatusResponse(CamelModel):
    """
    특정 사용자와의 팔로우 관계 상태 모델
    """
    is_following:    bool = Field(..., description="내가 대상 사용자를 팔로우 중인지")
    is_follower:     bool = Field(..., description="대상 사용자가 나를 팔로우 중인지")
    followers_count: int  = Field(..., description="대상 사용자의 팔로워 수")
    following_count: int  = Field(..., description="대상 사용자의 팔로잉 수")
