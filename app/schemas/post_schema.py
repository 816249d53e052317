from datetime import datetime
from typing import List

from pydantic import Field, field_validator

from app.models.post import MAX_CONTENT_LENGTH, Comment, Post
from app.schemas.common_schema import CamelModel

# ─── 게시글/댓글/좋아요 요청 스키마 정의 ─────────────────────────────────

class ContentRequest(CamelModel):
    """
    본문(content) 하나만 받는 요청의 공통 모델
    - 공백만 있는 본문은 거부, 최대 280자
    """
    content: str = Field(
        ...,
        min_length=1,
        max_length=MAX_CONTENT_LENGTH,
        description="본문 (1~280자)",
    )

    @field_validator("content")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content cannot be empty")
        return v


class CreatePostRequest(ContentRequest):
    """게시글 작성 요청 모델"""


class UpdatePostRequest(ContentRequest):
    """게시글 수정 요청 모델"""


class CommentRequest(ContentRequest):
    """댓글 작성 요청 모델"""


# ─── 응답 스키마 정의 ─────────────────────────────────────────────────

class CommentResponse(CamelModel):
    id:         str      = Field(..., description="댓글 ID")
    content:    str      = Field(..., description="댓글 본문")
    user_id:    str      = Field(..., description="작성자 ID")
    username:   str      = Field(..., description="작성자 username")
    created_at: datetime = Field(..., description="작성 시각(UTC)")

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls.model_validate(comment)


class PostResponse(CamelModel):
    """
    게시글 응답 모델
    - likes: 좋아요를 누른 사용자 ID 목록
    - comments: 추가 순서대로 정렬된 댓글
    """
    id:            str                   = Field(..., description="게시글 ID")
    content:       str                   = Field(..., description="본문")
    user_id:       str                   = Field(..., description="작성자 ID")
    username:      str                   = Field(..., description="작성자 username")
    likes:         List[str]             = Field(default_factory=list, description="좋아요 누른 사용자 ID 목록")
    like_count:    int                   = Field(0, description="좋아요 수")
    comments:      List[CommentResponse] = Field(default_factory=list, description="댓글 목록")
    comment_count: int                   = Field(0, description="댓글 수")
    created_at:    datetime              = Field(..., description="작성 시각(UTC)")
    updated_at:    datetime              = Field(..., description="수정 시각(UTC)")

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        """
        Post 모델 인스턴스를 PostResponse 스키마로 변환
        """
        return cls(
            id=post.id,
            content=post.content,
            user_id=post.user_id,
            username=post.username,
            likes=sorted(post.like_user_ids),
            like_count=post.like_count,
            comments=[CommentResponse.from_comment(c) for c in post.comments],
            comment_count=post.comment_count,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class LikeResultResponse(CamelModel):
    """
    좋아요/좋아요 취소 결과 모델
    """
    like_count: int  = Field(..., description="좋아요 수")
    is_liked:   bool = Field(..., description="요청 후 좋아요 상태")
