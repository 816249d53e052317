from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.dependencies import get_current_identity, get_optional_identity
from app.schemas.common_schema import ApiResponse
from app.schemas.post_schema import LikeResultResponse
from app.schemas.user_schema import UserResponse
from app.security.identity import Identity
from app.services.post_service import PostService

router = APIRouter(prefix="/likes", tags=["Like"])


@router.post("/posts/{post_id}", response_model=ApiResponse[LikeResultResponse], summary="좋아요")
async def like_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[LikeResultResponse]:
    post = await PostService(db).like_post(identity, post_id)
    return ApiResponse.ok(
        LikeResultResponse(like_count=post.like_count, is_liked=True),
        message="Post liked successfully",
    )


@router.delete("/posts/{post_id}", response_model=ApiResponse[LikeResultResponse], summary="좋아요 취소")
async def unlike_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[LikeResultResponse]:
    post = await PostService(db).unlike_post(identity, post_id)
    return ApiResponse.ok(
        LikeResultResponse(like_count=post.like_count, is_liked=False),
        message="Post unliked successfully",
    )


@router.get("/posts/{post_id}", response_model=ApiResponse[LikeResultResponse], summary="좋아요 상태")
async def like_status(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[LikeResultResponse]:
    post = await PostService(db).get_post(post_id)
    return ApiResponse.ok(
        LikeResultResponse(like_count=post.like_count, is_liked=post.is_liked_by(identity.user_id))
    )


@router.get(
    "/posts/{post_id}/users",
    response_model=ApiResponse[List[UserResponse]],
    dependencies=[Depends(get_optional_identity)],
    summary="좋아요 누른 사용자 목록 (공개)",
)
async def liking_users(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserResponse]]:
    users = await PostService(db).get_liking_users(post_id)
    return ApiResponse.ok([UserResponse.from_user(u) for u in users])
