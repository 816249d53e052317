from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.dependencies import get_current_identity, get_optional_identity
from app.schemas.common_schema import ApiResponse
from app.schemas.post_schema import CommentRequest, CommentResponse, PostResponse
from app.security.identity import Identity
from app.services.post_service import PostService

router = APIRouter(prefix="/comments", tags=["Comment"])


@router.post("/posts/{post_id}", response_model=ApiResponse[PostResponse], summary="댓글 작성")
async def add_comment(
    post_id: str,
    req: CommentRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    """
    게시글 끝에 댓글을 추가하고 갱신된 게시글을 반환
    """
    service = PostService(db)
    await service.add_comment(identity, post_id, req.content)
    post = await service.get_post(post_id)
    return ApiResponse.ok(PostResponse.from_post(post), message="Comment added successfully")


@router.get(
    "/posts/{post_id}",
    response_model=ApiResponse[List[CommentResponse]],
    dependencies=[Depends(get_optional_identity)],
    summary="댓글 목록 (공개)",
)
async def get_comments(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[CommentResponse]]:
    comments = await PostService(db).get_comments(post_id)
    return ApiResponse.ok([CommentResponse.from_comment(c) for c in comments])
