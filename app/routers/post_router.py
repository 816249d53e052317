import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.dependencies import PageParams, get_current_identity, get_optional_identity
from app.schemas.common_schema import ApiResponse, MessageResponse, PageResponse
from app.schemas.post_schema import CreatePostRequest, PostResponse, UpdatePostRequest
from app.security.identity import Identity
from app.services.feed_service import FeedService
from app.services.post_service import PostService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/posts", tags=["Post"])


@router.post("", response_model=ApiResponse[PostResponse], status_code=201, summary="게시글 작성")
async def create_post(
    req: CreatePostRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await PostService(db).create_post(identity, req.content)
    return ApiResponse.ok(PostResponse.from_post(post), message="Post created successfully")


@router.get("/feed", response_model=ApiResponse[PageResponse[PostResponse]], summary="내 피드 조회")
async def get_feed(
    paging: PageParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PageResponse[PostResponse]]:
    feed = await FeedService(db).personal_feed(identity, paging.page, paging.size)
    return ApiResponse.ok(PageResponse.of(feed.map(PostResponse.from_post)))


@router.get(
    "/user/{user_id}",
    response_model=ApiResponse[PageResponse[PostResponse]],
    summary="특정 사용자의 게시글 목록",
)
async def get_posts_by_user(
    user_id: str,
    paging: PageParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PageResponse[PostResponse]]:
    posts = await PostService(db).get_posts_by_user(user_id, paging.page, paging.size)
    return ApiResponse.ok(PageResponse.of(posts.map(PostResponse.from_post)))


@router.get(
    "/{post_id}",
    response_model=ApiResponse[PostResponse],
    dependencies=[Depends(get_optional_identity)],
    summary="게시글 조회 (공개)",
)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await PostService(db).get_post(post_id)
    return ApiResponse.ok(PostResponse.from_post(post))


@router.put("/{post_id}", response_model=ApiResponse[PostResponse], summary="게시글 수정 (작성자만)")
async def update_post(
    post_id: str,
    req: UpdatePostRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PostResponse]:
    post = await PostService(db).update_post(identity, post_id, req.content)
    return ApiResponse.ok(PostResponse.from_post(post), message="Post updated successfully")


@router.delete("/{post_id}", response_model=ApiResponse[MessageResponse], summary="게시글 삭제 (작성자만)")
async def delete_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[MessageResponse]:
    await PostService(db).delete_post(identity, post_id)
    return ApiResponse.ok(MessageResponse(message="Post deleted successfully"))
