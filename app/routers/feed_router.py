from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.dependencies import PageParams, get_current_identity
from app.schemas.common_schema import ApiResponse, PageResponse
from app.schemas.post_schema import PostResponse
from app.security.identity import Identity
from app.services.feed_service import FeedService

router = APIRouter(prefix="/feed", tags=["Feed"])


@router.get("", response_model=ApiResponse[PageResponse[PostResponse]], summary="개인 피드")
async def personal_feed(
    paging: PageParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PageResponse[PostResponse]]:
    """
    팔로우한 사용자와 본인의 게시글을 최신순으로 반환
    """
    feed = await FeedService(db).personal_feed(identity, paging.page, paging.size)
    return ApiResponse.ok(PageResponse.of(feed.map(PostResponse.from_post)))


@router.get(
    "/users/{username}",
    response_model=ApiResponse[PageResponse[PostResponse]],
    summary="사용자 피드",
)
async def user_feed(
    username: str,
    paging: PageParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PageResponse[PostResponse]]:
    feed = await FeedService(db).user_feed(username, paging.page, paging.size)
    return ApiResponse.ok(PageResponse.of(feed.map(PostResponse.from_post)))
