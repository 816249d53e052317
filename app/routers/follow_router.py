from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.dependencies import PageParams, get_current_identity
from app.schemas.common_schema import ApiResponse, PageResponse
from app.schemas.user_schema import FollowResultResponse, FollowStatusResponse, UserResponse
from app.security.identity import Identity
from app.services.user_service import UserService

router = APIRouter(prefix="/follow", tags=["Follow"])


# ─── 팔로워/팔로잉 목록 ────────────────────────────────────────────────

@router.get("/followers", response_model=ApiResponse[List[UserResponse]], summary="내 팔로워 목록")
async def get_followers(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserResponse]]:
    users = await UserService(db).get_followers(identity.user)
    return ApiResponse.ok([UserResponse.from_user(u) for u in users])


@router.get("/following", response_model=ApiResponse[List[UserResponse]], summary="내 팔로잉 목록")
async def get_following(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserResponse]]:
    users = await UserService(db).get_following(identity.user)
    return ApiResponse.ok([UserResponse.from_user(u) for u in users])


@router.get(
    "/followers/page",
    response_model=ApiResponse[PageResponse[UserResponse]],
    summary="내 팔로워 목록 (페이지)",
)
async def get_followers_page(
    paging: PageParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PageResponse[UserResponse]]:
    page = await UserService(db).get_followers_page(identity.user, paging.page, paging.size)
    return ApiResponse.ok(PageResponse.of(page.map(UserResponse.from_user)))


@router.get(
    "/following/page",
    response_model=ApiResponse[PageResponse[UserResponse]],
    summary="내 팔로잉 목록 (페이지)",
)
async def get_following_page(
    paging: PageParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PageResponse[UserResponse]]:
    page = await UserService(db).get_following_page(identity.user, paging.page, paging.size)
    return ApiResponse.ok(PageResponse.of(page.map(UserResponse.from_user)))


# ─── 팔로우/언팔로우 ──────────────────────────────────────────────────

@router.post("/{following_id}", response_model=ApiResponse[FollowResultResponse], summary="팔로우")
async def follow(
    following_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[FollowResultResponse]:
    user = await UserService(db).follow_user(identity, following_id)
    return ApiResponse.ok(FollowResultResponse(following=user.following_count, is_following=True))


@router.delete("/{following_id}", response_model=ApiResponse[FollowResultResponse], summary="언팔로우")
async def unfollow(
    following_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[FollowResultResponse]:
    user = await UserService(db).unfollow_user(identity, following_id)
    return ApiResponse.ok(FollowResultResponse(following=user.following_count, is_following=False))


@router.get("/{user_id}/status", response_model=ApiResponse[FollowStatusResponse], summary="팔로우 상태")
async def follow_status(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[FollowStatusResponse]:
    status = await UserService(db).follow_status(identity, user_id)
    return ApiResponse.ok(FollowStatusResponse(**status))
