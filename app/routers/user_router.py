import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.dependencies import get_current_identity, get_optional_identity
from app.schemas.common_schema import ApiResponse, MessageResponse
from app.schemas.user_schema import UpdateUserRequest, UserResponse
from app.security.identity import Identity
from app.security.ownership import ensure_acting_as
from app.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["User"])


async def _profile(service: UserService, user) -> UserResponse:
    return UserResponse.from_user(user, post_count=await service.count_posts(user.id))


# ─── 내 정보 (/users/me) ────────────────────────────────────────────────

@router.get("/me", response_model=ApiResponse[UserResponse], summary="내 프로필 조회")
async def get_me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    return ApiResponse.ok(await _profile(UserService(db), identity.user))


@router.put("/me", response_model=ApiResponse[UserResponse], summary="내 프로필 수정")
async def update_me(
    req: UpdateUserRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    service = UserService(db)
    user = await service.update_user(identity, identity.user_id, **req.model_dump(exclude_unset=True))
    return ApiResponse.ok(UserResponse.from_user(user), message="Profile updated successfully")


@router.delete("/me", response_model=ApiResponse[MessageResponse], summary="내 계정 삭제")
async def delete_me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[MessageResponse]:
    await UserService(db).delete_user(identity, identity.user_id)
    return ApiResponse.ok(MessageResponse(message="User deleted successfully"))


# ─── 공개 프로필 ────────────────────────────────────────────────────────

@router.get(
    "/{username}",
    response_model=ApiResponse[UserResponse],
    dependencies=[Depends(get_optional_identity)],
    summary="username으로 프로필 조회 (공개)",
)
async def get_user(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    service = UserService(db)
    user = await service.get_user_by_username(username)
    return ApiResponse.ok(await _profile(service, user))


# ─── 본인 계정에 대한 동작 (/users/{id}/...) ──────────────────────────────

@router.put("/{user_id}", response_model=ApiResponse[UserResponse], summary="프로필 수정 (본인만)")
async def update_user(
    user_id: str,
    req: UpdateUserRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    user = await UserService(db).update_user(identity, user_id, **req.model_dump(exclude_unset=True))
    return ApiResponse.ok(UserResponse.from_user(user), message="Profile updated successfully")


@router.delete("/{user_id}", response_model=ApiResponse[MessageResponse], summary="계정 삭제 (본인만)")
async def delete_user(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[MessageResponse]:
    await UserService(db).delete_user(identity, user_id)
    return ApiResponse.ok(MessageResponse(message="User deleted successfully"))


@router.post(
    "/{user_id}/follow/{following_id}",
    response_model=ApiResponse[UserResponse],
    summary="팔로우 (본인 계정으로만)",
)
async def follow_user(
    user_id: str,
    following_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    ensure_acting_as(identity, user_id)
    user = await UserService(db).follow_user(identity, following_id)
    return ApiResponse.ok(UserResponse.from_user(user))


@router.delete(
    "/{user_id}/unfollow/{following_id}",
    response_model=ApiResponse[UserResponse],
    summary="언팔로우 (본인 계정으로만)",
)
async def unfollow_user(
    user_id: str,
    following_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    ensure_acting_as(identity, user_id)
    user = await UserService(db).unfollow_user(identity, following_id)
    return ApiResponse.ok(UserResponse.from_user(user))
