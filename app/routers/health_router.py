import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings, Settings
from app.core.database import get_db_session
from app.repositories.post_repository import PostRepository
from app.repositories.user_repository import UserRepository
from app.schemas.common_schema import ApiResponse, ErrorDetail
from app.utils.datetime_utils import iso_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])


def format_uptime(seconds: float) -> str:
    """
    경과 초를 "Xd Yh Zm" 형식으로 변환
    """
    minutes = int(seconds) // 60
    return f"{minutes // 1440}d {(minutes // 60) % 24}h {minutes % 60}m"


async def check_database(db: AsyncSession) -> Dict[str, Any]:
    """
    DB 연결 확인 (SELECT 1) 후 사용자/게시글 수 집계
    """
    try:
        await db.execute(text("SELECT 1"))
        return {
            "status": "UP",
            "details": {
                "userCount": await UserRepository(db).count_users(),
                "postCount": await PostRepository(db).count_posts(),
            },
        }
    except SQLAlchemyError as e:
        logger.error("DB 헬스 체크 실패: %s", e)
        return {"status": "DOWN", "details": f"Database connection error: {e}"}


@router.get("/ping", summary="단순 생존 확인")
async def ping() -> Dict[str, str]:
    return {"status": "UP", "timestamp": iso_timestamp()}


@router.get("", summary="DB를 포함한 상태 확인")
async def health(
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
):
    database = await check_database(db)
    status = database["status"]
    data = {
        "status": status,
        "version": settings.APP_VERSION,
        "components": {"database": database},
    }
    if status != "UP":
        body = ApiResponse(
            success=False,
            message="Service is unhealthy",
            data=data,
            error=ErrorDetail(status=500, code="SERVICE_DOWN", details=database["details"]),
        )
        return ORJSONResponse(status_code=500, content=body.model_dump(mode="json"))
    return ApiResponse.ok(data)


@router.get("/info", summary="애플리케이션 정보")
async def info(
    request: Request,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
):
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return ApiResponse.ok({
        "application": {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "uptime": format_uptime(time.monotonic() - started_at),
        },
        "resources": {
            "users": await UserRepository(db).count_users(),
            "posts": await PostRepository(db).count_posts(),
        },
        "apiVersioning": {
            "current": settings.API_CURRENT_VERSION,
            "supported": settings.API_SUPPORTED_VERSIONS,
        },
    })
