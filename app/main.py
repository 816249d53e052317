import logging
import time
from contextlib import asynccontextmanager
from typing import Optional, Type

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings, Settings
from app.core.database import init_db
from app.middleware.api_version import ApiVersionMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.routers.auth_router import router as auth_router
from app.routers.comment_router import router as comment_router
from app.routers.feed_router import router as feed_router
from app.routers.follow_router import router as follow_router
from app.routers.health_router import router as health_router
from app.routers.like_router import router as like_router
from app.routers.post_router import router as post_router
from app.routers.user_router import router as user_router
from app.security.rate_limiter import RateLimiter
from app.utils.exceptions import (
    ApiError, BadRequestError, ConflictError, ForbiddenError,
    NotFoundError, RateLimitExceededError, TokenExpiredError, UnauthorizedError
)
from app.utils.responses import error_response

logger = logging.getLogger(__name__)

# ─── 로그 설정 ─────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# ─── 예외 클래스 → Status Code 매핑 ───────────────────────────────────────
EXCEPTION_STATUS_MAP: dict[Type[Exception], int] = {
    BadRequestError: 400,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    RateLimitExceededError: 429,
}

HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def resolve_status(exc: ApiError, settings: Settings) -> int:
    """
    예외 클래스의 MRO를 따라 EXCEPTION_STATUS_MAP에서 상태 코드를 찾음
    - 만료 토큰은 설정(EXPIRED_TOKEN_STATUS)에 따름
    - 매핑되지 않은 예외는 500
    """
    if isinstance(exc, TokenExpiredError):
        return settings.EXPIRED_TOKEN_STATUS
    for klass in type(exc).__mro__:
        if klass in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[klass]
    return 500


# ─── 예외 처리 핸들러 ───────────────────────────────────────────────────
async def handle_api_error(request: Request, exc: ApiError):
    """
    커스텀 ApiError를 응답 봉투로 변환
    - 5xx로 분류되는 예외는 내부 메시지를 노출하지 않음
    """
    status_code = resolve_status(exc, request.app.state.settings)
    if status_code >= 500:
        logger.error("처리되지 않은 서버 오류: %s", exc)
        return error_response(status_code, "INTERNAL_ERROR", "An unexpected error occurred")

    headers = None
    if status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    return error_response(status_code, exc.code, exc.message, exc.details, headers=headers)


async def handle_validation_error(request: Request, exc: RequestValidationError):
    """
    요청 본문/쿼리 검증 실패 → 400 VALIDATION_ERROR (필드별 메시지 포함)
    """
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return error_response(400, "VALIDATION_ERROR", "Validation failed", details)


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    """
    라우팅 단계의 HTTP 예외(존재하지 않는 경로, 허용되지 않는 메서드 등)도 봉투로 반환
    """
    code = HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(exc.status_code, code, str(exc.detail), headers=getattr(exc, "headers", None))


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("예상하지 못한 오류: %s %s", request.method, request.url.path)
    return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


# ─── 애플리케이션 수명 주기 이벤트 핸들러 정의 ─────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    앱 시작 시 DB 테이블 생성
    """
    await init_db()
    app.state.started_at = time.monotonic()
    logger.info("%s 시작 (environment=%s)", app.title, app.state.settings.ENVIRONMENT)
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    FastAPI 애플리케이션 생성
    1) 설정/속도 제한기를 app.state에 보관
    2) 미들웨어 등록 (CORS → 속도 제한 → API 버전 → 라우터 순으로 요청 통과)
    3) 예외 핸들러 및 라우터 등록
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="사용자/게시글/댓글/좋아요/팔로우/피드 기능을 제공하는 소셜 네트워크 API",
        version=settings.APP_VERSION,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.rate_limiter = RateLimiter(
        authenticated_capacity=settings.RATE_LIMIT_AUTHENTICATED_CAPACITY,
        anonymous_capacity=settings.RATE_LIMIT_ANONYMOUS_CAPACITY,
        refill_period=settings.RATE_LIMIT_PERIOD_SECONDS,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # ─── 미들웨어 (나중에 등록한 것이 바깥쪽) ─────────────────────────────
    app.add_middleware(
        ApiVersionMiddleware,
        current_version=settings.API_CURRENT_VERSION,
        supported_versions=settings.API_SUPPORTED_VERSIONS,
    )
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.rate_limiter,
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        trusted_proxies=settings.RATE_LIMIT_TRUSTED_PROXIES,
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "Authorization",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
            "X-API-Version",
            "X-API-Current-Version",
            "X-API-Supported-Versions",
        ],
    )

    @app.middleware("http")
    async def ensure_utf8(request: Request, call_next):
        """
        모든 JSON 응답에 UTF-8 charset을 명시적으로 추가
        """
        resp = await call_next(request)
        ctype = resp.headers.get("Content-Type", "")
        if ctype.startswith("application/json") and "charset" not in ctype.lower():
            resp.headers["Content-Type"] = "application/json; charset=utf-8"
        return resp

    # ─── 예외 처리 핸들러 등록 ──────────────────────────────────────────
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # ─── 라우터 등록 ───────────────────────────────────────────────────
    for router in (
        auth_router,
        user_router,
        post_router,
        comment_router,
        like_router,
        follow_router,
        feed_router,
        health_router,
    ):
        app.include_router(router, prefix="/api")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
