import logging
from typing import Collection, Iterable, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.dependencies import extract_bearer_token
from app.security import token_codec
from app.security.rate_limiter import RateLimitDecision, RateLimiter
from app.utils.exceptions import RateLimitExceededError
from app.utils.responses import error_response

logger = logging.getLogger(__name__)


def client_ip(request: Request, trusted_proxies: Collection[str] = ()) -> str:
    """
    버킷 키로 쓸 클라이언트 주소
    - 기본값은 접속 주소(request.client.host)
    - 접속 주소가 신뢰 프록시일 때만 X-Forwarded-For의 첫 번째 주소 사용
    """
    peer = request.client.host if request.client else "unknown"
    if peer not in trusted_proxies:
        return peer

    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop and first_hop.lower() != "unknown":
        return first_hop
    return peer


def resolve_client_key(
    request: Request,
    secret_key: str,
    algorithm: str = token_codec.ALGORITHM,
    trusted_proxies: Collection[str] = (),
) -> Tuple[str, bool]:
    """
    요청의 버킷 키와 인증 여부 결정
    - 검증되는 토큰이 있으면 user:<subject> (DB 조회 없이 토큰만 검증)
    - 그 외에는 ip:<주소>
    """
    token = extract_bearer_token(request)
    if token:
        try:
            return f"user:{token_codec.verify(token, secret_key, algorithm=algorithm)}", True
        except token_codec.TokenError as e:
            # 인증 실패 판정은 인가 단계가 담당, 여기서는 IP 버킷으로 분류
            logger.debug("속도 제한 키: 토큰 검증 실패로 IP 사용 (%s)", e)
    return f"ip:{client_ip(request, trusted_proxies)}", False


def _match_path(paths: Tuple[str, ...], target: str) -> bool:
    return any(target == candidate or target.startswith(f"{candidate}/") for candidate in paths)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    /api 하위 경로에 토큰 버킷 속도 제한 적용 (헬스 체크 제외)
    - 모든 제한 대상 응답에 X-RateLimit-* 헤더 추가
    - 초과 시 429 + Retry-After
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: RateLimiter,
        secret_key: str,
        algorithm: str = token_codec.ALGORITHM,
        trusted_proxies: Iterable[str] = (),
        enabled: bool = True,
        paths: Iterable[str] = ("/api",),
        exempt_paths: Iterable[str] = ("/api/health",),
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.trusted_proxies = frozenset(trusted_proxies)
        self.enabled = enabled
        self.paths = tuple(paths)
        self.exempt_paths = tuple(exempt_paths)

    def _is_limited(self, path: str) -> bool:
        return _match_path(self.paths, path) and not _match_path(self.exempt_paths, path)

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or not self._is_limited(request.url.path):
            return await call_next(request)

        client_key, authenticated = resolve_client_key(
            request, self.secret_key, self.algorithm, self.trusted_proxies
        )
        decision = self.limiter.try_acquire(client_key, authenticated)

        if decision.allowed:
            response = await call_next(request)
        else:
            logger.warning(
                "요청 속도 제한 초과: key=%s, path=%s, retry_after=%ss",
                client_key, request.url.path, decision.retry_after,
            )
            exc = RateLimitExceededError(
                "Rate limit exceeded. Please try again later.",
                retry_after=decision.retry_after,
                limit=decision.limit,
            )
            response = error_response(
                429,
                exc.code,
                exc.message,
                exc.details,
                headers={"Retry-After": str(exc.retry_after)},
            )

        _apply_headers(response, decision)
        return response


def _apply_headers(response, decision: RateLimitDecision) -> None:
    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    response.headers["X-RateLimit-Reset"] = str(decision.reset_after)
