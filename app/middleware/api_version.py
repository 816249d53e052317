import logging
from typing import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.utils.exceptions import UnsupportedApiVersionError
from app.utils.responses import error_response

logger = logging.getLogger(__name__)

VERSION_HEADER = "X-API-Version"


class ApiVersionMiddleware(BaseHTTPMiddleware):
    """
    X-API-Version 헤더 기반 API 버전 처리
    1) 헤더가 없으면 현재 버전으로 간주
    2) 지원하지 않는 버전이면 400 (UNSUPPORTED_API_VERSION)
    3) 응답에 요청 버전/현재 버전/지원 버전 목록 헤더 추가
    """

    def __init__(self, app: ASGIApp, current_version: str, supported_versions: Iterable[str]) -> None:
        super().__init__(app)
        self.current_version = current_version
        self.supported_versions = list(supported_versions)

    def _version_headers(self, version: str) -> dict:
        return {
            VERSION_HEADER: version,
            "X-API-Current-Version": self.current_version,
            "X-API-Supported-Versions": ", ".join(self.supported_versions),
        }

    async def dispatch(self, request: Request, call_next):
        requested = request.headers.get(VERSION_HEADER)
        version = requested or self.current_version

        if requested and requested not in self.supported_versions:
            logger.warning("지원하지 않는 API 버전 요청: %s", requested)
            supported = ", ".join(self.supported_versions)
            exc = UnsupportedApiVersionError(
                f"Unsupported API version. Supported versions: {supported}",
                details={"requested": requested, "supported": self.supported_versions},
            )
            return error_response(400, exc.code, exc.message, exc.details, headers=self._version_headers(self.current_version))

        request.state.api_version = version
        response = await call_next(request)
        for name, value in self._version_headers(version).items():
            response.headers[name] = value
        return response
