class ApiError(Exception):
    """
    기본 API 예외의 최상위 클래스
    - 모든 커스텀 API 예외가 이 클래스를 상속
    - FastAPI의 예외 핸들러에 의해 응답 봉투(envelope)로 변환
    - code: 응답 error.code 필드에 들어갈 기계 판독용 코드
    """
    code = "API_ERROR"

    def __init__(self, message: str, details: object = None):
        """
        - message: 사용자에게 전달할 예외 메시지 문자열
        - details: (선택) 응답 error.details에 담을 부가 정보
        """
        # 예외 메시지 설정
        self.message = message
        self.details = details
        # 상위 Exception 초기화
        super().__init__(message)


class BadRequestError(ApiError):
    """400 Bad Request"""
    code = "BAD_REQUEST"


class ValidationError(BadRequestError):
    """400 - 본문 공백/길이 제한 등 입력값 검증 실패"""
    code = "VALIDATION_ERROR"


class InvalidOperationError(BadRequestError):
    """400 - 자기 자신 팔로우 등 허용되지 않는 동작"""
    code = "INVALID_OPERATION"


class UnsupportedApiVersionError(BadRequestError):
    """400 - 지원하지 않는 X-API-Version"""
    code = "UNSUPPORTED_API_VERSION"


class UnauthorizedError(ApiError):
    """401 Unauthorized"""
    code = "UNAUTHORIZED"


class InvalidCredentialsError(UnauthorizedError):
    """401 - 로그인 실패 (존재하지 않는 사용자/잘못된 비밀번호를 구분하지 않음)"""
    code = "INVALID_CREDENTIALS"


class UnauthenticatedError(UnauthorizedError):
    """401 - 보호된 경로에 토큰이 없거나 유효하지 않음"""
    code = "UNAUTHENTICATED"


class TokenExpiredError(UnauthenticatedError):
    """401(기본) 또는 403 - 만료된 토큰, 설정 EXPIRED_TOKEN_STATUS로 결정"""
    code = "TOKEN_EXPIRED"


class ForbiddenError(ApiError):
    """403 Forbidden - 인증되었으나 리소스 소유자가 아님"""
    code = "FORBIDDEN"


class NotFoundError(ApiError):
    """404 Not Found"""
    code = "NOT_FOUND"


class ConflictError(ApiError):
    """409 Conflict"""
    code = "CONFLICT"


class RateLimitExceededError(ApiError):
    """429 Too Many Requests"""
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str, retry_after: int, limit: int):
        """
        - retry_after: 토큰 1개가 다시 생길 때까지 남은 초
        - limit: 초과된 버킷 용량
        """
        self.retry_after = retry_after
        self.limit = limit
        super().__init__(
            message,
            details="You have exceeded the allowed request rate. See rate limit headers for details.",
        )
