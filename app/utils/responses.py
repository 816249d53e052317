from typing import Any, Mapping, Optional

from fastapi.responses import ORJSONResponse

from app.schemas.common_schema import ApiResponse


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> ORJSONResponse:
    """
    실패 봉투(envelope)를 담은 JSON 응답 생성
    - 예외 핸들러와 미들웨어(라우터 밖에서 응답하는 경우)가 함께 사용
    """
    body = ApiResponse.fail(status_code, code, message, details)
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=dict(headers) if headers else None,
    )
