from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

from app.utils.datetime_utils import iso_timestamp
from app.utils.pagination import Page

T = TypeVar("T")

# ─── 공통 응답 스키마 정의 ─────────────────────────────────────────────


class CamelModel(BaseModel):
    """
    JSON 필드명을 camelCase로 직렬화하는 기본 모델
    - 요청 본문은 camelCase/snake_case 모두 허용
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorDetail(BaseModel):
    """
    실패 응답의 error 필드
    """
    status: int = Field(..., description="HTTP 상태 코드")
    code: str = Field(..., description="기계 판독용 오류 코드 (예: FORBIDDEN)")
    details: Optional[Any] = Field(None, description="부가 정보 (필드별 검증 오류 등)")


class ApiResponse(BaseModel, Generic[T]):
    """
    모든 응답을 감싸는 표준 봉투(envelope)
    - { success, message?, data?, error?, timestamp }
    - 값이 None인 필드는 직렬화에서 제외
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Operation completed successfully",
                "data": {},
                "timestamp": "2025-01-15T14:30:15.123Z",
            }
        },
    )

    success: bool = Field(..., description="요청 성공 여부")
    message: Optional[str] = Field(None, description="상태 메시지")
    data: Optional[T] = Field(None, description="응답 데이터")
    error: Optional[ErrorDetail] = Field(None, description="오류 상세 (실패 시)")
    timestamp: str = Field(default_factory=iso_timestamp, description="응답 생성 시각(ISO-8601 UTC)")

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        serialized = handler(self)
        return {k: v for k, v in serialized.items() if v is not None}

    @classmethod
    def ok(cls, data: Optional[T] = None, message: Optional[str] = None) -> "ApiResponse[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, status: int, code: str, message: str, details: Any = None) -> "ApiResponse[Any]":
        return cls(
            success=False,
            message=message,
            error=ErrorDetail(status=status, code=code, details=details),
        )


class PageResponse(CamelModel, Generic[T]):
    """
    페이지네이션 응답 모델
    """
    content: List[T] = Field(..., description="현재 페이지 항목")
    page: int = Field(..., description="0부터 시작하는 페이지 번호")
    size: int = Field(..., description="페이지 크기")
    total_elements: int = Field(..., description="전체 항목 수")
    total_pages: int = Field(..., description="전체 페이지 수")

    @classmethod
    def of(cls, page: Page) -> "PageResponse[T]":
        return cls(
            content=page.items,
            page=page.page,
            size=page.size,
            total_elements=page.total,
            total_pages=page.total_pages,
        )


class MessageResponse(BaseModel):
    """
    단순 메시지 응답 모델
    """
    message: str = Field(..., description="응답 메시지")
