# src/datafix/api/responses.py
"""
Standardized API Response Models

Provides consistent response envelopes for all API endpoints:
- Standard success/error structure
- Pagination metadata
- Error code standards
- Mapping of domain errors onto error codes

All API endpoints should use these models for consistency.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..core.errors import (
    AuthenticationError,
    BackendError,
    DataFixError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


# -------------------------
# Error Codes
# -------------------------

class ErrorCode(str, Enum):
    """
    Standardized error codes for API responses.
    Format: {CATEGORY}_{SPECIFIC_ERROR}
    """
    # Validation errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Authentication/Authorization (401/403)
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # Resource errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


# -------------------------
# HTTP Status Mappings
# -------------------------

ERROR_CODE_TO_HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 422,

    ErrorCode.AUTH_REQUIRED: 401,
    ErrorCode.AUTH_INVALID: 401,
    ErrorCode.PERMISSION_DENIED: 403,

    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_TRANSITION: 409,

    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
}


def get_http_status(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)


# Most specific first: InvalidTransitionError is also a ValidationError.
DOMAIN_ERROR_CODES = (
    (InvalidTransitionError, ErrorCode.INVALID_TRANSITION),
    (ValidationError, ErrorCode.VALIDATION_ERROR),
    (NotFoundError, ErrorCode.NOT_FOUND),
    (PermissionDeniedError, ErrorCode.PERMISSION_DENIED),
    (AuthenticationError, ErrorCode.AUTH_REQUIRED),
    (BackendError, ErrorCode.EXTERNAL_SERVICE_ERROR),
)


def error_code_for(error: DataFixError) -> ErrorCode:
    """Error code for a domain error."""
    for error_type, code in DOMAIN_ERROR_CODES:
        if isinstance(error, error_type):
            return code
    return ErrorCode.INTERNAL_ERROR


# -------------------------
# Response Metadata
# -------------------------

class ResponseMeta(BaseModel):
    """Metadata included in all API responses."""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: Optional[str] = None
    version: str = "1.0"


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""
    page: int = Field(ge=1, default=1)
    page_size: int = Field(ge=1, le=100, default=10)
    total_items: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    has_next: bool = False
    has_prev: bool = False

    @classmethod
    def from_page(cls, total: int, page: int = 1, page_size: int = 10) -> "PaginationMeta":
        """Create pagination meta from 1-based page params."""
        page = max(1, page)
        total_pages = (total + page_size - 1) // page_size if page_size > 0 else 0
        return cls(
            page=page,
            page_size=page_size,
            total_items=total,
            total_pages=total_pages,
            has_next=page * page_size < total,
            has_prev=page > 1,
        )


# -------------------------
# Error Details
# -------------------------

class FieldError(BaseModel):
    """Error for a specific field in validation."""
    field: str
    message: str
    code: str = "invalid"


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: ErrorCode
    message: str
    detail: Optional[str] = None
    field_errors: List[FieldError] = []


# -------------------------
# Generic Response Models
# -------------------------

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """
    Standard API response envelope.

    All successful responses use this structure:
    {
        "success": true,
        "data": { ... },
        "meta": { "timestamp": "...", "version": "1.0" }
    }
    """
    success: bool = True
    data: Optional[T] = None
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


class APIListResponse(BaseModel, Generic[T]):
    """
    Standard list response with pagination.

    {
        "success": true,
        "data": [ ... ],
        "pagination": { "page": 1, "total_items": 100, ... },
        "meta": { "timestamp": "...", "version": "1.0" }
    }
    """
    success: bool = True
    data: List[T] = []
    pagination: Optional[PaginationMeta] = None
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


class APIErrorResponse(BaseModel):
    """
    Standard error response envelope.

    {
        "success": false,
        "error": {
            "code": "NOT_FOUND",
            "message": "Ticket not found",
            "detail": "No ticket with identifier: 123"
        },
        "meta": { "timestamp": "...", "version": "1.0" }
    }
    """
    success: bool = False
    error: ErrorDetail
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


# -------------------------
# Response Helpers
# -------------------------

def success_response(
    data: Any = None,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create a standard success response dict."""
    return APIResponse(
        data=data,
        meta=ResponseMeta(request_id=request_id)
    ).model_dump(mode="json")


def list_response(
    items: List[Any],
    total: int,
    page: int = 1,
    page_size: int = 10,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create a standard paginated list response dict."""
    return APIListResponse(
        data=items,
        pagination=PaginationMeta.from_page(total, page, page_size),
        meta=ResponseMeta(request_id=request_id)
    ).model_dump(mode="json")


def error_response(
    code: ErrorCode,
    message: str,
    detail: Optional[str] = None,
    field_errors: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """Create a standard error response dict."""
    errors = []
    if field_errors:
        errors = [FieldError(**e) for e in field_errors]

    return APIErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            detail=detail,
            field_errors=errors,
        )
    ).model_dump(mode="json")


# -------------------------
# FastAPI Exception Classes
# -------------------------

class APIException(HTTPException):
    """
    Custom API exception with structured error response.

    Usage:
        raise APIException(
            error_code=ErrorCode.NOT_FOUND,
            message="Ticket not found",
            detail="No ticket with identifier: 123"
        )
    """
    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        detail: Optional[str] = None,
        field_errors: Optional[List[Dict[str, str]]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.error_detail = detail
        self.field_errors = field_errors

        status_code = get_http_status(error_code)
        super().__init__(status_code=status_code, detail=message, headers=headers)

    @classmethod
    def from_domain_error(cls, error: DataFixError) -> "APIException":
        """Wrap a domain error with its matching error code."""
        return cls(
            error_code=error_code_for(error),
            message=error.message,
            detail=error.detail,
            field_errors=getattr(error, "field_errors", None),
        )

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse for exception handlers."""
        return JSONResponse(
            status_code=self.status_code,
            content=error_response(
                code=self.error_code,
                message=self.message,
                detail=self.error_detail,
                field_errors=self.field_errors
            )
        )
