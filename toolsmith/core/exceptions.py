"""
Error types for Toolsmith and the FastAPI handlers that render them

Every error carries an ``ErrorDetails`` payload. Subclasses fix the code,
category and HTTP status; the handlers turn any of them into the shared
``{"error": {...}}`` envelope.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException


logger = logging.getLogger("toolsmith.errors")


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    POLICY = "policy"
    EXTERNAL_SERVICE = "external_service"
    SYSTEM = "system"


STATUS_BY_CATEGORY: Dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.POLICY: 422,
    ErrorCategory.EXTERNAL_SERVICE: 502,
    ErrorCategory.SYSTEM: 500,
}


class ErrorDetails(BaseModel):
    code: str
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    context: Dict[str, Any] = Field(default_factory=dict)
    suggestions: List[str] = Field(default_factory=list)
    retry_after_seconds: Optional[int] = None


class ToolsmithException(Exception):
    """
    Base class for errors raised by the pipeline and the API.

    Subclasses override the class attributes; ``context`` holds whatever
    identifies the failing input.
    """

    code: ClassVar[str] = "TOOLSMITH_ERROR"
    category: ClassVar[ErrorCategory] = ErrorCategory.SYSTEM
    severity: ClassVar[ErrorSeverity] = ErrorSeverity.MEDIUM
    suggestions: ClassVar[List[str]] = []
    retry_after_seconds: ClassVar[Optional[int]] = None

    def __init__(self, message: str, code: Optional[str] = None, **context):
        super().__init__(message)
        self.details = ErrorDetails(
            code=code or self.code,
            message=message,
            category=self.category,
            severity=self.severity,
            context=context,
            suggestions=list(self.suggestions),
            retry_after_seconds=self.retry_after_seconds,
        )

    @property
    def message(self) -> str:
        return self.details.message

    @property
    def status_code(self) -> int:
        return STATUS_BY_CATEGORY[self.details.category]

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.details.model_dump(mode="json")}

    def to_log_dict(self) -> Dict[str, Any]:
        # Keys must not collide with LogRecord attributes
        return {
            "error_code": self.details.code,
            "error_category": self.details.category.value,
            "error_severity": self.details.severity.value,
            "error_context": self.details.context,
        }


class InvalidSpecException(ToolsmithException):
    """Empty or malformed submission; no request is created"""

    code = "INVALID_SPEC"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW
    suggestions = ["Describe the tool you want in a few words"]

    def __init__(self, message: str, field: str = "spec", value: Any = None):
        super().__init__(message, field=field, value=str(value))


class ComplianceBlockedException(ToolsmithException):
    code = "COMPLIANCE_BLOCKED"
    category = ErrorCategory.POLICY
    severity = ErrorSeverity.LOW
    suggestions = [
        "Request a tool that does not involve copyrighted content",
        "Avoid license-circumvention functionality",
    ]

    def __init__(self, message: str, requested_name: str):
        super().__init__(message, requested_name=requested_name)


class ProviderException(ToolsmithException):
    """The generation provider failed, timed out or returned an unusable draft"""

    code = "PROVIDER_ERROR"
    category = ErrorCategory.EXTERNAL_SERVICE
    severity = ErrorSeverity.HIGH
    suggestions = ["Check the LLM key and model", "Try again with a different description"]
    retry_after_seconds = 30

    def __init__(self, message: str, provider: str, operation: str = "request_draft"):
        super().__init__(message, provider=provider, operation=operation)


class NotFoundException(ToolsmithException):
    code = "NOT_FOUND"
    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.LOW

    def __init__(self, message: str, resource: str, resource_id: Any):
        super().__init__(message, resource=resource, resource_id=str(resource_id))


class InternalInconsistencyException(ToolsmithException):
    """Stored state disagrees with the pipeline, e.g. a vanished request"""

    code = "INTERNAL_INCONSISTENCY"

    def __init__(self, message: str, operation: str):
        super().__init__(message, operation=operation)


def _error_response(exc: ToolsmithException, status_code: Optional[int] = None) -> JSONResponse:
    details = exc.details
    headers = {"X-Error-Code": details.code, "X-Error-Category": details.category.value}
    if details.retry_after_seconds:
        headers["Retry-After"] = str(details.retry_after_seconds)
    return JSONResponse(
        status_code=status_code or exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )


async def toolsmith_exception_handler(request: Request, exc: ToolsmithException) -> JSONResponse:
    logger.error(f"{exc.details.code} on {request.url.path}: {exc.message}", extra=exc.to_log_dict())
    return _error_response(exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body and query validation failures are reported as INVALID_SPEC"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or "request"

    invalid = InvalidSpecException(first.get("msg", "Invalid request"), field=field, value=first.get("input"))
    invalid.details.context["errors"] = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg")} for error in errors
    ]
    logger.warning(f"Rejected request to {request.url.path}: {invalid.message}")
    return _error_response(invalid)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Routing errors such as 404 and 405 in the same envelope"""
    if exc.status_code == 404:
        category = ErrorCategory.NOT_FOUND
    elif exc.status_code < 500:
        category = ErrorCategory.VALIDATION
    else:
        category = ErrorCategory.SYSTEM

    wrapped = ToolsmithException(str(exc.detail), code="HTTP_ERROR", status_code=exc.status_code,
                                 path=request.url.path)
    wrapped.details.category = category
    return _error_response(wrapped, status_code=exc.status_code)
