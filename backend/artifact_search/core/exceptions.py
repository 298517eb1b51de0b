"""
Standardized exception handling for the artifact catalogue search service
Provides consistent error types, formatting, and handling across all components
"""

import logging
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ErrorSeverity(str, Enum):
    """Error severity levels for consistent categorization"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for consistent classification"""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


class ErrorDetails(BaseModel):
    """Standardized error details structure"""
    code: str
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    timestamp: datetime
    correlation_id: Optional[str] = None
    context: Dict[str, Any] = {}
    suggestions: List[str] = []
    recoverable: bool = True
    retry_after_seconds: Optional[int] = None


class CatalogueException(Exception):
    """
    Base exception class for all catalogue search errors
    Provides standardized error information and formatting
    """

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        recoverable: bool = True,
        retry_after_seconds: Optional[int] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.details = ErrorDetails(
            code=code,
            message=message,
            category=category,
            severity=severity,
            timestamp=datetime.now(timezone.utc),
            correlation_id=correlation_id,
            context=context or {},
            suggestions=suggestions or [],
            recoverable=recoverable,
            retry_after_seconds=retry_after_seconds
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": {
                "code": self.details.code,
                "message": self.details.message,
                "category": self.details.category.value,
                "severity": self.details.severity.value,
                "timestamp": self.details.timestamp.isoformat(),
                "correlation_id": self.details.correlation_id,
                "context": self.details.context,
                "suggestions": self.details.suggestions,
                "recoverable": self.details.recoverable,
                "retry_after_seconds": self.details.retry_after_seconds
            }
        }

    def to_log_dict(self) -> Dict[str, Any]:
        """Convert exception to structured logging format"""
        return {
            "error_code": self.details.code,
            "error_message": self.details.message,
            "error_category": self.details.category.value,
            "error_severity": self.details.severity.value,
            "correlation_id": self.details.correlation_id,
            "context": self.details.context,
            "recoverable": self.details.recoverable
        }


# Specific exception classes for different error scenarios

class ValidationException(CatalogueException):
    """Raised when request validation fails"""

    def __init__(self, message: str, field: str, value: Any, **kwargs):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            context={"field": field, "value": str(value)},
            suggestions=["Check input format and try again", "Refer to API documentation"],
            **kwargs
        )


class StoreUnavailableException(CatalogueException):
    """
    Raised when the artifact store or the review-status store cannot serve a read.

    Searches must abort on this error: returning unfiltered or empty results
    instead would either leak unreviewed artifacts or hide the catalogue.
    """

    def __init__(self, message: str, store: str, operation: str, **kwargs):
        super().__init__(
            message=message,
            code="STORE_UNAVAILABLE",
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.HIGH,
            context={"store": store, "operation": operation},
            suggestions=[
                "Check database connectivity",
                "Verify store configuration",
                "Retry the request later"
            ],
            retry_after_seconds=10,
            **kwargs
        )


class ArtifactNotFoundException(CatalogueException):
    """Raised when an artifact does not exist or is not publicly visible"""

    def __init__(self, artifact_id: str, **kwargs):
        super().__init__(
            message=f"Artifact {artifact_id} not found",
            code="ARTIFACT_NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.LOW,
            context={"artifact_id": artifact_id},
            **kwargs
        )


class ConfigurationException(CatalogueException):
    """Raised when configuration errors occur"""

    def __init__(self, message: str, config_key: str, **kwargs):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            context={"config_key": config_key},
            suggestions=[
                "Check environment variables",
                "Verify configuration file",
                "Review application settings"
            ],
            recoverable=False,
            **kwargs
        )


# Exception handlers for FastAPI

async def catalogue_exception_handler(request: Request, exc: CatalogueException) -> JSONResponse:
    """
    Global exception handler for catalogue exceptions
    """
    logger = logging.getLogger("exception_handler")

    if exc.details.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
        logger.error(f"Catalogue exception occurred: {exc.details.code}", extra=exc.to_log_dict())
    else:
        logger.info(f"Catalogue exception occurred: {exc.details.code}", extra=exc.to_log_dict())

    status_code = _get_status_code_for_category(exc.details.category)

    return JSONResponse(
        status_code=status_code,
        content=exc.to_dict(),
        headers=_get_error_headers(exc.details)
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert FastAPI request validation errors into the catalogue error format
    """
    logger = logging.getLogger("validation_handler")

    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "query") or "request"
    validation_exc = ValidationException(
        message=first.get("msg", "Invalid request"),
        field=field,
        value=first.get("input")
    )
    logger.warning(f"Validation error: {validation_exc.details.message}", extra=validation_exc.to_log_dict())

    return JSONResponse(
        status_code=400,
        content=validation_exc.to_dict(),
        headers=_get_error_headers(validation_exc.details)
    )


# Utility functions

def _get_status_code_for_category(category: ErrorCategory) -> int:
    """Map error categories to HTTP status codes"""
    category_status_map = {
        ErrorCategory.VALIDATION: 400,
        ErrorCategory.NOT_FOUND: 404,
        ErrorCategory.DATABASE: 503,
        ErrorCategory.CONFIGURATION: 500,
        ErrorCategory.SYSTEM: 500
    }
    return category_status_map.get(category, 500)


def _get_error_headers(error_details: ErrorDetails) -> Dict[str, str]:
    """Generate appropriate headers for error responses"""
    headers = {
        "X-Error-Code": error_details.code,
        "X-Error-Category": error_details.category.value
    }

    if error_details.correlation_id:
        headers["X-Correlation-Id"] = error_details.correlation_id

    if error_details.retry_after_seconds:
        headers["Retry-After"] = str(error_details.retry_after_seconds)

    return headers
