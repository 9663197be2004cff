"""Error classification utilities for service and API errors."""

from enum import Enum

from pydantic import BaseModel, ValidationError


class ErrorCategory(Enum):
    """Categories of errors that can surface from the service layer."""

    TASK_NOT_FOUND = "task_not_found"
    CATEGORY_NOT_FOUND = "category_not_found"
    LOG_NOT_FOUND = "log_not_found"
    INVALID_FREQUENCY = "invalid_frequency"
    INVALID_INPUT = "invalid_input"
    DEFAULT_CATEGORY_PROTECTED = "default_category_protected"
    INVALID_IMPORT_FILE = "invalid_import_file"
    NOTIFICATION_DELIVERY_FAILED = "notification_delivery_failed"
    DATABASE_ERROR = "database_error"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Lookup errors
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_CATEGORY_NOT_FOUND = "ERR_CATEGORY_NOT_FOUND"
    ERR_LOG_NOT_FOUND = "ERR_LOG_NOT_FOUND"

    # Validation errors
    ERR_INVALID_FREQUENCY = "ERR_INVALID_FREQUENCY"
    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_DEFAULT_CATEGORY_PROTECTED = "ERR_DEFAULT_CATEGORY_PROTECTED"
    ERR_INVALID_IMPORT_FILE = "ERR_INVALID_IMPORT_FILE"

    # Infrastructure errors
    ERR_NOTIFICATION_DELIVERY_FAILED = "ERR_NOTIFICATION_DELIVERY_FAILED"
    ERR_DATABASE = "ERR_DATABASE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


class DefaultCategoryError(ValueError):
    """Raised when a built-in category is about to be removed."""


_HTTP_STATUS_BY_CODE: dict[str, int] = {
    ErrorCode.ERR_TASK_NOT_FOUND: 404,
    ErrorCode.ERR_CATEGORY_NOT_FOUND: 404,
    ErrorCode.ERR_LOG_NOT_FOUND: 404,
    ErrorCode.ERR_INVALID_FREQUENCY: 422,
    ErrorCode.ERR_INVALID_INPUT: 422,
    ErrorCode.ERR_DEFAULT_CATEGORY_PROTECTED: 409,
    ErrorCode.ERR_INVALID_IMPORT_FILE: 400,
    ErrorCode.ERR_NOTIFICATION_DELIVERY_FAILED: 502,
    ErrorCode.ERR_DATABASE: 500,
    ErrorCode.ERR_UNKNOWN: 500,
}


def _not_found_response(error_str: str) -> ErrorResponse | None:
    """Return a lookup error response if the message names a missing record."""
    if "not found" not in error_str:
        return None

    if "category" in error_str or "categories" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_CATEGORY_NOT_FOUND,
            message="I couldn't find that category.",
            suggestion="List categories to see the ones that exist.",
            severity=ErrorSeverity.LOW,
        )

    if "task_logs" in error_str or "log" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_LOG_NOT_FOUND,
            message="I couldn't find that completion record.",
            suggestion="Open the task's history to see its completion records.",
            severity=ErrorSeverity.LOW,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_TASK_NOT_FOUND,
        message="I couldn't find that task.",
        suggestion="List tasks to see the ones that exist.",
        severity=ErrorSeverity.LOW,
    )


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    error_str = str(exception).lower()

    if isinstance(exception, KeyError):
        response = _not_found_response(error_str)
        if response:
            return response

    if isinstance(exception, DefaultCategoryError):
        return ErrorResponse(
            code=ErrorCode.ERR_DEFAULT_CATEGORY_PROTECTED,
            message="Built-in categories can't be deleted.",
            suggestion="Rename the category or move its tasks instead.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, ValueError | ValidationError):
        if "frequency" in error_str:
            return ErrorResponse(
                code=ErrorCode.ERR_INVALID_FREQUENCY,
                message="Invalid frequency.",
                suggestion="Use a whole number from 1 to 365 with Days, Weeks, or Months.",
                severity=ErrorSeverity.LOW,
            )
        if "import file" in error_str or "file format" in error_str:
            return ErrorResponse(
                code=ErrorCode.ERR_INVALID_IMPORT_FILE,
                message="The import file could not be read.",
                suggestion="Choose a file created by the export function.",
                severity=ErrorSeverity.LOW,
            )
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_INPUT,
            message="Some of the values you entered are invalid.",
            suggestion="Check the highlighted fields and try again.",
            severity=ErrorSeverity.LOW,
        )

    if "notification" in error_str or "webhook" in error_str:
        return ErrorResponse(
            code=ErrorCode.ERR_NOTIFICATION_DELIVERY_FAILED,
            message="The reminder could not be delivered.",
            suggestion="Check the notification webhook settings.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, RuntimeError) and ("database" in error_str or "table" in error_str or "record" in error_str):
        return ErrorResponse(
            code=ErrorCode.ERR_DATABASE,
            message="The data store is unavailable.",
            suggestion="Please try again. If the problem persists, check the database file.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, check the logs.",
        severity=ErrorSeverity.MEDIUM,
    )


def http_status_for(error_response: ErrorResponse) -> int:
    """Map an error code to the HTTP status the API returns for it."""
    return _HTTP_STATUS_BY_CODE.get(error_response.code, 500)
