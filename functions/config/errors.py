"""Rehab Analyzer error handling.

Custom exceptions and error codes for the estimate and analysis pipeline.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"

    # Model Response Errors
    RESPONSE_FORMAT_ERROR = "RESPONSE_FORMAT_ERROR"

    # LLM Errors
    LLM_ERROR = "LLM_ERROR"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_CONTEXT_TOO_LONG = "LLM_CONTEXT_TOO_LONG"

    # Report Errors
    REPORT_GENERATION_FAILED = "REPORT_GENERATION_FAILED"


class RehabAnalyzerError(Exception):
    """Base exception for Rehab Analyzer errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response.

        Returns:
            Dictionary with code, message, and details.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(RehabAnalyzerError):
    """Validation-specific error."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class ResponseFormatError(RehabAnalyzerError):
    """The model response did not contain the structure we need."""

    def __init__(self, message: str, raw_content: Optional[str] = None, details: Optional[Dict] = None):
        extra = dict(details or {})
        if raw_content is not None:
            extra["raw_content"] = raw_content[:500]
        super().__init__(
            code=ErrorCode.RESPONSE_FORMAT_ERROR,
            message=message,
            details=extra
        )


class LLMError(RehabAnalyzerError):
    """LLM call failure."""

    def __init__(self, code: str, message: str, original_error: Optional[str] = None):
        super().__init__(
            code=code,
            message=message,
            details={"original_error": original_error} if original_error else None
        )


class ReportError(RehabAnalyzerError):
    """PDF report generation failure."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.REPORT_GENERATION_FAILED,
            message=message,
            details=details
        )
