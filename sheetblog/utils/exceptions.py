"""
SheetBlog Exceptions
====================

Error hierarchy for SheetBlog. Each error carries an ``ErrorCode``, a
context dict for structured logs and a message fit for readers of the
blog. Subclasses declare their defaults as class attributes.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration (C0xx)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"

    # Post sources (F0xx)
    SOURCE_INVALID_URL = "F001"
    SOURCE_TIMEOUT = "F002"
    SOURCE_PARSE_ERROR = "F003"
    SOURCE_NETWORK_ERROR = "F004"
    SOURCE_HTTP_STATUS = "F005"
    SOURCE_EMPTY = "F006"

    # Rows (P0xx)
    ROW_DECODE_FAILED = "P002"

    # Cache (K0xx)
    CACHE_READ_FAILED = "K001"
    CACHE_WRITE_FAILED = "K002"
    CACHE_CORRUPTED = "K003"

    # Validation (V0xx)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"


class SheetBlogError(Exception):
    """Base exception for all SheetBlog errors."""

    default_code: Optional[ErrorCode] = None
    default_user_message: Optional[str] = None
    default_recoverable = False

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: Optional[bool] = None,
    ):
        """Initialize SheetBlog error.

        Args:
            message: Technical error message for logging
            error_code: Error code (default: the class's code)
            context: Additional context information
            user_message: Reader-facing message (default: the class's message)
            recoverable: Whether a fallback can still succeed
        """
        super().__init__(message)
        self.error_code = error_code or self.default_code
        self.context = dict(context or {})
        self.user_message = user_message or self.default_user_message or message
        self.recoverable = self.default_recoverable if recoverable is None else recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        message = super().__str__()
        return f"[{self.error_code.value}] {message}" if self.error_code else message


class ConfigurationError(SheetBlogError):
    """Invalid or missing configuration."""

    default_code = ErrorCode.CONFIG_INVALID

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        kwargs.setdefault("user_message", f"Configuration error: {message}")
        super().__init__(message, **kwargs)
        if config_key:
            self.context["config_key"] = config_key


class SourceError(SheetBlogError):
    """Failure to obtain usable CSV text from a post source."""

    default_code = ErrorCode.SOURCE_NETWORK_ERROR
    default_user_message = "Blog posts are temporarily unavailable"
    default_recoverable = True

    def __init__(self, message: str, source_url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source_url = source_url
        if source_url:
            self.context["source_url"] = source_url


class SourceTimeoutError(SourceError):
    """The source did not answer within the request timeout."""

    default_code = ErrorCode.SOURCE_TIMEOUT


class SourceNetworkError(SourceError):
    """Connection failure or unreadable local source."""

    default_code = ErrorCode.SOURCE_NETWORK_ERROR


class SourceHTTPError(SourceError):
    """The source answered with a non-2xx status."""

    default_code = ErrorCode.SOURCE_HTTP_STATUS

    def __init__(self, message: str, status: int, source_url: Optional[str] = None, **kwargs):
        super().__init__(message, source_url=source_url, **kwargs)
        self.status = status
        self.context["status"] = status


class SourceEmptyError(SourceError):
    """The source body was empty or held no data rows."""

    default_code = ErrorCode.SOURCE_EMPTY


class SourceParseError(SourceError):
    """The source body could not be read as CSV."""

    default_code = ErrorCode.SOURCE_PARSE_ERROR


class RowDecodeError(SheetBlogError):
    """A single spreadsheet row could not be decoded into a post."""

    default_code = ErrorCode.ROW_DECODE_FAILED
    default_user_message = "There was an error loading this post"
    default_recoverable = True

    def __init__(self, message: str, row: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        if row is not None:
            self.context["row"] = repr(row)[:200]


class CacheError(SheetBlogError):
    """Cache storage errors."""

    default_code = ErrorCode.CACHE_READ_FAILED
    default_user_message = "Cache operation failed"
    default_recoverable = True

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if key:
            self.context["key"] = key


class ValidationError(SheetBlogError):
    """Input validation errors."""

    default_code = ErrorCode.VALIDATION_INVALID_FORMAT

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        kwargs.setdefault("user_message", f"Invalid input: {message}")
        super().__init__(message, **kwargs)
        if field_name:
            self.context["field_name"] = field_name


def handle_exception(
    exception: Exception,
    logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> SheetBlogError:
    """Log an exception and return it as a SheetBlogError.

    SheetBlog errors are logged and returned unchanged. Connection and
    timeout errors become ``SourceNetworkError``, a missing file becomes
    ``ConfigurationError``; anything else is wrapped in ``SheetBlogError``.
    """
    if isinstance(exception, SheetBlogError):
        error = exception
    else:
        context = {
            **(context or {}),
            "operation": operation,
            "original_exception_type": type(exception).__name__,
        }
        detail = f"during {operation}: {exception}"

        if isinstance(exception, (ConnectionError, TimeoutError)):
            error = SourceNetworkError(
                f"Network error {detail}", context=context, user_message="Network connection failed"
            )
        elif isinstance(exception, FileNotFoundError):
            error = ConfigurationError(
                f"Required file not found {detail}",
                error_code=ErrorCode.CONFIG_MISSING,
                context=context,
                user_message="Configuration file missing",
            )
        else:
            error = SheetBlogError(
                f"Unexpected error {detail}",
                context=context,
                user_message="An unexpected error occurred",
                recoverable=True,
            )

    logger.error(f"Operation '{operation}' failed: {error}", extra=error.to_dict())
    return error


def get_user_friendly_message(exception: Exception) -> str:
    """Reader-facing message for any exception."""
    if isinstance(exception, SheetBlogError):
        return exception.user_message
    return "An unexpected error occurred. Please try again later."
