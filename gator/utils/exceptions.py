"""
Gator Custom Exceptions
=======================

Custom exception hierarchy for Gator with error codes, context information,
and user-friendly error messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_PARSE_ERROR = "C003"
    CONFIG_INVALID_DURATION = "C004"

    # Database errors (D001-D099)
    DATABASE_CONNECTION = "D001"
    DATABASE_SCHEMA = "D002"
    DATABASE_CONSTRAINT = "D003"
    DATABASE_TRANSACTION = "D004"
    DATABASE_ERROR = "D006"

    # Feed errors (F001-F099)
    FEED_INVALID_URL = "F001"
    FEED_HTTP_STATUS = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"

    # Command errors (V001-V099)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"
    VALIDATION_DUPLICATE = "V004"

    # Resource errors (R001-R099)
    RESOURCE_NOT_FOUND = "R002"
    NOT_LOGGED_IN = "R003"


class GatorError(Exception):
    """Base exception for all Gator errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize Gator error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: User-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


def _split_kwargs(kwargs: Dict[str, Any], *names: str) -> Dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k not in names}


class ConfigurationError(GatorError):
    """Configuration-related errors, including bad durations."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", message),
            **_split_kwargs(kwargs, "context", "error_code", "user_message"),
        )


class DatabaseError(GatorError):
    """Database-related errors."""

    def __init__(self, message: str, query: Optional[str] = None, **kwargs):
        """Initialize database error.

        Args:
            message: Error message
            query: SQL query that caused the error
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if query:
            context["query"] = query

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.DATABASE_ERROR),
            context=context,
            user_message=kwargs.get("user_message", "Database operation failed"),
            recoverable=kwargs.get("recoverable", True),
            **_split_kwargs(
                kwargs, "context", "error_code", "user_message", "recoverable"
            ),
        )


class DuplicateUrlError(DatabaseError):
    """A unique constraint rejected a row (duplicate URL or follow)."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if url:
            context["url"] = url

        super().__init__(
            message,
            error_code=kwargs.pop("error_code", ErrorCode.DATABASE_CONSTRAINT),
            context=context,
            user_message=kwargs.pop(
                "user_message", f"Record with URL {url!r} already exists"
            ),
            **kwargs,
        )


class StoreUnavailableError(DatabaseError):
    """The store cannot be reached at all."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            error_code=kwargs.pop("error_code", ErrorCode.DATABASE_CONNECTION),
            user_message=kwargs.pop("user_message", "Database is unavailable"),
            recoverable=kwargs.pop("recoverable", False),
            **kwargs,
        )


class NotFoundError(GatorError):
    """Referenced user, feed or follow does not exist."""

    def __init__(self, message: str, resource: Optional[str] = None, **kwargs):
        """Initialize not-found error.

        Args:
            message: Error message, shown to the user as is
            resource: Kind of record that was missing (user, feed, follow)
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if resource:
            context["resource"] = resource

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.RESOURCE_NOT_FOUND),
            context=context,
            user_message=kwargs.get("user_message", message),
            **_split_kwargs(kwargs, "context", "error_code", "user_message"),
        )


class FeedError(GatorError):
    """Feed fetching and parsing errors."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            feed_url: Feed URL that caused the error
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if feed_url:
            context["feed_url"] = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_NETWORK_ERROR),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Feed processing failed: {message}"
            ),
            recoverable=kwargs.get("recoverable", True),
            **_split_kwargs(
                kwargs, "context", "error_code", "user_message", "recoverable"
            ),
        )


class FeedFetchError(FeedError):
    """Transport failure: bad HTTP status or network error."""

    def __init__(self, message: str, status: Optional[int] = None, **kwargs):
        if status is not None:
            kwargs.setdefault("context", {})["status"] = status
            kwargs.setdefault("error_code", ErrorCode.FEED_HTTP_STATUS)
        self.status = status
        super().__init__(message, **kwargs)


class MalformedFeedError(FeedError):
    """Feed body is not a complete RSS channel."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_PARSE_ERROR)
        super().__init__(message, **kwargs)


class CommandError(GatorError):
    """Command misuse: wrong arguments, not logged in, duplicates."""

    def __init__(self, message: str, command: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if command:
            context["command"] = command

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.VALIDATION_INVALID_FORMAT),
            context=context,
            user_message=kwargs.get("user_message", message),
            **_split_kwargs(kwargs, "context", "error_code", "user_message"),
        )


# Exception handling utilities


def get_user_friendly_message(exception: Exception) -> str:
    """Get user-friendly error message for any exception.

    Args:
        exception: Exception to get message for

    Returns:
        User-friendly error message
    """
    if isinstance(exception, GatorError):
        return exception.user_message

    return f"An unexpected error occurred: {exception}"
