"""
Custom exceptions for the application.
All exceptions map to standard error codes and HTTP status codes.
"""
from typing import Optional, Dict, Any

from review_collector.schemas.error import ErrorCode


class AppException(Exception):
    """
    Base exception class for all application exceptions.
    All custom exceptions should inherit from this.
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgumentException(AppException):
    """Raised when request arguments are invalid (422)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, details)


class NothingToExportException(AppException):
    """Raised when an export filter matches no reviews (404)."""

    def __init__(
        self, message: str = "No reviews found for export", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(ErrorCode.NO_DATA, message, details)


class StorageUnavailableException(AppException):
    """Raised when the review store cannot serve a request (503)."""

    def __init__(
        self, message: str = "Storage unavailable", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(ErrorCode.DB_UNAVAILABLE, message, details)
