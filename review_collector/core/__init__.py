"""
Core utilities package.
Exports configuration, logging, middleware, and exceptions.
"""
from review_collector.core.config import settings, Settings
from review_collector.core.logging import logger, log_error, log_info, log_warning, log_debug
from review_collector.core.middleware import RequestIdMiddleware, get_request_id
from review_collector.core.exceptions import (
    AppException,
    InvalidArgumentException,
    NothingToExportException,
    StorageUnavailableException,
)

__all__ = [
    "settings",
    "Settings",
    "logger",
    "log_error",
    "log_info",
    "log_warning",
    "log_debug",
    "RequestIdMiddleware",
    "get_request_id",
    "AppException",
    "InvalidArgumentException",
    "NothingToExportException",
    "StorageUnavailableException",
]
