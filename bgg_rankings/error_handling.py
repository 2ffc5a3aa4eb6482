"""
Error types and common error handling utilities for the BGG rankings crawler.
"""

import logging
from typing import Optional, Any, Callable
from functools import wraps

logger = logging.getLogger(__name__)


class CrawlError(Exception):
    """Base class for crawler errors."""


class FetchError(CrawlError):
    """A fetch failed on every allowed attempt."""

    def __init__(self, url: str, attempts: int, message: Optional[str] = None):
        self.url = url
        self.attempts = attempts
        super().__init__(message or f"Failed to fetch {url} after {attempts} attempt(s)")


class StartPageError(CrawlError):
    """The first listing page could not be fetched, so there is nothing to crawl."""


def handle_errors(default_return: Any = None, log_error: bool = True,
                  log_level: int = logging.ERROR):
    """
    Decorator to handle common exceptions and provide consistent error logging.

    Args:
        default_return: Value to return on error
        log_error: Whether to log the error
        log_level: Level used when logging the error
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log_error:
                    logger.log(log_level, f"Error in {func.__name__}: {e}")
                return default_return
        return wrapper
    return decorator


def safe_execute(func: Callable, *args, default_return: Any = None,
                 error_msg: Optional[str] = None, **kwargs) -> Any:
    """
    Safely execute a function with error handling.

    Args:
        func: Function to execute
        *args: Arguments for the function
        default_return: Value to return on error
        error_msg: Custom error message
        **kwargs: Keyword arguments for the function

    Returns:
        Function result or default_return on error
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        if error_msg:
            logger.error(f"{error_msg}: {e}")
        else:
            logger.error(f"Error in {func.__name__}: {e}")
        return default_return
