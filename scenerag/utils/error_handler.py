import asyncio
import functools
import time
from typing import TypeVar, Callable, Any, Optional, Type, Union
from loguru import logger
from ..exceptions import (
    SceneRAGException,
    ProviderException,
    ConfigurationException,
    ValidationException,
    ResourceNotFoundException,
)

T = TypeVar('T')

__all__ = [
    "handle_exceptions",
    "convert_exceptions",
    "ErrorHandler",
    "ProviderException",
    "ConfigurationException",
    "ValidationException",
    "ResourceNotFoundException",
]


def handle_exceptions(
    retries: int = 3,
    fallback: Any = None,
    exceptions: Union[Type[Exception], tuple] = Exception,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    should_retry: Optional[Callable[[Exception], bool]] = None,
):
    """
    Decorator to handle exceptions with retry logic and fallback.

    Args:
        retries: Number of attempts
        fallback: Value returned once all attempts fail. A callable is invoked
            with the original call arguments to build the value.
        exceptions: Exception types to catch and retry
        backoff_factor: Exponential backoff factor
        max_delay: Maximum delay between retries
        should_retry: Optional predicate; a caught exception for which it returns
            False is re-raised immediately
    """
    def _resolve_fallback(args, kwargs):
        if callable(fallback):
            return fallback(*args, **kwargs)
        return fallback

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            last_exception = None

            for attempt in range(retries):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if should_retry is not None and not should_retry(e):
                        raise

                    if attempt < retries - 1:
                        delay = min(backoff_factor ** attempt, max_delay)
                        logger.warning(f"{func.__name__} attempt {attempt + 1} failed: {e}. Retrying in {delay}s...")
                        await asyncio.sleep(delay)
                    else:
                        logger.error(f"All {retries} attempts of {func.__name__} failed: {e}")

            if fallback is not None:
                logger.info(f"Returning fallback value for {func.__name__}")
                return _resolve_fallback(args, kwargs)

            raise last_exception

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            last_exception = None

            for attempt in range(retries):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if should_retry is not None and not should_retry(e):
                        raise

                    if attempt < retries - 1:
                        delay = min(backoff_factor ** attempt, max_delay)
                        logger.warning(f"{func.__name__} attempt {attempt + 1} failed: {e}. Retrying in {delay}s...")
                        time.sleep(delay)
                    else:
                        logger.error(f"All {retries} attempts of {func.__name__} failed: {e}")

            if fallback is not None:
                logger.info(f"Returning fallback value for {func.__name__}")
                return _resolve_fallback(args, kwargs)

            raise last_exception

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def convert_exceptions(exception_map: dict):
    """
    Decorator to convert foreign exceptions to framework exceptions.

    Exceptions that already derive from SceneRAGException pass through untouched.

    Args:
        exception_map: Dictionary mapping exception types to framework exception types
    """
    def _convert(e: Exception):
        if isinstance(e, SceneRAGException):
            return None
        for source_exc, target_exc in exception_map.items():
            if isinstance(e, source_exc):
                return target_exc(str(e), details={"original_exception": type(e).__name__})
        return None

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                converted = _convert(e)
                if converted is None:
                    raise
                raise converted from e

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                converted = _convert(e)
                if converted is None:
                    raise
                raise converted from e

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


class ErrorHandler:
    """Centralized error handling utilities."""

    @staticmethod
    def is_rate_limit_error(e: Exception) -> bool:
        """True for HTTP 429 / quota exhaustion errors from any backend."""
        for attr in ("status_code", "status", "code"):
            if getattr(e, attr, None) == 429:
                return True
        if type(e).__name__ == "RateLimitError":
            return True
        text = str(e).lower()
        return "429" in text or "resource exhausted" in text or "resource_exhausted" in text or "rate limit" in text
