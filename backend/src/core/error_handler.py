"""
Centralized error handling and recovery strategies for Touchline.
Provides decorators and utilities for consistent error management.
"""

import asyncio
import logging
import functools
from typing import Any, Callable, Optional, Dict, TypeVar, Awaitable
from datetime import datetime

from .exceptions import (
    TouchlineException, ErrorContext,
    DomainException, StorageConnectionError
)

logger = logging.getLogger(__name__)

AF = TypeVar('AF', bound=Callable[..., Awaitable[Any]])


class ErrorHandler:
    """
    Centralized error handling with retry logic and failure tracking.
    """

    def __init__(self, default_retries: int = 3, default_delay: float = 0.5):
        self.default_retries = default_retries
        self.default_delay = default_delay
        self.retry_history: Dict[str, Dict[str, Any]] = {}

    def with_retry(
        self,
        max_retries: Optional[int] = None,
        delay: Optional[float] = None,
        exponential_backoff: bool = True,
        retryable_exceptions: Optional[tuple] = None
    ):
        """
        Decorator for automatic retry with exponential backoff.

        Args:
            max_retries: Maximum number of retry attempts
            delay: Initial delay between retries
            exponential_backoff: Whether to use exponential backoff
            retryable_exceptions: Tuple of exception types to retry on
        """
        if retryable_exceptions is None:
            retryable_exceptions = (StorageConnectionError,)

        def decorator(func: AF) -> AF:
            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                retries = self.default_retries if max_retries is None else max_retries
                current_delay = self.default_delay if delay is None else delay
                operation_id = f"{func.__module__}.{func.__name__}"

                for attempt in range(retries + 1):
                    try:
                        result = await func(*args, **kwargs)

                        if attempt > 0:
                            logger.info(
                                f"Operation {operation_id} succeeded after {attempt} retries"
                            )

                        return result

                    except retryable_exceptions as e:
                        if attempt >= retries:
                            self._record_failure(operation_id, attempt + 1)
                            logger.error(
                                f"Operation {operation_id} failed after {attempt + 1} attempts: {e}"
                            )
                            raise

                        logger.warning(
                            f"Operation {operation_id} failed (attempt {attempt + 1}/{retries + 1}): {e}. "
                            f"Retrying in {current_delay}s..."
                        )

                        await asyncio.sleep(current_delay)

                        if exponential_backoff:
                            current_delay *= 2

            return wrapper
        return decorator

    def _record_failure(self, operation_id: str, attempts: int):
        """Record operation failure for monitoring."""
        if operation_id not in self.retry_history:
            self.retry_history[operation_id] = {
                'failures': 0,
                'last_failure': None,
                'total_attempts': 0
            }

        history = self.retry_history[operation_id]
        history['failures'] += 1
        history['last_failure'] = datetime.utcnow()
        history['total_attempts'] += attempts

    def get_failure_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get failure statistics for monitoring."""
        return self.retry_history.copy()

    def reset_stats(self):
        """Reset failure statistics."""
        self.retry_history.clear()


# Global error handler instance
error_handler = ErrorHandler()


def with_storage_retry(max_retries: int = 3, delay: float = 0.5):
    """Retry decorator for storage operations that may hit a flaky connection."""
    return error_handler.with_retry(
        max_retries=max_retries,
        delay=delay,
        retryable_exceptions=(StorageConnectionError,)
    )


def with_domain_error_handling(
    fallback_value: Any = None,
    suppress_touchline_errors: bool = False,
    fallback_factory: Optional[Callable[[], Any]] = None
):
    """
    Decorator for domain service operations with error handling.

    Args:
        fallback_value: Fallback value on failure
        suppress_touchline_errors: Whether to suppress Touchline exceptions and use fallback
        fallback_factory: Builds a fresh fallback for each failed call; takes
            precedence over ``fallback_value`` for mutable fallbacks
    """
    def make_fallback() -> Any:
        if fallback_factory is not None:
            return fallback_factory()
        return fallback_value

    has_fallback = fallback_factory is not None or fallback_value is not None

    def decorator(func: AF) -> AF:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except TouchlineException as e:
                if suppress_touchline_errors and has_fallback:
                    operation = f"{func.__module__}.{func.__name__}"
                    logger.warning(f"Suppressing Touchline error in {operation}: {e}, using fallback")
                    return make_fallback()
                raise
            except Exception as e:
                operation = f"{func.__module__}.{func.__name__}"
                logger.error(f"Unexpected error in domain operation {operation}: {e}")

                if has_fallback:
                    logger.info(f"Using fallback value for {operation}")
                    return make_fallback()

                raise DomainException(
                    message=f"Unexpected error in {operation}",
                    original_error=e,
                    context=ErrorContext(operation=operation, parameters=kwargs)
                ) from e

        return wrapper

    return decorator


async def safe_execute(
    operation: Callable[..., Any],
    *args,
    fallback_value: Any = None,
    log_errors: bool = True,
    **kwargs
) -> Any:
    """
    Safely execute a sync or async callable with error handling.

    Args:
        operation: Function or coroutine function to execute
        *args: Positional arguments for operation
        fallback_value: Value to return on error
        log_errors: Whether to log errors
        **kwargs: Keyword arguments for operation

    Returns:
        Operation result or fallback value
    """
    try:
        result = operation(*args, **kwargs)
        if asyncio.iscoroutine(result):
            result = await result
        return result
    except Exception as e:
        if log_errors:
            name = getattr(operation, '__name__', repr(operation))
            logger.error(f"Safe execute failed for {name}: {e}")
        return fallback_value
