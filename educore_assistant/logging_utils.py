"""
Centralized logging and error handling utilities for the signup assistant.

This module provides decorators and helper functions to standardize logging
and error reporting across the client, service and gateway.

Features:
- Structured logging with contextual information
- Error classification into HTTP status codes and categories
- Performance timing for async operations
- Context-bound loggers for related operations
"""

from __future__ import annotations

import functools
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from educore_assistant.llm.exceptions import AssistantError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Type variables for generic decorators
P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]

logger = structlog.get_logger(__name__)


class AssistantErrorHandler:
    """Centralized error classification with structured logging."""

    @staticmethod
    def classify_error(error: Exception) -> tuple[int, str]:
        """
        Classify an error and return an HTTP status code and category.

        Args:
            error: The exception to classify

        Returns:
            Tuple of (http_status, error_category)
        """
        if isinstance(error, AssistantError):
            return error.status_code or 500, "assistant_error"
        if isinstance(error, ValidationError):
            return 400, "validation_error"
        if isinstance(error, TimeoutError | httpx.TimeoutException):
            return 504, "timeout_error"
        if isinstance(error, httpx.HTTPError | ConnectionError | OSError):
            return 502, "connection_error"
        if isinstance(error, ValueError | TypeError):
            return 400, "parameter_error"
        return 500, "unknown_error"

    @staticmethod
    def error_payload(
        error: Exception,
        operation: str,
        context: dict[str, Any] | None = None,
        custom_message: str | None = None,
    ) -> tuple[int, dict[str, Any]]:
        """
        Log an error and build the JSON body returned to the caller.

        Args:
            error: Original exception
            operation: Description of the operation that failed
            context: Additional context for logging
            custom_message: Override the default error message

        Returns:
            Tuple of (http_status, {"error": message})
        """
        status_code, error_category = AssistantErrorHandler.classify_error(error)
        context = context or {}

        if custom_message:
            message = custom_message
        elif isinstance(error, AssistantError):
            message = error.message
        else:
            message = str(error) or f"{operation} failed"

        logger.error(
            "Operation failed",
            operation=operation,
            error_type=type(error).__name__,
            error_category=error_category,
            status_code=status_code,
            error_message=str(error),
            **context,
        )

        return status_code, {"error": message}


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


def log_operation(
    operation: str,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator that logs start, completion and failure of an async call.

    Completion and failure records carry ``duration_ms``. Exceptions are
    re-raised unchanged.
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            operation_logger = logger.bind(operation=operation, function=func.__name__)
            operation_logger.info("Operation started")
            start_time = time.perf_counter()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                operation_logger.error(
                    "Operation failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                    duration_ms=_elapsed_ms(start_time),
                )
                raise

            operation_logger.info(
                "Operation completed successfully", duration_ms=_elapsed_ms(start_time)
            )
            return result

        return wrapper
    return decorator


@asynccontextmanager
async def operation_context(operation: str, *, context: dict[str, Any] | None = None):
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context bound to every record

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(operation=operation, **(context or {}))
    operation_logger.info("Operation started")
    start_time = time.perf_counter()

    try:
        yield operation_logger
    except Exception as e:
        operation_logger.error(
            "Operation failed",
            error_type=type(e).__name__,
            error_message=str(e),
            duration_ms=_elapsed_ms(start_time),
        )
        raise

    operation_logger.info(
        "Operation completed successfully", duration_ms=_elapsed_ms(start_time)
    )


class ContextualLogger:
    """Logger that carries a fixed context for one conversation."""

    def __init__(self, base_context: dict[str, Any] | None = None):
        self.base_context = base_context or {}
        self._logger = logger.bind(**self.base_context)

    def bind(self, **context: Any) -> ContextualLogger:
        return ContextualLogger({**self.base_context, **context})

    def info(self, message: str, **context: Any) -> None:
        self._logger.info(message, **context)

    def error(self, message: str, **context: Any) -> None:
        self._logger.error(message, **context)
