"""
Retry mechanism with exponential backoff for the Patreon API client.

Provides a decorator and utilities for retrying network operations
with configurable backoff strategies. Only transport failures and
upstream 5xx responses are retried; decoding, signature and OAuth
grant errors are final.
"""

import time
import random
import functools
import asyncio
from dataclasses import dataclass
from typing import Any, Optional, List, Tuple, Dict, Callable, Type, TypeVar

import httpx

from .exceptions import (
    APIError,
    DecodeError,
    OAuthError,
    RetryExhaustedError,
    WebhookSignatureError,
)
from .logger import get_logger

T = TypeVar('T')

logger = get_logger("patreon_api.retry")


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay between retries in seconds
        backoff_factor: Multiplier for exponential backoff
        max_delay: Maximum delay between retries in seconds
        jitter: Whether to add random jitter to delays
        retryable_exceptions: Exception types that should trigger retries
        non_retryable_exceptions: Exception types that should NOT trigger retries
    """
    max_retries: int = 3
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 60.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[Exception], ...] = (
        httpx.TransportError,
        APIError,
        ConnectionError,
    )
    non_retryable_exceptions: Tuple[Type[Exception], ...] = (
        OAuthError,
        DecodeError,
        WebhookSignatureError,
        ValueError,
        TypeError,
    )

    def should_retry(self, exception: Exception) -> bool:
        """
        Determine if an exception should trigger a retry.

        An APIError is only retried when it carries no status (a
        transport failure) or a 5xx status.
        """
        for exc_type in self.non_retryable_exceptions:
            if isinstance(exception, exc_type):
                return False

        if isinstance(exception, APIError):
            return exception.status_code is None or exception.is_server_error

        for exc_type in self.retryable_exceptions:
            if isinstance(exception, exc_type):
                return True

        return False

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for a given retry attempt.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        delay = min(self.initial_delay * (self.backoff_factor ** attempt), self.max_delay)

        if self.jitter:
            # +/-25%
            delay *= 0.75 + (random.random() * 0.5)

        return delay

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "RetryConfig":
        """Build a retry config from the retry fields of Settings."""
        values: Dict[str, Any] = {
            "max_retries": settings.max_retries,
            "initial_delay": settings.retry_delay,
            "backoff_factor": settings.retry_backoff_factor,
        }
        values.update(kwargs)
        return cls(**values)


class RetryState:
    """
    State tracking for retry operations.
    """

    def __init__(self, config: RetryConfig):
        self.config = config
        self.attempts: List[Tuple[int, float, Exception]] = []

    def record_attempt(self, attempt: int, exception: Exception):
        """Record a failed attempt."""
        self.attempts.append((attempt, time.time(), exception))

    def should_continue(self, attempt: int, exception: Exception) -> bool:
        """Determine if retrying should continue."""
        return attempt <= self.config.max_retries and self.config.should_retry(exception)


def _log_retry(func_name: str, attempt: int, config: RetryConfig, error: Exception, delay: float) -> None:
    logger.warning(
        f"Operation failed, retrying... (attempt {attempt}/{config.max_retries})",
        extra={
            "function": func_name,
            "attempt": attempt,
            "max_retries": config.max_retries,
            "error_type": type(error).__name__,
            "error_message": str(error),
            "next_delay": delay,
        }
    )


def _exhausted(func_name: str, state: RetryState, last_exception: Exception) -> RetryExhaustedError:
    return RetryExhaustedError(
        f"Operation '{func_name}' failed after {len(state.attempts)} attempts",
        attempts=len(state.attempts),
        last_error=last_exception
    )


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    **config_kwargs
):
    """
    Decorator for retrying functions with exponential backoff.

    Can be used with both sync and async functions. Errors that are
    not retryable are re-raised unchanged on the first attempt; when
    retries run out a RetryExhaustedError wraps the last failure.

    Args:
        config: Retry configuration (if not provided, created from config_kwargs)
        **config_kwargs: Configuration options for RetryConfig
    """
    if config is None:
        config = RetryConfig(**config_kwargs)

    def decorator(func):
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                state = RetryState(config)
                attempt = 0
                while True:
                    try:
                        return await func(*args, **kwargs)
                    except Exception as e:
                        state.record_attempt(attempt, e)
                        attempt += 1
                        if not state.should_continue(attempt, e):
                            if not config.should_retry(e):
                                raise
                            raise _exhausted(func.__name__, state, e) from e
                        delay = config.calculate_delay(attempt - 1)
                        _log_retry(func.__name__, attempt, config, e, delay)
                        await asyncio.sleep(delay)

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            state = RetryState(config)
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    state.record_attempt(attempt, e)
                    attempt += 1
                    if not state.should_continue(attempt, e):
                        if not config.should_retry(e):
                            raise
                        raise _exhausted(func.__name__, state, e) from e
                    delay = config.calculate_delay(attempt - 1)
                    _log_retry(func.__name__, attempt, config, e, delay)
                    time.sleep(delay)

        return sync_wrapper

    return decorator


API_RETRY_CONFIG = RetryConfig(
    max_retries=3,
    initial_delay=1.0,
    backoff_factor=2.0,
    max_delay=30.0,
    jitter=True,
)


def api_retry(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator for API calls with standard retry configuration."""
    return retry_with_backoff(API_RETRY_CONFIG)(func)
