"""
Utilities module for the Patreon API client.
"""

from .exceptions import (
    PatreonError,
    ConfigurationError,
    APIError,
    OAuthError,
    DecodeError,
    WebhookSignatureError,
    UnknownTriggerError,
    MissingHeaderError,
    RetryExhaustedError,
)
from .logger import setup_logging, get_logger, api_logger
from .retry import retry_with_backoff, RetryConfig, api_retry

__all__ = [
    "setup_logging",
    "get_logger",
    "api_logger",
    "PatreonError",
    "ConfigurationError",
    "APIError",
    "OAuthError",
    "DecodeError",
    "WebhookSignatureError",
    "UnknownTriggerError",
    "MissingHeaderError",
    "RetryExhaustedError",
    "retry_with_backoff",
    "RetryConfig",
    "api_retry",
]
