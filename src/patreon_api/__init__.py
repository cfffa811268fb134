"""
Typed Python client for the Patreon API v2.

Provides:
- Null-tolerant pydantic models for JSON:API resources
- Webhook signature verification and event classification
- OAuth2 token acquisition and an async document client
"""

from .client import AsyncPatreonClient
from .models import (
    ApiResponse,
    PatronStatus,
    Resource,
    ResourceType,
    WebhookTrigger,
    decode_document,
    filter_included,
    resolve_included,
)
from .oauth import OAuthClient, OAuthToken, scopes
from .utils.exceptions import (
    APIError,
    ConfigurationError,
    DecodeError,
    MissingHeaderError,
    OAuthError,
    PatreonError,
    UnknownTriggerError,
    WebhookSignatureError,
)
from .webhook import (
    WebhookConfig,
    WebhookEventType,
    WebhookHandler,
    WebhookSignatureValidator,
    classify_event,
    parse_event,
)

__version__ = "1.0.0"

__all__ = [
    "AsyncPatreonClient",
    "ApiResponse",
    "PatronStatus",
    "Resource",
    "ResourceType",
    "WebhookTrigger",
    "decode_document",
    "filter_included",
    "resolve_included",
    "OAuthClient",
    "OAuthToken",
    "scopes",
    "APIError",
    "ConfigurationError",
    "DecodeError",
    "MissingHeaderError",
    "OAuthError",
    "PatreonError",
    "UnknownTriggerError",
    "WebhookSignatureError",
    "WebhookConfig",
    "WebhookEventType",
    "WebhookHandler",
    "WebhookSignatureValidator",
    "classify_event",
    "parse_event",
]
