"""
Webhook handling for Patreon webhooks.

This package provides models, signature verification and trigger-driven
classification for Patreon webhook events.

Main exports:
    - WebhookHandler: Main handler for processing webhooks
    - WebhookSignatureValidator: HMAC signature verification
    - WebhookConfig: Configuration for webhook processing
    - WebhookEventType: Trigger label value object
    - classify_event / parse_event: Payload decoding
"""

from .models import (
    TRIGGER_LITERALS,
    Event,
    EventSubject,
    EventVerb,
    WebhookEvent,
    WebhookEventType,
    WebhookValidationResult,
)
from .validators import (
    X_PATREON_EVENT,
    X_PATREON_SIGNATURE,
    DigestAlgorithm,
    WebhookConfig,
    WebhookSignatureValidator,
    compute_signature,
    constant_time_compare,
)
from .handlers import (
    TRIGGER_TABLE,
    TriggerRoute,
    WebhookHandler,
    classify_event,
    parse_event,
)

__all__ = [
    # Models
    "TRIGGER_LITERALS",
    "Event",
    "EventSubject",
    "EventVerb",
    "WebhookEvent",
    "WebhookEventType",
    "WebhookValidationResult",
    # Validators
    "X_PATREON_EVENT",
    "X_PATREON_SIGNATURE",
    "DigestAlgorithm",
    "WebhookConfig",
    "WebhookSignatureValidator",
    "compute_signature",
    "constant_time_compare",
    # Handlers
    "TRIGGER_TABLE",
    "TriggerRoute",
    "WebhookHandler",
    "classify_event",
    "parse_event",
]
