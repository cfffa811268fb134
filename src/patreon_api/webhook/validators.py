"""
Webhook signature validation.

Patreon signs each webhook body with an HMAC keyed by the webhook's
secret and sends the lowercase hex digest in the X-Patreon-Signature
header. The digest algorithm is a deployment choice: SHA-256 is the
default, MD5 is available for legacy registrations. A validator is
bound to exactly one algorithm and never tries the other.

Key features:
    - HMAC signature computation over raw body bytes
    - Constant-time signature comparison
    - Verify-then-parse helpers that never decode an unverified body
"""

import hashlib
import hmac
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ..models.enums import WebhookTrigger
from ..utils.exceptions import ConfigurationError, WebhookSignatureError
from ..utils.logger import get_logger
from .models import Event, WebhookEvent, WebhookEventType

logger = get_logger(__name__)

X_PATREON_EVENT = "X-Patreon-Event"
X_PATREON_SIGNATURE = "X-Patreon-Signature"


class DigestAlgorithm(str, Enum):
    """Hash used for the webhook HMAC."""

    SHA256 = "sha256"
    MD5 = "md5"

    @property
    def digest_size(self) -> int:
        """Digest length in bytes."""
        return hashlib.new(self.value).digest_size

    @property
    def hex_length(self) -> int:
        """Length of the hex-encoded signature."""
        return self.digest_size * 2


def _to_bytes(value: Union[bytes, str]) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(
    secret: Union[bytes, str],
    body: Union[bytes, str],
    digest: DigestAlgorithm = DigestAlgorithm.SHA256,
) -> str:
    """
    Compute the webhook signature of a body.

    Args:
        secret: Webhook secret
        body: Raw request body
        digest: Hash algorithm

    Returns:
        Lowercase hex HMAC, twice the digest size in length
    """
    return hmac.new(_to_bytes(secret), _to_bytes(body), DigestAlgorithm(digest).value).hexdigest()


def constant_time_compare(expected: str, received: str) -> bool:
    """
    Compare two signatures without leaking where they differ.

    Strings of different length compare unequal without looking at
    their content.
    """
    expected_bytes = expected.encode("utf-8")
    received_bytes = received.encode("utf-8")
    if len(expected_bytes) != len(received_bytes):
        return False
    return hmac.compare_digest(expected_bytes, received_bytes)


def _all_triggers() -> list[WebhookTrigger]:
    return [trigger for trigger in WebhookTrigger if trigger is not WebhookTrigger.UNKNOWN]


@dataclass
class WebhookConfig:
    """
    Configuration for webhook processing.

    Controls how webhooks are verified and which triggers are processed.
    """

    # Secret shown when the webhook was registered
    secret: str = ""

    digest: DigestAlgorithm = DigestAlgorithm.SHA256

    # Header names
    event_header: str = X_PATREON_EVENT
    signature_header: str = X_PATREON_SIGNATURE

    # Trigger filtering
    allowed_triggers: list[WebhookTrigger] = field(default_factory=_all_triggers)

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "WebhookConfig":
        """Build a config from application Settings."""
        values = {
            "secret": settings.webhook_secret,
            "digest": DigestAlgorithm(settings.webhook_digest),
            "event_header": settings.webhook_event_header,
            "signature_header": settings.webhook_signature_header,
        }
        values.update(kwargs)
        return cls(**values)


class WebhookSignatureValidator:
    """
    Validates Patreon webhook signatures.

    Example:
        validator = WebhookSignatureValidator(secret)
        event = validator.validate_and_parse(body, headers["X-Patreon-Signature"])
    """

    def __init__(
        self,
        secret: Union[bytes, str],
        digest: Union[DigestAlgorithm, str] = DigestAlgorithm.SHA256,
    ):
        """
        Initialize signature validator.

        Args:
            secret: Webhook secret
            digest: Hash algorithm the deployment signs with

        Raises:
            ConfigurationError: If the secret is empty or the digest unsupported
        """
        if not secret:
            raise ConfigurationError("Webhook secret must not be empty", config_key="webhook_secret")
        try:
            self.digest = DigestAlgorithm(digest)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported webhook digest: {digest}",
                config_key="webhook_digest",
                config_value=digest,
            ) from None
        self._secret = _to_bytes(secret)

    def compute_signature(self, body: Union[bytes, str]) -> str:
        """Compute the expected signature of ``body``."""
        return compute_signature(self._secret, body, self.digest)

    def validate(self, body: Union[bytes, str], signature: Optional[str]) -> bool:
        """
        Validate a webhook signature.

        Args:
            body: Raw request body, exactly as received
            signature: Value of the signature header

        Returns:
            True if the signature matches the body, False otherwise
        """
        if not signature:
            logger.warning("Empty webhook signature", extra={"digest": self.digest.value})
            return False

        expected = self.compute_signature(body)
        is_valid = constant_time_compare(expected, signature)

        if not is_valid:
            logger.warning(
                "Invalid webhook signature",
                extra={
                    "digest": self.digest.value,
                    "expected_length": len(expected),
                    "received_length": len(signature),
                },
            )
        else:
            logger.debug("Webhook signature validated successfully")

        return is_valid

    def validate_or_error(self, body: Union[bytes, str], signature: Optional[str]) -> None:
        """
        Validate a webhook signature, raising on mismatch.

        Raises:
            WebhookSignatureError: If the signature does not match
        """
        if not self.validate(body, signature):
            raise WebhookSignatureError(digest=self.digest.value)

    def parse_event(self, body: Union[bytes, str]) -> WebhookEvent:
        """Decode a body that has already been verified."""
        from .handlers import parse_event

        return parse_event(body)

    def validate_and_parse(self, body: Union[bytes, str], signature: Optional[str]) -> WebhookEvent:
        """
        Verify a body and decode it as a self-describing event.

        The body is not decoded at all when the signature is bad.

        Raises:
            WebhookSignatureError: If the signature does not match
            DecodeError: If the verified body is not a valid document
        """
        self.validate_or_error(body, signature)
        return self.parse_event(body)

    def validate_and_classify(
        self,
        body: Union[bytes, str],
        signature: Optional[str],
        trigger: Union[str, WebhookEventType, WebhookTrigger],
    ) -> Event:
        """
        Verify a body and decode it according to its trigger.

        Raises:
            WebhookSignatureError: If the signature does not match
            DecodeError: If the verified body is not a valid document
            UnknownTriggerError: If the trigger is not recognised
        """
        from .handlers import classify_event

        self.validate_or_error(body, signature)
        return classify_event(trigger, body)
