"""
Webhook request handling for Patreon webhooks.

Provides:
- Trigger-driven classification of payloads into typed events
- Self-describing payload parsing
- A header-driven handler that verifies, classifies and filters
"""

from typing import Any, Mapping, NamedTuple, Union

from pydantic import BaseModel

from ..models.attributes import MemberAttributes, PostAttributes
from ..models.decoding import decode_json
from ..models.enums import WebhookTrigger
from ..models.response import decode_document
from ..utils.exceptions import MissingHeaderError, UnknownTriggerError
from ..utils.logger import get_logger
from .models import (
    Event,
    EventSubject,
    EventVerb,
    WebhookEvent,
    WebhookEventType,
    WebhookValidationResult,
)
from .validators import WebhookConfig, WebhookSignatureValidator

logger = get_logger(__name__)


class TriggerRoute(NamedTuple):
    """Decode target for one trigger."""

    subject: EventSubject
    verb: EventVerb
    attributes: type[BaseModel]


# Pledge triggers carry member documents.
TRIGGER_TABLE: dict[WebhookTrigger, TriggerRoute] = {
    WebhookTrigger.MEMBERS_CREATE: TriggerRoute(EventSubject.MEMBER, EventVerb.CREATE, MemberAttributes),
    WebhookTrigger.MEMBERS_UPDATE: TriggerRoute(EventSubject.MEMBER, EventVerb.UPDATE, MemberAttributes),
    WebhookTrigger.MEMBERS_DELETE: TriggerRoute(EventSubject.MEMBER, EventVerb.DELETE, MemberAttributes),
    WebhookTrigger.MEMBERS_PLEDGE_CREATE: TriggerRoute(EventSubject.PLEDGE, EventVerb.CREATE, MemberAttributes),
    WebhookTrigger.MEMBERS_PLEDGE_UPDATE: TriggerRoute(EventSubject.PLEDGE, EventVerb.UPDATE, MemberAttributes),
    WebhookTrigger.MEMBERS_PLEDGE_DELETE: TriggerRoute(EventSubject.PLEDGE, EventVerb.DELETE, MemberAttributes),
    WebhookTrigger.POSTS_PUBLISH: TriggerRoute(EventSubject.POST, EventVerb.PUBLISH, PostAttributes),
    WebhookTrigger.POSTS_UPDATE: TriggerRoute(EventSubject.POST, EventVerb.UPDATE, PostAttributes),
    WebhookTrigger.POSTS_DELETE: TriggerRoute(EventSubject.POST, EventVerb.DELETE, PostAttributes),
}


def _event_type(trigger: Union[str, WebhookEventType, WebhookTrigger]) -> WebhookEventType:
    if isinstance(trigger, WebhookEventType):
        return trigger
    if isinstance(trigger, WebhookTrigger):
        if trigger is WebhookTrigger.UNKNOWN:
            raise UnknownTriggerError(trigger.value)
        return WebhookEventType(trigger)
    return WebhookEventType.from_str(trigger)


def parse_event(body: Union[bytes, str]) -> WebhookEvent:
    """
    Decode a webhook body without looking at its trigger.

    Raises:
        DecodeError: If the body is not a valid JSON:API document
    """
    return decode_json(body, WebhookEvent)


def classify_event(trigger: Union[str, WebhookEventType, WebhookTrigger], body: Union[bytes, str]) -> Event:
    """
    Decode a webhook body according to the trigger that fired it.

    The body is parsed as JSON before the trigger is looked up, so a
    malformed body is reported as such whatever its trigger.

    Args:
        trigger: Trigger label from the X-Patreon-Event header
        body: Raw request body

    Returns:
        Event tagged with subject and verb

    Raises:
        DecodeError: If the body is not JSON or does not match the
            document shape for the trigger
        UnknownTriggerError: If the trigger is not recognised
    """
    raw: Any = decode_json(body, dict[str, Any])
    event_type = _event_type(trigger)

    route = TRIGGER_TABLE.get(event_type.trigger)
    if route is None:
        logger.warning("Unknown webhook trigger", extra={"trigger": event_type.as_str()})
        raise UnknownTriggerError(event_type.as_str())

    document = decode_document(raw, route.attributes)
    logger.debug(
        "Webhook event classified",
        extra={"trigger": event_type.as_str(), "subject": route.subject.value, "verb": route.verb.value},
    )
    return Event(event_type=event_type, subject=route.subject, verb=route.verb, document=document)


class WebhookHandler:
    """
    Main handler for processing Patreon webhooks.

    Orchestrates the complete webhook processing flow:
    1. Header extraction
    2. Signature validation
    3. Classification by trigger
    4. Trigger filtering
    """

    def __init__(self, config: WebhookConfig):
        """
        Initialize webhook handler.

        Args:
            config: Webhook processing configuration
        """
        self.config = config
        self.signature_validator = WebhookSignatureValidator(config.secret, config.digest)
        self._logger = get_logger(__name__)

        self._logger.info(
            "WebhookHandler initialized",
            extra={
                "digest": self.signature_validator.digest.value,
                "allowed_triggers": [t.value for t in config.allowed_triggers],
            },
        )

    def handle_request(self, payload_body: bytes, headers: Mapping[str, str]) -> WebhookValidationResult:
        """
        Handle incoming webhook request.

        Args:
            payload_body: Raw request body bytes
            headers: Request headers, any case

        Returns:
            WebhookValidationResult with the classified event

        Raises:
            MissingHeaderError: If the signature or event header is absent
            WebhookSignatureError: If signature validation fails
            UnknownTriggerError: If the trigger is not recognised
            DecodeError: If the payload cannot be decoded
        """
        normalized_headers = {k.lower(): v for k, v in headers.items()}
        signature = self._require_header(normalized_headers, self.config.signature_header)
        label = self._require_header(normalized_headers, self.config.event_header)

        self._logger.info(
            "Processing webhook request",
            extra={"content_length": len(payload_body), "trigger": label},
        )

        self.signature_validator.validate_or_error(payload_body, signature)

        event = classify_event(label, payload_body)

        if event.trigger not in self.config.allowed_triggers:
            reason = f"Trigger '{label}' not in allowed triggers"
            self._logger.info(f"Rejecting webhook: {reason}", extra={"rejection_reason": reason})
            return WebhookValidationResult(
                is_valid=True,
                event_type=label,
                should_process=False,
                rejection_reason=reason,
                event=event,
            )

        self._logger.info(
            "Webhook passed validation and filters",
            extra={"trigger": label, "resource_id": event.resource.id},
        )
        return WebhookValidationResult(
            is_valid=True,
            event_type=label,
            should_process=True,
            event=event,
        )

    def _require_header(self, normalized_headers: dict[str, str], name: str) -> str:
        value = normalized_headers.get(name.lower())
        if not value:
            self._logger.warning(
                f"Missing {name} header",
                extra={"headers": list(normalized_headers.keys())},
            )
            raise MissingHeaderError(name)
        return value
