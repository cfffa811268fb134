"""
Data models for Patreon webhook payloads.

Patreon webhook bodies are ordinary JSON:API documents. The trigger
that fired the webhook arrives separately, in the X-Patreon-Event
header, as a colon-delimited label such as ``members:pledge:create``.

Documentation: https://docs.patreon.com/#webhooks
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from ..models.enums import ResourceType, WebhookTrigger
from ..models.resources import Resource
from ..models.response import ApiResponse, filter_included


class EventSubject(str, Enum):
    """Resource kind a webhook event is about."""

    MEMBER = "member"
    PLEDGE = "pledge"
    POST = "post"


class EventVerb(str, Enum):
    """What happened to the subject."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"


# Consulted in both directions by WebhookEventType.
TRIGGER_LITERALS: tuple[tuple[WebhookTrigger, str], ...] = (
    (WebhookTrigger.MEMBERS_CREATE, "members:create"),
    (WebhookTrigger.MEMBERS_UPDATE, "members:update"),
    (WebhookTrigger.MEMBERS_DELETE, "members:delete"),
    (WebhookTrigger.MEMBERS_PLEDGE_CREATE, "members:pledge:create"),
    (WebhookTrigger.MEMBERS_PLEDGE_UPDATE, "members:pledge:update"),
    (WebhookTrigger.MEMBERS_PLEDGE_DELETE, "members:pledge:delete"),
    (WebhookTrigger.POSTS_PUBLISH, "posts:publish"),
    (WebhookTrigger.POSTS_UPDATE, "posts:update"),
    (WebhookTrigger.POSTS_DELETE, "posts:delete"),
)

_TRIGGER_BY_LITERAL = {literal: trigger for trigger, literal in TRIGGER_LITERALS}
_LITERAL_BY_TRIGGER = {trigger: literal for trigger, literal in TRIGGER_LITERALS}


class WebhookEventType:
    """
    Webhook trigger label as a value object.

    Known labels map to a WebhookTrigger member. Any other label is
    kept verbatim with ``trigger == WebhookTrigger.UNKNOWN``, so
    ``WebhookEventType.from_str(s).as_str() == s`` holds for every string.
    """

    __slots__ = ("trigger", "_label")

    def __init__(self, trigger: WebhookTrigger, label: Optional[str] = None):
        if trigger is WebhookTrigger.UNKNOWN:
            if label is None:
                raise ValueError("Unknown event types must carry their original label")
            self._label = label
        else:
            self._label = _LITERAL_BY_TRIGGER[trigger]
        self.trigger = trigger

    @classmethod
    def from_str(cls, value: str) -> "WebhookEventType":
        """Parse a trigger label; never fails."""
        trigger = _TRIGGER_BY_LITERAL.get(value)
        if trigger is None:
            return cls(WebhookTrigger.UNKNOWN, value)
        return cls(trigger)

    def as_str(self) -> str:
        """Trigger label exactly as it appears on the wire."""
        return self._label

    @property
    def is_known(self) -> bool:
        """Check if the label is one of the documented triggers."""
        return self.trigger is not WebhookTrigger.UNKNOWN

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WebhookEventType):
            return NotImplemented
        return self._label == other._label

    def __hash__(self) -> int:
        return hash(self._label)

    def __str__(self) -> str:
        return self._label

    def __repr__(self) -> str:
        return f"WebhookEventType({self._label!r})"


class WebhookEvent(BaseModel):
    """
    Self-describing webhook payload.

    Used when the caller branches on resource types itself instead of
    on the trigger label, e.g. scanning ``included`` for members and
    checking their patron status.
    """

    data: Union[Resource, list[Resource]] = Field(..., description="Primary resource(s)")
    included: Optional[list[Any]] = Field(None, description="Raw related resources")
    links: Optional[Any] = Field(None, description="Links object")

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def resources(self) -> list[Resource]:
        """Primary data normalised to a list."""
        return list(self.data) if isinstance(self.data, list) else [self.data]

    def included_of(self, resource_type: ResourceType, attributes_cls: Optional[type[BaseModel]] = None) -> list[Resource]:
        """Decode the ``included`` entries of one resource type."""
        return filter_included(self.included or [], resource_type, attributes_cls)


class Event(BaseModel):
    """
    Webhook event typed by its trigger.

    ``document`` is the JSON:API envelope decoded with the attribute
    model the trigger implies.
    """

    event_type: WebhookEventType = Field(..., description="Trigger that fired")
    subject: EventSubject = Field(..., description="Resource kind")
    verb: EventVerb = Field(..., description="Action")
    document: ApiResponse = Field(..., description="Decoded payload")

    class Config:
        """Pydantic configuration."""

        frozen = True
        arbitrary_types_allowed = True

    @property
    def trigger(self) -> WebhookTrigger:
        """Trigger enum member."""
        return self.event_type.trigger

    @property
    def resource(self) -> Resource:
        """Primary resource of the payload."""
        return self.document.data


class WebhookValidationResult(BaseModel):
    """
    Result of webhook request handling.

    Contains validation status and the reason for rejection, if any.
    """

    is_valid: bool = Field(..., description="Whether the signature checked out")
    event_type: Optional[str] = Field(None, description="Trigger label from the request")
    should_process: bool = Field(False, description="Whether the event should be processed")
    rejection_reason: Optional[str] = Field(None, description="Reason for rejection if not processed")
    event: Optional[Event] = Field(None, description="Classified event")

    class Config:
        """Pydantic configuration."""

        frozen = False
        extra = "allow"
