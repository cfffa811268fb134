"""
Wire enumerations used across Patreon resources.

Every enum here has an ``UNKNOWN`` member. Decoding is an exact,
case-sensitive match on the wire string; any other string (including
values Patreon introduces later) becomes ``UNKNOWN`` rather than an
error. ``UNKNOWN`` itself has no wire form.
"""

from enum import Enum
from typing import Annotated, Any, Optional, Type, TypeVar

from pydantic import BeforeValidator, PlainSerializer

E = TypeVar("E", bound="WireEnum")


class WireEnum(str, Enum):
    """Base for enums whose values are the exact wire strings."""

    @classmethod
    def _missing_(cls, value: object) -> "WireEnum":
        return cls.UNKNOWN  # type: ignore[attr-defined]

    @classmethod
    def from_wire(cls: Type[E], value: str) -> E:
        """Decode a wire string, falling back to UNKNOWN."""
        return cls(value)

    def wire_value(self) -> str:
        """
        Encode to the wire string.

        Raises:
            ValueError: For UNKNOWN, which is never written back
        """
        if self is self.__class__.UNKNOWN:  # type: ignore[attr-defined]
            raise ValueError(f"{self.__class__.__name__}.UNKNOWN has no wire encoding")
        return self.value


class ResourceType(WireEnum):
    """JSON:API ``type`` discriminator values."""

    USER = "user"
    CAMPAIGN = "campaign"
    MEMBER = "member"
    TIER = "tier"
    POST = "post"
    BENEFIT = "benefit"
    DELIVERABLE = "deliverable"
    ADDRESS = "address"
    GOAL = "goal"
    MEDIA = "media"
    WEBHOOK = "webhook"
    PLEDGE_EVENT = "pledge_event"
    UNKNOWN = "<unknown>"


class PatronStatus(WireEnum):
    """Membership status of a patron."""

    ACTIVE_PATRON = "active_patron"
    DECLINED_PATRON = "declined_patron"
    FORMER_PATRON = "former_patron"
    UNKNOWN = "<unknown>"


class ChargeStatus(WireEnum):
    """Outcome of the most recent charge."""

    PAID = "paid"
    DECLINED = "declined"
    DELETED = "deleted"
    PENDING = "pending"
    REFUNDED = "refunded"
    FRAUD = "fraud"
    UNKNOWN = "<unknown>"


class WebhookTrigger(WireEnum):
    """Triggers a webhook can subscribe to."""

    MEMBERS_CREATE = "members:create"
    MEMBERS_UPDATE = "members:update"
    MEMBERS_DELETE = "members:delete"
    MEMBERS_PLEDGE_CREATE = "members:pledge:create"
    MEMBERS_PLEDGE_UPDATE = "members:pledge:update"
    MEMBERS_PLEDGE_DELETE = "members:pledge:delete"
    POSTS_PUBLISH = "posts:publish"
    POSTS_UPDATE = "posts:update"
    POSTS_DELETE = "posts:delete"
    UNKNOWN = "<unknown>"


def _wire_field(enum_cls: Type[WireEnum], nullable: bool):
    def _coerce(value: Any) -> Any:
        if value is None and nullable:
            return enum_cls.UNKNOWN  # type: ignore[attr-defined]
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            return enum_cls.from_wire(value)
        raise ValueError(f"{enum_cls.__name__} must be a string, got {type(value).__name__}")

    def _encode(member: WireEnum) -> Optional[str]:
        if member is enum_cls.UNKNOWN:  # type: ignore[attr-defined]
            return None
        return member.wire_value()

    return Annotated[
        enum_cls,
        BeforeValidator(_coerce),
        PlainSerializer(_encode, return_type=Optional[str]),
    ]


# ``type`` is required on every resource, so null is rejected there.
ResourceTypeField = _wire_field(ResourceType, nullable=False)
PatronStatusField = _wire_field(PatronStatus, nullable=True)
ChargeStatusField = _wire_field(ChargeStatus, nullable=True)
WebhookTriggerField = _wire_field(WebhookTrigger, nullable=True)
