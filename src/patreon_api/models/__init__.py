"""
Patreon API data models.

Patreon uses the JSON:API format. Responses generally follow this structure:
    - data: primary resource data
    - included: related resources
    - links: pagination links
    - meta: metadata
"""

from .decoding import (
    UNIX_EPOCH,
    NullBool,
    NullDatetime,
    NullInt,
    NullJSON,
    NullStr,
    NullStrList,
    decode_json,
    null_default,
    unix_epoch,
)
from .enums import ChargeStatus, PatronStatus, ResourceType, WebhookTrigger
from .attributes import (
    AddressAttributes,
    BenefitAttributes,
    CampaignAttributes,
    GoalAttributes,
    MediaAttributes,
    MemberAttributes,
    PostAttributes,
    TierAttributes,
    UserAttributes,
    WebhookAttributes,
)
from .resources import (
    ATTRIBUTES_BY_TYPE,
    AddressResource,
    BenefitResource,
    CampaignResource,
    GoalResource,
    MediaResource,
    MemberResource,
    PostResource,
    RelationshipData,
    Resource,
    ResourceRef,
    TierResource,
    UserResource,
    WebhookResource,
)
from .response import (
    ApiErrorDetail,
    ApiErrorResponse,
    ApiResponse,
    PaginationLinks,
    PaginationMeta,
    decode_document,
    document_type,
    filter_included,
    resolve_included,
)

__all__ = [
    # Decoding
    "UNIX_EPOCH",
    "NullBool",
    "NullDatetime",
    "NullInt",
    "NullJSON",
    "NullStr",
    "NullStrList",
    "decode_json",
    "null_default",
    "unix_epoch",
    # Enums
    "ChargeStatus",
    "PatronStatus",
    "ResourceType",
    "WebhookTrigger",
    # Attributes
    "AddressAttributes",
    "BenefitAttributes",
    "CampaignAttributes",
    "GoalAttributes",
    "MediaAttributes",
    "MemberAttributes",
    "PostAttributes",
    "TierAttributes",
    "UserAttributes",
    "WebhookAttributes",
    # Resources
    "ATTRIBUTES_BY_TYPE",
    "AddressResource",
    "BenefitResource",
    "CampaignResource",
    "GoalResource",
    "MediaResource",
    "MemberResource",
    "PostResource",
    "RelationshipData",
    "Resource",
    "ResourceRef",
    "TierResource",
    "UserResource",
    "WebhookResource",
    # Responses
    "ApiErrorDetail",
    "ApiErrorResponse",
    "ApiResponse",
    "PaginationLinks",
    "PaginationMeta",
    "decode_document",
    "document_type",
    "filter_included",
    "resolve_included",
]
