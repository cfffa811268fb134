"""
Attribute sets for Patreon API v2 resources.

One model per resource kind. Every field is null-tolerant: an explicit
``null`` or a missing key yields the field's zero value (empty string,
0, False, the UNIX epoch, an empty list, or None for free-form JSON).
Monetary amounts are integer cents.

API reference:
https://docs.patreon.com/#apiv2-resources
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field

from .decoding import (
    UNIX_EPOCH,
    NullBool,
    NullDatetime,
    NullInt,
    NullJSON,
    NullStr,
    NullStrList,
    null_default,
)
from .enums import (
    ChargeStatus,
    ChargeStatusField,
    PatronStatus,
    PatronStatusField,
    WebhookTrigger,
    WebhookTriggerField,
)


class _Attributes(BaseModel):
    """Common configuration for attribute models."""

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "allow"


class UserAttributes(_Attributes):
    """
    Patreon user.

    Email is only populated with the ``identity[email]`` scope.
    """

    email: NullStr = Field("", description="Email address")
    full_name: NullStr = Field("", description="Full name")
    first_name: NullStr = Field("", description="First name")
    last_name: NullStr = Field("", description="Last name")
    vanity: NullStr = Field("", description="Vanity username")
    about: NullStr = Field("", description="Bio/about text")
    image_url: NullStr = Field("", description="Avatar image URL")
    thumb_url: NullStr = Field("", description="Thumbnail URL")
    url: NullStr = Field("", description="Patreon profile URL")
    is_creator: NullBool = Field(False, description="Whether the user is a creator")
    is_email_verified: NullBool = Field(False, description="Whether the email is verified")
    created: NullDatetime = Field(UNIX_EPOCH, description="Account creation time")
    hide_pledges: NullBool = Field(False, description="Whether pledges are hidden")
    like_count: NullInt = Field(0, description="Number of likes given")
    social_connections: NullJSON = Field(None, description="Linked social accounts")


class CampaignAttributes(_Attributes):
    """Creator campaign."""

    created_at: NullDatetime = UNIX_EPOCH
    creation_name: NullStr = ""
    discord_server_id: NullStr = ""
    google_analytics_id: NullStr = ""
    is_charged_immediately: NullBool = False
    is_monthly: NullBool = False
    is_nsfw: NullBool = False
    image_url: NullStr = ""
    image_small_url: NullStr = ""
    cover_photo_url: NullStr = ""
    cover_photo_url_sizes: NullJSON = None
    main_video_embed: NullStr = ""
    main_video_url: NullStr = ""
    thanks_video_url: NullStr = ""
    thanks_msg: NullStr = ""
    thanks_embed: NullStr = ""
    one_liner: NullStr = ""
    patron_count: NullInt = 0
    paid_member_count: NullInt = 0
    pledge_sum_cents: NullInt = 0
    pledge_sum_currency: NullStr = ""
    published_at: NullDatetime = UNIX_EPOCH
    summary: NullStr = ""
    url: NullStr = ""
    vanity: NullStr = ""
    pay_per_name: NullStr = ""
    is_published: NullBool = False
    show_earnings: NullBool = False


class MemberAttributes(_Attributes):
    """
    Membership of a user in a campaign.

    ``patron_status`` is null for followers who never pledged; it then
    decodes to PatronStatus.UNKNOWN, the same as an unrecognised value.
    """

    patron_status: PatronStatusField = Field(PatronStatus.UNKNOWN, description="Patron status")
    is_follower: NullBool = Field(False, description="Whether the member only follows")
    full_name: NullStr = Field("", description="Member full name")
    email: NullStr = Field("", description="Member email")
    currently_entitled_amount_cents: NullInt = Field(0, description="Amount the member is entitled to, in cents")
    lifetime_support_cents: NullInt = Field(0, description="Total paid over the membership, in cents")
    last_charge_date: NullDatetime = Field(UNIX_EPOCH, description="Date of the last charge")
    last_charge_status: ChargeStatusField = Field(ChargeStatus.UNKNOWN, description="Outcome of the last charge")
    next_charge_date: NullDatetime = Field(UNIX_EPOCH, description="Date of the next charge")
    pledge_relationship_start: NullDatetime = Field(UNIX_EPOCH, description="When the pledge began")
    note: NullStr = Field("", description="Creator's private note")
    will_pay_amount_cents: NullInt = Field(0, description="Amount of the next charge, in cents")
    campaign_currency: NullStr = Field("", description="Campaign currency code")
    campaign_lifetime_support_cents: NullInt = Field(0, description="Lifetime support in campaign currency, in cents")
    campaign_pledge_amount_cents: NullInt = Field(0, description="Pledge amount in campaign currency, in cents")

    @property
    def is_active_patron(self) -> bool:
        """Check if the member is currently an active patron."""
        return self.patron_status == PatronStatus.ACTIVE_PATRON

    def charged_after(self, moment: datetime) -> bool:
        """Check if the last charge happened after ``moment``."""
        return self.last_charge_date > moment


class TierAttributes(_Attributes):
    """Reward tier."""

    amount_cents: NullInt = 0
    created_at: NullDatetime = UNIX_EPOCH
    description: NullStr = ""
    discord_role_ids: NullStrList = Field(default_factory=list)
    edited_at: NullDatetime = UNIX_EPOCH
    image_url: NullStr = ""
    patron_count: NullInt = 0
    post_count: NullInt = 0
    published: NullBool = False
    published_at: NullDatetime = UNIX_EPOCH
    title: NullStr = ""
    unpublished_at: NullDatetime = UNIX_EPOCH
    url: NullStr = ""
    user_limit: NullInt = 0
    remaining: NullInt = 0


class PostAttributes(_Attributes):
    """Campaign post."""

    title: NullStr = ""
    content: NullStr = ""
    is_public: NullBool = False
    is_paid: NullBool = False
    published_at: NullDatetime = UNIX_EPOCH
    edited_at: NullDatetime = UNIX_EPOCH
    created_at: NullDatetime = UNIX_EPOCH
    embed: NullJSON = None
    embed_url: NullStr = ""
    app_id: NullInt = 0
    app_status: NullStr = ""
    image: NullJSON = None
    is_teaser: NullBool = False
    teaser_text: NullStr = ""
    like_count: NullInt = 0
    comment_count: NullInt = 0
    url: NullStr = ""
    post_type: NullStr = ""
    post_file: NullJSON = None
    post_metadata: NullJSON = None
    min_cents_pledged_to_view: NullInt = 0
    thumbnail_url: NullStr = ""
    thumbnail: NullJSON = None


class BenefitAttributes(_Attributes):
    """Benefit attached to one or more tiers."""

    title: NullStr = ""
    description: NullStr = ""
    benefit_type: NullStr = ""
    rule_type: NullStr = ""
    created_at: NullDatetime = UNIX_EPOCH
    is_published: NullBool = False
    is_deleted: NullBool = False
    is_deliverable: NullBool = False
    deliverables_due_today_count: NullInt = 0
    delivered_deliverables_count: NullInt = 0
    not_delivered_deliverables_count: NullInt = 0
    next_deliverable_due_date: NullDatetime = UNIX_EPOCH
    tiers_count: NullInt = 0
    app_external_id: NullStr = ""
    app_meta: NullJSON = None


class AddressAttributes(_Attributes):
    """Shipping address of a member."""

    addressee: NullStr = ""
    city: NullStr = ""
    country: NullStr = ""
    created_at: NullDatetime = UNIX_EPOCH
    line_1: NullStr = ""
    line_2: NullStr = ""
    phone_number: NullStr = ""
    postal_code: NullStr = ""
    state: NullStr = ""
    confirmed: NullBool = False
    confirmed_at: NullDatetime = UNIX_EPOCH


class GoalAttributes(_Attributes):
    """Campaign funding goal."""

    amount_cents: NullInt = 0
    completed_percentage: NullInt = 0
    created_at: NullDatetime = UNIX_EPOCH
    description: NullStr = ""
    reached_at: NullDatetime = UNIX_EPOCH
    title: NullStr = ""


class MediaAttributes(_Attributes):
    """Uploaded file or image."""

    created_at: NullDatetime = UNIX_EPOCH
    download_url: NullStr = ""
    file_name: NullStr = ""
    image_urls: NullJSON = None
    metadata: NullJSON = None
    mimetype: NullStr = ""
    owner_id: NullStr = ""
    owner_relationship: NullStr = ""
    owner_type: NullStr = ""
    size_bytes: NullInt = 0
    state: NullStr = ""
    upload_expires_at: NullDatetime = UNIX_EPOCH
    upload_parameters: NullJSON = None
    upload_url: NullStr = ""


class WebhookAttributes(_Attributes):
    """
    Webhook registration.

    Unrecognised trigger strings in ``triggers`` become
    WebhookTrigger.UNKNOWN entries; the list is never rejected for them.
    """

    last_attempted_at: NullDatetime = UNIX_EPOCH
    num_consecutive_times_failed: NullInt = 0
    paused: NullBool = False
    secret: NullStr = ""
    triggers: Annotated[list[WebhookTriggerField], null_default(list)] = Field(default_factory=list)
    uri: NullStr = ""

    def subscribes_to(self, trigger: WebhookTrigger) -> bool:
        """Check if the webhook fires for ``trigger``."""
        return trigger in self.triggers


ATTRIBUTE_MODELS: tuple[type[BaseModel], ...] = (
    UserAttributes,
    CampaignAttributes,
    MemberAttributes,
    TierAttributes,
    PostAttributes,
    BenefitAttributes,
    AddressAttributes,
    GoalAttributes,
    MediaAttributes,
    WebhookAttributes,
)

__all__ = [model.__name__ for model in ATTRIBUTE_MODELS] + ["ATTRIBUTE_MODELS"]
