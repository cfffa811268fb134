"""
Tests for null-tolerant decoding, wire enums and attribute models.
"""

from datetime import datetime, timezone

import pytest
from pydantic import BaseModel, ValidationError

from patreon_api.models.attributes import (
    CampaignAttributes,
    MemberAttributes,
    TierAttributes,
    UserAttributes,
    WebhookAttributes,
)
from patreon_api.models.decoding import (
    UNIX_EPOCH,
    NullDatetime,
    NullInt,
    NullStr,
    decode_json,
)
from patreon_api.models.enums import (
    ChargeStatus,
    PatronStatus,
    ResourceType,
    WebhookTrigger,
)
from patreon_api.utils.exceptions import DecodeError


class _Sample(BaseModel):
    name: NullStr = ""
    count: NullInt = 0
    seen_at: NullDatetime = UNIX_EPOCH


class TestNullTolerantFields:
    """Test the Null* field types."""

    def test_null_becomes_zero_value(self):
        """Explicit null decodes to the type's zero value."""
        sample = decode_json({"name": None, "count": None, "seen_at": None}, _Sample)
        assert sample.name == ""
        assert sample.count == 0
        assert sample.seen_at == UNIX_EPOCH

    def test_missing_key_becomes_zero_value(self):
        """Absent keys decode like null."""
        sample = decode_json(b"{}", _Sample)
        assert sample.name == ""
        assert sample.count == 0
        assert sample.seen_at == UNIX_EPOCH

    def test_present_values_are_kept(self):
        """Real values pass through unchanged."""
        sample = decode_json('{"name": "x", "count": 3, "seen_at": "2024-01-02T03:04:05Z"}', _Sample)
        assert sample.name == "x"
        assert sample.count == 3
        assert sample.seen_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_type_mismatch_is_an_error(self):
        """A present but malformed value is never defaulted."""
        with pytest.raises(DecodeError) as exc_info:
            decode_json({"count": "not a number"}, _Sample)

        assert exc_info.value.model == "_Sample"
        assert exc_info.value.locations == ["count"]

    @pytest.mark.parametrize("payload,location", [
        ('{"count": "500"}', "count"),
        ('{"count": true}', "count"),
        ('{"count": 2.5}', "count"),
        ('{"name": 7}', "name"),
    ])
    def test_scalars_are_not_coerced(self, payload, location):
        """Numeric strings, bools and numbers keep their JSON type."""
        with pytest.raises(DecodeError) as exc_info:
            decode_json(payload, _Sample)
        assert exc_info.value.locations == [location]

    @pytest.mark.parametrize("attrs,location", [
        ({"currently_entitled_amount_cents": "500"}, "currently_entitled_amount_cents"),
        ({"is_follower": "yes"}, "is_follower"),
        ({"is_follower": 1}, "is_follower"),
    ])
    def test_member_scalars_are_not_coerced(self, attrs, location):
        """Member fields reject values of the wrong JSON type."""
        with pytest.raises(DecodeError) as exc_info:
            decode_json(attrs, MemberAttributes)
        assert exc_info.value.locations == [location]

    def test_campaign_scalars_are_not_coerced(self):
        """Bools are not ints and ints are not bools."""
        with pytest.raises(DecodeError) as exc_info:
            decode_json({"patron_count": True, "is_nsfw": 1}, CampaignAttributes)
        assert sorted(exc_info.value.locations) == ["is_nsfw", "patron_count"]

    def test_timestamp_without_offset_is_an_error(self):
        """Timestamps must carry a UTC offset."""
        with pytest.raises(DecodeError) as exc_info:
            decode_json('{"seen_at": "2024-03-01T12:00:00"}', _Sample)
        assert exc_info.value.locations == ["seen_at"]

        with pytest.raises(DecodeError):
            decode_json({"last_charge_date": "2024-03-01T12:00:00"}, MemberAttributes)

    def test_offset_timestamps_compare_with_default(self):
        """Decoded timestamps and the epoch default sort together."""
        charged = decode_json({"last_charge_date": "2024-03-01T12:00:00+02:00"}, MemberAttributes)
        never = decode_json({"last_charge_date": None}, MemberAttributes)

        dates = sorted([charged.last_charge_date, never.last_charge_date])
        assert dates[0] == UNIX_EPOCH
        assert charged.charged_after(datetime(2024, 1, 1, tzinfo=timezone.utc))

    def test_epoch_sorts_before_real_timestamps(self):
        """Missing timestamps compare as the earliest instant."""
        sample = decode_json({}, _Sample)
        assert sample.seen_at < datetime(2000, 1, 1, tzinfo=timezone.utc)


class TestDecodeJson:
    """Test decode_json error reporting."""

    def test_malformed_json(self):
        """Invalid JSON raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            decode_json(b"{not json", _Sample)

        assert exc_info.value.error_code == "DECODE_ERROR"
        assert "_Sample" in exc_info.value.message

    def test_error_to_dict(self):
        """DecodeError serializes with its details."""
        with pytest.raises(DecodeError) as exc_info:
            decode_json({"count": []}, _Sample)

        data = exc_info.value.to_dict()
        assert data["error_code"] == "DECODE_ERROR"
        assert data["details"]["model"] == "_Sample"


class TestWireEnums:
    """Test enum decoding and encoding."""

    @pytest.mark.parametrize("value,expected", [
        ("user", ResourceType.USER),
        ("member", ResourceType.MEMBER),
        ("pledge_event", ResourceType.PLEDGE_EVENT),
        ("webhook", ResourceType.WEBHOOK),
    ])
    def test_known_resource_types(self, value, expected):
        """Known wire strings map to their member."""
        assert ResourceType.from_wire(value) is expected
        assert expected.wire_value() == value

    @pytest.mark.parametrize("value", ["some_future_type", "Member", "MEMBER", ""])
    def test_unknown_resource_types(self, value):
        """Anything else, including case variants, is UNKNOWN."""
        assert ResourceType.from_wire(value) is ResourceType.UNKNOWN

    def test_unknown_has_no_wire_value(self):
        """UNKNOWN is never written back."""
        with pytest.raises(ValueError):
            ResourceType.UNKNOWN.wire_value()
        with pytest.raises(ValueError):
            PatronStatus.UNKNOWN.wire_value()

    def test_every_known_member_round_trips(self):
        """Encoding then decoding is the identity for known members."""
        for enum_cls in (ResourceType, PatronStatus, ChargeStatus, WebhookTrigger):
            for member in enum_cls:
                if member is enum_cls.UNKNOWN:
                    continue
                assert enum_cls.from_wire(member.wire_value()) is member


class TestMemberAttributes:
    """Test member attribute decoding."""

    def test_null_patron_status_is_unknown(self):
        """A null patron_status is not a decode error."""
        attrs = decode_json({"patron_status": None}, MemberAttributes)
        assert attrs.patron_status is PatronStatus.UNKNOWN
        assert not attrs.is_active_patron

    def test_unrecognised_patron_status_is_unknown(self):
        """New upstream statuses decode to UNKNOWN."""
        attrs = decode_json({"patron_status": "vip_patron"}, MemberAttributes)
        assert attrs.patron_status is PatronStatus.UNKNOWN

    def test_non_string_status_is_an_error(self):
        """A status of the wrong JSON type is malformed."""
        with pytest.raises(DecodeError):
            decode_json({"patron_status": 5}, MemberAttributes)

    def test_full_member(self, member_document):
        """A realistic member decodes with nulls defaulted."""
        attrs = decode_json(member_document["data"]["attributes"], MemberAttributes)

        assert attrs.is_active_patron
        assert attrs.last_charge_status is ChargeStatus.PAID
        assert attrs.currently_entitled_amount_cents == 500
        assert attrs.lifetime_support_cents == 0
        assert attrs.note == ""
        assert attrs.next_charge_date == UNIX_EPOCH

    def test_charged_after(self, member_document):
        """charged_after compares against the last charge date."""
        attrs = decode_json(member_document["data"]["attributes"], MemberAttributes)
        assert attrs.charged_after(datetime(2024, 2, 1, tzinfo=timezone.utc))
        assert not attrs.charged_after(datetime(2024, 4, 1, tzinfo=timezone.utc))
        assert not MemberAttributes().charged_after(datetime(1990, 1, 1, tzinfo=timezone.utc))

    def test_unknown_status_serializes_as_null(self):
        """model_dump writes UNKNOWN as null and known members as wire strings."""
        dumped = MemberAttributes(patron_status=PatronStatus.FORMER_PATRON).model_dump()
        assert dumped["patron_status"] == "former_patron"
        assert dumped["last_charge_status"] is None

    def test_attributes_are_frozen(self):
        """Decoded attributes cannot be mutated."""
        attrs = MemberAttributes()
        with pytest.raises(ValidationError):
            attrs.full_name = "changed"


class TestOtherAttributes:
    """Test remaining attribute sets."""

    def test_user_defaults(self):
        """An empty user decodes to defaults."""
        user = decode_json({}, UserAttributes)
        assert user.email == ""
        assert user.is_creator is False
        assert user.created == UNIX_EPOCH
        assert user.social_connections is None

    def test_extra_fields_are_kept(self):
        """Unmodelled upstream fields do not fail decoding."""
        campaign = decode_json({"creation_name": "Engines", "brand_new_field": 1}, CampaignAttributes)
        assert campaign.creation_name == "Engines"
        assert campaign.model_extra == {"brand_new_field": 1}

    def test_tier_null_role_ids(self):
        """A null list decodes to an empty list."""
        tier = decode_json({"discord_role_ids": None, "amount_cents": 250}, TierAttributes)
        assert tier.discord_role_ids == []
        assert tier.amount_cents == 250

    def test_webhook_triggers(self):
        """Unknown triggers are kept as UNKNOWN entries."""
        webhook = decode_json(
            {"triggers": ["members:create", "posts:publish", "members:brand_new"], "uri": "https://x"},
            WebhookAttributes,
        )
        assert webhook.triggers == [
            WebhookTrigger.MEMBERS_CREATE,
            WebhookTrigger.POSTS_PUBLISH,
            WebhookTrigger.UNKNOWN,
        ]
        assert webhook.subscribes_to(WebhookTrigger.POSTS_PUBLISH)
        assert not webhook.subscribes_to(WebhookTrigger.MEMBERS_DELETE)

    def test_webhook_null_triggers(self):
        """A null trigger list is empty."""
        assert decode_json({"triggers": None}, WebhookAttributes).triggers == []
