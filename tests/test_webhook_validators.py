"""
Tests for webhook signature verification.
"""

import hashlib
import hmac
import logging
import re
from unittest.mock import patch

import pytest

from patreon_api.models.enums import ResourceType, WebhookTrigger
from patreon_api.utils.exceptions import ConfigurationError, DecodeError, WebhookSignatureError
from patreon_api.webhook import (
    DigestAlgorithm,
    EventSubject,
    WebhookConfig,
    WebhookSignatureValidator,
    compute_signature,
    constant_time_compare,
)
from patreon_api.config.settings import Settings


BODIES = [
    b"",
    b"{}",
    b'{"data":{"type":"member","id":"123"}}',
    "unicode body ✓".encode("utf-8"),
    bytes(range(256)),
]


def _flip_last(signature: str) -> str:
    return signature[:-1] + ("0" if signature[-1] != "0" else "1")


class TestComputeSignature:
    """Test the signature function."""

    @pytest.mark.parametrize("body", BODIES)
    def test_sha256_shape(self, body, webhook_secret):
        """SHA-256 signatures are 64 lowercase hex characters."""
        signature = compute_signature(webhook_secret, body)
        assert re.fullmatch(r"[0-9a-f]{64}", signature)

    @pytest.mark.parametrize("body", BODIES)
    def test_deterministic(self, body, webhook_secret):
        """Same inputs give the same signature."""
        assert compute_signature(webhook_secret, body) == compute_signature(webhook_secret, body)

    def test_matches_hmac(self, webhook_secret, member_body):
        """The signature is a plain HMAC of the raw body."""
        expected = hmac.new(webhook_secret.encode(), member_body, hashlib.sha256).hexdigest()
        assert compute_signature(webhook_secret, member_body) == expected

    def test_md5_digest(self, webhook_secret, member_body):
        """The legacy digest gives 32 hex characters."""
        signature = compute_signature(webhook_secret, member_body, DigestAlgorithm.MD5)
        assert signature == hmac.new(webhook_secret.encode(), member_body, hashlib.md5).hexdigest()
        assert len(signature) == DigestAlgorithm.MD5.hex_length == 32

    def test_str_and_bytes_agree(self, webhook_secret):
        """Text bodies are signed as their UTF-8 bytes."""
        assert compute_signature(webhook_secret, "café") == compute_signature(
            webhook_secret, "café".encode("utf-8")
        )

    def test_secret_changes_signature(self, member_body):
        """Different secrets give different signatures."""
        assert compute_signature("a", member_body) != compute_signature("b", member_body)


class TestConstantTimeCompare:
    """Test signature comparison."""

    def test_equal(self):
        assert constant_time_compare("abc123", "abc123")

    def test_different_content(self):
        assert not constant_time_compare("abc123", "abc124")

    @pytest.mark.parametrize("other", ["", "abc12", "abc1234", "abc123 "])
    def test_different_length(self, other):
        """Length mismatches are always unequal."""
        assert not constant_time_compare("abc123", other)

    def test_length_mismatch_skips_digest_compare(self):
        """Content is not inspected when lengths differ."""
        with patch("patreon_api.webhook.validators.hmac.compare_digest") as compare:
            assert not constant_time_compare("abc", "abcd")
        compare.assert_not_called()


class TestWebhookSignatureValidator:
    """Test the secret-bound validator."""

    @pytest.fixture
    def validator(self, webhook_secret):
        return WebhookSignatureValidator(webhook_secret)

    def test_empty_secret_rejected(self):
        """A validator without a secret would accept forgeries."""
        with pytest.raises(ConfigurationError):
            WebhookSignatureValidator("")

    def test_unsupported_digest_rejected(self, webhook_secret):
        with pytest.raises(ConfigurationError) as exc_info:
            WebhookSignatureValidator(webhook_secret, digest="sha1")
        assert exc_info.value.details["config_key"] == "webhook_digest"

    def test_default_digest_is_sha256(self, validator):
        assert validator.digest is DigestAlgorithm.SHA256

    @pytest.mark.parametrize("body", BODIES)
    def test_validate_own_signature(self, validator, body):
        """A body always validates against its own signature."""
        assert validator.validate(body, validator.compute_signature(body))

    @pytest.mark.parametrize("body", [b for b in BODIES if b])
    def test_single_byte_mutation_fails(self, validator, body):
        """Changing any byte of the body invalidates the signature."""
        signature = validator.compute_signature(body)
        for index in range(len(body)):
            mutated = bytearray(body)
            mutated[index] ^= 0x01
            assert not validator.validate(bytes(mutated), signature)

    def test_wrong_length_signature(self, validator, member_body):
        signature = validator.compute_signature(member_body)
        assert not validator.validate(member_body, signature[:-1])
        assert not validator.validate(member_body, signature + "0")

    def test_missing_signature(self, validator, member_body):
        assert not validator.validate(member_body, None)
        assert not validator.validate(member_body, "")

    def test_digests_are_not_interchangeable(self, webhook_secret, member_body):
        """An MD5 signature never validates under SHA-256 and vice versa."""
        sha_validator = WebhookSignatureValidator(webhook_secret, DigestAlgorithm.SHA256)
        md5_validator = WebhookSignatureValidator(webhook_secret, "md5")

        assert not sha_validator.validate(member_body, md5_validator.compute_signature(member_body))
        assert not md5_validator.validate(member_body, sha_validator.compute_signature(member_body))
        assert md5_validator.validate(member_body, md5_validator.compute_signature(member_body))

    def test_failure_logs_lengths_only(self, validator, member_body, caplog):
        """Failed validation never logs the signature or secret."""
        bad = "f" * 64
        with caplog.at_level(logging.WARNING, logger="patreon_api.webhook.validators"):
            validator.validate(member_body, bad)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.received_length == 64
        assert bad not in caplog.text
        assert "example_webhook_secret" not in caplog.text

    def test_validate_or_error(self, validator, member_body):
        validator.validate_or_error(member_body, validator.compute_signature(member_body))

        with pytest.raises(WebhookSignatureError) as exc_info:
            validator.validate_or_error(member_body, "0" * 64)
        assert exc_info.value.error_code == "WEBHOOK_SIGNATURE_INVALID"
        assert exc_info.value.details["digest"] == "sha256"


class TestValidateAndParse:
    """End-to-end verify-then-decode scenarios."""

    def test_end_to_end(self, webhook_secret, member_body):
        """A correctly signed member body parses."""
        validator = WebhookSignatureValidator(webhook_secret)
        signature = compute_signature(webhook_secret, member_body)

        event = validator.validate_and_parse(member_body, signature)

        assert event.data.id == "123"
        assert event.data.resource_type is ResourceType.MEMBER
        assert event.links == {"self": "https://example/members/123"}
        assert event.included is None

    def test_flipped_signature_never_parses(self, webhook_secret, member_body):
        """A bad signature raises before the body is looked at."""
        validator = WebhookSignatureValidator(webhook_secret)
        bad = _flip_last(compute_signature(webhook_secret, member_body))

        with pytest.raises(WebhookSignatureError):
            validator.validate_or_error(member_body, bad)

        with patch("patreon_api.webhook.handlers.parse_event") as parse_event:
            with pytest.raises(WebhookSignatureError):
                validator.validate_and_parse(member_body, bad)
        parse_event.assert_not_called()

    def test_signed_garbage_is_a_decode_error(self, webhook_secret):
        """A verified but malformed body is a decode error, not a signature error."""
        validator = WebhookSignatureValidator(webhook_secret)
        body = b"not json at all"

        with pytest.raises(DecodeError):
            validator.validate_and_parse(body, validator.compute_signature(body))

    def test_validate_and_classify(self, webhook_secret, member_body):
        validator = WebhookSignatureValidator(webhook_secret)
        event = validator.validate_and_classify(
            member_body, validator.compute_signature(member_body), "members:pledge:create"
        )

        assert event.trigger is WebhookTrigger.MEMBERS_PLEDGE_CREATE
        assert event.subject is EventSubject.PLEDGE
        assert event.resource.id == "123"

    def test_validate_and_classify_bad_signature(self, webhook_secret, member_body):
        validator = WebhookSignatureValidator(webhook_secret)
        with patch("patreon_api.webhook.handlers.classify_event") as classify:
            with pytest.raises(WebhookSignatureError):
                validator.validate_and_classify(member_body, "0" * 64, "members:create")
        classify.assert_not_called()


class TestWebhookConfig:
    """Test webhook configuration."""

    def test_defaults(self):
        config = WebhookConfig(secret="s")
        assert config.digest is DigestAlgorithm.SHA256
        assert config.event_header == "X-Patreon-Event"
        assert config.signature_header == "X-Patreon-Signature"
        assert WebhookTrigger.UNKNOWN not in config.allowed_triggers
        assert len(config.allowed_triggers) == 9

    def test_from_settings(self):
        settings = Settings(webhook_secret="from-settings", webhook_digest="MD5")
        config = WebhookConfig.from_settings(settings, allowed_triggers=[WebhookTrigger.POSTS_PUBLISH])

        assert config.secret == "from-settings"
        assert config.digest is DigestAlgorithm.MD5
        assert config.allowed_triggers == [WebhookTrigger.POSTS_PUBLISH]
