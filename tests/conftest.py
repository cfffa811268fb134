"""
Configuration for pytest test suite
"""
import os
import sys
from pathlib import Path

import pytest

# Add src to path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables BEFORE importing anything from src
os.environ.update({
    "PATREON_CLIENT_ID": "test_client_id",
    "PATREON_CLIENT_SECRET": "test_client_secret",
    "PATREON_REDIRECT_URI": "https://app.example.com/oauth/callback",
    "PATREON_WEBHOOK_SECRET": "example_webhook_secret",
    "PATREON_WEBHOOK_DIGEST": "sha256",
    "LOG_LEVEL": "DEBUG",
    "LOG_FORMAT": "json",
})


WEBHOOK_SECRET = "example_webhook_secret"

MEMBER_BODY = b'{"data":{"type":"member","id":"123"},"links":{"self":"https://example/members/123"}}'


@pytest.fixture
def webhook_secret():
    """Shared webhook secret."""
    return WEBHOOK_SECRET


@pytest.fixture
def member_body():
    """Minimal member webhook body."""
    return MEMBER_BODY


@pytest.fixture
def member_document():
    """Member document with a campaign, a user and a tier included."""
    return {
        "data": {
            "type": "member",
            "id": "member-1",
            "attributes": {
                "full_name": "Ada Lovelace",
                "patron_status": "active_patron",
                "last_charge_status": "paid",
                "last_charge_date": "2024-03-01T12:00:00.000+00:00",
                "currently_entitled_amount_cents": 500,
                "lifetime_support_cents": None,
                "note": None,
            },
            "relationships": {
                "campaign": {"data": {"type": "campaign", "id": "camp-1"}},
                "currently_entitled_tiers": {
                    "data": [{"type": "tier", "id": "tier-1"}, {"type": "tier", "id": "tier-2"}]
                },
                "user": {"data": {"type": "user", "id": "user-1"}},
            },
        },
        "included": [
            {"type": "campaign", "id": "camp-1", "attributes": {"creation_name": "Engines", "patron_count": 42}},
            {"type": "user", "id": "user-1", "attributes": {"full_name": "Ada Lovelace", "email": None}},
            {"type": "tier", "id": "tier-1", "attributes": {"title": "Gold", "amount_cents": 500}},
            {"type": "some_future_type", "id": "x-1", "attributes": {"anything": True}},
        ],
        "links": {"self": "https://www.patreon.com/api/oauth2/v2/members/member-1"},
    }
