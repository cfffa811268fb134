"""
Configuration management for the Patreon API client.

Settings are read from environment variables (and a local ``.env``
file when present) into a validated dataclass. Nothing in the
decoding or signature layers reads these directly; the values are
handed to the HTTP collaborators and the webhook handler at
construction time.
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from ..utils.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()


DEFAULT_API_BASE_URL = "https://www.patreon.com/api/oauth2/v2"
DEFAULT_OAUTH_AUTHORIZE_URL = "https://www.patreon.com/oauth2/authorize"
DEFAULT_OAUTH_TOKEN_URL = "https://www.patreon.com/api/oauth2/token"

SUPPORTED_DIGESTS = ("sha256", "md5")
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
SUPPORTED_LOG_FORMATS = ("json", "text")


@dataclass
class Settings:
    """
    Client settings loaded from environment variables.

    All settings have sensible defaults where applicable and
    are validated on instantiation.
    """

    # OAuth Configuration
    client_id: str = field(default_factory=lambda: os.getenv("PATREON_CLIENT_ID", ""))
    client_secret: str = field(default_factory=lambda: os.getenv("PATREON_CLIENT_SECRET", ""))
    redirect_uri: str = field(default_factory=lambda: os.getenv("PATREON_REDIRECT_URI", ""))

    # Endpoints
    api_base_url: str = field(default=DEFAULT_API_BASE_URL)
    oauth_authorize_url: str = field(default=DEFAULT_OAUTH_AUTHORIZE_URL)
    oauth_token_url: str = field(default=DEFAULT_OAUTH_TOKEN_URL)

    # Webhook Configuration
    webhook_secret: str = field(default_factory=lambda: os.getenv("PATREON_WEBHOOK_SECRET", ""))
    webhook_digest: str = field(default="sha256")
    webhook_event_header: str = field(default="X-Patreon-Event")
    webhook_signature_header: str = field(default="X-Patreon-Signature")

    # HTTP Configuration
    request_timeout: float = field(default=30.0)

    # Retry Configuration
    max_retries: int = field(default=3)
    retry_delay: float = field(default=1.0)
    retry_backoff_factor: float = field(default=2.0)

    # Logging Configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="json")
    log_file: Optional[str] = field(default=None)

    def __post_init__(self):
        """Validate settings after initialization."""
        self.webhook_digest = self.webhook_digest.lower()
        if self.webhook_digest not in SUPPORTED_DIGESTS:
            raise ConfigurationError(
                f"webhook_digest must be one of: {', '.join(SUPPORTED_DIGESTS)}",
                config_key="webhook_digest",
                config_value=self.webhook_digest
            )

        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive", config_key="request_timeout")

        if self.max_retries < 0:
            raise ConfigurationError("max_retries cannot be negative", config_key="max_retries")

        if self.retry_backoff_factor < 1.0:
            raise ConfigurationError(
                "retry_backoff_factor must be at least 1.0",
                config_key="retry_backoff_factor"
            )

        self.log_level = self.log_level.upper()
        if self.log_level not in SUPPORTED_LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of: {', '.join(SUPPORTED_LOG_LEVELS)}",
                config_key="log_level",
                config_value=self.log_level
            )

        self.log_format = self.log_format.lower()
        if self.log_format not in SUPPORTED_LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of: {', '.join(SUPPORTED_LOG_FORMATS)}",
                config_key="log_format",
                config_value=self.log_format
            )

        for key in ("api_base_url", "oauth_authorize_url", "oauth_token_url"):
            setattr(self, key, getattr(self, key).rstrip("/"))

    @classmethod
    def from_env(cls, **kwargs) -> "Settings":
        """Create Settings instance from environment variables with optional overrides."""
        env_vars = {}

        # Map environment variables to field names
        env_mapping = {
            "PATREON_CLIENT_ID": "client_id",
            "PATREON_CLIENT_SECRET": "client_secret",
            "PATREON_REDIRECT_URI": "redirect_uri",
            "PATREON_API_BASE_URL": "api_base_url",
            "PATREON_OAUTH_AUTHORIZE_URL": "oauth_authorize_url",
            "PATREON_OAUTH_TOKEN_URL": "oauth_token_url",
            "PATREON_WEBHOOK_SECRET": "webhook_secret",
            "PATREON_WEBHOOK_DIGEST": "webhook_digest",
            "PATREON_WEBHOOK_EVENT_HEADER": "webhook_event_header",
            "PATREON_WEBHOOK_SIGNATURE_HEADER": "webhook_signature_header",
            "PATREON_REQUEST_TIMEOUT": "request_timeout",
            "PATREON_MAX_RETRIES": "max_retries",
            "PATREON_RETRY_DELAY": "retry_delay",
            "PATREON_RETRY_BACKOFF_FACTOR": "retry_backoff_factor",
            "LOG_LEVEL": "log_level",
            "LOG_FORMAT": "log_format",
            "LOG_FILE": "log_file",
        }

        # Collect environment variables
        for env_var, field_name in env_mapping.items():
            if env_var in os.environ:
                env_vars[field_name] = os.environ[env_var]

        # Convert numeric strings
        try:
            for key, value in env_vars.items():
                if key in ["request_timeout", "retry_delay", "retry_backoff_factor"]:
                    env_vars[key] = float(value)
                elif key in ["max_retries"]:
                    env_vars[key] = int(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        # Merge with provided kwargs
        env_vars.update(kwargs)

        return cls(**env_vars)


# Initialize settings from environment variables
try:
    settings = Settings.from_env()
except ConfigurationError as e:
    print(f"Warning: Could not initialize Settings from environment: {e}", file=sys.stderr)
    print("Using default Settings as fallback", file=sys.stderr)
    settings = Settings(log_level="INFO", log_format="json", webhook_digest="sha256")
