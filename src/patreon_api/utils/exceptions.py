"""
Custom exception classes for the Patreon API client.

Provides specific exception types for different error scenarios
with appropriate error codes and messages.
"""

from typing import Optional, Dict, Any, List


class PatreonError(Exception):
    """
    Base exception for the Patreon API client.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(PatreonError):
    """
    Raised when there's a configuration error.

    This includes missing environment variables,
    invalid configuration values, etc.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None
    ):
        """Initialize configuration error."""
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = config_value

        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            details=details
        )


class APIError(PatreonError):
    """
    Raised when a request to the Patreon API fails.

    Covers transport failures (connection, timeout) as well as
    non-success HTTP responses. For the latter the decoded upstream
    error entries are kept in ``errors``.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        endpoint: Optional[str] = None
    ):
        """Initialize API error."""
        details: Dict[str, Any] = {}
        if status_code:
            details["status_code"] = status_code
        if errors:
            details["errors"] = errors
        if endpoint:
            details["endpoint"] = endpoint

        super().__init__(
            message=message,
            error_code="API_ERROR",
            details=details
        )
        self.status_code = status_code
        self.errors = errors or []

    @property
    def is_server_error(self) -> bool:
        """Whether the upstream answered with a 5xx status."""
        return self.status_code is not None and self.status_code >= 500


class OAuthError(PatreonError):
    """
    Raised when the OAuth token endpoint rejects a request.

    Carries the ``error`` / ``error_description`` pair returned
    by the authorization server.
    """

    def __init__(
        self,
        error: str,
        description: str = "",
        status_code: Optional[int] = None
    ):
        """Initialize OAuth error."""
        details: Dict[str, Any] = {"error": error}
        if description:
            details["error_description"] = description
        if status_code:
            details["status_code"] = status_code

        super().__init__(
            message=f"OAuth error: {error} - {description}",
            error_code="OAUTH_ERROR",
            details=details
        )
        self.error = error
        self.description = description


class DecodeError(PatreonError):
    """
    Raised when a payload cannot be decoded.

    This includes malformed JSON and schema mismatches. Explicit
    nulls and unknown enum values are not decode errors.
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        locations: Optional[List[str]] = None,
        payload_excerpt: Optional[str] = None
    ):
        """Initialize decode error."""
        details: Dict[str, Any] = {}
        if model:
            details["model"] = model
        if locations:
            details["locations"] = locations
        if payload_excerpt:
            details["payload_excerpt"] = payload_excerpt

        super().__init__(
            message=message,
            error_code="DECODE_ERROR",
            details=details
        )
        self.model = model
        self.locations = locations or []


class WebhookSignatureError(PatreonError):
    """
    Raised when a webhook signature does not match the body.

    Kept separate from DecodeError: a forged signature is a
    security event, a malformed body is a data-quality event.
    """

    def __init__(
        self,
        message: str = "Webhook signature validation failed",
        digest: Optional[str] = None
    ):
        """Initialize webhook signature error."""
        details = {}
        if digest:
            details["digest"] = digest

        super().__init__(
            message=message,
            error_code="WEBHOOK_SIGNATURE_INVALID",
            details=details
        )


class UnknownTriggerError(PatreonError):
    """
    Raised when a webhook arrives with a trigger this library cannot type.
    """

    def __init__(self, trigger: str):
        """Initialize unknown trigger error."""
        super().__init__(
            message=f"Unknown webhook trigger: {trigger!r}",
            error_code="UNKNOWN_TRIGGER",
            details={"trigger": trigger}
        )
        self.trigger = trigger


class MissingHeaderError(PatreonError):
    """
    Raised when a required webhook request header is absent.
    """

    def __init__(self, header: str):
        """Initialize missing header error."""
        super().__init__(
            message=f"Missing required header: {header}",
            error_code="MISSING_HEADER",
            details={"header": header}
        )
        self.header = header


class RetryExhaustedError(PatreonError):
    """
    Raised when all retry attempts are exhausted.

    This indicates that an operation failed repeatedly
    despite retry attempts.
    """

    def __init__(
        self,
        message: str,
        attempts: Optional[int] = None,
        last_error: Optional[Exception] = None
    ):
        """Initialize retry exhausted error."""
        details = {}
        if attempts:
            details["attempts"] = attempts
        if last_error:
            details["last_error_type"] = type(last_error).__name__
            details["last_error_message"] = str(last_error)

        super().__init__(
            message=message,
            error_code="RETRY_EXHAUSTED_ERROR",
            details=details
        )
        self.attempts = attempts
        self.last_error = last_error
