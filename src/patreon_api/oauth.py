"""
OAuth2 client for the Patreon authorization flow.

Builds the authorization URL users are sent to, exchanges the returned
code for tokens and refreshes expired tokens. Endpoint URLs are passed
in at construction; ``from_settings`` reads them from configuration.

Documentation: https://docs.patreon.com/#oauth
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

import httpx
from pydantic import BaseModel, Field

from .models.decoding import NullInt, NullStr, decode_json
from .utils.exceptions import APIError, ConfigurationError, DecodeError, OAuthError, RetryExhaustedError
from .utils.logger import api_logger, get_logger
from .utils.retry import RetryConfig, api_retry, retry_with_backoff


class OAuthScopes:
    """Scope names accepted by the authorization endpoint."""

    IDENTITY = "identity"
    IDENTITY_EMAIL = "identity[email]"
    IDENTITY_MEMBERSHIPS = "identity.memberships"
    CAMPAIGNS = "campaigns"
    CAMPAIGNS_MEMBERS = "campaigns.members"
    CAMPAIGNS_MEMBERS_EMAIL = "campaigns.members[email]"
    CAMPAIGNS_MEMBERS_ADDRESS = "campaigns.members.address"
    CAMPAIGNS_POSTS = "campaigns.posts"
    CAMPAIGNS_WEBHOOK = "w:campaigns.webhook"


scopes = OAuthScopes


class TokenResponse(BaseModel):
    """Token endpoint success body."""

    access_token: str = Field(..., description="Access token")
    refresh_token: NullStr = Field("", description="Refresh token")
    expires_in: NullInt = Field(0, description="Lifetime in seconds")
    token_type: NullStr = Field("", description="Token type, normally Bearer")
    scope: NullStr = Field("", description="Granted scopes, space separated")
    version: Optional[str] = Field(None, description="Token version")

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "allow"


class OAuthToken(BaseModel):
    """Token pair with an absolute expiry."""

    access_token: str
    refresh_token: str
    expires_at: datetime
    token_type: str
    scope: str

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def from_response(cls, response: TokenResponse, now: Optional[datetime] = None) -> "OAuthToken":
        """Compute ``expires_at`` from ``expires_in`` once, at receipt."""
        issued_at = now or datetime.now(timezone.utc)
        return cls(
            access_token=response.access_token,
            refresh_token=response.refresh_token,
            expires_at=issued_at + timedelta(seconds=response.expires_in),
            token_type=response.token_type,
            scope=response.scope,
        )

    @property
    def scopes(self) -> list[str]:
        """Granted scopes as a list."""
        return self.scope.split()


class OAuthErrorResponse(BaseModel):
    """Token endpoint error body."""

    error: str
    error_description: NullStr = ""

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "allow"


class OAuthClient:
    """
    Async client for the Patreon OAuth2 endpoints.

    Provides the authorization URL and token exchange/refresh calls.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        authorize_url: str,
        token_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        """
        Initialize the OAuth client.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            redirect_uri: Redirect URI registered for the client
            authorize_url: Authorization endpoint
            token_url: Token endpoint
            timeout: Request timeout in seconds
            http_client: Shared HTTP client; one is created per call if omitted
            retry_config: Retry policy for token requests; api_retry preset by default
        """
        if not client_id or not client_secret:
            raise ConfigurationError("OAuth client id and secret are required", config_key="client_id")

        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.timeout = timeout
        self._http_client = http_client
        self._post_token = (
            retry_with_backoff(retry_config)(self._post_token_once) if retry_config is not None else api_retry(self._post_token_once)
        )
        self.logger = get_logger(__name__)

        self.logger.info(
            "OAuth client initialized",
            extra={"token_url": token_url, "redirect_uri": redirect_uri},
        )

    @classmethod
    def from_settings(cls, settings=None, **kwargs) -> "OAuthClient":
        """Create a client from Settings (the global settings by default)."""
        if settings is None:
            from .config.settings import settings
        values: Dict[str, Any] = {
            "authorize_url": settings.oauth_authorize_url,
            "token_url": settings.oauth_token_url,
            "timeout": settings.request_timeout,
            "retry_config": RetryConfig.from_settings(settings),
        }
        values.update(kwargs)
        return cls(settings.client_id, settings.client_secret, settings.redirect_uri, **values)

    @asynccontextmanager
    async def get_client(self):
        """Async context manager for HTTP client."""
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    def authorization_url(self, scopes: Iterable[str], state: Optional[str] = None) -> str:
        """
        Build the URL the user visits to authorize this client.

        Args:
            scopes: Requested scopes
            state: Opaque value echoed back to the redirect URI

        Returns:
            Authorization URL
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        }
        scope = " ".join(scopes)
        if scope:
            params["scope"] = scope
        if state:
            params["state"] = state
        return str(httpx.URL(self.authorize_url, params=params))

    async def exchange_code(self, code: str) -> OAuthToken:
        """
        Exchange an authorization code for tokens.

        Raises:
            OAuthError: If the token endpoint rejects the code
            APIError: If the request fails or the error body is unreadable
            DecodeError: If the success body is malformed
        """
        return await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
            }
        )

    async def refresh_token(self, refresh_token: str) -> OAuthToken:
        """
        Get a fresh token pair from a refresh token.

        Raises:
            OAuthError: If the token endpoint rejects the refresh token
            APIError: If the request fails or the error body is unreadable
            DecodeError: If the success body is malformed
        """
        return await self._token_request(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            }
        )

    async def _token_request(self, form: Dict[str, str]) -> OAuthToken:
        try:
            response = await self._post_token(form)
        except RetryExhaustedError as e:
            raise e.last_error

        if response.is_success:
            token = OAuthToken.from_response(decode_json(response.content, TokenResponse))
            self.logger.info(
                "OAuth token obtained",
                extra={"grant_type": form["grant_type"], "scope": token.scope, "expires_at": token.expires_at.isoformat()},
            )
            return token

        try:
            error = decode_json(response.content, OAuthErrorResponse)
        except DecodeError:
            raise APIError(
                f"Token endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
                endpoint=self.token_url,
            ) from None

        self.logger.warning(
            "OAuth token request rejected",
            extra={"grant_type": form["grant_type"], "oauth_error": error.error, "status_code": response.status_code},
        )
        raise OAuthError(error.error, error.error_description, status_code=response.status_code)

    async def _post_token_once(self, form: Dict[str, str]) -> httpx.Response:
        api_logger.log_request("POST", self.token_url)
        try:
            async with self.get_client() as client:
                response = await client.post(self.token_url, data=form)
        except httpx.RequestError as e:
            api_logger.log_error("POST", self.token_url, e)
            raise APIError(f"Token request failed: {e}", endpoint=self.token_url) from e

        api_logger.log_response("POST", self.token_url, response.status_code)
        if response.status_code >= 500:
            raise APIError(
                f"Token endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
                endpoint=self.token_url,
            )
        return response
