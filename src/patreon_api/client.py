"""
Async client for Patreon API v2 resource endpoints.

The client knows how to perform an authorised GET and decode the
JSON:API document it returns. Endpoint paths, ``include`` and
``fields[...]`` parameters are the caller's business; the base URL is
passed in at construction rather than hard-coded.
"""

import time
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from .config.settings import DEFAULT_API_BASE_URL
from .models.decoding import decode_json
from .models.response import ApiErrorResponse, ApiResponse, decode_document
from .utils.exceptions import APIError, ConfigurationError, DecodeError, RetryExhaustedError
from .utils.logger import api_logger, get_logger
from .utils.retry import RetryConfig, api_retry, retry_with_backoff

USER_AGENT = "patreon-api-python"


class AsyncPatreonClient:
    """
    Async client for fetching Patreon API documents.

    Usage:
        async with AsyncPatreonClient(token) as client:
            doc = await client.get_document("identity", attributes_cls=UserAttributes)
    """

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        """
        Initialize the client.

        Args:
            access_token: OAuth access token
            base_url: API root, e.g. https://www.patreon.com/api/oauth2/v2
            timeout: Request timeout in seconds
            http_client: Shared HTTP client; owned clients are created otherwise
            retry_config: Retry policy for GET requests; api_retry preset by default
        """
        if not access_token:
            raise ConfigurationError("Access token is required", config_key="access_token")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "User-Agent": USER_AGENT,
        }
        self._http_client = http_client
        self._owns_client = False
        self._get = (
            retry_with_backoff(retry_config)(self._get_once) if retry_config is not None else api_retry(self._get_once)
        )
        self.logger = get_logger(__name__)

        self.logger.info(
            "Patreon client initialized",
            extra={"base_url": self.base_url, "timeout": timeout},
        )

    @classmethod
    def from_settings(cls, access_token: str, settings=None, **kwargs) -> "AsyncPatreonClient":
        """Create a client from Settings (the global settings by default)."""
        if settings is None:
            from .config.settings import settings
        values: Dict[str, Any] = {
            "base_url": settings.api_base_url,
            "timeout": settings.request_timeout,
            "retry_config": RetryConfig.from_settings(settings),
        }
        values.update(kwargs)
        return cls(access_token, **values)

    async def __aenter__(self):
        """Async context manager entry."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_client = False

    def build_url(self, path: str) -> str:
        """Resolve ``path`` against the base URL; absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get_document(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        attributes_cls: Optional[type[BaseModel]] = None,
        many: bool = False,
    ) -> ApiResponse:
        """
        Fetch and decode a JSON:API document.

        Args:
            path: Endpoint path relative to the base URL, or an absolute URL
            params: Query parameters such as ``include`` or ``fields[member]``
            attributes_cls: Attribute model of the primary data
            many: Whether the endpoint returns a list

        Returns:
            Decoded document

        Raises:
            APIError: On transport failure or a non-2xx status
            DecodeError: If the body does not match the expected document
        """
        url = self.build_url(path)
        try:
            response = await self._get(url, params)
        except RetryExhaustedError as e:
            raise e.last_error

        document = decode_document(response.content, attributes_cls, many)
        self.logger.debug(
            "Document decoded",
            extra={"url": url, "included_count": len(document.included)},
        )
        return document

    async def get_next_page(
        self,
        document: ApiResponse,
        attributes_cls: Optional[type[BaseModel]] = None,
        many: bool = True,
    ) -> Optional[ApiResponse]:
        """Follow ``links.next`` of a paginated document, or return None on the last page."""
        if not document.has_next_page:
            return None
        return await self.get_document(document.links.next, attributes_cls=attributes_cls, many=many)

    async def _get_once(self, url: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        if self._http_client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await self._send(client, url, params)
        return await self._send(self._http_client, url, params)

    async def _send(self, client: httpx.AsyncClient, url: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        api_logger.log_request("GET", url, params)
        started = time.monotonic()
        try:
            response = await client.get(url, params=params, headers=self.headers)
        except httpx.RequestError as e:
            api_logger.log_error("GET", url, e)
            raise APIError(f"Request to {url} failed: {e}", endpoint=url) from e

        elapsed_ms = (time.monotonic() - started) * 1000
        api_logger.log_response("GET", url, response.status_code, elapsed_ms)

        if not response.is_success:
            raise self._error_from_response(url, response)
        return response

    def _error_from_response(self, url: str, response: httpx.Response) -> APIError:
        try:
            body = decode_json(response.content, ApiErrorResponse)
        except DecodeError:
            body = ApiErrorResponse()

        self.logger.error(
            f"Patreon API returned HTTP {response.status_code}",
            extra={"url": url, "status_code": response.status_code, "error_count": len(body.errors)},
        )
        return APIError(
            f"Patreon API error {response.status_code}: {body.summary()}",
            status_code=response.status_code,
            errors=[error.model_dump() for error in body.errors],
            endpoint=url,
        )
