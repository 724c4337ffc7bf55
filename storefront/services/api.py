"""
REST API client.

Thin wrapper over a shared httpx.AsyncClient that turns every outcome into an
ApiResponse. Transport errors, non-JSON bodies and error statuses come back as
`success=False` instead of raising, so callers only ever branch on the flag.
"""
from typing import Any, Optional

import httpx

from storefront import config
from storefront.config import StorageKeys
from storefront.db import KeyValueStore
from storefront.errors import ERROR_INVALID_JSON, ERROR_INVALID_REQUEST, ERROR_NETWORK, ERROR_REQUEST_FAILED
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.services.models import ApiResponse

logger = get_logger(__name__)


class ApiClient:
    """HTTP client for the storefront backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        store: Optional[KeyValueStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.store = store

        # HTTP client (lazy init)
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(config.REQUEST_TIMEOUT, connect=5.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_token(self) -> Optional[str]:
        """Session token saved at login, if any."""
        if self.store is None:
            return None
        try:
            return await self.store.get(StorageKeys.USER_TOKEN)
        except Exception as e:
            logger.warning("Failed to read session token: %s", type(e).__name__)
            return None

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        """
        Perform an API call.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL
            json: Optional JSON body

        Returns:
            ApiResponse with the parsed body as `data` on success
        """
        url = f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json"}
        token = await self._get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            client = await self._get_http_client()
            response = await client.request(method, url, headers=headers, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, endpoint, type(e).__name__)
            return ApiResponse.fail(str(e) or ERROR_NETWORK)
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            # Bad URL or a header value httpx cannot encode (e.g. a corrupted token)
            logger.warning("%s %s could not be sent: %s", method, endpoint, type(e).__name__)
            return ApiResponse.fail(ERROR_INVALID_REQUEST)

        # Empty body (204 etc.) is a success without data
        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError:
                logger.warning(
                    "%s %s returned non-JSON body (status %s)", method, endpoint, response.status_code
                )
                return ApiResponse.fail(ERROR_INVALID_JSON)

        raw_message = data.get("message") if isinstance(data, dict) else None
        message = str(raw_message) if raw_message else None

        if response.is_error:
            error = message or f"HTTP {response.status_code}: {response.reason_phrase}"
            logger.warning(
                "%s %s returned %s: %s",
                method,
                endpoint,
                response.status_code,
                sanitize_string_for_logging(error),
            )
            return ApiResponse.fail(error)

        # 2xx with an explicit failure flag in the envelope
        if isinstance(data, dict) and data.get("success") is False:
            error = message or str(data.get("error") or ERROR_REQUEST_FAILED)
            logger.warning("%s %s reported failure: %s", method, endpoint, sanitize_string_for_logging(error))
            return ApiResponse(success=False, data=data, message=message, error=error)

        return ApiResponse(success=True, data=data, message=message)
