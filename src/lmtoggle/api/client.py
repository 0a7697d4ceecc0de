#!/usr/bin/env python3
"""HTTP Client for the LogicMonitor REST API.

This module provides a reusable HTTP client that handles the common
concerns of LogicMonitor API communication:

    - LMv1 request signing via RequestSigner (fresh signature per request)
    - Offset-based pagination with configurable page sizes
    - Connection pooling via a shared aiohttp session
    - Bounded per-request timeouts
    - Comprehensive error handling with typed exceptions

Design Philosophy:
    This client knows HOW to talk to LogicMonitor, but not WHAT to fetch.
    It has no knowledge of devices, datasources or instances. That
    knowledge belongs in the adapters that compose this client.

    Requests are issued one at a time and never retried: a failed listing
    surfaces to the caller immediately, and the caller decides whether the
    failure is terminal (listing) or isolated (one instance update).

Usage:
    async with LMClient(credentials) as client:
        data = await client.get("/device/devices/42/devicedatasources")

        async for page in client.paginate("/device/devices/42/devicedatasources"):
            for item in page:
                process(item)

        modules = await client.fetch_all(
            "/device/devices/42/devicedatasources",
            config=PaginationConfig(page_size=500),
        )
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional

import aiohttp
from yarl import URL

from .auth import Credentials, RequestSigner
from .error_sanitizer import get_sanitizer
from .exceptions import (
    APIError,
    ConfigurationError,
    ConnectionError,
    InvalidCredentialsError,
    LMError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

DEFAULT_DOMAIN = "logicmonitor.com"
API_VERSION = "3"


@dataclass
class PaginationConfig:
    """Configuration for paginated API requests.

    Attributes:
        page_size: Number of items per request (the portal caps this at 1000)
        delay_between_pages: Seconds to wait between requests
        max_pages: Safety limit to prevent runaway loops (None = no limit)
    """
    page_size: int = 1000
    delay_between_pages: float = 0.0
    max_pages: Optional[int] = None


# ============================================
# The Client
# ============================================

class LMClient:
    """Async HTTP client for the LogicMonitor REST API.

    Use as an async context manager to ensure proper session lifecycle:

        async with LMClient(credentials) as client:
            data = await client.get("/device/devices/1")

    Attributes:
        credentials: Credentials for LMv1 signing
        base_url: API root, e.g. "https://acme.logicmonitor.com/santaba/rest"
        timeout: Total per-request timeout in seconds
    """

    def __init__(
        self,
        credentials: Credentials,
        domain: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        connect_timeout: float = 10.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize the LMClient.

        Args:
            credentials: Access id, access key and account name
            domain: Portal domain (default: logicmonitor.com)
            base_url: Full API root; overrides account name and domain
            timeout: Total per-request timeout in seconds
            connect_timeout: Connection timeout in seconds
            clock: Time source for request signatures (default: time.time)

        Raises:
            ConfigurationError: If neither base_url nor an account name is set.
        """
        self.credentials = credentials
        self.signer = RequestSigner(credentials, clock=clock)
        self.timeout = timeout
        self.connect_timeout = connect_timeout

        if base_url:
            self.base_url = base_url.rstrip("/")
        elif credentials.account_name:
            self.base_url = (
                f"https://{credentials.account_name}.{domain or DEFAULT_DOMAIN}/santaba/rest"
            )
        else:
            raise ConfigurationError(
                "Account name is required to build the API URL.",
                missing_keys=["LM_ACCOUNT_NAME"],
            )

        self._session: Optional[aiohttp.ClientSession] = None

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "LMClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=1),
            timeout=aiohttp.ClientTimeout(
                total=self.timeout,
                connect=self.connect_timeout,
            ),
        )
        logger.debug(
            f"Opened session to {self.base_url} "
            f"(access_id={self.credentials.access_id}, "
            f"key_id={self.credentials.access_key.key_id})"
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ----------------------------------------
    # Request Construction
    # ----------------------------------------

    def build_url(self, resource_path: str, params: Optional[dict] = None) -> URL:
        """Build the request URL without re-encoding query values.

        Query values are joined verbatim; values that need percent-encoding
        (filter expressions) must already be encoded by the caller.
        """
        url = f"{self.base_url}{resource_path}"
        if params:
            query = "&".join(
                f"{key}={value}" for key, value in params.items() if value is not None
            )
            if query:
                url = f"{url}?{query}"
        return URL(url, encoded=True)

    def build_headers(self, method: str, resource_path: str, body: str = "") -> dict[str, str]:
        """Signed headers for a single request."""
        return {
            "Authorization": self.signer.authorization_header(method, resource_path, body),
            "X-Version": API_VERSION,
            "Content-Type": "application/json",
        }

    # ----------------------------------------
    # Low-Level Request Method
    # ----------------------------------------

    async def _request(
        self,
        method: str,
        resource_path: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a single signed HTTP request.

        The body is serialized once, and the same string is both signed and
        sent, so the portal recomputes an identical signature.

        Args:
            method: HTTP method (GET, PATCH)
            resource_path: Path below /santaba/rest (e.g. "/device/devices")
            params: Query parameters
            json_body: JSON request body (for PATCH)

        Returns:
            Parsed JSON response as dict

        Raises:
            APIError: If response status is not 2xx
            InvalidCredentialsError: If the signature is rejected
            RuntimeError: If called outside of async context manager
            ConnectionError: If connection to server fails
            TimeoutError: If request times out
        """
        if not self._session:
            raise RuntimeError(
                "LMClient must be used as async context manager: "
                "async with LMClient(...) as client:"
            )

        body = json.dumps(json_body) if json_body is not None else ""
        url = self.build_url(resource_path, params)

        try:
            headers = self.build_headers(method, resource_path, body)

            async with self._session.request(
                method=method,
                url=url,
                headers=headers,
                data=body.encode("utf-8") if body else None,
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    raise self._create_api_error(
                        status=response.status,
                        method=method,
                        endpoint=resource_path,
                        response_body=error_text,
                    )

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    error_text = await response.text()
                    raise APIError(
                        f"{method} {resource_path} returned a non-JSON body",
                        status_code=response.status,
                        endpoint=resource_path,
                        method=method,
                        response_body=get_sanitizer().sanitize(error_text).sanitized_message,
                        cause=e,
                    )
                return data or {}

        except LMError:
            raise

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"{method} {resource_path} timed out",
                timeout_seconds=self.timeout,
                cause=e,
            )

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {self.base_url}",
                host=self.base_url,
                cause=e,
            )

        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during {method} {resource_path}: {e}",
                cause=e,
            )

    def _create_api_error(
        self,
        status: int,
        method: str,
        endpoint: str,
        response_body: str,
    ) -> LMError:
        """Create the appropriate exception for an error status code."""
        safe_body = get_sanitizer().sanitize(response_body).sanitized_message if response_body else None

        if status in (401, 403):
            return InvalidCredentialsError(
                f"Request signature rejected for {method} {endpoint}",
                status_code=status,
                details={"endpoint": endpoint},
            )

        if status == 404:
            return NotFoundError(
                resource_type="Resource",
                resource_id=endpoint,
                endpoint=endpoint,
                method=method,
                response_body=safe_body,
            )

        if status == 429:
            return RateLimitError(
                f"Rate limit exceeded for {endpoint}",
                endpoint=endpoint,
                method=method,
                response_body=safe_body,
            )

        if status in (400, 422):
            return ValidationError(
                f"Validation failed for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                method=method,
                response_body=safe_body,
            )

        if status >= 500:
            return ServerError(
                f"Server error ({status}) for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                method=method,
                response_body=safe_body,
            )

        return APIError(
            f"{method} {endpoint} failed",
            status_code=status,
            endpoint=endpoint,
            method=method,
            response_body=safe_body,
        )

    # ----------------------------------------
    # High-Level Request Methods
    # ----------------------------------------

    async def get(
        self,
        resource_path: str,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a signed GET request."""
        return await self._request("GET", resource_path, params=params)

    async def patch(
        self,
        resource_path: str,
        json_body: dict,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a signed PATCH request.

        Args:
            resource_path: Path below /santaba/rest
            json_body: Request body as dict (serialized and signed)
            params: Query parameters

        Returns:
            Parsed JSON response (the updated resource)
        """
        return await self._request("PATCH", resource_path, params=params, json_body=json_body)

    # ----------------------------------------
    # Response Shape Helpers
    # ----------------------------------------

    @staticmethod
    def extract_items(data: dict[str, Any]) -> list[dict]:
        """Read the item list from a top-level or data-wrapped response."""
        if "items" in data:
            return data.get("items") or []
        nested = data.get("data")
        if isinstance(nested, dict):
            return nested.get("items") or []
        return []

    @staticmethod
    def extract_total(data: dict[str, Any], default: int = 0) -> int:
        """Read the server-reported total from either response shape."""
        if "total" in data:
            return int(data["total"])
        nested = data.get("data")
        if isinstance(nested, dict) and "total" in nested:
            return int(nested["total"])
        return default

    # ----------------------------------------
    # Pagination Methods
    # ----------------------------------------

    async def paginate(
        self,
        resource_path: str,
        config: Optional[PaginationConfig] = None,
        params: Optional[dict] = None,
    ) -> AsyncIterator[list[dict]]:
        """Iterate through a paginated collection, sorted by id.

        Pages are requested with offset/size until the number of items
        received reaches the server-reported total. The portal caps the page
        size, so a short page advances the offset by the number of items
        actually received. An empty page before the total is reached raises
        APIError. Any request error propagates; pages already yielded are the
        caller's responsibility to discard.

        Args:
            resource_path: Path below /santaba/rest
            config: Pagination configuration (page size, delay, etc.)
            params: Additional query parameters

        Yields:
            List of items from each page
        """
        config = config or PaginationConfig()
        params = dict(params or {})
        params.setdefault("sort", "id")

        offset = 0
        total: Optional[int] = None
        fetched_count = 0
        pages_fetched = 0

        while True:
            page_params = {**params, "offset": offset, "size": config.page_size}
            data = await self.get(resource_path, params=page_params)
            items = self.extract_items(data)

            if total is None:
                logger.info(
                    f"Paginating {resource_path}: "
                    f"{self.extract_total(data, default=len(items)):,} total items"
                )
            total = self.extract_total(data, default=fetched_count + len(items))

            if items:
                yield items

            pages_fetched += 1
            fetched_count += len(items)
            logger.debug(f"Progress: {fetched_count:,}/{total:,}")

            if total >= 0 and fetched_count >= total:
                break
            if not items:
                if total >= 0:
                    raise APIError(
                        f"{resource_path} returned an empty page after "
                        f"{fetched_count:,} of {total:,} items",
                        status_code=200,
                        endpoint=resource_path,
                    )
                break
            if len(items) < config.page_size:
                if total < 0:
                    break
                logger.debug(
                    f"Short page from {resource_path}: {len(items):,} of "
                    f"{config.page_size:,} requested, continuing at offset {offset + len(items):,}"
                )
            if config.max_pages and pages_fetched >= config.max_pages:
                logger.info(f"Reached max_pages limit ({config.max_pages})")
                break

            offset += len(items)

            if config.delay_between_pages > 0:
                await asyncio.sleep(config.delay_between_pages)

        logger.info(f"Pagination complete: {fetched_count:,} items in {pages_fetched} pages")

    async def fetch_all(
        self,
        resource_path: str,
        config: Optional[PaginationConfig] = None,
        params: Optional[dict] = None,
    ) -> list[dict]:
        """Fetch every item of a paginated collection.

        Returns:
            List of all items across all pages, in id order
        """
        all_items = []
        async for page in self.paginate(resource_path, config, params):
            all_items.extend(page)
        return all_items
