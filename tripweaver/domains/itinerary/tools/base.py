"""Base classes and utilities for external provider clients."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from tripweaver.core.config import settings

logger = logging.getLogger(__name__)


class ToolError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, tool_name: str, details: dict | None = None):
        self.message = message
        self.tool_name = tool_name
        self.details = details or {}
        super().__init__(self.message)


class APIClientError(ToolError):
    """Exception for API client errors."""

    pass


class RateLimitError(ToolError):
    """Exception for rate limit errors."""

    pass


class AuthenticationError(ToolError):
    """Exception for authentication errors."""

    pass


class ProviderTimeoutError(ToolError):
    """Exception for provider calls that exceeded their time budget."""

    pass


class BaseAsyncAPIClient(ABC):
    """Base class for async API clients with common functionality."""

    #: Name used in logs and tool health tracking
    tool_name: str = "provider"

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.PROVIDER_TIMEOUT_SECONDS
        self.max_retries = max_retries or settings.PROVIDER_MAX_RETRIES
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        """Whether credentials are present. Unconfigured clients are skipped."""
        return True

    async def __aenter__(self) -> "BaseAsyncAPIClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=await self._get_headers(),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests. Override in subclasses."""
        pass

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json_data: dict | None = None,
        **kwargs: Any,
    ) -> Any:
        """Make an async HTTP request with retry logic."""
        if not self._client:
            raise APIClientError(
                "Client not initialized. Use async context manager.",
                tool_name=self.tool_name,
            )

        url = f"{endpoint}" if endpoint.startswith("/") else f"/{endpoint}"
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await self._client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json_data,
                    **kwargs,
                )

                if response.status_code in (401, 403):
                    raise AuthenticationError(
                        "Authentication failed",
                        tool_name=self.tool_name,
                        details={"status_code": response.status_code},
                    )

                if response.status_code == 429:
                    raise RateLimitError(
                        "Rate limit exceeded",
                        tool_name=self.tool_name,
                    )

                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                last_error = APIClientError(
                    f"HTTP error: {e.response.status_code}",
                    tool_name=self.tool_name,
                    details={"status_code": e.response.status_code},
                )
                if e.response.status_code < 500:
                    raise last_error
                logger.warning(f"{self.tool_name} attempt {attempt + 1}/{self.max_retries} failed: {e}")

            except httpx.TimeoutException as e:
                last_error = ProviderTimeoutError(
                    f"Request timed out: {str(e)}",
                    tool_name=self.tool_name,
                )
                logger.warning(f"{self.tool_name} attempt {attempt + 1}/{self.max_retries} timed out")

            except httpx.RequestError as e:
                last_error = APIClientError(
                    f"Request error: {str(e)}",
                    tool_name=self.tool_name,
                )
                logger.warning(f"{self.tool_name} attempt {attempt + 1}/{self.max_retries} failed: {e}")

            except ValueError as e:
                raise APIClientError(
                    f"Invalid JSON response: {str(e)}",
                    tool_name=self.tool_name,
                )

        if last_error:
            raise last_error
        raise APIClientError(
            "Max retries exceeded",
            tool_name=self.tool_name,
        )

    async def get(
        self, endpoint: str, params: dict | None = None, **kwargs: Any
    ) -> Any:
        """Make an async GET request."""
        return await self._request("GET", endpoint, params=params, **kwargs)

    async def post(
        self,
        endpoint: str,
        json_data: dict | None = None,
        params: dict | None = None,
        **kwargs: Any,
    ) -> Any:
        """Make an async POST request."""
        return await self._request(
            "POST", endpoint, params=params, json_data=json_data, **kwargs
        )
