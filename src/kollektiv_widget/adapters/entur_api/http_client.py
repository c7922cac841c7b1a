"""HTTP client for Entur API requests."""

import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from kollektiv_widget.adapters.api_rate_limiter import ApiRateLimiter
from kollektiv_widget.adapters.api_request_logger import log_api_request
from kollektiv_widget.adapters.entur_api.constants import (
    CLIENT_NAME_HEADER,
    DEFAULT_HEADERS,
    GEOCODER_SEARCH_URL,
    JOURNEY_PLANNER_URL,
)

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientResponse, ClientSession


class EnturApiError(RuntimeError):
    """Raised when Entur answers with an error status or GraphQL errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EnturHttpClient:
    """HTTP client for the Entur journey planner (GraphQL) and geocoder."""

    def __init__(
        self,
        session: "ClientSession",
        client_name: str,
        timeout_seconds: float = 10,
        min_delay_seconds: float = 0.0,
        journey_planner_url: str = JOURNEY_PLANNER_URL,
        geocoder_url: str = GEOCODER_SEARCH_URL,
    ) -> None:
        """Initialize the client.

        Args:
            session: Shared aiohttp session.
            client_name: Value of the ET-Client-Name header.
            timeout_seconds: Total timeout per request.
            min_delay_seconds: Minimum delay between requests to Entur.
            journey_planner_url: GraphQL endpoint.
            geocoder_url: Geocoder search endpoint.
        """
        self._session = session
        self._headers = {**DEFAULT_HEADERS, CLIENT_NAME_HEADER: client_name}
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._min_delay_seconds = min_delay_seconds
        self._journey_planner_url = journey_planner_url
        self._geocoder_url = geocoder_url
        self._rate_limiter: ApiRateLimiter | None = None

    async def _get_rate_limiter(self) -> ApiRateLimiter:
        """Get the shared rate limiter for Entur."""
        if self._rate_limiter is None:
            self._rate_limiter = await ApiRateLimiter.get_instance(
                "entur", self._min_delay_seconds
            )
        return self._rate_limiter

    async def _read_json(self, response: "ClientResponse", url: str) -> Any:
        if response.status != 200:
            error_text = await response.text()
            retry_after = response.headers.get("Retry-After")
            extra = f" [Retry-After: {retry_after}]" if retry_after else ""
            logger.warning(
                f"Entur API returned status {response.status} for {url}: "
                f"{error_text[:200] or '(empty response body)'}{extra}"
            )
            raise EnturApiError(
                f"Entur API returned status {response.status}", status_code=response.status
            )
        return await response.json()

    async def graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a journey planner GraphQL query.

        Returns:
            The ``data`` object of the response.

        Raises:
            EnturApiError: On non-200 responses or GraphQL errors.
        """
        payload = {"query": query, "variables": variables}
        log_api_request("POST", self._journey_planner_url, headers=self._headers, payload=payload)

        async with await self._get_rate_limiter():
            async with self._session.post(
                self._journey_planner_url,
                json=payload,
                headers=self._headers,
                timeout=self._timeout,
            ) as response:
                body = await self._read_json(response, self._journey_planner_url)

        if not isinstance(body, dict):
            raise EnturApiError("Unexpected GraphQL response shape")
        errors = body.get("errors")
        if errors:
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in errors
            )
            raise EnturApiError(f"GraphQL errors: {messages}")
        data = body.get("data")
        return data if isinstance(data, dict) else {}

    async def geocode(self, params: dict[str, str | int]) -> dict[str, Any]:
        """Run a geocoder search.

        Raises:
            EnturApiError: On non-200 responses.
        """
        log_api_request("GET", self._geocoder_url, params=params, headers=self._headers)

        async with await self._get_rate_limiter():
            async with self._session.get(
                self._geocoder_url,
                params=params,
                headers=self._headers,
                timeout=self._timeout,
            ) as response:
                body = await self._read_json(response, self._geocoder_url)

        return body if isinstance(body, dict) else {}
