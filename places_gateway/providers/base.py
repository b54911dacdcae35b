"""Place Provider Adapter Base Class.

This module defines the abstract interface that all place data providers must
implement. Each adapter fetches raw upstream payloads and maps them to the
unified place schema, so route handlers never deal with provider-specific
field names.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10

SORT_DISTANCE = "distance"
SORT_LEAST_EXPENSIVE = "least_expensive"
SORT_MOST_REVIEWED = "most_reviewed"


@dataclass
class PlaceRaw:
    """Raw place data from a provider.

    The structure varies by provider, so the payload is stored as a dict.
    """

    source: str  # Provider name ("google" or "yelp")
    payload: dict[str, Any]  # One place object from the upstream response
    provider_place_id: Optional[str] = None  # Google place_id or Yelp business id


class PlaceAdapter(ABC):
    """Abstract base class for place provider adapters.

    All place providers implement this interface. This ensures:
    - The same request/response handling across providers (one attempt per call)
    - Upstream failures always surface as ProviderError
    - Search and details results share the unified place schema

    Usage:
        class MyProviderAdapter(PlaceAdapter):
            def __init__(self, api_key: str):
                super().__init__(source_name="my_provider", api_key=api_key, base_url="https://...")

            def search(self, query):
                ...

            def details(self, query):
                ...
    """

    required_fields = {"source", "id", "name", "price", "rating", "review_count", "distance"}

    def __init__(
        self,
        source_name: str,
        api_key: Optional[str],
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        api_key_env: str = "API_KEY",
    ):
        """Initialize the adapter.

        Args:
            source_name: Unique identifier for this provider ("google", "yelp")
            api_key: Provider API key
            base_url: Provider API base URL (no trailing slash needed)
            timeout: Request timeout in seconds
            api_key_env: Environment variable the key is read from (for error messages)

        Raises:
            ValueError: If no API key is available
        """
        if not api_key:
            raise ValueError(
                f"{api_key_env} must be set in environment or passed as parameter"
            )

        self.source_name = source_name
        self.api_key = api_key
        self.api_key_env = api_key_env
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_call_count = 0

    @abstractmethod
    def search(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        """Search places near a coordinate.

        Args:
            query: Validated search payload with keys term, latitude, longitude,
                   category, sort, price, min_rating, open_now

        Returns:
            List of search results filtered by min_rating and sorted by `sort`

        Raises:
            ProviderError: If the upstream call fails
        """

    @abstractmethod
    def details(self, query: dict[str, Any]) -> dict[str, Any]:
        """Fetch one place's details.

        Args:
            query: Validated details payload with keys id, latitude, longitude

        Returns:
            Unified place details (including normalized hours)

        Raises:
            ProviderError: If the upstream call fails
        """

    @abstractmethod
    def map_search_result(self, raw: PlaceRaw, latitude: float, longitude: float) -> dict[str, Any]:
        """Map one provider search result to the unified search schema."""

    @abstractmethod
    def map_to_common(self, raw: PlaceRaw, latitude: float, longitude: float) -> dict[str, Any]:
        """Map a provider details payload to the unified details schema."""

    def _check_response(self, response: requests.Response, data: Any) -> None:
        """Raise ProviderError if the response does not represent success.

        The default checks the HTTP status and that the body is a JSON object;
        providers that report errors inside a 200 body override this.
        """
        if response.status_code != 200 or not isinstance(data, dict):
            raise ProviderError.from_payload(response.status_code, data)

    def _get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        raw: bool = False,
    ) -> Any:
        """Make exactly one GET request to the provider.

        Args:
            url: Absolute request URL
            params: Query parameters
            headers: Request headers
            raw: Return the response object instead of the decoded JSON body

        Returns:
            Decoded JSON body, or the response itself when raw=True

        Raises:
            ProviderError: On network errors, HTTP errors or provider error payloads
        """
        self.api_call_count += 1

        logger.debug(
            "Making provider API call",
            extra={
                "source": self.source_name,
                "url": url,
                "params": _redact(params),
                "call_count": self.api_call_count,
            },
        )

        try:
            response = requests.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            logger.error(
                "Provider request failed",
                extra={
                    "source": self.source_name,
                    "url": url,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise ProviderError.from_exception(exc) from exc

        if raw:
            if response.status_code != 200:
                error = ProviderError.from_response(response)
                self._log_error_response(url, response, error)
                raise error
            return response

        try:
            data = response.json()
        except ValueError:
            data = None

        try:
            self._check_response(response, data)
        except ProviderError as error:
            self._log_error_response(url, response, error)
            raise

        logger.info(
            "Provider API call successful",
            extra={
                "source": self.source_name,
                "url": url,
                "status_code": response.status_code,
                "total_api_calls": self.api_call_count,
            },
        )

        return data

    def _log_error_response(self, url: str, response: requests.Response, error: ProviderError) -> None:
        logger.error(
            "Provider returned an error",
            extra={
                "source": self.source_name,
                "url": url,
                "status_code": response.status_code,
                "error_status": error.status,
                "error_description": error.description,
            },
        )

    @staticmethod
    def filter_by_rating(places: list[PlaceRaw], min_rating: float) -> list[PlaceRaw]:
        """Keep places whose raw rating is at least min_rating; unrated places are dropped."""
        return [
            place
            for place in places
            if isinstance(place.payload.get("rating"), (int, float))
            and place.payload["rating"] >= min_rating
        ]

    @staticmethod
    def sort_results(results: list[dict[str, Any]], sort: str) -> list[dict[str, Any]]:
        """Order search results.

        - most_reviewed: review_count descending
        - least_expensive: price then distance ascending
        - distance (default): distance ascending

        Sorting is stable, so ties keep the provider's order.
        """
        if sort == SORT_MOST_REVIEWED:
            return sorted(results, key=lambda result: result["review_count"], reverse=True)
        if sort == SORT_LEAST_EXPENSIVE:
            return sorted(results, key=lambda result: (result["price"], result["distance"]))
        return sorted(results, key=lambda result: result["distance"])

    def validate_common_format(self, data: dict[str, Any]) -> bool:
        """Check that a mapped result has every required unified field."""
        return all(field in data for field in self.required_fields)

    def __repr__(self) -> str:
        """String representation of the adapter."""
        return (
            f"{self.__class__.__name__}(source='{self.source_name}', "
            f"api_calls={self.api_call_count})"
        )


def _redact(params: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if not params or "key" not in params:
        return params
    return {**params, "key": "***"}
