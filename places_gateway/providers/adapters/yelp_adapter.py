"""
Yelp Fusion Adapter.

This adapter connects to the Yelp Fusion v3 API and maps business search,
business details and business reviews to the unified place schema.
"""

import logging
import os
from typing import Any, Optional

import requests
from dotenv import load_dotenv

from ...normalizer.converters import (
    convert_address,
    convert_categories,
    convert_clean_url,
    convert_gps_distance,
    convert_iso8601,
    convert_photos,
    convert_price_level,
    convert_services,
)
from ...normalizer.hours import HoursSource, normalize_hours
from ..base import DEFAULT_TIMEOUT_SECONDS, PlaceAdapter, PlaceRaw
from ..errors import ProviderError

# Load environment variables from .env
load_dotenv()

logger = logging.getLogger(__name__)

# Constants
DEFAULT_BASE_URL = "https://api.yelp.com/v3"
DEFAULT_API_KEY_ENV = "YELP_API_KEY"


class YelpFusionAdapter(PlaceAdapter):
    """
    Adapter for the Yelp Fusion API.

    Yelp signals errors with an "error" object in the body; a call only
    succeeds when the HTTP status is 200 and no "error" key is present.

    Environment Variables Required:
        YELP_API_KEY: Yelp Fusion API key (sent as a bearer token); another
            variable can be named with api_key_env
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        api_key_env: str = DEFAULT_API_KEY_ENV,
    ):
        """
        Initialize the Yelp Fusion adapter.

        Args:
            api_key: Yelp API key (defaults to the api_key_env variable)
            base_url: API base URL (default: https://api.yelp.com/v3)
            timeout: Request timeout in seconds
            api_key_env: Environment variable holding the key (default: YELP_API_KEY)
        """
        super().__init__(
            source_name="yelp",
            api_key=api_key or os.getenv(api_key_env),
            base_url=base_url or DEFAULT_BASE_URL,
            timeout=timeout,
            api_key_env=api_key_env,
        )

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _check_response(self, response: requests.Response, data: Any) -> None:
        if response.status_code != 200 or not isinstance(data, dict) or "error" in data:
            raise ProviderError.from_payload(response.status_code, data)

    def search(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Search businesses near a coordinate.

        Args:
            query: Validated search payload

        Returns:
            Unified search results with rating >= min_rating, sorted by `sort`
        """
        latitude = query["latitude"]
        longitude = query["longitude"]

        params = {
            "term": query["term"],
            "latitude": latitude,
            "longitude": longitude,
            "categories": ",".join(query["category"]),
            "price": ",".join(str(price) for price in sorted(query["price"])),
            "open_now": "true" if query["open_now"] else "false",
        }

        data = self._get(f"{self.base_url}/businesses/search", params=params, headers=self.headers)

        businesses = [
            PlaceRaw(source=self.source_name, payload=item, provider_place_id=item.get("id"))
            for item in data.get("businesses", [])
            if isinstance(item, dict)
        ]
        rated = self.filter_by_rating(businesses, query["min_rating"])
        results = [self.map_search_result(business, latitude, longitude) for business in rated]

        logger.info(
            "Yelp search mapped",
            extra={
                "results_returned": len(businesses),
                "results_kept": len(results),
                "sort": query["sort"],
            },
        )

        return self.sort_results(results, query["sort"])

    def details(self, query: dict[str, Any]) -> dict[str, Any]:
        """Fetch business details for a Yelp business id."""
        data = self._get(f"{self.base_url}/businesses/{query['id']}", headers=self.headers)
        raw = PlaceRaw(source=self.source_name, payload=data, provider_place_id=data.get("id"))
        return self.map_to_common(raw, query["latitude"], query["longitude"])

    def reviews(self, query: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
        """
        Fetch review excerpts for a Yelp business id.

        Returns:
            {"reviews": [{text, url, rating, time, user: {name, image_url}}, ...]}
        """
        data = self._get(f"{self.base_url}/businesses/{query['id']}/reviews", headers=self.headers)

        reviews = []
        for review in data.get("reviews", []):
            user = review.get("user") or {}
            reviews.append(
                {
                    "text": review.get("text", ""),
                    "url": convert_clean_url(review.get("url", "")),
                    "rating": review.get("rating", 0),
                    "time": convert_iso8601(review.get("time_created", "")),
                    "user": {
                        "name": user.get("name", ""),
                        "image_url": user.get("image_url", ""),
                    },
                }
            )

        return {"reviews": reviews}

    def map_search_result(self, raw: PlaceRaw, latitude: float, longitude: float) -> dict[str, Any]:
        payload = raw.payload
        coordinates = payload.get("coordinates") or {}
        place_latitude = coordinates.get("latitude", 0.0)
        place_longitude = coordinates.get("longitude", 0.0)

        return {
            "source": self.source_name,
            "id": payload.get("id", ""),
            "name": payload.get("name", ""),
            "price": convert_price_level(payload.get("price", "")),
            "rating": payload.get("rating", 1.0),
            "review_count": payload.get("review_count", 0),
            "distance": convert_gps_distance(latitude, longitude, place_latitude, place_longitude),
        }

    def map_to_common(self, raw: PlaceRaw, latitude: float, longitude: float) -> dict[str, Any]:
        """
        Map a Yelp business details payload to the unified details schema.

        Yelp returns review excerpts from a separate endpoint, so "reviews" is
        always empty here; clients call the reviews route for them.
        """
        payload = raw.payload
        coordinates = payload.get("coordinates") or {}
        place_latitude = coordinates.get("latitude", 0.0)
        place_longitude = coordinates.get("longitude", 0.0)
        location = payload.get("location") or {}

        common_data = {
            "source": self.source_name,
            "id": payload.get("id", ""),
            "name": payload.get("name", ""),
            "price": convert_price_level(payload.get("price", "")),
            "rating": payload.get("rating", 1.0),
            "review_count": payload.get("review_count", 0),
            "categories": convert_categories(payload.get("categories", [])),
            "services": convert_services(payload.get("transactions", [])),
            "address": convert_address(location.get("display_address", [])),
            "coordinates": {
                "latitude": place_latitude,
                "longitude": place_longitude,
            },
            "distance": convert_gps_distance(latitude, longitude, place_latitude, place_longitude),
            "url": convert_clean_url(payload.get("url", "")),
            "phone": {
                "display": payload.get("display_phone", ""),
                "raw": payload.get("phone", ""),
            },
            "hours": normalize_hours(payload.get("hours", []), HoursSource.YELP),
            "photos": convert_photos(payload.get("photos", [])),
            "reviews": [],
        }

        if not self.validate_common_format(common_data):
            logger.warning("Mapped data failed validation", extra={"business_id": raw.provider_place_id})

        return common_data
