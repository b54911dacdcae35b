"""
Google Places Adapter.

This adapter connects to the Google Places and Geocoding APIs and maps their
responses to the unified place schema.

Endpoints used (relative to base_url):
- place/nearbysearch/json: search
- place/details/json: details
- place/photo: photo bytes
- geocode/json: reverse geocoding
"""

import base64
import logging
import os
from typing import Any, Optional

import requests
from dotenv import load_dotenv

from ...normalizer.converters import (
    convert_address,
    convert_categories,
    convert_e164_phone,
    convert_gps_distance,
    convert_photos,
    convert_reviews,
    convert_services,
)
from ...normalizer.hours import HoursSource, normalize_hours
from ..base import DEFAULT_TIMEOUT_SECONDS, PlaceAdapter, PlaceRaw
from ..errors import ProviderError

# Load environment variables from .env
load_dotenv()

logger = logging.getLogger(__name__)

# Constants
DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api"
DEFAULT_API_KEY_ENV = "GOOGLE_API_KEY"
GEOCODE_RESULT_TYPE = "street_address"

# Address component types that never identify a geocode field
IGNORED_ADDRESS_TYPES = {"political", "sublocality", "administrative_area"}

# Keys returned by reverse geocoding
GEOCODE_KEYS = (
    "neighborhood",
    "sublocality_level_1",
    "locality",
    "administrative_area_level_1",
    "country",
)


class GooglePlacesAdapter(PlaceAdapter):
    """
    Adapter for the Google Places API.

    Google reports most errors inside a 200 response through the body "status"
    field, so a call only succeeds when both the HTTP status is 200 and
    "status" is "OK".

    Environment Variables Required:
        GOOGLE_API_KEY: Google Maps Platform API key; another
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
        Initialize the Google Places adapter.

        Args:
            api_key: Google API key (defaults to the api_key_env variable)
            base_url: API base URL (default: https://maps.googleapis.com/maps/api)
            timeout: Request timeout in seconds
            api_key_env: Environment variable holding the key (default: GOOGLE_API_KEY)
        """
        super().__init__(
            source_name="google",
            api_key=api_key or os.getenv(api_key_env),
            base_url=base_url or DEFAULT_BASE_URL,
            timeout=timeout,
            api_key_env=api_key_env,
        )

        logger.debug(
            "Google Places adapter initialized",
            extra={"source": self.source_name, "base_url": self.base_url},
        )

    def _check_response(self, response: requests.Response, data: Any) -> None:
        status = data.get("status") if isinstance(data, dict) else None
        if response.status_code != 200 or status != "OK":
            raise ProviderError.from_payload(response.status_code, data)

    def search(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Search nearby places ranked by distance.

        Args:
            query: Validated search payload

        Returns:
            Unified search results with rating >= min_rating, sorted by `sort`
        """
        latitude = query["latitude"]
        longitude = query["longitude"]
        prices = sorted(query["price"])

        params: dict[str, Any] = {
            "location": f"{latitude},{longitude}",
            "type": query["category"][0],
            "keyword": query["term"],
        }
        # Google treats the presence of "opennow" as true, whatever its value
        if query["open_now"]:
            params["opennow"] = ""
        params.update(
            {
                "minprice": prices[0],
                "maxprice": prices[-1],
                "rankby": "distance",
                "key": self.api_key,
            }
        )

        data = self._get(f"{self.base_url}/place/nearbysearch/json", params=params)

        places = [
            PlaceRaw(source=self.source_name, payload=item, provider_place_id=item.get("place_id"))
            for item in data.get("results", [])
            if isinstance(item, dict)
        ]
        rated = self.filter_by_rating(places, query["min_rating"])
        results = [self.map_search_result(place, latitude, longitude) for place in rated]

        logger.info(
            "Google search mapped",
            extra={
                "results_returned": len(places),
                "results_kept": len(results),
                "sort": query["sort"],
            },
        )

        return self.sort_results(results, query["sort"])

    def details(self, query: dict[str, Any]) -> dict[str, Any]:
        """Fetch place details for a Google place_id."""
        data = self._get(
            f"{self.base_url}/place/details/json",
            params={"place_id": query["id"], "key": self.api_key},
        )
        result = data.get("result") or {}
        raw = PlaceRaw(source=self.source_name, payload=result, provider_place_id=result.get("place_id"))
        return self.map_to_common(raw, query["latitude"], query["longitude"])

    def photo(self, query: dict[str, Any]) -> dict[str, str]:
        """
        Fetch a place photo and return it as a data URL.

        Args:
            query: Validated photo payload with reference, max_width, max_height

        Returns:
            {"data_url": "data:<content-type>;base64,<bytes>"}
        """
        response = self._get(
            f"{self.base_url}/place/photo",
            params={
                "photoreference": query["reference"],
                "maxwidth": query["max_width"],
                "maxheight": query["max_height"],
                "key": self.api_key,
            },
            raw=True,
        )

        content_type = response.headers.get("Content-Type", "").lower()
        encoded = base64.b64encode(response.content).decode("ascii")

        return {"data_url": f"data:{content_type};base64,{encoded}"}

    def geocode(self, query: dict[str, Any]) -> dict[str, str]:
        """
        Reverse geocode a coordinate into neighborhood/locality/region/country.

        Each address component is keyed by its first type once generic types
        (political, sublocality, administrative_area) are removed.
        """
        data = self._get(
            f"{self.base_url}/geocode/json",
            params={
                "latlng": f"{query['latitude']},{query['longitude']}",
                "result_type": GEOCODE_RESULT_TYPE,
                "key": self.api_key,
            },
        )

        results = data.get("results") or [{}]
        components = results[0].get("address_components", []) if isinstance(results[0], dict) else []

        address: dict[str, str] = {}
        for component in components:
            types = [t for t in component.get("types", []) if t not in IGNORED_ADDRESS_TYPES]
            if not types:
                continue
            address[types[0]] = component.get("long_name")

        return {key: address[key] for key in GEOCODE_KEYS if key in address}

    def map_search_result(self, raw: PlaceRaw, latitude: float, longitude: float) -> dict[str, Any]:
        payload = raw.payload
        location = (payload.get("geometry") or {}).get("location") or {}
        place_latitude = location.get("lat", 0)
        place_longitude = location.get("lng", 0)

        return {
            "source": self.source_name,
            "id": payload.get("place_id", ""),
            "name": payload.get("name", ""),
            "price": payload.get("price_level", 0),
            "rating": payload.get("rating", 1.0),
            "review_count": payload.get("user_ratings_total", 0),
            "distance": convert_gps_distance(latitude, longitude, place_latitude, place_longitude),
        }

    def map_to_common(self, raw: PlaceRaw, latitude: float, longitude: float) -> dict[str, Any]:
        """
        Map a Google place details result to the unified details schema.

        Args:
            raw: PlaceRaw with the details "result" object
            latitude: Requester latitude (for distance)
            longitude: Requester longitude (for distance)
        """
        payload = raw.payload
        location = (payload.get("geometry") or {}).get("location") or {}
        place_latitude = location.get("lat", 0)
        place_longitude = location.get("lng", 0)
        types = payload.get("types", [])

        common_data = {
            "source": self.source_name,
            "id": payload.get("place_id", ""),
            "name": payload.get("name", ""),
            "price": payload.get("price_level", 0),
            "rating": payload.get("rating", 1.0),
            "review_count": payload.get("user_ratings_total", 0),
            "categories": convert_categories(types),
            "services": convert_services(types),
            "address": convert_address(payload.get("formatted_address", "")),
            "coordinates": {
                "latitude": place_latitude,
                "longitude": place_longitude,
            },
            "distance": convert_gps_distance(latitude, longitude, place_latitude, place_longitude),
            "url": payload.get("url", ""),
            "phone": {
                "display": payload.get("formatted_phone_number", ""),
                "raw": convert_e164_phone(payload.get("international_phone_number", "")),
            },
            "hours": normalize_hours(payload.get("opening_hours", {}), HoursSource.GOOGLE),
            "photos": convert_photos(payload.get("photos", [])),
            "reviews": convert_reviews(payload.get("reviews", [])),
        }

        if not self.validate_common_format(common_data):
            logger.warning("Mapped data failed validation", extra={"place_id": raw.provider_place_id})

        return common_data
