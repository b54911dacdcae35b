"""
Unit tests for the Google Places Adapter.

These tests use mocked API responses to verify adapter behavior
without making real API calls.
"""

from unittest.mock import patch

import pytest
import requests

from places_gateway.providers.adapters.google_adapter import GooglePlacesAdapter
from places_gateway.providers.base import PlaceRaw
from places_gateway.providers.errors import ProviderError


# Sample Nearby Search response for testing
SAMPLE_NEARBY_RESPONSE = {
    "status": "OK",
    "results": [
        {
            "place_id": "far",
            "name": "Far Bakery",
            "price_level": 1,
            "rating": 4.6,
            "user_ratings_total": 50,
            "geometry": {"location": {"lat": 37.80, "lng": -122.4194}},
        },
        {
            "place_id": "near",
            "name": "Near Bakery",
            "price_level": 2,
            "rating": 4.2,
            "user_ratings_total": 900,
            "geometry": {"location": {"lat": 37.7750, "lng": -122.4194}},
        },
        {
            "place_id": "low",
            "name": "Low Rated",
            "price_level": 1,
            "rating": 3.1,
            "user_ratings_total": 10,
            "geometry": {"location": {"lat": 37.7751, "lng": -122.4194}},
        },
        {
            "place_id": "unrated",
            "name": "New Place",
            "geometry": {"location": {"lat": 37.7752, "lng": -122.4194}},
        },
    ],
}

SAMPLE_GEOCODE_RESPONSE = {
    "status": "OK",
    "results": [
        {
            "address_components": [
                {"long_name": "1", "types": ["street_number"]},
                {"long_name": "Mission District", "types": ["neighborhood", "political"]},
                {"long_name": "San Francisco", "types": ["locality", "political"]},
                {"long_name": "San Francisco County", "types": ["administrative_area_level_2", "political"]},
                {"long_name": "California", "types": ["administrative_area_level_1", "political"]},
                {"long_name": "United States", "types": ["country", "political"]},
                {"long_name": "Ignored", "types": ["political"]},
            ]
        }
    ],
}


@pytest.fixture
def adapter():
    return GooglePlacesAdapter(api_key="test-key")


class TestGoogleAdapterInit:
    """Test adapter initialization."""

    def test_init_with_api_key(self):
        adapter = GooglePlacesAdapter(api_key="test-key", timeout=5)

        assert adapter.source_name == "google"
        assert adapter.api_key == "test-key"
        assert adapter.base_url == "https://maps.googleapis.com/maps/api"
        assert adapter.timeout == 5
        assert adapter.api_call_count == 0

    def test_init_with_env_var(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "env-test-key")

        adapter = GooglePlacesAdapter(base_url="https://test.api.com/")

        assert adapter.api_key == "env-test-key"
        assert adapter.base_url == "https://test.api.com"

    def test_init_without_api_key_raises_error(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        with pytest.raises(ValueError, match="GOOGLE_API_KEY must be set"):
            GooglePlacesAdapter()

    def test_repr(self, adapter):
        repr_str = repr(adapter)

        assert "GooglePlacesAdapter" in repr_str
        assert "google" in repr_str
        assert "api_calls=0" in repr_str


class TestGoogleAdapterSearch:
    """Test the search() method."""

    @patch("places_gateway.providers.base.requests.get")
    def test_search_request_parameters(self, mock_get, adapter, search_query, make_response):
        mock_get.return_value = make_response(200, SAMPLE_NEARBY_RESPONSE)

        adapter.search(search_query)

        mock_get.assert_called_once()
        url = mock_get.call_args.args[0]
        params = mock_get.call_args.kwargs["params"]

        assert url == "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
        assert params["location"] == "37.7749,-122.4194"
        assert params["type"] == "bakery"
        assert params["keyword"] == "bakery"
        assert params["opennow"] == ""
        assert params["minprice"] == 1
        assert params["maxprice"] == 2
        assert params["rankby"] == "distance"
        assert params["key"] == "test-key"
        assert mock_get.call_args.kwargs["timeout"] == 10

    @patch("places_gateway.providers.base.requests.get")
    def test_search_omits_opennow_when_false(self, mock_get, adapter, search_query, make_response):
        mock_get.return_value = make_response(200, SAMPLE_NEARBY_RESPONSE)
        search_query["open_now"] = False

        adapter.search(search_query)

        assert "opennow" not in mock_get.call_args.kwargs["params"]

    @patch("places_gateway.providers.base.requests.get")
    def test_search_filters_and_sorts_by_distance(self, mock_get, adapter, search_query, make_response):
        mock_get.return_value = make_response(200, SAMPLE_NEARBY_RESPONSE)

        results = adapter.search(search_query)

        assert [r["id"] for r in results] == ["near", "far"]
        assert results[0]["source"] == "google"
        assert results[0]["price"] == 2
        assert results[0]["review_count"] == 900
        assert results[0]["distance"] == pytest.approx(11.1, abs=0.5)

    @patch("places_gateway.providers.base.requests.get")
    def test_search_sort_most_reviewed(self, mock_get, adapter, search_query, make_response):
        mock_get.return_value = make_response(200, SAMPLE_NEARBY_RESPONSE)
        search_query["sort"] = "most_reviewed"
        search_query["min_rating"] = 0

        results = adapter.search(search_query)

        assert [r["id"] for r in results] == ["near", "far", "low"]

    @patch("places_gateway.providers.base.requests.get")
    def test_search_sort_least_expensive(self, mock_get, adapter, search_query, make_response):
        mock_get.return_value = make_response(200, SAMPLE_NEARBY_RESPONSE)
        search_query["sort"] = "least_expensive"
        search_query["min_rating"] = 0

        results = adapter.search(search_query)

        assert [r["id"] for r in results] == ["low", "far", "near"]

    @patch("places_gateway.providers.base.requests.get")
    def test_search_zero_results_is_error(self, mock_get, adapter, search_query, make_response):
        mock_get.return_value = make_response(200, {"status": "ZERO_RESULTS", "results": []})

        with pytest.raises(ProviderError) as exc_info:
            adapter.search(search_query)

        assert exc_info.value.status == "ZERO_RESULTS"

    @patch("places_gateway.providers.base.requests.get")
    def test_network_error_is_single_attempt(self, mock_get, adapter, search_query):
        mock_get.side_effect = requests.exceptions.ConnectionError("Network error")

        with pytest.raises(ProviderError) as exc_info:
            adapter.search(search_query)

        assert exc_info.value.status == "CONNECTION_REFUSED"
        assert mock_get.call_count == 1
        assert adapter.api_call_count == 1


class TestGoogleAdapterDetails:
    """Test the details() method."""

    @patch("places_gateway.providers.base.requests.get")
    def test_details_maps_result(self, mock_get, adapter, google_details_result, make_response):
        mock_get.return_value = make_response(200, {"status": "OK", "result": google_details_result})

        details = adapter.details({"id": "ChIJ-test-place", "latitude": 37.7749, "longitude": -122.4194})

        assert mock_get.call_args.args[0] == "https://maps.googleapis.com/maps/api/place/details/json"
        assert mock_get.call_args.kwargs["params"] == {"place_id": "ChIJ-test-place", "key": "test-key"}

        assert details["id"] == "ChIJ-test-place"
        assert details["categories"] == [
            {"tag": "bakery", "name": "Bakery"},
            {"tag": "cafe", "name": "Cafe"},
        ]
        assert details["services"] == [{"tag": "takeout", "name": "Takeout"}]
        assert details["address"] == "600 Guerrero St, San Francisco, CA 94110"
        assert details["phone"] == {"display": "(415) 487-2600", "raw": "+14154872600"}
        assert details["photos"] == [{"reference": "ref-1", "width": 4032, "height": 3024}]
        assert details["reviews"][0]["time"] == "2024-01-01T00:00:00Z"
        assert details["hours"]["open_now"] is True
        assert details["hours"]["open_days"][-1] == {
            "day": 5,
            "start": "2100",
            "end": "0300",
            "is_overnight": True,
        }
        assert adapter.validate_common_format(details)

    @patch("places_gateway.providers.base.requests.get")
    def test_details_without_hours(self, mock_get, adapter, google_details_result, make_response):
        del google_details_result["opening_hours"]
        mock_get.return_value = make_response(200, {"status": "OK", "result": google_details_result})

        details = adapter.details({"id": "x", "latitude": 0, "longitude": 0})

        assert details["hours"] == {}

    @patch("places_gateway.providers.base.requests.get")
    def test_details_invalid_request(self, mock_get, adapter, make_response):
        mock_get.return_value = make_response(200, {"status": "INVALID_REQUEST"})

        with pytest.raises(ProviderError) as exc_info:
            adapter.details({"id": "x", "latitude": 0, "longitude": 0})

        assert exc_info.value.to_dict() == {
            "status": "INVALID_REQUEST",
            "description": "The requested resource is invalid because of missing parameters",
        }


class TestGoogleAdapterPhoto:
    """Test the photo() method."""

    @patch("places_gateway.providers.base.requests.get")
    def test_photo_data_url(self, mock_get, adapter, make_response):
        mock_get.return_value = make_response(
            200, content=b"\x89PNG", headers={"Content-Type": "IMAGE/PNG"}
        )

        result = adapter.photo({"reference": "ref-1", "max_width": 400, "max_height": 300})

        assert result == {"data_url": "data:image/png;base64,iVBORw=="}
        assert mock_get.call_args.args[0] == "https://maps.googleapis.com/maps/api/place/photo"
        assert mock_get.call_args.kwargs["params"] == {
            "photoreference": "ref-1",
            "maxwidth": 400,
            "maxheight": 300,
            "key": "test-key",
        }

    @patch("places_gateway.providers.base.requests.get")
    def test_photo_http_error(self, mock_get, adapter, make_response):
        mock_get.return_value = make_response(403, ValueError("not json"))

        with pytest.raises(ProviderError) as exc_info:
            adapter.photo({"reference": "ref-1", "max_width": 400, "max_height": 300})

        assert exc_info.value.status == "FORBIDDEN"


class TestGoogleAdapterGeocode:
    """Test the geocode() method."""

    @patch("places_gateway.providers.base.requests.get")
    def test_geocode_keys(self, mock_get, adapter, make_response):
        mock_get.return_value = make_response(200, SAMPLE_GEOCODE_RESPONSE)

        result = adapter.geocode({"latitude": 37.76, "longitude": -122.42})

        assert mock_get.call_args.kwargs["params"]["latlng"] == "37.76,-122.42"
        assert mock_get.call_args.kwargs["params"]["result_type"] == "street_address"
        assert result == {
            "neighborhood": "Mission District",
            "locality": "San Francisco",
            "administrative_area_level_1": "California",
            "country": "United States",
        }


class TestGoogleAdapterMapping:
    """Test mapping helpers directly."""

    def test_map_search_result_defaults(self, adapter):
        raw = PlaceRaw(source="google", payload={"place_id": "p"})

        result = adapter.map_search_result(raw, 0.0, 0.0)

        assert result == {
            "source": "google",
            "id": "p",
            "name": "",
            "price": 0,
            "rating": 1.0,
            "review_count": 0,
            "distance": 0.0,
        }


# Mark all tests in this file as unit tests
pytestmark = pytest.mark.unit
