"""
Pytest configuration and shared fixtures

This file contains test fixtures that can be used across all tests.
Fixtures are reusable components that set up test preconditions.

Learn more: https://docs.pytest.org/en/stable/fixture.html
"""

from unittest.mock import Mock

import pytest

from places_gateway.providers.source_config import ProviderConfig


@pytest.fixture(autouse=True)
def provider_keys(monkeypatch):
    """
    Provide fake provider API keys for every test.

    Adapters refuse to start without a key; tests that check that behavior
    delete the variable themselves.
    """
    monkeypatch.setenv("GOOGLE_API_KEY", "test-google-key")
    monkeypatch.setenv("YELP_API_KEY", "test-yelp-key")


@pytest.fixture(scope="function")
def providers() -> dict[str, ProviderConfig]:
    """Provider configuration matching config/sources.yml."""
    return {
        "google": ProviderConfig(
            adapter="google_places",
            api_key_env="GOOGLE_API_KEY",
            params={"base_url": "https://maps.googleapis.com/maps/api", "timeout": 10},
        ),
        "yelp": ProviderConfig(
            adapter="yelp_fusion",
            api_key_env="YELP_API_KEY",
            params={"base_url": "https://api.yelp.com/v3", "timeout": 10},
        ),
    }


@pytest.fixture(scope="function")
def make_response():
    """
    Build a mocked requests.Response.

    Usage:
        response = make_response(200, {"status": "OK"})
    """

    def _make(status_code: int = 200, json_data=None, content: bytes = b"", headers=None):
        response = Mock()
        response.status_code = status_code
        response.content = content
        response.headers = headers or {}
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response

    return _make


@pytest.fixture(scope="function")
def google_opening_hours() -> dict:
    """
    Google "opening_hours" with a late Friday that closes early Saturday.

    Days are Sunday=0 .. Saturday=6.
    """
    return {
        "open_now": True,
        "periods": [
            {"open": {"day": 1, "time": "1100"}, "close": {"day": 1, "time": "2200"}},
            {"open": {"day": 5, "time": "2100"}, "close": {"day": 6, "time": "0300"}},
            {"open": {"day": 3, "time": "1100"}, "close": {"day": 3, "time": "2200"}},
        ],
    }


@pytest.fixture(scope="function")
def yelp_hours() -> list:
    """Yelp "hours" with Monday=0 .. Sunday=6 day numbering."""
    return [
        {
            "hours_type": "REGULAR",
            "is_open_now": False,
            "open": [
                {"is_overnight": False, "start": "1100", "end": "2200", "day": 0},
                {"is_overnight": True, "start": "1800", "end": "0200", "day": 4},
                {"is_overnight": False, "start": "1000", "end": "1500", "day": 6},
            ],
        }
    ]


@pytest.fixture(scope="function")
def google_details_result(google_opening_hours) -> dict:
    """Google Places details "result" object."""
    return {
        "place_id": "ChIJ-test-place",
        "name": "Tartine Bakery",
        "price_level": 2,
        "rating": 4.5,
        "user_ratings_total": 8123,
        "types": ["bakery", "cafe", "meal_takeaway", "food", "establishment"],
        "formatted_address": "600 Guerrero St, San Francisco, CA 94110, USA",
        "geometry": {"location": {"lat": 37.7614, "lng": -122.4241}},
        "url": "https://maps.google.com/?cid=123",
        "formatted_phone_number": "(415) 487-2600",
        "international_phone_number": "+1 415-487-2600",
        "opening_hours": google_opening_hours,
        "photos": [
            {"photo_reference": "ref-1", "width": 4032, "height": 3024},
            {"photo_reference": "ref-2", "width": 800, "height": 600},
        ],
        "reviews": [
            {
                "author_name": "Sam",
                "profile_photo_url": "https://example.com/sam.png",
                "rating": 5,
                "text": "Morning bun.",
                "time": 1704067200,
            }
        ],
    }


@pytest.fixture(scope="function")
def yelp_business(yelp_hours) -> dict:
    """Yelp Fusion business details payload."""
    return {
        "id": "tartine-bakery-san-francisco",
        "name": "Tartine Bakery",
        "price": "$$",
        "rating": 4.0,
        "review_count": 8500,
        "categories": [
            {"alias": "bakeries", "title": "Bakeries"},
            {"alias": "cafes", "title": "Cafes"},
        ],
        "transactions": ["delivery", "pickup"],
        "location": {"display_address": ["600 Guerrero St", "San Francisco, CA 94110"]},
        "coordinates": {"latitude": 37.7614, "longitude": -122.4241},
        "url": "https://www.yelp.com/biz/tartine-bakery-san-francisco?adjust_creative=abc&utm_campaign=yelp_api_v3&utm_medium=api_v3_business_lookup&utm_source=abc",
        "display_phone": "(415) 487-2600",
        "phone": "+14154872600",
        "hours": yelp_hours,
        "photos": ["https://s3-media1.fl.yelpcdn.com/bphoto/a/o.jpg"],
    }


@pytest.fixture(scope="function")
def search_query() -> dict:
    """Validated search payload shared by both providers."""
    return {
        "term": "bakery",
        "latitude": 37.7749,
        "longitude": -122.4194,
        "category": ["bakery"],
        "sort": "distance",
        "price": [2, 1],
        "min_rating": 4.0,
        "open_now": True,
    }


# Mark tests based on their type for selective running
def pytest_configure(config):
    """
    Register custom pytest markers.

    This allows us to run specific test categories:
    - pytest -m unit        (run only unit tests)
    - pytest -m integration (run only integration tests)
    - pytest -m "not slow"  (skip slow tests)
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (isolated, fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (exercises the full handler)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (>1 second)"
    )
