"""
Place Field Converters

This module maps individual provider fields (Google Places and Yelp Fusion)
into the unified place schema. Every converter is a pure function that returns
an empty value ("" / [] / 0) for input it does not recognize instead of raising,
so a single odd field never breaks a whole place result.

Converters:
- convert_address: formatted address / display address -> single string
- convert_categories: Google types / Yelp categories -> [{tag, name}]
- convert_services: Google types / Yelp transactions -> [{tag, name}]
- convert_clean_url: strip utm_* tracking parameters
- convert_e164_phone: phone number -> "+<digits>"
- convert_gps_distance: haversine distance in meters
- convert_iso8601: Unix seconds / Yelp local time -> "YYYY-MM-DDTHH:MM:SSZ"
- convert_photos: Google photo references / Yelp photo URLs
- convert_price_level: "$".."$$$$" -> 1..4
- convert_reviews: Google reviews -> unified reviews
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


# Google place types that are surfaced as categories
GOOGLE_CATEGORY_TYPES = ("bakery", "bar", "cafe", "night_club", "restaurant")

# Provider service identifiers -> (tag, name)
SERVICE_TAGS = {
    "meal_delivery": ("delivery", "Delivery"),
    "delivery": ("delivery", "Delivery"),
    "meal_takeaway": ("takeout", "Takeout"),
    "pickup": ("takeout", "Takeout"),
    "restaurant_reservation": ("reservation", "Reservations"),
}

PRICE_LEVELS = {"$": 1, "$$": 2, "$$$": 3, "$$$$": 4}

EARTH_RADIUS_METERS = 6371000

# Yelp reports review timestamps in Pacific time without an offset
YELP_TIMEZONE = ZoneInfo("America/Los_Angeles")

ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

MAX_PHONE_DIGITS = 14

# Photos returned for Google places
GOOGLE_PHOTO_LIMIT = 1


def convert_address(address: Any) -> str:
    """
    Convert a Google or Yelp address into a single display string.

    Google "formatted_address" is a string; food-truck intersections come back
    as "A &, B" and US addresses end in ", USA". Yelp "location.display_address"
    is a list of lines that are joined with ", ".

    Examples:
        >>> convert_address("1st Ave &, 2nd St, New York, NY 10001, USA")
        '1st Ave & 2nd St, New York, NY 10001'
        >>> convert_address(["123 Main St", "Brooklyn, NY 11211"])
        '123 Main St, Brooklyn, NY 11211'
    """
    if isinstance(address, str) and address:
        cleaned = address.replace("&,", "&")
        cleaned = cleaned.replace("and,", "and")
        return cleaned.replace(", USA", "")

    if isinstance(address, list) and all(isinstance(line, str) for line in address):
        return ", ".join(address)

    return ""


def convert_categories(categories: Any) -> list[dict[str, str]]:
    """
    Convert Google types or Yelp categories into [{tag, name}].

    Google types are filtered to food-related types and title-cased
    ("night_club" -> "Night Club"). Yelp categories already carry an alias and
    a title.
    """
    if not isinstance(categories, list):
        return []

    if all(isinstance(category, str) for category in categories):
        return [
            {"tag": category, "name": _title_case(category.replace("_", " "))}
            for category in categories
            if category in GOOGLE_CATEGORY_TYPES
        ]

    if all(isinstance(category, dict) for category in categories):
        return [
            {
                "tag": category.get("alias", "unknown"),
                "name": category.get("title", "Unknown"),
            }
            for category in categories
        ]

    return []


def convert_services(services: Any) -> list[dict[str, str]]:
    """Convert Google types or Yelp transactions into [{tag, name}]."""
    if not isinstance(services, list) or not all(isinstance(service, str) for service in services):
        return []

    return [
        {"tag": SERVICE_TAGS[service][0], "name": SERVICE_TAGS[service][1]}
        for service in services
        if service in SERVICE_TAGS
    ]


def convert_clean_url(url: Any) -> str:
    """
    Remove utm_* tracking parameters from a URL.

    Examples:
        >>> convert_clean_url("https://www.yelp.com/biz/a?adjust_creative=x&utm_campaign=y&utm_source=z")
        'https://www.yelp.com/biz/a?adjust_creative=x'
    """
    if not isinstance(url, str) or not url:
        return ""

    cleaned = re.sub(r"&?utm_(.*?)=[^&]+", "", url)
    return cleaned.replace("?&", "?")


def convert_e164_phone(phone_number: Any) -> str:
    """Keep the first 14 digits of a phone number and prefix them with '+'."""
    if not isinstance(phone_number, str) or not phone_number:
        return ""

    digits = re.sub(r"\D", "", phone_number)
    return f"+{digits[:MAX_PHONE_DIGITS]}"


def convert_gps_distance(
    latitude1: float,
    longitude1: float,
    latitude2: float,
    longitude2: float,
) -> float:
    """
    Great-circle distance between two coordinates using the haversine formula.

    Returns:
        Distance in meters
    """
    phi1 = math.radians(latitude1)
    phi2 = math.radians(latitude2)
    delta_phi = math.radians(latitude2 - latitude1)
    delta_lambda = math.radians(longitude2 - longitude1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def convert_iso8601(value: Any) -> str:
    """
    Convert a provider timestamp into ISO 8601 UTC ("YYYY-MM-DDTHH:MM:SSZ").

    Supports:
    - Google review "time": Unix timestamp in seconds (UTC)
    - Yelp review "time_created": "YYYY-MM-DD HH:MM:SS" in Pacific time

    Returns:
        ISO 8601 string, or "" if the value is missing or cannot be parsed
    """
    if isinstance(value, bool):
        return ""

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return ""
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning("Failed to parse Unix timestamp", extra={"value": value})
            return ""
        return parsed.strftime(ISO8601_FORMAT)

    if isinstance(value, str) and value:
        parsed = _parse_local_datetime(value)
        if parsed is None:
            logger.warning("Failed to parse timestamp string", extra={"value": value})
            return ""
        return parsed.astimezone(timezone.utc).strftime(ISO8601_FORMAT)

    return ""


def convert_photos(photos: Any) -> list[dict[str, Any]]:
    """
    Convert Google photo objects or Yelp photo URLs.

    Google photos are references that must be fetched through the photo route;
    only the first one is returned. Yelp photos are plain URLs.
    """
    if not isinstance(photos, list):
        return []

    if all(isinstance(photo, dict) for photo in photos):
        return [
            {
                "reference": photo.get("photo_reference"),
                "width": photo.get("width"),
                "height": photo.get("height"),
            }
            for photo in photos[:GOOGLE_PHOTO_LIMIT]
        ]

    if all(isinstance(photo, str) for photo in photos):
        return [{"url": photo} for photo in photos]

    return []


def convert_price_level(dollars: Any) -> int:
    """Convert a Yelp price ("$" to "$$$$") to a price level (1-4, 0 if unknown)."""
    return PRICE_LEVELS.get(dollars, 0) if isinstance(dollars, str) else 0


def convert_reviews(reviews: Any) -> list[dict[str, Any]]:
    """Convert Google place reviews to the unified review format."""
    if not isinstance(reviews, list) or not all(isinstance(review, dict) for review in reviews):
        return []

    return [
        {
            "text": review.get("text"),
            "url": "",
            "rating": review.get("rating"),
            "time": convert_iso8601(review.get("time")),
            "user": {
                "name": review.get("author_name"),
                "image_url": review.get("profile_photo_url"),
            },
        }
        for review in reviews
    ]


def _title_case(text: str) -> str:
    return re.sub(r"\w+", lambda match: match.group(0)[0].upper() + match.group(0)[1:], text)


def _parse_local_datetime(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=YELP_TIMEZONE)
    return parsed
