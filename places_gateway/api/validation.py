"""
Request Payload Validation

Every route runs its JSON body through an ordered list of checks before any
upstream call is made. Each check logs that it ran, returns the payload
unchanged when it passes, and raises a GatewayError subclass when it does not.

The error's `status` becomes the "status" field of the failed response:
- PayloadSyntaxError -> SYNTAX_ERROR (missing/invalid values)
- PayloadTypeError -> TYPE_ERROR (a value of the wrong type where a string was required)
- MaliciousPayloadError -> SYSTEM_ERROR (client tried to inject token claims)
"""

import json
import logging
import math
import re
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# Keys that only the token signer may set
RESERVED_CLAIMS = ("ip", "ua", "iat", "exp")

AUTH_TYPE_PATTERN = re.compile(r"^(web|app)$")
SORT_PATTERN = re.compile(r"^(distance|least_expensive|most_reviewed)$")

MAX_PRICE_LEVELS = 4

Payload = dict[str, Any]
Check = Callable[[str, Payload], Payload]


class GatewayError(Exception):
    """Base class for errors raised by the gateway itself."""

    status = "SYSTEM_ERROR"


class PayloadSyntaxError(GatewayError):
    """The request body is missing, not JSON, or a value fails validation."""

    status = "SYNTAX_ERROR"


class PayloadTypeError(GatewayError):
    """A value has a type the check cannot work with."""

    status = "TYPE_ERROR"


class MaliciousPayloadError(GatewayError):
    """The request body carries reserved token claims."""

    status = "SYSTEM_ERROR"


def check_for_auth(route: str, content: Payload) -> Payload:
    """Check that "type" identifies a web or app client."""
    _log_check(route, "check_for_auth", content)

    client_type = content.get("type")
    if not isinstance(client_type, str):
        raise PayloadTypeError('The "type" key is not a string')
    if AUTH_TYPE_PATTERN.match(client_type) is None:
        raise PayloadSyntaxError('The "type" key does not match expression')

    return content


def check_for_coordinates(route: str, content: Payload) -> Payload:
    """Check that latitude/longitude are finite numbers within range."""
    _log_check(route, "check_for_coordinates", content)

    latitude = content.get("latitude")
    longitude = content.get("longitude")

    if not _is_finite_number(latitude):
        raise PayloadSyntaxError('The "latitude" key is not a finite number')

    if not _is_finite_number(longitude):
        raise PayloadSyntaxError('The "longitude" key is not a finite number')

    if latitude < -90 or latitude > 90 or longitude < -180 or longitude > 180:
        raise PayloadSyntaxError('The "latitude" or "longitude" key has exceeded the allowed value')

    return content


def check_for_details(route: str, content: Payload) -> Payload:
    _log_check(route, "check_for_details", content)
    _require_id(content)
    return content


def check_for_reviews(route: str, content: Payload) -> Payload:
    _log_check(route, "check_for_reviews", content)
    _require_id(content)
    return content


def check_for_photo(route: str, content: Payload) -> Payload:
    """Check the photo reference and requested dimensions."""
    _log_check(route, "check_for_photo", content)

    if not _is_non_empty_string(content.get("reference")):
        raise PayloadSyntaxError('The "reference" key is empty or not a string')

    if not _is_finite_number(content.get("max_width")):
        raise PayloadSyntaxError('The "max_width" key is not a number')

    if not _is_finite_number(content.get("max_height")):
        raise PayloadSyntaxError('The "max_height" key is not a number')

    return content


def check_for_search(route: str, content: Payload) -> Payload:
    """
    Check a search request.

    Required keys:
        term: non-empty string
        category: non-empty list of non-empty strings
        sort: "distance", "least_expensive" or "most_reviewed"
        price: 1 to 4 finite numbers
        min_rating: finite number
        open_now: boolean
    """
    _log_check(route, "check_for_search", content)

    if not _is_non_empty_string(content.get("term")):
        raise PayloadSyntaxError('The "term" key is empty or not a string')

    category = content.get("category")
    if (
        not isinstance(category, list)
        or len(category) < 1
        or not all(_is_non_empty_string(item) for item in category)
    ):
        raise PayloadSyntaxError('The "category" key is not a string[] or wrong size')

    sort = content.get("sort")
    if not isinstance(sort, str):
        raise PayloadTypeError('The "sort" key is not a string')
    if SORT_PATTERN.match(sort) is None:
        raise PayloadSyntaxError('The "sort" key does not match expression')

    price = content.get("price")
    if (
        not isinstance(price, list)
        or not 1 <= len(price) <= MAX_PRICE_LEVELS
        or not all(_is_finite_number(item) for item in price)
    ):
        raise PayloadSyntaxError('The "price" key is not a finite number[] or wrong size')

    if not _is_finite_number(content.get("min_rating")):
        raise PayloadSyntaxError('The "min_rating" key is not a number')

    if not isinstance(content.get("open_now"), bool):
        raise PayloadSyntaxError('The "open_now" key is not a boolean')

    return content


def check_if_empty_or_invalid(route: str, content: Any) -> Payload:
    """Check that the body is a non-empty JSON object."""
    _log_check(route, "check_if_empty_or_invalid", content)

    if not isinstance(content, dict) or not content:
        raise PayloadSyntaxError("The content is empty or invalid")

    return content


def check_if_malicious(route: str, content: Payload) -> Payload:
    """Reject bodies that try to set token claims reserved for the signer."""
    _log_check(route, "check_if_malicious", content)

    if any(claim in content for claim in RESERVED_CLAIMS):
        raise MaliciousPayloadError("The content is malicious")

    return content


def parse_json_body(body: Optional[str]) -> Any:
    """
    Decode a JSON request body.

    Raises:
        PayloadSyntaxError: If the body is missing or not valid JSON
    """
    if body is None:
        raise PayloadSyntaxError("Unexpected end of JSON input")
    try:
        return json.loads(body)
    except ValueError as e:
        raise PayloadSyntaxError(f"Unexpected token in JSON: {e}") from e


def run_checks(route: str, content: Any, checks: tuple[Check, ...]) -> Payload:
    """Run checks in order, feeding each one's output into the next."""
    for check in checks:
        content = check(route, content)
    return content


def _log_check(route: str, check_name: str, content: Any) -> None:
    logger.info("%s %s", route, check_name, extra={"route": route, "check": check_name})
    logger.debug("Checked payload", extra={"route": route, "payload": content})


def _require_id(content: Payload) -> None:
    if not _is_non_empty_string(content.get("id")):
        raise PayloadSyntaxError('The "id" key is empty or not a string')


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
