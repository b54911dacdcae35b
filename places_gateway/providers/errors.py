"""
Provider Error Mapping

Upstream failures (network errors, HTTP errors, Google "status" codes and Yelp
"error" objects) are all reduced to one ProviderError carrying a status code
and a human-readable description. The route layer turns that into the
{"status", "description"} info of a failed response.
"""

from typing import Any, Optional

import requests

API_ERROR_MESSAGES = {
    # Google: request succeeded but nothing matched
    "ZERO_RESULTS": "The requested resource was found, but returned no results",
    # Google: missing parameters
    "INVALID_REQUEST": "The requested resource is invalid because of missing parameters",
    "BAD_REQUEST": "The requested resource cannot be accessed",
    "FORBIDDEN": "You do not have permission to access the requested resource",
    "NOT_FOUND": "The requested resource could not be found",
    "CONNECTION_REFUSED": "The requested resource cannot be reached due to a network issue",
    "UNKNOWN_ERROR": "An unknown server error has occurred",
}

GOOGLE_OK_STATUS = "OK"

HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
}


def api_error_message(code: Optional[str]) -> str:
    """Return the custom message for an API error code, or "" if unknown."""
    return API_ERROR_MESSAGES.get(code, "") if isinstance(code, str) else ""


class ProviderError(Exception):
    """Raised when an upstream provider call fails or returns an error payload."""

    def __init__(self, status: str, description: str = ""):
        super().__init__(description or status)
        self.status = status
        self.description = description

    def to_dict(self) -> dict[str, str]:
        return {"status": self.status, "description": self.description}

    @classmethod
    def from_response(cls, response: requests.Response) -> "ProviderError":
        """
        Build an error from an upstream response that was not successful.

        Precedence:
        1. Google body "status" (e.g. ZERO_RESULTS, REQUEST_DENIED)
        2. Yelp body "error.code" (e.g. BUSINESS_UNAVAILABLE)
        3. HTTP status (400, 403, 404), otherwise UNKNOWN_ERROR
        """
        return cls.from_payload(response.status_code, _safe_json(response))

    @classmethod
    def from_exception(cls, exc: requests.exceptions.RequestException) -> "ProviderError":
        """Build an error from a requests exception (no usable response means a network failure)."""
        response = exc.response
        if response is None:
            return cls("CONNECTION_REFUSED", api_error_message("CONNECTION_REFUSED"))
        return cls.from_response(response)

    @classmethod
    def from_payload(cls, http_status: Optional[int], data: Any) -> "ProviderError":
        google_code, google_message = _google_error(data)
        if google_code:
            return cls(google_code, google_message or api_error_message(google_code))

        yelp_code, yelp_message = _yelp_error(data)
        if yelp_code:
            return cls(yelp_code, yelp_message or api_error_message(yelp_code))

        status = HTTP_STATUS_CODES.get(http_status, "UNKNOWN_ERROR")
        return cls(status, api_error_message(status))


def _safe_json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _google_error(data: Any) -> tuple[Optional[str], Optional[str]]:
    if not isinstance(data, dict):
        return None, None
    code = data.get("status")
    if not isinstance(code, str) or not code or code == GOOGLE_OK_STATUS:
        return None, None
    return code, data.get("error_message")


def _yelp_error(data: Any) -> tuple[Optional[str], Optional[str]]:
    if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
        return None, None
    error = data["error"]
    code = error.get("code")
    if not isinstance(code, str) or not code:
        return None, None
    return code, error.get("description")
