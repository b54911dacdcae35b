"""
Response Envelope

Every gateway response body has the same shape:

    {"action": "<ROUTE_ACTION>", "success": <http status < 400>, "info": <content>}

Route results go out as 200 responses; any failure goes out as a 400 whose
info is {"status", "description"}. Responses produced by the gateway itself
(unknown route, wrong method, unexpected crash) use action "API_GATEWAY".
"""

import json
import logging
import re
from typing import Any

from ..providers.errors import ProviderError
from .validation import GatewayError

logger = logging.getLogger(__name__)

GATEWAY_ACTION = "API_GATEWAY"

JSON_HEADERS = {"Content-Type": "application/json"}

_ERROR_NAME = re.compile(r"^(.+)(Error)$")


def build_response(action: str, http_code: int, content: Any) -> dict[str, Any]:
    """Build an API Gateway proxy response with the standard envelope."""
    body = {
        "action": action,
        "success": http_code < 400,
        "info": content,
    }
    return {
        "statusCode": http_code,
        "headers": dict(JSON_HEADERS),
        "body": json.dumps(body),
    }


def success_response(route: str, action: str, content: Any) -> dict[str, Any]:
    """200 response carrying a route's result."""
    logger.info("%s success_response", route, extra={"route": route, "action": action})
    return build_response(action, 200, content)


def failed_response(route: str, action: str, error: BaseException) -> dict[str, Any]:
    """
    400 response describing why a route failed.

    Args:
        route: Route path (for logging)
        action: Route action name
        error: ProviderError, GatewayError, or any other exception

    Returns:
        Proxy response whose info is {"status", "description"}
    """
    info = error_info(error)

    logger.error(
        "%s failed_response",
        route,
        extra={"route": route, "action": action, **info},
    )

    return build_response(action, 400, info)


def gateway_response(response_type: str, http_code: int, description: str) -> dict[str, Any]:
    """Response produced by the gateway itself rather than by a route."""
    logger.warning(
        "Gateway response",
        extra={"response_type": response_type, "status_code": http_code, "description": description},
    )
    return build_response(
        GATEWAY_ACTION,
        http_code,
        {"status": response_type, "description": description},
    )


def error_info(error: BaseException) -> dict[str, str]:
    """
    Turn an exception into {"status", "description"}.

    - ProviderError: upstream status and description
    - GatewayError: the class's status ("SYNTAX_ERROR", "TYPE_ERROR", ...)
    - anything else: derived from the class name ("ValueError" -> "VALUE_ERROR");
      a bare Exception becomes "SYSTEM_ERROR"
    """
    if isinstance(error, ProviderError):
        return error.to_dict()

    if isinstance(error, GatewayError):
        return {"status": error.status, "description": str(error)}

    return {"status": _status_from_class(type(error)), "description": str(error)}


def _status_from_class(error_class: type) -> str:
    name = error_class.__name__
    if name == "Exception":
        return "SYSTEM_ERROR"
    return _ERROR_NAME.sub(r"\1_\2", name).upper()

