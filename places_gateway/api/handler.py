"""
Lambda Entry Point

Receives API Gateway proxy events, resolves the route, and returns a proxy
response. CORS headers from config/gateway.yml are attached to every response,
including preflight and gateway responses.
"""

import base64
import binascii
import logging
from typing import Any, Optional

from .gateway_config import GatewayConfig, load_gateway_config
from .responses import gateway_response
from .routes import ROUTES, RequestContext

logger = logging.getLogger(__name__)

PREFLIGHT_METHOD = "OPTIONS"

_gateway_config: Optional[GatewayConfig] = None


def get_gateway_config() -> GatewayConfig:
    """Load gateway.yml once per container; fall back to defaults if it cannot be read."""
    global _gateway_config
    if _gateway_config is None:
        try:
            _gateway_config = load_gateway_config()
        except (FileNotFoundError, ValueError) as e:
            logger.error(
                "Failed to load gateway config, using defaults",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return GatewayConfig()
    return _gateway_config


def lambda_handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """
    Handle one API Gateway proxy event.

    Args:
        event: Proxy integration event
        context: Lambda context (unused)

    Returns:
        Proxy response dict (statusCode, headers, body)
    """
    config = get_gateway_config()
    request_context = event.get("requestContext") or {}

    resource_path = (
        request_context.get("resourcePath") or event.get("resource") or event.get("path") or ""
    )
    method = (request_context.get("httpMethod") or event.get("httpMethod") or "").upper()

    logger.info(
        "Received request",
        extra={"resource_path": resource_path, "method": method},
    )

    if method == PREFLIGHT_METHOD:
        response = {"statusCode": 200, "headers": {}, "body": ""}
    else:
        response = _route_request(event, resource_path, method, config)

    response["headers"] = {**response.get("headers", {}), **config.cors.headers()}
    return response


def _route_request(
    event: dict[str, Any],
    resource_path: str,
    method: str,
    config: GatewayConfig,
) -> dict[str, Any]:
    route = ROUTES.get(resource_path)
    if route is None:
        return gateway_response(
            "RESOURCE_NOT_FOUND",
            config.status_for("RESOURCE_NOT_FOUND"),
            f"No route for {resource_path or '<empty path>'}",
        )

    if method != route.method:
        return gateway_response(
            "MISSING_AUTHENTICATION_TOKEN",
            config.status_for("MISSING_AUTHENTICATION_TOKEN"),
            f"Method {method or '<none>'} is not allowed on {resource_path}",
        )

    identity = (event.get("requestContext") or {}).get("identity") or {}
    context = RequestContext(
        source_ip=identity.get("sourceIp"),
        user_agent=identity.get("userAgent"),
    )

    return route.dispatch(_event_body(event), context)


def _event_body(event: dict[str, Any]) -> Optional[str]:
    body = event.get("body")
    if body is None or not event.get("isBase64Encoded"):
        return body

    try:
        return base64.b64decode(body).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.warning("Could not decode base64 body", extra={"error": str(e)})
        # Left as-is; JSON parsing reports the syntax error
        return body
