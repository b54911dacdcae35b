"""
Route Table

Each route is a POST endpoint described by its path, the action name used in
the response envelope, the ordered payload checks it runs, and the operation
that produces its result. Route operations build their provider adapter per
request, so nothing is shared between invocations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..providers.adapters import build_adapter
from ..providers.errors import ProviderError
from ..providers.source_config import ProviderConfig
from .responses import failed_response, success_response
from .session_token import TokenSettings, sign_token
from .validation import (
    Check,
    GatewayError,
    check_for_auth,
    check_for_coordinates,
    check_for_details,
    check_for_photo,
    check_for_reviews,
    check_for_search,
    check_if_empty_or_invalid,
    check_if_malicious,
    parse_json_body,
    run_checks,
)

logger = logging.getLogger(__name__)

ROUTE_METHOD = "POST"


@dataclass
class RequestContext:
    """Per-request information available to route operations."""

    source_ip: Optional[str] = None
    user_agent: Optional[str] = None
    providers: Optional[dict[str, ProviderConfig]] = None
    token_settings: Optional[TokenSettings] = None


Operation = Callable[[dict[str, Any], RequestContext], Any]


@dataclass
class Route:
    """One gateway endpoint."""

    path: str
    action: str
    operation: Operation
    checks: tuple[Check, ...] = field(default_factory=tuple)
    method: str = ROUTE_METHOD

    def dispatch(self, body: Optional[str], context: RequestContext) -> dict[str, Any]:
        """
        Parse, check and run the route, returning a proxy response.

        Any exception is turned into a failed response; nothing propagates
        to the caller.
        """
        try:
            content = parse_json_body(body)
            verified = run_checks(self.path, content, self.checks)
            result = self.operation(verified, context)
        except Exception as error:
            if not isinstance(error, (GatewayError, ProviderError)):
                logger.exception(
                    "Unexpected error in route",
                    extra={"route": self.path, "error_type": type(error).__name__},
                )
            return failed_response(self.path, self.action, error)

        return success_response(self.path, self.action, result)


def _session(content: dict[str, Any], context: RequestContext) -> dict[str, str]:
    token = sign_token(content, context.source_ip, context.user_agent, context.token_settings)
    return {"token": token}


def _provider_call(provider_name: str, method_name: str) -> Operation:
    def operation(content: dict[str, Any], context: RequestContext) -> Any:
        adapter = build_adapter(provider_name, context.providers)
        return getattr(adapter, method_name)(content)

    operation.__name__ = f"{provider_name}_{method_name}"
    return operation


_BODY_CHECKS = (check_if_empty_or_invalid, check_if_malicious)

ROUTES: dict[str, Route] = {
    route.path: route
    for route in (
        Route(
            path="/auth/session",
            action="AUTHORIZATION",
            operation=_session,
            checks=_BODY_CHECKS + (check_for_auth,),
        ),
        Route(
            path="/fusion/search",
            action="FUSION_SEARCH",
            operation=_provider_call("yelp", "search"),
            checks=_BODY_CHECKS + (check_for_coordinates, check_for_search),
        ),
        Route(
            path="/fusion/details",
            action="FUSION_DETAILS",
            operation=_provider_call("yelp", "details"),
            checks=_BODY_CHECKS + (check_for_coordinates, check_for_details),
        ),
        Route(
            path="/fusion/reviews",
            action="FUSION_REVIEWS",
            operation=_provider_call("yelp", "reviews"),
            checks=_BODY_CHECKS + (check_for_reviews,),
        ),
        Route(
            path="/geocode/locate",
            action="GEOCODE_LOCATE",
            operation=_provider_call("google", "geocode"),
            checks=_BODY_CHECKS + (check_for_coordinates,),
        ),
        Route(
            path="/places/search",
            action="PLACES_SEARCH",
            operation=_provider_call("google", "search"),
            checks=_BODY_CHECKS + (check_for_coordinates, check_for_search),
        ),
        Route(
            path="/places/details",
            action="PLACES_DETAILS",
            operation=_provider_call("google", "details"),
            checks=_BODY_CHECKS + (check_for_coordinates, check_for_details),
        ),
        Route(
            path="/places/photo",
            action="PLACES_PHOTO",
            operation=_provider_call("google", "photo"),
            checks=_BODY_CHECKS + (check_for_photo,),
        ),
    )
}
