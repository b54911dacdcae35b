"""API layer: Lambda handler, routes, payload checks and response envelopes."""

from .handler import lambda_handler
from .routes import ROUTES, RequestContext, Route

__all__ = ["lambda_handler", "ROUTES", "RequestContext", "Route"]
