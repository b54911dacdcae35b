"""
Configuration Loader for the Gateway

This module loads and validates gateway-level settings from gateway.yml:
CORS headers attached to every response, and the HTTP status of each gateway
response type (responses produced by the gateway itself, such as an unknown
route).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PLACES_GATEWAY_GATEWAY_CONFIG"


@dataclass
class CorsConfig:
    """CORS response headers."""

    allow_origin: str = "*"
    allow_headers: str = "Authorization,X-Api-Key"
    max_age: int = 600

    def headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Headers": self.allow_headers,
            "Access-Control-Max-Age": str(self.max_age),
        }


@dataclass
class GatewayConfig:
    """Complete gateway configuration."""

    cors: CorsConfig = field(default_factory=CorsConfig)
    gateway_responses: dict[str, int] = field(default_factory=dict)

    def status_for(self, response_type: str) -> int:
        """HTTP status for a gateway response type (DEFAULT_4XX status if unknown)."""
        return self.gateway_responses.get(
            response_type, self.gateway_responses.get("DEFAULT_4XX", 400)
        )


def load_gateway_config(config_path: Optional[str] = None) -> GatewayConfig:
    """
    Load gateway configuration from YAML file.

    Args:
        config_path: Path to gateway.yml (defaults to $PLACES_GATEWAY_GATEWAY_CONFIG,
                     then config/gateway.yml in the project root)

    Returns:
        GatewayConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    configured = config_path or os.getenv(CONFIG_ENV_VAR)
    if configured:
        path = Path(configured)
    else:
        project_root = Path(__file__).parent.parent.parent
        path = project_root / "config" / "gateway.yml"

    if not path.exists():
        raise FileNotFoundError(f"Gateway config file not found: {path}")

    logger.info(f"Loading gateway config from {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in gateway config: {e}") from e

    if not isinstance(config_data, dict):
        raise ValueError("Gateway config must be a mapping")

    cors = _parse_cors(config_data.get("cors") or {})
    gateway_responses = _parse_gateway_responses(config_data.get("gateway_responses") or {})

    logger.info(
        "Gateway config loaded",
        extra={"gateway_responses": len(gateway_responses), "allow_origin": cors.allow_origin},
    )

    return GatewayConfig(cors=cors, gateway_responses=gateway_responses)


def _parse_cors(data: Any) -> CorsConfig:
    if not isinstance(data, dict):
        raise ValueError("`cors` section must be a mapping")

    try:
        max_age = int(data.get("max_age", 600))
    except (TypeError, ValueError) as e:
        raise ValueError(f"`cors.max_age` must be an integer: {e}") from e

    return CorsConfig(
        allow_origin=str(data.get("allow_origin", "*")),
        allow_headers=str(data.get("allow_headers", "Authorization,X-Api-Key")),
        max_age=max_age,
    )


def _parse_gateway_responses(data: Any) -> dict[str, int]:
    if not isinstance(data, dict):
        raise ValueError("`gateway_responses` section must be a mapping")

    responses: dict[str, int] = {}
    for response_type, status in data.items():
        if isinstance(status, bool) or not isinstance(status, int) or not 400 <= status <= 599:
            raise ValueError(f"Gateway response '{response_type}' must map to a 4xx/5xx status code")
        responses[str(response_type)] = status

    return responses
