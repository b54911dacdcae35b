"""
Provider settings for the places gateway.

`config/sources.yml` lists every upstream provider under `providers:`. Each
entry names the adapter class to build, the environment variable holding the
provider's API key, and the keyword arguments (base URL, timeout) passed to
the adapter. Keys themselves never live in the file.

    providers:
      google:
        adapter: google_places
        api_key_env: GOOGLE_API_KEY
        params:
          base_url: https://maps.googleapis.com/maps/api
          timeout: 10
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PLACES_GATEWAY_SOURCES_CONFIG"

# Adapter keyword arguments that may be set from the file
ALLOWED_PARAMS = {"base_url", "timeout"}


@dataclass
class ProviderConfig:
    """Settings for one upstream provider."""

    adapter: str
    api_key_env: str
    enabled: bool = True
    params: dict[str, Any] = field(default_factory=dict)

    def adapter_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the adapter constructor."""
        return {**self.params, "api_key_env": self.api_key_env}


def sources_config_path(config_path: Optional[str] = None) -> Path:
    """Resolve the file to read: explicit path, then $PLACES_GATEWAY_SOURCES_CONFIG, then config/sources.yml."""
    configured = config_path or os.getenv(CONFIG_ENV_VAR)
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent.parent.parent / "config" / "sources.yml"


def load_sources_config(config_path: Optional[str] = None) -> dict[str, ProviderConfig]:
    """
    Load provider settings.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML is invalid or a provider entry is malformed
    """
    path = sources_config_path(config_path)
    if not path.exists():
        logger.error("Sources configuration file not found: %s", path)
        raise FileNotFoundError(f"Sources configuration file not found: {path}")

    try:
        raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse sources configuration: %s", exc)
        raise ValueError(f"Invalid YAML in sources configuration: {exc}") from exc

    if not raw_config:
        logger.warning("Sources configuration file is empty: %s", path)
        return {}

    section = raw_config.get("providers") if isinstance(raw_config, Mapping) else None
    if not isinstance(section, Mapping):
        raise ValueError("`providers` section is missing or invalid in sources configuration")

    providers = {name: _parse_provider(name, entry) for name, entry in section.items()}

    logger.info(
        "Loaded provider configuration",
        extra={
            "providers": sorted(providers),
            "enabled_providers": [name for name, cfg in providers.items() if cfg.enabled],
        },
    )
    return providers


def _parse_provider(name: str, entry: Any) -> ProviderConfig:
    if not isinstance(entry, Mapping):
        raise ValueError(f"Invalid provider configuration for '{name}'")

    adapter = entry.get("adapter")
    if not isinstance(adapter, str) or not adapter.strip():
        raise ValueError(f"Provider '{name}' must define a non-empty `adapter` string")

    api_key_env = entry.get("api_key_env")
    if not isinstance(api_key_env, str) or not api_key_env.strip():
        raise ValueError(f"Provider '{name}' must define a non-empty `api_key_env` string")

    params = entry.get("params") or {}
    if not isinstance(params, Mapping):
        raise ValueError(f"`params` for provider '{name}' must be a mapping")
    unknown = set(params) - ALLOWED_PARAMS
    if unknown:
        raise ValueError(f"Unknown params for provider '{name}': {', '.join(sorted(unknown))}")

    return ProviderConfig(
        adapter=adapter,
        api_key_env=api_key_env,
        enabled=bool(entry.get("enabled", True)),
        params=dict(params),
    )


__all__ = ["ProviderConfig", "load_sources_config", "sources_config_path"]
