"""Place Provider Adapters.

This package contains concrete implementations of the PlaceAdapter interface
for each upstream provider.

Available adapters:
- GooglePlacesAdapter: Google Places and Geocoding (google_adapter.py)
- YelpFusionAdapter: Yelp Fusion v3 (yelp_adapter.py)

Adapters are usually built through `build_adapter`, which applies the
provider settings from config/sources.yml.
"""

import logging
from typing import Optional

from ..base import PlaceAdapter
from ..source_config import ProviderConfig, load_sources_config
from .google_adapter import GooglePlacesAdapter
from .yelp_adapter import YelpFusionAdapter

logger = logging.getLogger(__name__)

ADAPTERS: dict[str, type[PlaceAdapter]] = {
    "google_places": GooglePlacesAdapter,
    "yelp_fusion": YelpFusionAdapter,
}


def build_adapter(
    provider_name: str,
    providers: Optional[dict[str, ProviderConfig]] = None,
) -> PlaceAdapter:
    """
    Build the adapter configured for a provider.

    Args:
        provider_name: Provider key in config/sources.yml ("google", "yelp")
        providers: Already loaded provider configuration (loaded from disk if omitted)

    Returns:
        Configured adapter instance

    Raises:
        ValueError: If the provider is unknown, disabled, or names an unknown adapter
    """
    if providers is None:
        providers = load_sources_config()

    config = providers.get(provider_name)
    if config is None:
        raise ValueError(f"Provider '{provider_name}' is not configured")
    if not config.enabled:
        raise ValueError(f"Provider '{provider_name}' is disabled")

    adapter_cls = ADAPTERS.get(config.adapter)
    if adapter_cls is None:
        raise ValueError(f"Unknown adapter '{config.adapter}' for provider '{provider_name}'")

    logger.debug(
        "Building provider adapter",
        extra={"provider": provider_name, "adapter": config.adapter},
    )

    return adapter_cls(**config.adapter_kwargs())


__all__ = ["GooglePlacesAdapter", "YelpFusionAdapter", "ADAPTERS", "build_adapter"]
