"""Place Providers.

This package fetches place data from upstream APIs and maps it to the unified
place schema.

Main components:
- PlaceAdapter: Abstract base class for all provider adapters
- PlaceRaw: Data class for raw provider payloads
- ProviderError: Upstream failure mapped to a status and description
- Adapters: Provider-specific implementations (in adapters/ directory)
"""

from .base import PlaceAdapter, PlaceRaw
from .errors import ProviderError
from .source_config import ProviderConfig, load_sources_config

__all__ = ["PlaceAdapter", "PlaceRaw", "ProviderError", "ProviderConfig", "load_sources_config"]
