"""Spatial data provider adapters.

Implements the provider-agnostic adapter pattern:
- SpatialDataProvider: Abstract base class defining the interface
- OverpassAdapter: OpenStreetMap Overpass API

The active provider is selected via configuration.
"""

from osm_extract.providers.base import ProviderError, SpatialDataProvider
from osm_extract.providers.factory import (
    OVERPASS,
    get_provider,
    list_providers,
    register_provider,
)

__all__ = [
    "OVERPASS",
    "ProviderError",
    "SpatialDataProvider",
    "get_provider",
    "list_providers",
    "register_provider",
]
