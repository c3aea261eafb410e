"""Data models and schemas.

Defines the data structures used throughout the extraction pipeline:
- Region: The validated, user-drawn polygon ring
- CategoryFilter / GeometryFilter: What to request and what to keep
- Feature / FeatureCollection: Normalized OSM elements
- GeoJSONFeatureCollection: The exported document schema
"""

from osm_extract.models.feature import (
    Feature,
    FeatureCollection,
    GeometryType,
)
from osm_extract.models.filters import CategoryFilter, GeometryFilter
from osm_extract.models.region import (
    Coordinate,
    Region,
    validate_coordinate,
    validate_ring,
)

__all__ = [
    "CategoryFilter",
    "Coordinate",
    "Feature",
    "FeatureCollection",
    "GeometryFilter",
    "GeometryType",
    "Region",
    "validate_coordinate",
    "validate_ring",
]
