"""Shared extraction constants — single source of truth.

Centralises coordinate bounds, Overpass defaults, the category
catalogue offered to the presentation layer, and the tag rules that
decide whether a closed way is an area or a line.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# WGS 84 coordinate bounds
# ---------------------------------------------------------------------------

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0

MIN_REGION_POINTS = 3
"""A region ring needs at least three distinct corners."""

# ---------------------------------------------------------------------------
# Overpass defaults
# ---------------------------------------------------------------------------

DEFAULT_OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
"""Public Overpass API interpreter endpoint."""

DEFAULT_QUERY_TIMEOUT_S: int = 60
"""Server-side evaluation timeout written into the query header."""

DEFAULT_HTTP_TIMEOUT_S: float = 90.0
"""Client-side timeout for the whole HTTP exchange."""

DEFAULT_EXPORT_PREFIX: str = "osm_extract"
GEOJSON_SUFFIX: str = ".geojson"

# ---------------------------------------------------------------------------
# Category catalogue
# ---------------------------------------------------------------------------

CATEGORY_CATALOGUE: tuple[str, ...] = (
    "amenity",
    "building",
    "highway",
    "landuse",
    "leisure",
    "natural",
    "railway",
    "shop",
    "tourism",
    "waterway",
)
"""Top-level tag keys offered as filters. The core accepts any key."""

# ---------------------------------------------------------------------------
# Area semantics for closed ways
# ---------------------------------------------------------------------------

AREA_KEYS: frozenset[str] = frozenset(
    {
        "aeroway",
        "amenity",
        "building",
        "building:part",
        "craft",
        "historic",
        "landuse",
        "leisure",
        "man_made",
        "military",
        "natural",
        "office",
        "place",
        "public_transport",
        "shop",
        "sport",
        "tourism",
        "water",
    }
)
"""Keys whose presence makes a closed way a polygon."""

LINEAR_TAG_VALUES: dict[str, frozenset[str]] = {
    "natural": frozenset({"coastline", "cliff", "ridge", "arete", "tree_row"}),
    "man_made": frozenset({"embankment", "cutline", "pipeline"}),
    "leisure": frozenset({"track", "slipway"}),
}
"""Values that keep an otherwise area-keyed closed way linear."""

AREA_RELATION_TYPES: frozenset[str] = frozenset({"multipolygon", "boundary"})
"""Relation ``type`` values assembled into polygons."""
