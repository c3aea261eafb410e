"""Data model for normalized OSM features.

A Feature is one extracted OpenStreetMap element: a geometry (Point,
LineString or Polygon) and the element's tags.  Features are produced
only by ``normalize_osm`` and are immutable.  Coordinates follow the
GeoJSON ``(lon, lat)`` order.

A FeatureCollection is the ordered aggregate returned by one
extraction.  It is replaced wholesale, never updated in place.
"""

from __future__ import annotations

import enum
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from osm_extract.models.filters import GeometryFilter

Position = tuple[float, float]
"""A ``(lon, lat)`` pair in GeoJSON order."""

LineCoords = tuple[Position, ...]
PolygonCoords = tuple[LineCoords, ...]
Coordinates = Union[Position, LineCoords, PolygonCoords]


class GeometryType(enum.Enum):
    """GeoJSON geometry kinds produced by normalization."""

    POINT = "Point"
    LINESTRING = "LineString"
    POLYGON = "Polygon"


@dataclass(frozen=True, slots=True)
class Feature:
    """A single normalized OSM element.

    Attributes:
        osm_id: Element reference in ``"<type>/<id>"`` form (e.g. ``"way/42"``).
        geometry_type: Kind of geometry held in ``coordinates``.
        coordinates: ``(lon, lat)`` for points, a tuple of positions for
            lines, a tuple of closed rings (exterior first) for polygons.
        tags: OSM tag key/value pairs.
    """

    osm_id: str
    geometry_type: GeometryType
    coordinates: Coordinates
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def osm_type(self) -> str:
        """Element kind: ``"node"``, ``"way"`` or ``"relation"``."""
        return self.osm_id.split("/", 1)[0]

    @property
    def display_name(self) -> str | None:
        """Best human-readable name: ``name``, then any ``name:<lang>``."""
        name = self.tags.get("name")
        if name:
            return name
        for key in sorted(self.tags):
            if key.startswith("name:") and self.tags[key]:
                return self.tags[key]
        return None

    def geometry_dict(self) -> dict[str, object]:
        """Return the GeoJSON geometry object with list coordinates."""
        if self.geometry_type is GeometryType.POINT:
            coords: object = list(self.coordinates)
        elif self.geometry_type is GeometryType.LINESTRING:
            coords = [list(p) for p in self.coordinates]  # type: ignore[union-attr]
        else:
            coords = [[list(p) for p in ring] for ring in self.coordinates]  # type: ignore[union-attr]
        return {"type": self.geometry_type.value, "coordinates": coords}


@dataclass(frozen=True, slots=True)
class FeatureCollection:
    """Ordered, immutable result of one extraction."""

    features: tuple[Feature, ...] = ()

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    @property
    def is_empty(self) -> bool:
        return not self.features

    def count_by_type(self) -> dict[str, int]:
        """Number of features per GeoJSON geometry type."""
        counts = Counter(f.geometry_type.value for f in self.features)
        return {gt.value: counts.get(gt.value, 0) for gt in GeometryType}

    def filter_geometry(self, geometry_filter: GeometryFilter) -> FeatureCollection:
        """Return a new collection keeping only the allowed geometry kinds."""
        if geometry_filter.keeps_everything:
            return self
        allowed = geometry_filter.allowed_types()
        return FeatureCollection(
            features=tuple(f for f in self.features if f.geometry_type.value in allowed)
        )
