"""Data model for the user-drawn Region.

A Region is the closed ring the user draws on the map.  Coordinates are
``(lat, lon)`` pairs as delivered by the drawing tool.  The ring does
not need to repeat its first point; a duplicated closing point is
accepted and dropped.

``region_id`` identifies one drawn shape across its edits; ``revision``
counts the edits applied to it.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from osm_extract.core.constants import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    MIN_REGION_POINTS,
)
from osm_extract.core.exceptions import InvalidGeometry

logger = logging.getLogger("osm_extract.models.region")

Coordinate = tuple[float, float]
"""A ``(lat, lon)`` pair in WGS 84 degrees."""


@dataclass(frozen=True, slots=True)
class Region:
    """A validated, closed polygon ring.

    Attributes:
        points: Ring corners as ``(lat, lon)`` tuples, without a closing duplicate.
        region_id: Identity of the drawn shape, preserved across edits.
        revision: Number of edits applied since the shape was drawn.
    """

    points: tuple[Coordinate, ...]
    region_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    revision: int = 0

    @classmethod
    def from_points(
        cls,
        points: Iterable[Sequence[float]],
        *,
        region_id: str = "",
        revision: int = 0,
    ) -> Region:
        """Validate *points* and build a Region.

        Raises:
            InvalidGeometry: If fewer than 3 distinct points are given or
                any coordinate is not a finite in-range number.
        """
        ring = validate_ring(points)
        if region_id:
            return cls(points=ring, region_id=region_id, revision=revision)
        return cls(points=ring, revision=revision)

    @property
    def vertex_count(self) -> int:
        """Number of corners in the ring."""
        return len(self.points)

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        """Bounding box as ``(min_lat, min_lon, max_lat, max_lon)``."""
        lats = [lat for lat, _ in self.points]
        lons = [lon for _, lon in self.points]
        return (min(lats), min(lons), max(lats), max(lons))

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict."""
        return {
            "points": [list(p) for p in self.points],
            "region_id": self.region_id,
            "revision": self.revision,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Region:
        """Deserialise from a dict produced by ``to_dict``.

        Raises:
            TypeError: If ``points`` is not a list.
            InvalidGeometry: If the points do not form a valid ring.
        """
        points_raw = data.get("points", [])
        if not isinstance(points_raw, list):
            msg = f"points must be a list, got {type(points_raw).__name__}"
            raise TypeError(msg)
        return cls.from_points(
            points_raw,
            region_id=str(data.get("region_id", "")),
            revision=int(data.get("revision", 0)),  # type: ignore[arg-type]
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_coordinate(raw: Sequence[float], index: int) -> Coordinate:
    """Coerce one raw point into a validated ``(lat, lon)`` tuple.

    Raises:
        InvalidGeometry: If the point is malformed, non-finite or out of range.
    """
    if isinstance(raw, str | bytes) or not isinstance(raw, Sequence) or len(raw) != 2:
        msg = f"Point {index} must be a (lat, lon) pair, got {raw!r}"
        raise InvalidGeometry(msg)
    try:
        lat = float(raw[0])
        lon = float(raw[1])
    except (TypeError, ValueError) as exc:
        msg = f"Point {index} is not numeric: {raw!r}"
        raise InvalidGeometry(msg) from exc

    if not (math.isfinite(lat) and math.isfinite(lon)):
        msg = f"Point {index} is not finite: ({lat}, {lon})"
        raise InvalidGeometry(msg)
    if not MIN_LATITUDE <= lat <= MAX_LATITUDE:
        msg = f"Latitude {lat} at point {index} out of range [{MIN_LATITUDE}, {MAX_LATITUDE}]"
        raise InvalidGeometry(msg)
    if not MIN_LONGITUDE <= lon <= MAX_LONGITUDE:
        msg = f"Longitude {lon} at point {index} out of range [{MIN_LONGITUDE}, {MAX_LONGITUDE}]"
        raise InvalidGeometry(msg)
    return (lat, lon)


def validate_ring(points: Iterable[Sequence[float]]) -> tuple[Coordinate, ...]:
    """Validate a drawn ring and return it without a closing duplicate.

    Self-intersecting rings are accepted (the drawing tool is trusted by
    convention) but logged as a warning.

    Raises:
        InvalidGeometry: If the ring is malformed.
    """
    if points is None:
        msg = "Region points must not be None"
        raise InvalidGeometry(msg)

    ring = [validate_coordinate(p, idx) for idx, p in enumerate(points)]
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring.pop()

    if len(ring) < MIN_REGION_POINTS:
        msg = f"Region has only {len(ring)} point(s), need at least {MIN_REGION_POINTS}"
        raise InvalidGeometry(msg)
    if len(set(ring)) < MIN_REGION_POINTS:
        msg = f"Region has fewer than {MIN_REGION_POINTS} distinct points"
        raise InvalidGeometry(msg)

    _warn_if_self_intersecting(ring)
    return tuple(ring)


def _warn_if_self_intersecting(ring: list[Coordinate]) -> None:
    from shapely.geometry import Polygon

    polygon = Polygon([(lon, lat) for lat, lon in ring])
    if not polygon.is_valid:
        logger.warning(
            "Region ring is not a simple polygon | vertices=%d | area_deg2=%.6f",
            len(ring),
            polygon.area,
        )
