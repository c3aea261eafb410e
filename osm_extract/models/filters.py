"""Typed filter models for an extraction request.

- ``CategoryFilter``: top-level OSM tag keys restricting the query
- ``GeometryFilter``: which geometry kinds to keep in the result

Both are frozen so a session can hand them to the query builder
without worrying about later mutation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from osm_extract.core.exceptions import InvalidFilterError


@dataclass(frozen=True, slots=True)
class CategoryFilter:
    """A set of tag keys such as ``"building"`` or ``"highway"``.

    An empty filter means "no filtering": every feature class inside the
    region is requested.
    """

    keys: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for key in self.keys:
            if not isinstance(key, str) or not key.strip() or key != key.strip():
                msg = f"Category key must be a non-blank, stripped string, got {key!r}"
                raise InvalidFilterError(msg)

    @classmethod
    def of(cls, keys: Iterable[str] = ()) -> CategoryFilter:
        """Build a filter from any iterable of keys, stripping whitespace.

        Raises:
            InvalidFilterError: If a key is blank or not a string.
        """
        cleaned: set[str] = set()
        for key in keys:
            if not isinstance(key, str) or not key.strip():
                msg = f"Category key must be a non-blank string, got {key!r}"
                raise InvalidFilterError(msg)
            cleaned.add(key.strip())
        return cls(keys=frozenset(cleaned))

    @property
    def is_empty(self) -> bool:
        return not self.keys

    def sorted_keys(self) -> list[str]:
        """Keys in a stable order for deterministic query output."""
        return sorted(self.keys)

    def __len__(self) -> int:
        return len(self.keys)


@dataclass(frozen=True, slots=True)
class GeometryFilter:
    """Geometry kinds to keep after normalization.

    Attributes:
        points: Keep ``Point`` features.
        lines: Keep ``LineString`` features.
        polygons: Keep ``Polygon`` features.
    """

    points: bool = True
    lines: bool = True
    polygons: bool = True

    @property
    def keeps_everything(self) -> bool:
        return self.points and self.lines and self.polygons

    def allowed_types(self) -> frozenset[str]:
        """GeoJSON geometry type names allowed by this filter."""
        allowed = set()
        if self.points:
            allowed.add("Point")
        if self.lines:
            allowed.add("LineString")
        if self.polygons:
            allowed.add("Polygon")
        return frozenset(allowed)
