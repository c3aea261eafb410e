"""Normalize activity — convert raw Overpass JSON into a FeatureCollection.

Responsibilities:
- Merge duplicate elements (same type and id) delivered by several
  union clauses or by the ``>`` recursion
- Resolve way geometry from inline ``geometry`` or referenced nodes
- Classify geometry: node → Point, open way → LineString, closed way
  with area semantics → Polygon, multipolygon relation → Polygon,
  other relations → LineString
- Drop untagged elements and elements without usable geometry
- Accept an exported GeoJSON ``FeatureCollection`` as input, so that
  re-normalizing an export yields the same collection

The pass is a pure function of its input.  Output order is nodes, then
ways, then relations, each by ascending id.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from osm_extract.core.constants import (
    AREA_KEYS,
    AREA_RELATION_TYPES,
    LINEAR_TAG_VALUES,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
)
from osm_extract.core.exceptions import ContractError
from osm_extract.models.feature import (
    Feature,
    FeatureCollection,
    GeometryType,
    LineCoords,
    Position,
)
from osm_extract.models.geojson import OSM_ID_PROPERTY

logger = logging.getLogger("osm_extract.activities.normalize_osm")

_ELEMENT_TYPES = ("node", "way", "relation")
_TYPE_RANK = {name: rank for rank, name in enumerate(_ELEMENT_TYPES)}


class ResponseFormatError(ContractError):
    """Raised when a response is not an Overpass or GeoJSON document."""

    default_stage = "normalize"
    default_code = "RESPONSE_FORMAT_INVALID"


def normalize_osm(payload: object) -> FeatureCollection:
    """Normalize a decoded Overpass response into a ``FeatureCollection``.

    Args:
        payload: Decoded JSON.  Either an Overpass document with an
            ``elements`` list or a GeoJSON ``FeatureCollection``.

    Returns:
        The normalized collection.  Empty when nothing usable was found.

    Raises:
        ResponseFormatError: If *payload* is neither document shape.
    """
    if not isinstance(payload, dict):
        msg = f"Expected a JSON object, got {type(payload).__name__}"
        raise ResponseFormatError(msg)

    if payload.get("type") == "FeatureCollection":
        return _normalize_geojson(payload)

    elements = payload.get("elements")
    if not isinstance(elements, list):
        msg = "Overpass response has no 'elements' list"
        raise ResponseFormatError(msg)

    remark = payload.get("remark")
    if remark:
        logger.warning("Overpass remark | %s", remark)

    return _normalize_elements(elements)


# ---------------------------------------------------------------------------
# Overpass elements
# ---------------------------------------------------------------------------


def _normalize_elements(elements: list[Any]) -> FeatureCollection:
    merged = _merge_elements(elements)

    node_positions: dict[int, Position] = {}
    for (kind, osm_id), record in merged.items():
        if kind == "node":
            position = _position(record.get("lat"), record.get("lon"))
            if position is not None:
                node_positions[osm_id] = position

    way_lines: dict[int, LineCoords] = {}
    for (kind, osm_id), record in merged.items():
        if kind == "way":
            line = _way_line(record, node_positions)
            if line is not None:
                way_lines[osm_id] = line

    features: list[Feature] = []
    dropped = 0
    for key in sorted(merged, key=lambda k: (_TYPE_RANK[k[0]], k[1])):
        kind, osm_id = key
        record = merged[key]
        tags = record["tags"]
        if not tags:
            continue
        ref = f"{kind}/{osm_id}"
        if kind == "node":
            feature = _node_feature(ref, osm_id, tags, node_positions)
        elif kind == "way":
            feature = _way_feature(ref, tags, way_lines.get(osm_id))
        else:
            feature = _relation_feature(ref, record, tags, way_lines)
        if feature is None:
            dropped += 1
            continue
        features.append(feature)

    logger.info(
        "Normalized Overpass response | elements=%d | unique=%d | features=%d | dropped=%d",
        len(elements),
        len(merged),
        len(features),
        dropped,
    )
    return FeatureCollection(features=tuple(features))


def _merge_elements(elements: list[Any]) -> dict[tuple[str, int], dict[str, Any]]:
    """Merge elements by ``(type, id)``, skipping malformed entries.

    Tags are unioned (first value wins on conflict); geometry fields are
    taken from the first element that provides them.
    """
    merged: dict[tuple[str, int], dict[str, Any]] = {}
    for element in elements:
        if not isinstance(element, dict):
            continue
        kind = element.get("type")
        osm_id = element.get("id")
        if kind not in _TYPE_RANK or not isinstance(osm_id, int) or isinstance(osm_id, bool):
            logger.debug("Skipping malformed element: %r", element)
            continue

        record = merged.setdefault((kind, osm_id), {"tags": {}})
        raw_tags = element.get("tags")
        if isinstance(raw_tags, dict):
            for tag_key, tag_value in raw_tags.items():
                record["tags"].setdefault(str(tag_key), str(tag_value))
        for geometry_key in ("lat", "lon", "nodes", "geometry", "members"):
            if geometry_key in element and geometry_key not in record:
                record[geometry_key] = element[geometry_key]
    return merged


def _node_feature(
    ref: str,
    osm_id: int,
    tags: dict[str, str],
    node_positions: dict[int, Position],
) -> Feature | None:
    position = node_positions.get(osm_id)
    if position is None:
        return None
    return Feature(osm_id=ref, geometry_type=GeometryType.POINT, coordinates=position, tags=dict(tags))


def _way_feature(ref: str, tags: dict[str, str], line: LineCoords | None) -> Feature | None:
    if line is None:
        return None
    if _is_closed(line) and is_area(tags):
        return Feature(
            osm_id=ref,
            geometry_type=GeometryType.POLYGON,
            coordinates=(line,),
            tags=dict(tags),
        )
    return Feature(
        osm_id=ref,
        geometry_type=GeometryType.LINESTRING,
        coordinates=line,
        tags=dict(tags),
    )


def _relation_feature(
    ref: str,
    record: dict[str, Any],
    tags: dict[str, str],
    way_lines: dict[int, LineCoords],
) -> Feature | None:
    members = record.get("members")
    if not isinstance(members, list):
        return None

    outer: list[LineCoords] = []
    inner: list[LineCoords] = []
    for member in members:
        if not isinstance(member, dict) or member.get("type") != "way":
            continue
        line = _member_line(member, way_lines)
        if line is None:
            logger.debug("Skipping unresolved member way/%s of %s", member.get("ref"), ref)
            continue
        if member.get("role") == "inner":
            inner.append(line)
        else:
            outer.append(line)

    if tags.get("type") in AREA_RELATION_TYPES:
        polygon = _assemble_polygon(outer, inner)
        if polygon is None:
            return None
        return Feature(
            osm_id=ref,
            geometry_type=GeometryType.POLYGON,
            coordinates=polygon,
            tags=dict(tags),
        )

    chains = _join_segments(outer + inner)
    if not chains:
        return None
    longest = max(chains, key=len)
    return Feature(
        osm_id=ref,
        geometry_type=GeometryType.LINESTRING,
        coordinates=longest,
        tags=dict(tags),
    )


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------


def is_area(tags: dict[str, str]) -> bool:
    """Decide whether a closed way with *tags* describes an area."""
    area = tags.get("area")
    if area == "no":
        return False
    if area == "yes":
        return True
    for key in AREA_KEYS:
        value = tags.get(key)
        if value is None or value == "no":
            continue
        if value in LINEAR_TAG_VALUES.get(key, frozenset()):
            continue
        return True
    return False


def _position(lat: object, lon: object) -> Position | None:
    if isinstance(lat, bool) or isinstance(lon, bool):
        return None
    if not isinstance(lat, int | float) or not isinstance(lon, int | float):
        return None
    lat_f, lon_f = float(lat), float(lon)
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return None
    if not (MIN_LATITUDE <= lat_f <= MAX_LATITUDE and MIN_LONGITUDE <= lon_f <= MAX_LONGITUDE):
        return None
    return (lon_f, lat_f)


def _inline_line(geometry: object) -> LineCoords | None:
    """Read an ``out geom`` style list of ``{"lat": .., "lon": ..}`` points."""
    if not isinstance(geometry, list):
        return None
    positions: list[Position] = []
    for point in geometry:
        if not isinstance(point, dict):
            return None
        position = _position(point.get("lat"), point.get("lon"))
        if position is None:
            return None
        positions.append(position)
    return tuple(positions) if len(positions) >= 2 else None


def _way_line(record: dict[str, Any], node_positions: dict[int, Position]) -> LineCoords | None:
    """Resolve a way's coordinates; ``None`` if any node is undefined."""
    if "geometry" in record:
        return _inline_line(record["geometry"])

    node_refs = record.get("nodes")
    if not isinstance(node_refs, list):
        return None
    positions: list[Position] = []
    for node_ref in node_refs:
        position = node_positions.get(node_ref) if isinstance(node_ref, int) else None
        if position is None:
            return None
        positions.append(position)
    return tuple(positions) if len(positions) >= 2 else None


def _member_line(member: dict[str, Any], way_lines: dict[int, LineCoords]) -> LineCoords | None:
    if "geometry" in member:
        return _inline_line(member["geometry"])
    way_ref = member.get("ref")
    return way_lines.get(way_ref) if isinstance(way_ref, int) else None


def _is_closed(line: LineCoords) -> bool:
    return len(line) >= 4 and line[0] == line[-1]


def _join_segments(segments: list[LineCoords]) -> list[LineCoords]:
    """Join segments that share endpoints into the longest possible chains."""
    pending = [list(segment) for segment in segments]
    chains: list[LineCoords] = []
    while pending:
        current = pending.pop(0)
        joined = True
        while joined and current[0] != current[-1]:
            joined = False
            for idx, segment in enumerate(pending):
                if segment[0] == current[-1]:
                    current.extend(segment[1:])
                elif segment[-1] == current[-1]:
                    current.extend(reversed(segment[:-1]))
                elif segment[-1] == current[0]:
                    current[:0] = segment[:-1]
                elif segment[0] == current[0]:
                    current[:0] = list(reversed(segment[1:]))
                else:
                    continue
                pending.pop(idx)
                joined = True
                break
        chains.append(tuple(current))
    return chains


def _assemble_polygon(
    outer: list[LineCoords],
    inner: list[LineCoords],
) -> tuple[LineCoords, ...] | None:
    """Build ``(exterior, *holes)`` from relation member lines.

    When several outer rings exist the largest one is kept together with
    the inner rings that fall inside it.
    """
    from shapely.geometry import Point, Polygon

    outer_rings = [ring for ring in _join_segments(outer) if _is_closed(ring)]
    if not outer_rings:
        return None
    exterior = max(outer_rings, key=lambda ring: Polygon(ring).area)
    if len(outer_rings) > 1:
        logger.debug("Keeping largest of %d outer rings", len(outer_rings))

    shell = Polygon(exterior)
    holes = [
        ring
        for ring in _join_segments(inner)
        if _is_closed(ring) and shell.covers(Point(ring[0]))
    ]
    return (exterior, *holes)


# ---------------------------------------------------------------------------
# GeoJSON re-normalization
# ---------------------------------------------------------------------------


def _normalize_geojson(payload: dict[str, Any]) -> FeatureCollection:
    raw_features = payload.get("features")
    if not isinstance(raw_features, list):
        msg = "GeoJSON FeatureCollection has no 'features' list"
        raise ResponseFormatError(msg)

    by_id: dict[str, Feature] = {}
    for raw in raw_features:
        feature = _geojson_feature(raw)
        if feature is None:
            continue
        existing = by_id.get(feature.osm_id)
        if existing is None:
            by_id[feature.osm_id] = feature
            continue
        tags = dict(feature.tags)
        tags.update(existing.tags)
        by_id[feature.osm_id] = Feature(
            osm_id=existing.osm_id,
            geometry_type=existing.geometry_type,
            coordinates=existing.coordinates,
            tags=tags,
        )

    ordered = sorted(by_id.values(), key=lambda f: _ref_sort_key(f.osm_id))
    return FeatureCollection(features=tuple(ordered))


def _geojson_feature(raw: object) -> Feature | None:
    if not isinstance(raw, dict):
        return None
    properties = raw.get("properties")
    if not isinstance(properties, dict):
        properties = {}
    ref = raw.get("id") or properties.get(OSM_ID_PROPERTY)
    geometry = raw.get("geometry")
    if not isinstance(ref, str) or not isinstance(geometry, dict):
        return None
    tags = {str(k): str(v) for k, v in properties.items() if k != OSM_ID_PROPERTY and v is not None}
    if not tags:
        return None

    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    try:
        if kind == GeometryType.POINT.value:
            geometry_type = GeometryType.POINT
            coordinates: Any = _geojson_position(coords)
        elif kind == GeometryType.LINESTRING.value:
            geometry_type = GeometryType.LINESTRING
            coordinates = tuple(_geojson_position(p) for p in coords)
            if len(coordinates) < 2:
                return None
        elif kind == GeometryType.POLYGON.value:
            geometry_type = GeometryType.POLYGON
            coordinates = tuple(tuple(_geojson_position(p) for p in ring) for ring in coords)
            if not coordinates or not all(_is_closed(ring) for ring in coordinates):
                return None
        else:
            return None
    except (TypeError, ValueError):
        return None
    return Feature(osm_id=ref, geometry_type=geometry_type, coordinates=coordinates, tags=tags)


def _geojson_position(raw: object) -> Position:
    if not isinstance(raw, list | tuple) or len(raw) < 2:
        msg = f"Malformed position: {raw!r}"
        raise ValueError(msg)
    position = _position(raw[1], raw[0])
    if position is None:
        msg = f"Invalid position: {raw!r}"
        raise ValueError(msg)
    return position


def _ref_sort_key(ref: str) -> tuple[int, int, str]:
    kind, _, number = ref.partition("/")
    if kind in _TYPE_RANK and number.lstrip("-").isdigit():
        return (_TYPE_RANK[kind], int(number), "")
    return (len(_ELEMENT_TYPES), 0, ref)
