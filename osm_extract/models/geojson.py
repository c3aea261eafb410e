"""Pydantic GeoJSON document model for exported extractions.

Defines the exact JSON document written by the exporter: an RFC 7946
``FeatureCollection`` whose features carry the OSM tags as properties
plus an ``@id`` reference to the source element.

The models validate the document on construction, so a malformed
in-memory feature is reported as a serialisation failure instead of
producing a broken file.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from osm_extract.models.feature import Feature, FeatureCollection

# Property key carrying the element reference, as OSM-to-GeoJSON converters do.
OSM_ID_PROPERTY = "@id"


class GeoJSONGeometry(BaseModel):
    """Geometry object of a GeoJSON feature.

    Attributes:
        type: ``"Point"``, ``"LineString"`` or ``"Polygon"``.
        coordinates: Nested ``[lon, lat]`` arrays matching ``type``.
    """

    type: Literal["Point", "LineString", "Polygon"]
    coordinates: list[float] | list[list[float]] | list[list[list[float]]]


class GeoJSONFeature(BaseModel):
    """One exported feature."""

    type: Literal["Feature"] = "Feature"
    id: str
    properties: dict[str, str] = Field(default_factory=dict)
    geometry: GeoJSONGeometry

    @classmethod
    def from_feature(cls, feature: Feature) -> GeoJSONFeature:
        properties = dict(feature.tags)
        properties[OSM_ID_PROPERTY] = feature.osm_id
        return cls(
            id=feature.osm_id,
            properties=properties,
            geometry=GeoJSONGeometry.model_validate(feature.geometry_dict()),
        )


class GeoJSONFeatureCollection(BaseModel):
    """Top-level exported document."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[GeoJSONFeature] = Field(default_factory=list)

    @classmethod
    def from_collection(cls, collection: FeatureCollection) -> GeoJSONFeatureCollection:
        return cls(features=[GeoJSONFeature.from_feature(f) for f in collection])

    def to_json(self, *, indent: int = 2) -> str:
        """Serialise to a pretty-printed JSON string."""
        return self.model_dump_json(indent=indent)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict."""
        return self.model_dump()
