"""Tests for GeoJSON serialisation and export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from osm_extract.activities.export_geojson import (
    GEOJSON_MEDIA_TYPE,
    GeoJSONExporter,
    InMemoryFileSaver,
    LocalFileSaver,
    serialise_collection,
)
from osm_extract.activities.normalize_osm import normalize_osm
from osm_extract.core.exceptions import ExportError
from osm_extract.models.feature import Feature, FeatureCollection, GeometryType


@pytest.fixture()
def collection(mixed_payload: dict[str, Any]) -> FeatureCollection:
    return normalize_osm(mixed_payload)


class TestSerialiseCollection:
    def test_feature_collection_document(self, collection: FeatureCollection) -> None:
        document = json.loads(serialise_collection(collection))
        assert document["type"] == "FeatureCollection"
        assert len(document["features"]) == 3

    def test_feature_shape(self, collection: FeatureCollection) -> None:
        first = json.loads(serialise_collection(collection))["features"][0]
        assert first == {
            "type": "Feature",
            "id": "node/1",
            "properties": {"shop": "bakery", "name": "Fresh Bread", "@id": "node/1"},
            "geometry": {"type": "Point", "coordinates": [46.65, 24.75]},
        }

    def test_pretty_printed_utf8(self) -> None:
        feature = Feature("node/5", GeometryType.POINT, (46.6, 24.7), {"name": "مقهى"})
        data = serialise_collection(FeatureCollection((feature,)))
        assert isinstance(data, bytes)
        text = data.decode("utf-8")
        assert "\n  " in text
        assert "مقهى" in text

    def test_empty_collection(self) -> None:
        document = json.loads(serialise_collection(FeatureCollection()))
        assert document == {"type": "FeatureCollection", "features": []}

    def test_malformed_feature_raises_export_error(self) -> None:
        broken = Feature("node/1", GeometryType.POINT, ("east", "north"), {"a": "b"})  # type: ignore[arg-type]
        with pytest.raises(ExportError):
            serialise_collection(FeatureCollection((broken,)))


class TestGeoJSONExporter:
    def test_export_to_memory(
        self,
        collection: FeatureCollection,
        memory_exporter: GeoJSONExporter,
        memory_saver: InMemoryFileSaver,
    ) -> None:
        result = memory_exporter.export(collection, "King Road")
        assert result.filename == "king-road.geojson"
        assert result.location == "memory://king-road.geojson"
        assert result.feature_count == 3
        assert result.media_type == GEOJSON_MEDIA_TYPE
        assert result.size_bytes == len(memory_saver.files["king-road.geojson"])

    def test_export_to_disk(self, collection: FeatureCollection, tmp_path: Path) -> None:
        exporter = GeoJSONExporter(LocalFileSaver(tmp_path / "exports"))
        result = exporter.export(collection, "osm_extract_1760745600000")
        target = tmp_path / "exports" / "osm_extract_1760745600000.geojson"
        assert result.location == str(target)
        assert json.loads(target.read_bytes())["type"] == "FeatureCollection"

    def test_saver_failure_propagates(self, collection: FeatureCollection) -> None:
        class _FailingSaver:
            def save(self, filename: str, data: bytes) -> str:
                raise PermissionError("read-only")

        with pytest.raises(PermissionError):
            GeoJSONExporter(_FailingSaver()).export(collection, "x")
