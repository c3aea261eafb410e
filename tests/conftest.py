"""Shared pytest fixtures for the OSM Area Extract test suite."""

from __future__ import annotations

from typing import Any

import pytest

from osm_extract.activities.export_geojson import GeoJSONExporter, InMemoryFileSaver
from osm_extract.models.region import Region
from tests.payloads import SQUARE_POINTS, node, overpass_payload, way

# ---------------------------------------------------------------------------
# Region fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def square_points() -> list[tuple[float, float]]:
    return list(SQUARE_POINTS)


@pytest.fixture()
def square_region() -> Region:
    return Region.from_points(SQUARE_POINTS, region_id="square")


# ---------------------------------------------------------------------------
# Overpass payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def twelve_cafes_payload() -> dict[str, Any]:
    """Twelve tagged nodes inside the square."""
    return overpass_payload(
        *(node(100 + i, 24.71 + i * 0.005, 46.61 + i * 0.005, amenity="cafe") for i in range(12))
    )


@pytest.fixture()
def mixed_payload() -> dict[str, Any]:
    """A road, a building, a shop node and their skeleton nodes.

    Mirrors ``out body; >; out skel qt;``: tagged elements first, then
    untagged member nodes.
    """
    return overpass_payload(
        node(1, 24.75, 46.65, shop="bakery", name="Fresh Bread"),
        way(10, [2, 3, 4], highway="residential", name="King Road"),
        way(11, [5, 6, 7, 8, 5], building="yes"),
        node(2, 24.71, 46.61),
        node(3, 24.72, 46.62),
        node(4, 24.73, 46.63),
        node(5, 24.74, 46.64),
        node(6, 24.74, 46.65),
        node(7, 24.75, 46.65),
        node(8, 24.75, 46.64),
    )


# ---------------------------------------------------------------------------
# Exporter fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def memory_saver() -> InMemoryFileSaver:
    return InMemoryFileSaver()


@pytest.fixture()
def memory_exporter(memory_saver: InMemoryFileSaver) -> GeoJSONExporter:
    return GeoJSONExporter(memory_saver)
